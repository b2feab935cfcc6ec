from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from splitledger.models import Expense, to_money
from splitledger.services.settlement import SETTLED_TOLERANCE, Settlement, settle_all
from splitledger.services.split import compute_share


RECENT_LIMIT = 3

Balances = dict[str, dict[str, Decimal]]


@dataclass(slots=True)
class LedgerReport:
    balances: Balances = field(default_factory=dict)
    settlements: dict[str, list[Settlement]] = field(default_factory=dict)

    @property
    def currencies(self) -> list[str]:
        return list(self.balances)

    def balance_of(self, user_id: str, currency: str) -> Decimal:
        return self.balances.get(currency, {}).get(user_id, Decimal(0))

    def all_settlements(self) -> list[Settlement]:
        return [s for currency in self.settlements for s in self.settlements[currency]]


@dataclass(slots=True)
class MemberSummary:
    paid: Decimal = Decimal("0.00")
    owed: Decimal = Decimal("0.00")

    @property
    def net(self) -> Decimal:
        return self.paid - self.owed


@dataclass(slots=True)
class ParticipantSet:
    user_ids: tuple[str, ...]
    expenses: list[Expense] = field(default_factory=list)

    @property
    def key(self) -> str:
        return "|".join(self.user_ids)


def is_settled(amount: Decimal) -> bool:
    return abs(amount) <= SETTLED_TOLERANCE


def is_billable(expense: Expense) -> bool:
    amount = Decimal(expense.amount)
    if not amount.is_finite() or amount <= 0:
        return False
    return bool(expense.paid_by) and bool(expense.participants)


def compute_balances(expenses: Iterable[Expense]) -> Balances:
    """Signed net per user, per currency. Positive means the user is owed money."""
    balances: Balances = {}
    for expense in expenses:
        if not is_billable(expense):
            continue
        net = balances.setdefault(expense.currency, {})
        net[expense.paid_by] = net.get(expense.paid_by, Decimal(0)) + to_money(expense.amount)
        for user_id in expense.participant_ids:
            net[user_id] = net.get(user_id, Decimal(0)) - compute_share(expense, user_id)
    return balances


def net_between(expenses: Iterable[Expense], me: str, friend: str) -> dict[str, Decimal]:
    """What ``friend`` owes ``me`` per currency; negative when ``me`` is the debtor.

    Only expenses that both users take part in count, and only the payer's
    side of each such expense moves the pair balance.
    """
    result: dict[str, Decimal] = {}
    for expense in expenses:
        if not is_billable(expense):
            continue
        if not (expense.has_participant(me) and expense.has_participant(friend)):
            continue
        net = result.get(expense.currency, Decimal("0.00"))
        if expense.paid_by == me:
            net += compute_share(expense, friend)
        elif expense.paid_by == friend:
            net -= compute_share(expense, me)
        result[expense.currency] = net
    return result


def participant_sets(expenses: Iterable[Expense]) -> list[ParticipantSet]:
    groups: dict[tuple[str, ...], ParticipantSet] = {}
    for expense in expenses:
        key = tuple(sorted(set(expense.participant_ids)))
        groups.setdefault(key, ParticipantSet(user_ids=key)).expenses.append(expense)
    return sorted(groups.values(), key=lambda s: len(s.expenses), reverse=True)


def recent_expenses(expenses: Iterable[Expense], limit: int = RECENT_LIMIT) -> list[Expense]:
    """Newest first by ``created_at``; undated expenses sort last."""
    return sorted(
        expenses,
        key=lambda e: e.created_at.timestamp() if e.created_at else 0.0,
        reverse=True,
    )[:limit]


def member_summary(expenses: Iterable[Expense], user_id: str) -> dict[str, MemberSummary]:
    summaries: dict[str, MemberSummary] = {}
    for expense in expenses:
        if not is_billable(expense):
            continue
        summary = summaries.setdefault(expense.currency, MemberSummary())
        if expense.paid_by == user_id:
            summary.paid += to_money(expense.amount)
        summary.owed += compute_share(expense, user_id)
    return summaries


def resolve(expenses: Sequence[Expense], names: Optional[Mapping[str, str]] = None) -> LedgerReport:
    balances = compute_balances(expenses)
    return LedgerReport(balances=balances, settlements=settle_all(balances, names))
