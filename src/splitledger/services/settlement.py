from __future__ import annotations

from collections import deque
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from splitledger.models import DEFAULT_CURRENCY


SETTLED_TOLERANCE = Decimal("0.01")


@dataclass(slots=True, frozen=True)
class Settlement:
    debtor_id: str
    creditor_id: str
    amount: Decimal
    currency: str = DEFAULT_CURRENCY
    debtor_name: Optional[str] = None
    creditor_name: Optional[str] = None


def settle(
    balances: Mapping[str, Decimal],
    currency: str = DEFAULT_CURRENCY,
    tolerance: Decimal = SETTLED_TOLERANCE,
) -> list[Settlement]:
    """Greedy debt simplification for a single currency.

    Debtors and creditors are matched in the iteration order of ``balances``;
    each step transfers ``min(debt, credit)`` and puts whichever side still
    has more than ``tolerance`` outstanding back at the head of its queue.
    """
    debtors: deque[tuple[str, Decimal]] = deque()
    creditors: deque[tuple[str, Decimal]] = deque()

    for user_id, balance in balances.items():
        if balance > tolerance:
            creditors.append((user_id, balance))
        elif balance < -tolerance:
            debtors.append((user_id, -balance))

    settlements: list[Settlement] = []
    while debtors and creditors:
        debtor_id, debt = debtors.popleft()
        creditor_id, credit = creditors.popleft()

        amount = min(debt, credit)
        settlements.append(Settlement(debtor_id=debtor_id, creditor_id=creditor_id, amount=amount, currency=currency))

        if debt - amount > tolerance:
            debtors.appendleft((debtor_id, debt - amount))
        if credit - amount > tolerance:
            creditors.appendleft((creditor_id, credit - amount))

    return [s for s in settlements if s.amount > tolerance]


def settle_all(
    balances: Mapping[str, Mapping[str, Decimal]],
    names: Optional[Mapping[str, str]] = None,
) -> dict[str, list[Settlement]]:
    names = names or {}
    result: dict[str, list[Settlement]] = {}
    for currency, currency_balances in balances.items():
        result[currency] = [
            replace(
                settlement,
                debtor_name=names.get(settlement.debtor_id, settlement.debtor_id),
                creditor_name=names.get(settlement.creditor_id, settlement.creditor_id),
            )
            for settlement in settle(currency_balances, currency)
        ]
    return result


def apply_settlements(balances: Mapping[str, Decimal], settlements: Iterable[Settlement]) -> dict[str, Decimal]:
    after = dict(balances)
    for settlement in settlements:
        after[settlement.debtor_id] = after.get(settlement.debtor_id, Decimal(0)) + settlement.amount
        after[settlement.creditor_id] = after.get(settlement.creditor_id, Decimal(0)) - settlement.amount
    return after
