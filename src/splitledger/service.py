from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping, Optional, Protocol, Sequence

from splitledger.config import Settings, get_settings
from splitledger.logging import get_logger
from splitledger.models import Expense, UserProfile
from splitledger.rows import build_expenses, build_profiles
from splitledger.services.ledger import (
    LedgerReport,
    MemberSummary,
    ParticipantSet,
    is_billable,
    is_settled,
    member_summary,
    net_between,
    participant_sets,
    recent_expenses,
    resolve,
)
from splitledger.services.names import SELF_LABEL, build_name_map
from splitledger.services.report import format_expense_line
from splitledger.services.scope import Scope, friends_of, group_ids_of


class ExpenseSource(Protocol):
    async def list_expenses(self, user_id: str) -> Sequence[Mapping[str, Any]]: ...

    async def list_participants(self, expense_id: str) -> Sequence[Mapping[str, Any]]: ...

    async def list_profiles(self) -> Sequence[Mapping[str, Any]]: ...


@dataclass(slots=True)
class Snapshot:
    expenses: list[Expense]
    profiles: dict[str, UserProfile]


@dataclass(slots=True)
class SetBreakdown:
    participants: ParticipantSet
    label: str
    net: dict[str, Decimal]


@dataclass(slots=True)
class FriendReport:
    friend_id: str
    name: str
    net: dict[str, Decimal]
    ledger: LedgerReport
    breakdown: list[SetBreakdown] = field(default_factory=list)
    recent: list[Expense] = field(default_factory=list)
    recent_lines: list[str] = field(default_factory=list)


@dataclass(slots=True)
class GroupReport:
    group_id: str
    ledger: LedgerReport
    summary: dict[str, MemberSummary]
    expense_count: int
    member_count: int
    recent: list[Expense] = field(default_factory=list)
    recent_lines: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Overview:
    friends: dict[str, dict[str, Decimal]] = field(default_factory=dict)
    groups: dict[str, dict[str, Decimal]] = field(default_factory=dict)
    totals: dict[str, Decimal] = field(default_factory=dict)


def _add_into(totals: dict[str, Decimal], nets: Mapping[str, Decimal]) -> None:
    for currency, amount in nets.items():
        totals[currency] = totals.get(currency, Decimal("0.00")) + amount


class LedgerService:
    """Loads a user's expense snapshot from the storage layer and runs the ledger over it."""

    def __init__(self, source: ExpenseSource, settings: Optional[Settings] = None) -> None:
        self._source = source
        self._settings = settings or get_settings()
        self._log = get_logger(__name__)

    def describe_recent(self, expenses: Sequence[Expense], now: Optional[datetime] = None) -> list[str]:
        now = now or datetime.now(timezone.utc)
        return [format_expense_line(expense, now, self._settings.zoneinfo) for expense in expenses]

    async def load(self, user_id: str) -> Snapshot:
        rows = [row for row in await self._source.list_expenses(user_id) if row.get("id")]
        participant_rows = await asyncio.gather(*(self._source.list_participants(row["id"]) for row in rows))
        expenses = build_expenses(
            rows,
            {row["id"]: parts for row, parts in zip(rows, participant_rows)},
            default_currency=self._settings.default_currency,
        )
        for expense in expenses:
            if not is_billable(expense):
                self._log.info("ledger.expense.skipped", expense_id=expense.id)

        profiles = build_profiles(await self._source.list_profiles())
        self._log.info("ledger.snapshot.loaded", user_id=user_id, expenses=len(expenses))
        return Snapshot(expenses=expenses, profiles=profiles)

    async def friend_report(self, me: str, friend: str, snapshot: Optional[Snapshot] = None) -> FriendReport:
        snapshot = snapshot or await self.load(me)
        expenses = Scope.direct(me, friend).filter(snapshot.expenses)
        names = build_name_map(
            [user_id for expense in expenses for user_id in expense.participant_ids] + [me, friend],
            snapshot.profiles,
            me=me,
        )

        recent = recent_expenses(expenses)
        breakdown: list[SetBreakdown] = []
        for group in participant_sets(expenses):
            net = net_between(group.expenses, me, friend)
            if all(is_settled(amount) for amount in net.values()):
                continue
            labels = [names[u] for u in group.expenses[0].participant_ids]
            label = " + ".join(sorted(labels, key=lambda n: n != SELF_LABEL))
            breakdown.append(SetBreakdown(participants=group, label=label, net=net))

        report = FriendReport(
            friend_id=friend,
            name=names[friend],
            net=net_between(expenses, me, friend),
            ledger=resolve(expenses, names),
            breakdown=breakdown,
            recent=recent,
            recent_lines=self.describe_recent(recent),
        )
        self._log.info("ledger.report", scope="direct", user_id=me, friend_id=friend, expenses=len(expenses))
        return report

    async def group_report(self, me: str, group_id: str, snapshot: Optional[Snapshot] = None) -> GroupReport:
        snapshot = snapshot or await self.load(me)
        expenses = Scope.group(group_id).filter(snapshot.expenses)
        members = {user_id for expense in expenses for user_id in expense.participant_ids}
        names = build_name_map(
            [user_id for expense in expenses for user_id in expense.participant_ids],
            snapshot.profiles,
            me=me,
        )

        recent = recent_expenses(expenses)
        report = GroupReport(
            group_id=group_id,
            ledger=resolve(expenses, names),
            summary=member_summary(expenses, me),
            expense_count=len(expenses),
            member_count=len(members),
            recent=recent,
            recent_lines=self.describe_recent(recent),
        )
        self._log.info("ledger.report", scope="group", user_id=me, group_id=group_id, expenses=len(expenses))
        return report

    async def overview(self, me: str, snapshot: Optional[Snapshot] = None) -> Overview:
        snapshot = snapshot or await self.load(me)
        expenses = Scope.everyone(me).filter(snapshot.expenses)
        overview = Overview()

        friend_nets = {
            friend: net_between(Scope.direct(me, friend).filter(expenses), me, friend)
            for friend in friends_of(expenses, me)
        }
        # largest outstanding balance first
        for friend in sorted(friend_nets, key=lambda f: sum(abs(v) for v in friend_nets[f].values()), reverse=True):
            overview.friends[friend] = friend_nets[friend]
            _add_into(overview.totals, friend_nets[friend])

        for group_id in group_ids_of(expenses):
            summaries = member_summary(Scope.group(group_id).filter(expenses), me)
            net = {currency: summary.net for currency, summary in summaries.items()}
            overview.groups[group_id] = net
            _add_into(overview.totals, net)

        self._log.info("ledger.report", scope="everyone", user_id=me, expenses=len(expenses))
        return overview
