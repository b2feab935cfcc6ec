from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from splitledger.models import Expense


class ScopeKind(str, Enum):
    DIRECT = "direct"
    GROUP = "group"
    EVERYONE = "everyone"


@dataclass(slots=True, frozen=True)
class Scope:
    kind: ScopeKind
    user_id: Optional[str] = None
    friend_id: Optional[str] = None
    group_id: Optional[str] = None

    @classmethod
    def direct(cls, me: str, friend: str) -> "Scope":
        return cls(kind=ScopeKind.DIRECT, user_id=me, friend_id=friend)

    @classmethod
    def group(cls, group_id: str) -> "Scope":
        return cls(kind=ScopeKind.GROUP, group_id=group_id)

    @classmethod
    def everyone(cls, user_id: str) -> "Scope":
        return cls(kind=ScopeKind.EVERYONE, user_id=user_id)

    def includes(self, expense: Expense) -> bool:
        if self.kind == ScopeKind.DIRECT:
            return (
                not expense.group_id
                and expense.has_participant(self.user_id)
                and expense.has_participant(self.friend_id)
            )
        if self.kind == ScopeKind.GROUP:
            return expense.group_id == self.group_id
        return expense.paid_by == self.user_id or expense.has_participant(self.user_id)

    def filter(self, expenses: Iterable[Expense]) -> list[Expense]:
        return [expense for expense in expenses if self.includes(expense)]


def friends_of(expenses: Iterable[Expense], me: str) -> list[str]:
    """Counterparties of ``me`` across direct (group-less) expenses, in first-seen order."""
    seen: dict[str, None] = {}
    for expense in expenses:
        if expense.group_id or not expense.has_participant(me):
            continue
        for user_id in expense.participant_ids:
            if user_id != me:
                seen.setdefault(user_id, None)
    return list(seen)


def group_ids_of(expenses: Iterable[Expense]) -> list[str]:
    seen: dict[str, None] = {}
    for expense in expenses:
        if expense.group_id:
            seen.setdefault(expense.group_id, None)
    return list(seen)
