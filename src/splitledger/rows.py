"""Conversion of the storage layer's raw rows into ledger records."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from splitledger.models import DEFAULT_CURRENCY, Expense, ExpenseParticipant, SplitMethod, UserProfile


Row = Mapping[str, Any]


def _decimal(value: Any, default: Decimal) -> Decimal:
    if value is None:
        return default
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return default
    return result if result.is_finite() else default


def _split_method(value: Optional[str]) -> Union[SplitMethod, str]:
    if not value:
        return SplitMethod.EQUAL
    try:
        return SplitMethod(value)
    except ValueError:
        return value


def _timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def build_participants(rows: Iterable[Row]) -> tuple[ExpenseParticipant, ...]:
    participants: dict[str, ExpenseParticipant] = {}
    for row in rows:
        user_id = row.get("userId")
        if not user_id or user_id in participants:
            continue
        participants[user_id] = ExpenseParticipant(
            user_id=user_id,
            share_count=_decimal(row.get("shareCount"), Decimal(1)),
        )
    return tuple(participants.values())


def build_expense(
    row: Row,
    participant_rows: Iterable[Row] = (),
    default_currency: str = DEFAULT_CURRENCY,
) -> Optional[Expense]:
    expense_id = row.get("id")
    if not expense_id:
        return None
    return Expense(
        id=expense_id,
        amount=_decimal(row.get("amount"), Decimal(0)),
        paid_by=row.get("paidBy") or None,
        participants=build_participants(participant_rows),
        split_method=_split_method(row.get("splitMethod")),
        currency=row.get("currency") or default_currency,
        group_id=row.get("groupId") or None,
        title=row.get("title") or "",
        created_at=_timestamp(row.get("createdAt")),
    )


def build_expenses(
    rows: Iterable[Row],
    participants_by_expense: Mapping[str, Sequence[Row]],
    default_currency: str = DEFAULT_CURRENCY,
) -> list[Expense]:
    expenses: list[Expense] = []
    for row in rows:
        expense = build_expense(row, participants_by_expense.get(row.get("id"), ()), default_currency)
        if expense is not None:
            expenses.append(expense)
    return expenses


def build_profiles(rows: Iterable[Row]) -> dict[str, UserProfile]:
    profiles: dict[str, UserProfile] = {}
    for row in rows:
        user_id = row.get("id")
        if not user_id:
            continue
        profiles[user_id] = UserProfile(
            id=user_id,
            display_name=row.get("displayName") or "Unknown",
            email=row.get("email") or "",
        )
    return profiles
