from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional, Union


CENT = Decimal("0.01")
DEFAULT_CURRENCY = "USD"


class SplitMethod(str, Enum):
    EQUAL = "EQUAL"
    BY_SHARES = "BY_SHARES"
    BY_PERCENT = "BY_PERCENT"
    FULL = "FULL"
    BY_EXACT = "BY_EXACT"


def to_money(value: Decimal | int | float | str) -> Decimal:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(slots=True, frozen=True)
class ExpenseParticipant:
    user_id: str
    share_count: Decimal = Decimal(1)


@dataclass(slots=True, frozen=True)
class Expense:
    id: str
    amount: Decimal
    paid_by: Optional[str]
    participants: tuple[ExpenseParticipant, ...] = ()
    split_method: Union[SplitMethod, str] = SplitMethod.EQUAL
    currency: str = DEFAULT_CURRENCY
    group_id: Optional[str] = None
    title: str = ""
    created_at: Optional[datetime] = None

    @property
    def participant_ids(self) -> list[str]:
        return [p.user_id for p in self.participants]

    def has_participant(self, user_id: str) -> bool:
        return any(p.user_id == user_id for p in self.participants)


@dataclass(slots=True, frozen=True)
class UserProfile:
    id: str
    display_name: str
    email: str = ""
