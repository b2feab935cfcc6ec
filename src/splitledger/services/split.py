from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from splitledger.models import Expense, ExpenseParticipant, SplitMethod, to_money


ZERO = Decimal("0.00")

WEIGHTED_METHODS = frozenset({SplitMethod.BY_SHARES, SplitMethod.BY_PERCENT, SplitMethod.FULL})


def _total_weight(participants: Sequence[ExpenseParticipant]) -> Decimal:
    return sum((Decimal(p.share_count) for p in participants), Decimal(0))


def _absorb_remainder(amount: Decimal, shares: list[Decimal]) -> list[Decimal]:
    # the first participant takes whatever rounding left over
    remainder = amount - sum(shares, ZERO)
    if remainder and shares:
        shares[0] = to_money(shares[0] + remainder)
    return shares


def split_equal(amount: Decimal, participant_count: int) -> list[Decimal]:
    if participant_count <= 0:
        return []
    amount = to_money(amount)
    base_share = to_money(amount / participant_count)
    return _absorb_remainder(amount, [base_share] * participant_count)


def split_by_shares(amount: Decimal, participants: Sequence[ExpenseParticipant]) -> list[Decimal]:
    if not participants:
        return []
    total_shares = _total_weight(participants)
    if total_shares <= 0:
        return [ZERO for _ in participants]

    amount = to_money(amount)
    shares = [to_money(amount * Decimal(p.share_count) / total_shares) for p in participants]
    return _absorb_remainder(amount, shares)


def split_by_exact(participants: Sequence[ExpenseParticipant]) -> list[Decimal]:
    """Literal amounts: ``share_count`` carries the participant's share in minor units."""
    return [to_money(Decimal(p.share_count) / 100) for p in participants]


def compute_share(expense: Expense, user_id: str) -> Decimal:
    """Unrounded amount ``user_id`` owes for ``expense``.

    Non-participants, unknown split methods and degenerate weights yield zero
    instead of raising.
    """
    participants = expense.participants
    participant = next((p for p in participants if p.user_id == user_id), None)
    if participant is None:
        return Decimal(0)

    method = expense.split_method
    if method == SplitMethod.EQUAL:
        return Decimal(expense.amount) / len(participants)
    if method == SplitMethod.BY_EXACT:
        return Decimal(participant.share_count) / 100
    if method in WEIGHTED_METHODS:
        total_weight = _total_weight(participants)
        if total_weight <= 0:
            return Decimal(0)
        return Decimal(participant.share_count) / total_weight * Decimal(expense.amount)
    return Decimal(0)


def allocate(expense: Expense) -> dict[str, Decimal]:
    """Cent-exact shares for every participant, keyed by user id in participant order."""
    participants = expense.participants
    method = expense.split_method

    if method == SplitMethod.EQUAL:
        shares = split_equal(expense.amount, len(participants))
    elif method in WEIGHTED_METHODS:
        shares = split_by_shares(expense.amount, participants)
    elif method == SplitMethod.BY_EXACT:
        shares = split_by_exact(participants)
    else:
        shares = [ZERO for _ in participants]

    return {p.user_id: share for p, share in zip(participants, shares)}
