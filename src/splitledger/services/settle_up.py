from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from splitledger.models import DEFAULT_CURRENCY, ExpenseParticipant, SplitMethod, to_money
from splitledger.services.report import format_amount
from splitledger.services.settlement import SETTLED_TOLERANCE


class SettleUpError(ValueError):
    pass


@dataclass(slots=True, frozen=True)
class SettleUpDraft:
    """Expense payload recording a payment from debtor to creditor.

    The debtor "pays" and the creditor carries the whole weight, so once stored
    the ledger credits the debtor and debits the creditor by ``amount``.
    """

    title: str
    amount: Decimal
    currency: str
    paid_by: str
    split_method: SplitMethod
    participants: tuple[ExpenseParticipant, ...]


def settle_up_draft(
    debtor_id: str,
    creditor_id: str,
    outstanding: Decimal,
    currency: str = DEFAULT_CURRENCY,
    amount: Optional[Decimal] = None,
    creditor_name: Optional[str] = None,
) -> SettleUpDraft:
    full_amount = to_money(abs(outstanding))
    if debtor_id == creditor_id:
        raise SettleUpError("Debtor and creditor must differ.")
    if full_amount <= SETTLED_TOLERANCE:
        raise SettleUpError("Nothing to settle.")

    label = creditor_name or creditor_id
    if amount is None:
        settled = full_amount
        title = f"Settlement: {label}"
    else:
        settled = to_money(amount)
        if settled <= 0:
            raise SettleUpError("Enter a valid amount.")
        if settled > full_amount + SETTLED_TOLERANCE:
            raise SettleUpError(f"Can't settle more than {format_amount(full_amount, currency)}.")
        title = f"Partial settlement: {label} ({format_amount(settled, currency)})"

    return SettleUpDraft(
        title=title,
        amount=settled,
        currency=currency,
        paid_by=debtor_id,
        split_method=SplitMethod.BY_SHARES,
        participants=(
            ExpenseParticipant(user_id=debtor_id, share_count=Decimal(0)),
            ExpenseParticipant(user_id=creditor_id, share_count=Decimal(100)),
        ),
    )
