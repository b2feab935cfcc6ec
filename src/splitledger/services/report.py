from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo

from splitledger.models import Expense, to_money
from splitledger.services.ledger import LedgerReport, is_settled
from splitledger.services.settlement import SETTLED_TOLERANCE, Settlement


CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}


def format_amount(amount: Decimal, currency: str) -> str:
    value = to_money(amount)
    sign = "-" if value < 0 else ""
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol:
        return f"{sign}{symbol}{abs(value):.2f}"
    return f"{sign}{abs(value):.2f} {currency}"


def balance_label(net: Decimal, name: str) -> str:
    if net > SETTLED_TOLERANCE:
        return f"{name} owes you"
    if net < -SETTLED_TOLERANCE:
        return f"You owe {name}"
    return "All settled up"


def format_settlement(settlement: Settlement) -> str:
    debtor = settlement.debtor_name or settlement.debtor_id
    creditor = settlement.creditor_name or settlement.creditor_id
    return f"{debtor} -> {creditor}: {format_amount(settlement.amount, settlement.currency)}"


def format_report(report: LedgerReport, names: Optional[dict[str, str]] = None) -> str:
    names = names or {}
    lines: list[str] = []
    for currency, balances in report.balances.items():
        lines.append(f"[{currency}]")
        for user_id, net in balances.items():
            label = names.get(user_id, user_id)
            if is_settled(net):
                lines.append(f"  {label}: settled")
            else:
                sign = "+" if net > 0 else ""
                lines.append(f"  {label}: {sign}{format_amount(net, currency)}")
        settlements = report.settlements.get(currency, [])
        if settlements:
            lines.append("  Suggested:")
            lines.extend(f"    {format_settlement(s)}" for s in settlements)
        else:
            lines.append("  All settled up")
    return "\n".join(lines)


def format_expense_date(moment: datetime, now: datetime, tz: ZoneInfo) -> str:
    """Relative date: "Today, 8:44 AM", "Yesterday, 7:20 PM", "Tuesday, 3:05 PM" or "Feb 18"."""
    local = moment.astimezone(tz)
    local_now = now.astimezone(tz)
    diff_days = (local_now.date() - local.date()).days
    time_str = f"{local.hour % 12 or 12}:{local.minute:02d} {'AM' if local.hour < 12 else 'PM'}"

    if diff_days == 0:
        return f"Today, {time_str}"
    if diff_days == 1:
        return f"Yesterday, {time_str}"
    if 1 < diff_days < 7:
        return f"{local.strftime('%A')}, {time_str}"
    return f"{local.strftime('%b')} {local.day}"


def format_expense_line(expense: Expense, now: datetime, tz: ZoneInfo) -> str:
    line = f"{expense.title or 'Untitled'}: {format_amount(expense.amount, expense.currency)}"
    if expense.created_at:
        line += f" ({format_expense_date(expense.created_at, now, tz)})"
    return line
