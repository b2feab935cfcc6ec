from decimal import Decimal

from splitledger.models import Expense, ExpenseParticipant
from splitledger.services.scope import Scope, friends_of, group_ids_of


def _expense(expense_id, payer, users, group_id=None):
    return Expense(
        id=expense_id,
        amount=Decimal("10.00"),
        paid_by=payer,
        participants=tuple(ExpenseParticipant(user_id=u) for u in users),
        group_id=group_id,
    )


EXPENSES = [
    _expense("e1", "me", ["me", "ann"]),
    _expense("e2", "ann", ["me", "ann", "bob"]),
    _expense("e3", "bob", ["me", "bob"], group_id="trip"),
    _expense("e4", "ann", ["ann", "bob"]),
    _expense("e5", "me", ["ann"], group_id="flat"),
]


def test_direct_scope():
    assert [e.id for e in Scope.direct("me", "ann").filter(EXPENSES)] == ["e1", "e2"]
    assert [e.id for e in Scope.direct("me", "bob").filter(EXPENSES)] == ["e2"]


def test_group_scope():
    assert [e.id for e in Scope.group("trip").filter(EXPENSES)] == ["e3"]
    assert Scope.group("missing").filter(EXPENSES) == []


def test_everyone_scope_includes_paid_only():
    assert [e.id for e in Scope.everyone("me").filter(EXPENSES)] == ["e1", "e2", "e3", "e5"]


def test_friends_and_groups():
    assert friends_of(EXPENSES, "me") == ["ann", "bob"]
    assert group_ids_of(EXPENSES) == ["trip", "flat"]
