from decimal import Decimal

from splitledger.models import Expense, ExpenseParticipant, SplitMethod
from splitledger.services.split import allocate, compute_share, split_by_exact, split_by_shares, split_equal


def _participants(*weights):
    return [ExpenseParticipant(user_id=f"u{i}", share_count=Decimal(w)) for i, w in enumerate(weights)]


def test_split_equal_even():
    assert split_equal(Decimal("90.00"), 3) == [Decimal("30.00")] * 3


def test_split_equal_remainder_goes_to_first():
    shares = split_equal(Decimal("100.00"), 3)
    assert shares == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sum(shares) == Decimal("100.00")


def test_split_equal_negative_remainder():
    shares = split_equal(Decimal("0.05"), 3)
    assert sum(shares) == Decimal("0.05")
    assert shares[1:] == [Decimal("0.02"), Decimal("0.02")]
    assert shares[0] == Decimal("0.01")


def test_split_equal_sums_exactly():
    for amount in ("0.01", "1.00", "10.07", "999.99", "1234.56"):
        for count in range(1, 12):
            assert sum(split_equal(Decimal(amount), count)) == Decimal(amount)


def test_split_equal_no_participants():
    assert split_equal(Decimal("10.00"), 0) == []
    assert split_equal(Decimal("10.00"), -2) == []


def test_split_by_shares_weighted():
    assert split_by_shares(Decimal("100.00"), _participants(1, 3)) == [Decimal("25.00"), Decimal("75.00")]


def test_split_by_shares_remainder():
    shares = split_by_shares(Decimal("10.00"), _participants(1, 1, 1))
    assert shares == [Decimal("3.34"), Decimal("3.33"), Decimal("3.33")]


def test_split_by_shares_sums_exactly():
    weights = [(1, 2, 3), (7, 0, 5), (0.5, 1.5), (33, 33, 34), (1,) * 7]
    for amount in ("0.10", "19.99", "100.00", "3333.33"):
        for w in weights:
            assert sum(split_by_shares(Decimal(amount), _participants(*w))) == Decimal(amount)


def test_split_by_shares_zero_weights():
    assert split_by_shares(Decimal("50.00"), _participants(0, 0)) == [Decimal("0"), Decimal("0")]


def test_split_by_shares_empty():
    assert split_by_shares(Decimal("50.00"), []) == []


def test_split_by_exact_uses_minor_units():
    assert split_by_exact(_participants(1250, 750)) == [Decimal("12.50"), Decimal("7.50")]


def test_compute_share_methods():
    participants = tuple(_participants(1, 3))
    equal = Expense(id="e1", amount=Decimal("100.00"), paid_by="u0", participants=participants)
    weighted = Expense(
        id="e2", amount=Decimal("100.00"), paid_by="u0", participants=participants, split_method=SplitMethod.BY_SHARES
    )
    assert compute_share(equal, "u1") == Decimal(50)
    assert compute_share(weighted, "u1") == Decimal(75)


def test_compute_share_full_and_percent():
    full = Expense(
        id="e1",
        amount=Decimal("40.00"),
        paid_by="u0",
        participants=tuple(_participants(0, 100)),
        split_method=SplitMethod.FULL,
    )
    assert compute_share(full, "u0") == 0
    assert compute_share(full, "u1") == Decimal(40)

    percent = Expense(
        id="e2",
        amount=Decimal("200.00"),
        paid_by="u0",
        participants=tuple(_participants(30, 70)),
        split_method=SplitMethod.BY_PERCENT,
    )
    assert compute_share(percent, "u0") == Decimal(60)


def test_compute_share_degenerate_and_unknown():
    zero = Expense(
        id="e1",
        amount=Decimal("10.00"),
        paid_by="u0",
        participants=tuple(_participants(0, 0)),
        split_method=SplitMethod.BY_SHARES,
    )
    unknown = Expense(
        id="e2", amount=Decimal("10.00"), paid_by="u0", participants=tuple(_participants(1, 1)), split_method="BY_VIBES"
    )
    assert compute_share(zero, "u0") == 0
    assert compute_share(unknown, "u0") == 0


def test_allocate_dispatch():
    participants = tuple(_participants(1000, 2000))
    exact = Expense(
        id="e1", amount=Decimal("30.00"), paid_by="u0", participants=participants, split_method=SplitMethod.BY_EXACT
    )
    unknown = Expense(id="e2", amount=Decimal("30.00"), paid_by="u0", participants=participants, split_method="ODD")

    assert allocate(exact) == {"u0": Decimal("10.00"), "u1": Decimal("20.00")}
    assert allocate(unknown) == {"u0": Decimal("0"), "u1": Decimal("0")}


def test_compute_share_non_participant():
    participants = tuple(_participants(1, 3))
    equal = Expense(id="e1", amount=Decimal("90.00"), paid_by="u0", participants=participants)
    weighted = Expense(
        id="e2", amount=Decimal("90.00"), paid_by="u0", participants=participants, split_method=SplitMethod.BY_SHARES
    )

    assert compute_share(equal, "outsider") == 0
    assert compute_share(weighted, "outsider") == 0
