"""
Tests for the expense split calculator.
"""
import pytest
from decimal import Decimal
from splitledger.core.errors import InvalidSplitInput, ReconciliationWarning
from splitledger.models.expense import Item, ItemAssignment, SplitMethod
from splitledger.services.split_calculator import compute_shares


def _amounts(shares):
    return [share.amount for share in shares]


def test_equal_split_gives_remainder_to_first_member():
    """100 among three members is 33.34 / 33.33 / 33.33."""
    shares = compute_shares(Decimal("100"), SplitMethod.EQUAL, ["A", "B", "C"])

    assert [share.member_id for share in shares] == ["A", "B", "C"]
    assert _amounts(shares) == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert [share.percentage for share in shares] == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sum(_amounts(shares)) == Decimal("100.00")


def test_equal_split_single_member_takes_everything():
    """One member owes the whole amount."""
    shares = compute_shares(Decimal("42.50"), "equal", ["A"])

    assert _amounts(shares) == [Decimal("42.50")]
    assert shares[0].percentage == Decimal("100.00")


@pytest.mark.parametrize("amount", ["0.01", "1.00", "10.00", "99.99", "100.00", "1234.57", "0.07"])
@pytest.mark.parametrize("count", [1, 2, 3, 6, 7])
def test_equal_split_always_sums_to_amount(amount, count):
    """Equal shares reconcile exactly for any amount and member count."""
    members = [f"m{i}" for i in range(count)]
    shares = compute_shares(Decimal(amount), SplitMethod.EQUAL, members)

    assert sum(_amounts(shares)) == Decimal(amount)


def test_equal_split_rejects_empty_and_repeated_members():
    """Equal split needs distinct members."""
    with pytest.raises(InvalidSplitInput):
        compute_shares(Decimal("10"), SplitMethod.EQUAL, [])
    with pytest.raises(InvalidSplitInput):
        compute_shares(Decimal("10"), SplitMethod.EQUAL, ["A", "A"])


def test_equal_split_rejects_amount_too_small_for_members():
    """Rounding up 0.005 per head would push the first share negative."""
    members = [f"m{i}" for i in range(300)]

    with pytest.raises(InvalidSplitInput):
        compute_shares(Decimal("1.50"), SplitMethod.EQUAL, members)


@pytest.mark.parametrize("amount", [0, -5, "0.00"])
def test_non_positive_amount_is_rejected(amount):
    """Amount must be greater than zero."""
    with pytest.raises(InvalidSplitInput):
        compute_shares(amount, SplitMethod.EQUAL, ["A"])


def test_malformed_amount_is_rejected():
    """A non-numeric amount is an input error, not a crash."""
    with pytest.raises(InvalidSplitInput):
        compute_shares("ten", SplitMethod.EQUAL, ["A"])


def test_unknown_split_method_is_rejected():
    """Only the four policies exist."""
    with pytest.raises(InvalidSplitInput):
        compute_shares(Decimal("10"), "shares", ["A"])


def test_float_amount_is_rounded_to_cents():
    """Floats go through the rounding utility before splitting."""
    shares = compute_shares(0.1 + 0.2, SplitMethod.EQUAL, ["A"])

    assert _amounts(shares) == [Decimal("0.30")]


def test_percentage_split_last_member_reconciles():
    """The last member absorbs whatever rounding left over."""
    shares = compute_shares(
        Decimal("100"), SplitMethod.PERCENTAGE,
        {"A": Decimal("33.33"), "B": Decimal("33.33"), "C": Decimal("33.34")}
    )

    assert _amounts(shares) == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(_amounts(shares)) == Decimal("100.00")


def test_percentage_split_rounding_lands_on_last_member():
    """10.00 at 33.33% is 3.33 twice, the last member gets 3.34."""
    shares = compute_shares(
        Decimal("10.00"), SplitMethod.PERCENTAGE,
        {"A": Decimal("33.33"), "B": Decimal("33.33"), "C": Decimal("33.34")}
    )

    assert _amounts(shares) == [Decimal("3.33"), Decimal("3.33"), Decimal("3.34")]
    assert [share.percentage for share in shares] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]


def test_percentage_split_requires_total_of_100():
    """Percentages off by more than 0.01 are rejected."""
    with pytest.raises(InvalidSplitInput):
        compute_shares(Decimal("100"), SplitMethod.PERCENTAGE, {"A": Decimal("50"), "B": Decimal("49")})


def test_percentage_split_rejects_negative_percentage():
    """Negative percentages cannot be balanced out by others."""
    with pytest.raises(InvalidSplitInput):
        compute_shares(Decimal("100"), SplitMethod.PERCENTAGE, {"A": Decimal("110"), "B": Decimal("-10")})


def test_custom_split_passes_amounts_through():
    """Custom amounts are used as given, percentages back-computed."""
    shares = compute_shares(Decimal("100"), SplitMethod.CUSTOM, {"A": Decimal("60"), "B": Decimal("40")})

    assert _amounts(shares) == [Decimal("60.00"), Decimal("40.00")]
    assert [share.percentage for share in shares] == [Decimal("60.00"), Decimal("40.00")]


def test_custom_split_rejects_mismatched_total():
    """Custom amounts more than 0.05 away from the total are rejected."""
    with pytest.raises(InvalidSplitInput):
        compute_shares(Decimal("100"), SplitMethod.CUSTOM, {"A": Decimal("60"), "B": Decimal("39.90")})


def test_custom_split_within_tolerance_warns():
    """A small mismatch is accepted but reported."""
    with pytest.warns(ReconciliationWarning):
        shares = compute_shares(Decimal("100"), SplitMethod.CUSTOM, {"A": Decimal("60"), "B": Decimal("39.97")})

    assert sum(_amounts(shares)) == Decimal("99.97")


def test_item_split_sums_items_per_member():
    """Pizza 300 for A and B, beer 100 for A: A owes 250, B owes 150."""
    items = [
        Item(name="Pizza", price=Decimal("300"), assigned_to=[ItemAssignment(member_id="A"), ItemAssignment(member_id="B")]),
        Item(name="Beer", price=Decimal("100"), assigned_to=[ItemAssignment(member_id="A")]),
    ]
    shares = compute_shares(Decimal("400"), SplitMethod.ITEMS, items)

    assert {share.member_id: share.amount for share in shares} == {"A": Decimal("250.00"), "B": Decimal("150.00")}
    assert {share.member_id: share.percentage for share in shares} == {"A": Decimal("62.50"), "B": Decimal("37.50")}


def test_item_split_accepts_plain_dicts_and_legacy_name():
    """Items can arrive as raw dicts; 'item-based' is an alias for items."""
    items = [
        {"name": "Cake", "price": "10.00", "assigned_to": [{"member_id": "A"}, {"member_id": "B"}, {"member_id": "C", "quantity": 2}]},
    ]
    shares = compute_shares(Decimal("10.00"), "item-based", items)

    assert _amounts(shares) == [Decimal("3.34"), Decimal("3.33"), Decimal("3.33")]
    assert sum(_amounts(shares)) == Decimal("10.00")


def test_item_split_rejects_mismatched_total():
    """Items must add up to the expense amount within 0.05."""
    items = [Item(name="Soup", price=Decimal("20"), assigned_to=[ItemAssignment(member_id="A")])]

    with pytest.raises(InvalidSplitInput):
        compute_shares(Decimal("20.10"), SplitMethod.ITEMS, items)


def test_item_split_rejects_unassigned_item():
    """Every item needs at least one assignee."""
    items = [
        Item(name="Soup", price=Decimal("20"), assigned_to=[ItemAssignment(member_id="A")]),
        Item(name="Bread", price=Decimal("5"), assigned_to=[]),
    ]

    with pytest.raises(InvalidSplitInput):
        compute_shares(Decimal("25"), SplitMethod.ITEMS, items)


def test_item_split_rejects_empty_item_list():
    """Item-based split needs items."""
    with pytest.raises(InvalidSplitInput):
        compute_shares(Decimal("25"), SplitMethod.ITEMS, [])


def test_percentage_tolerance_uses_unrounded_values():
    """50.005 + 50.005 is 100.01 and within tolerance."""
    shares = compute_shares(
        Decimal("100"), SplitMethod.PERCENTAGE,
        {"A": Decimal("50.005"), "B": Decimal("50.005")}
    )

    assert _amounts(shares) == [Decimal("50.01"), Decimal("49.99")]
    assert [share.percentage for share in shares] == [Decimal("50.01"), Decimal("50.01")]


def test_custom_split_overshoot_caps_percentage():
    """One member owing 100.05 of 100 is accepted with a 100% share."""
    with pytest.warns(ReconciliationWarning):
        shares = compute_shares(Decimal("100"), SplitMethod.CUSTOM, {"A": Decimal("100.05")})

    assert _amounts(shares) == [Decimal("100.05")]
    assert shares[0].percentage == Decimal("100")


def test_item_split_overshoot_caps_percentage():
    """A single item priced 100.03 on a 100 expense stays within tolerance."""
    items = [Item(name="Dinner", price=Decimal("100.03"), assigned_to=[ItemAssignment(member_id="A")])]

    with pytest.warns(ReconciliationWarning):
        shares = compute_shares(Decimal("100"), SplitMethod.ITEMS, items)

    assert _amounts(shares) == [Decimal("100.03")]
    assert shares[0].percentage == Decimal("100")
