"""
Split calculator: turns one charged amount into per-member shares.

Four policies are supported:
- equal: divide equally among members, rounding remainder to the first member
- percentage: divide by percentages, the last member absorbs the rounding
- custom: explicit amount per member
- items: each item split equally among its assignees, summed per member

Shares always come back in a deterministic order (the order members were
supplied in, or first appearance across items).
"""
import logging
import warnings
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Union

from splitledger.core.config import settings
from splitledger.core.errors import InvalidSplitInput, ReconciliationWarning
from splitledger.core.utils import Number, percentage_of, round_money
from splitledger.models.expense import Item, Share, SplitMethod
from splitledger.models.member import MemberId

logger = logging.getLogger(__name__)


HUNDRED = Decimal("100")


def _parse_decimal(value: Number, what: str) -> Decimal:
    try:
        if isinstance(value, float):
            value = str(value)
        parsed = value if isinstance(value, Decimal) else Decimal(value)
    except (ArithmeticError, ValueError, TypeError):
        raise InvalidSplitInput(f"Invalid {what}: {value!r}")
    if not parsed.is_finite():
        raise InvalidSplitInput(f"Invalid {what}: {value!r}")
    return parsed


def _to_decimal(value: Number, what: str) -> Decimal:
    return round_money(_parse_decimal(value, what))


def _build_shares(amounts: Dict[MemberId, Decimal], total: Decimal) -> List[Share]:
    # Custom and item splits may overshoot the total within tolerance
    shares = [
        Share(
            member_id=member_id,
            amount=share_amount,
            percentage=min(percentage_of(share_amount, total), HUNDRED),
        )
        for member_id, share_amount in amounts.items()
        if share_amount >= 0
    ]
    if len(shares) != len(amounts):
        raise InvalidSplitInput(
            f"Amount {total} is too small to split among {len(amounts)} members"
        )
    return shares


def calculate_equal_split(total_amount: Decimal, member_ids: Sequence[MemberId]) -> List[Share]:
    """
    Divide amount equally among members.

    Example: 100 divided among 3 people gives 33.34, 33.33, 33.33.
    """
    if not member_ids:
        raise InvalidSplitInput("At least one member required for equal split")
    if len(set(member_ids)) != len(member_ids):
        raise InvalidSplitInput("Members must not repeat in an equal split")

    count = len(member_ids)
    base_amount = round_money(total_amount / count)
    remainder = total_amount - base_amount * count

    amounts = {member_id: base_amount for member_id in member_ids}
    amounts[member_ids[0]] = base_amount + remainder
    return _build_shares(amounts, total_amount)


def calculate_percentage_split(total_amount: Decimal, percentages: Mapping[MemberId, Number]) -> List[Share]:
    """Divide amount by percentages; the last member gets whatever is left."""
    if not percentages:
        raise InvalidSplitInput("Percentages required for percentage split")

    # Raw values are checked; rounding happens per share
    cleaned = {member_id: _parse_decimal(pct, "percentage") for member_id, pct in percentages.items()}
    if any(pct < 0 for pct in cleaned.values()):
        raise InvalidSplitInput("Percentages must not be negative")

    total_percentage = sum(cleaned.values(), Decimal("0"))
    if abs(total_percentage - HUNDRED) > settings.PERCENTAGE_TOLERANCE:
        raise InvalidSplitInput(
            f"Percentages must sum to 100%. Current total: {total_percentage}%"
        )

    amounts: Dict[MemberId, Decimal] = {}
    running_total = Decimal("0.00")
    members = list(cleaned)
    for member_id in members[:-1]:
        amounts[member_id] = round_money(total_amount * cleaned[member_id] / HUNDRED)
        running_total += amounts[member_id]
    amounts[members[-1]] = total_amount - running_total

    if amounts[members[-1]] < 0:
        raise InvalidSplitInput("Percentages leave a negative remainder for the last member")

    return [
        Share(member_id=member_id, amount=amounts[member_id], percentage=min(round_money(cleaned[member_id]), HUNDRED))
        for member_id in members
    ]


def calculate_custom_split(total_amount: Decimal, amounts: Mapping[MemberId, Number]) -> List[Share]:
    """Use the amount each member owes as given."""
    if not amounts:
        raise InvalidSplitInput("Amounts required for custom split")

    cleaned = {member_id: _to_decimal(value, "amount") for member_id, value in amounts.items()}
    if any(value < 0 for value in cleaned.values()):
        raise InvalidSplitInput("Custom amounts must not be negative")

    total_provided = sum(cleaned.values(), Decimal("0.00"))
    if abs(total_provided - total_amount) > settings.AMOUNT_TOLERANCE:
        raise InvalidSplitInput(
            f"Custom amounts must sum to total. Total provided: {total_provided}, "
            f"Expected: {total_amount}"
        )
    return _build_shares(cleaned, total_amount)


def calculate_item_split(total_amount: Decimal, items: Iterable[Union[Item, Mapping[str, Any]]]) -> List[Share]:
    """
    Split by line items.

    Each item is shared equally by its assignees (remainder to the first
    assignee); a member's share is the sum over the items assigned to them.
    Example: pizza 300 for A and B, beer 100 for A gives A 250, B 150.
    """
    items = [item if isinstance(item, Item) else Item.model_validate(item) for item in items or []]
    if not items:
        raise InvalidSplitInput("At least one item required for item-based split")

    items_total = sum((round_money(item.price) for item in items), Decimal("0.00"))
    if abs(items_total - total_amount) > settings.AMOUNT_TOLERANCE:
        raise InvalidSplitInput(
            f"Items total ({items_total}) doesn't match expense amount ({total_amount})"
        )

    member_totals: Dict[MemberId, Decimal] = {}
    for item in items:
        if not item.assigned_to:
            raise InvalidSplitInput(f'Item "{item.name}" must be assigned to at least one member')

        price = round_money(item.price)
        count = len(item.assigned_to)
        share_per_member = round_money(price / count)
        remainder = price - share_per_member * count

        for index, assignment in enumerate(item.assigned_to):
            member_amount = share_per_member + remainder if index == 0 else share_per_member
            previous = member_totals.get(assignment.member_id, Decimal("0.00"))
            member_totals[assignment.member_id] = round_money(previous + member_amount)

    return _build_shares(member_totals, total_amount)


def compute_shares(amount: Number, method: Union[SplitMethod, str], params: Any) -> List[Share]:
    """
    Compute expense shares for one amount under a split policy.

    params depends on the method: an ordered list of member ids (equal), a
    member -> percentage mapping (percentage), a member -> amount mapping
    (custom) or a list of items (items). Raises InvalidSplitInput when the
    input is malformed or does not reconcile.
    """
    total_amount = _to_decimal(amount, "amount")
    if total_amount <= 0:
        raise InvalidSplitInput("Expense amount must be greater than 0")

    try:
        method = SplitMethod(method)
    except ValueError:
        raise InvalidSplitInput(f"Unknown split type: {method}")

    if method == SplitMethod.EQUAL:
        shares = calculate_equal_split(total_amount, list(params or []))
    elif method == SplitMethod.PERCENTAGE:
        shares = calculate_percentage_split(total_amount, params or {})
    elif method == SplitMethod.CUSTOM:
        shares = calculate_custom_split(total_amount, params or {})
    else:
        shares = calculate_item_split(total_amount, params)

    check_share_total(shares, total_amount)
    logger.debug(f"Split {total_amount} by {method.value} into {len(shares)} shares")
    return shares


def check_share_total(shares: Sequence[Share], amount: Decimal) -> Decimal:
    """Warn when shares do not add up to the expense amount. Returns the deviation."""
    deviation = sum((share.amount for share in shares), Decimal("0.00")) - amount
    if deviation != 0:
        message = f"Shares deviate from expense amount {amount} by {deviation}"
        logger.warning(message)
        warnings.warn(message, ReconciliationWarning, stacklevel=2)
    return deviation
