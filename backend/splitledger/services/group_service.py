"""
Group service for roster and expense-history maintenance.

Every function takes a Group and returns a new one; saving it is up to the
caller.
"""
import logging
import secrets
import string
from typing import Any, Container, List, Optional

from splitledger.core.config import settings
from splitledger.core.errors import (
    DuplicateMember,
    ExpenseNotFound,
    InvalidGroupDetails,
    InvalidJoinKey,
    InvalidMemberChange,
    InvalidSplitInput,
    MemberNotFound,
)
from splitledger.core.utils import round_money
from splitledger.models.expense import Expense, PaymentStatus, SplitMethod
from splitledger.models.group import Group
from splitledger.models.member import Member, MemberId, MemberRole
from splitledger.schemas.expense import ExpenseCreate
from splitledger.services.split_calculator import compute_shares

logger = logging.getLogger(__name__)

JOIN_KEY_LENGTH = 6
JOIN_KEY_ALPHABET = string.ascii_uppercase + string.digits


def generate_join_key(taken: Container[str] = ()) -> str:
    """Random 6-character code, uppercase letters and digits, not in taken."""
    while True:
        key = "".join(secrets.choice(JOIN_KEY_ALPHABET) for _ in range(JOIN_KEY_LENGTH))
        if key not in taken:
            return key


def normalize_join_key(join_key: str) -> str:
    """Join keys are matched case-insensitively."""
    join_key = (join_key or "").strip()
    if len(join_key) != JOIN_KEY_LENGTH:
        raise InvalidJoinKey("Valid 6-character join key is required")
    return join_key.upper()


def _check_currency(currency: str) -> str:
    if currency not in settings.SUPPORTED_CURRENCIES:
        raise InvalidGroupDetails(
            f"Invalid currency. Supported currencies are: {', '.join(settings.SUPPORTED_CURRENCIES)}"
        )
    return currency


def create_group(
    name: str,
    creator_id: MemberId,
    creator_name: str = "",
    creator_email: Optional[str] = None,
    description: str = "",
    currency: str = "USD",
    join_key: Optional[str] = None
) -> Group:
    """Create a group with its creator as the first admin."""
    if not name.strip():
        raise InvalidGroupDetails("Group name is required")

    creator = Member(id=creator_id, name=creator_name, email=creator_email, role=MemberRole.ADMIN)
    return Group(
        name=name.strip(),
        description=description.strip(),
        currency=_check_currency(currency),
        join_key=normalize_join_key(join_key) if join_key else generate_join_key(),
        created_by=creator_id,
        members=[creator],
    )


def update_group(
    group: Group,
    name: Optional[str] = None,
    description: Optional[str] = None,
    currency: Optional[str] = None
) -> Group:
    """Change a group's name, description or display currency. None leaves a field as is."""
    update = {}
    if currency:
        update["currency"] = _check_currency(currency)
    if name is not None:
        if not name.strip():
            raise InvalidGroupDetails("Group name is required")
        update["name"] = name.strip()
    if description is not None:
        update["description"] = description.strip()
    return group.model_copy(update=update)


def add_member(
    group: Group,
    member_id: MemberId,
    name: str = "",
    email: Optional[str] = None,
    role: MemberRole = MemberRole.MEMBER
) -> Group:
    """Add a member to the roster."""
    if group.is_member(member_id):
        raise DuplicateMember("User is already a member of this group")

    member = Member(id=member_id, name=name, email=email, role=role)
    return group.model_copy(update={"members": group.members + [member]})


def join_group(group: Group, member_id: MemberId, name: str = "", email: Optional[str] = None) -> Group:
    """Add the caller to a group found by its join key, as a regular member."""
    if group.is_member(member_id):
        raise DuplicateMember("You are already a member of this group")

    logger.info(f"{member_id} joined group {group.id}")
    return add_member(group, member_id, name=name, email=email)


def remove_member(group: Group, member_id: MemberId) -> Group:
    """Remove a member from the roster. Their expenses and shares stay."""
    if not group.is_member(member_id):
        raise MemberNotFound("Member not found in this group")
    if member_id == group.created_by:
        raise InvalidMemberChange("Cannot remove the group creator")
    if group.admin_ids == [member_id]:
        raise InvalidMemberChange("Cannot remove the last admin of the group")

    members = [member for member in group.members if member.id != member_id]
    return group.model_copy(update={"members": members})


def change_role(group: Group, member_id: MemberId, role: MemberRole) -> Group:
    """Change a member's role; the only mutable part of a member."""
    if not group.is_member(member_id):
        raise MemberNotFound("Member not found in this group")
    if role != MemberRole.ADMIN and group.admin_ids == [member_id]:
        raise InvalidMemberChange("Cannot demote the last admin of the group")

    members = [
        member.model_copy(update={"role": role}) if member.id == member_id else member
        for member in group.members
    ]
    return group.model_copy(update={"members": members})


def _split_params(data: ExpenseCreate) -> Any:
    if data.split_method == SplitMethod.EQUAL:
        return data.split_among
    if data.split_method == SplitMethod.PERCENTAGE:
        return data.percentages
    if data.split_method == SplitMethod.CUSTOM:
        return data.custom_amounts
    return data.items


def _split_members(data: ExpenseCreate) -> List[MemberId]:
    if data.split_method == SplitMethod.PERCENTAGE:
        return list(data.percentages or {})
    if data.split_method == SplitMethod.CUSTOM:
        return list(data.custom_amounts or {})
    if data.split_method == SplitMethod.ITEMS:
        return [assignment.member_id for item in data.items or [] for assignment in item.assigned_to]
    return list(data.split_among or [])


def build_expense(group: Group, data: ExpenseCreate) -> Expense:
    """
    Validate an expense request against the roster and compute its shares.

    The payer's own share starts out paid, since nobody owes themselves.
    """
    if not group.is_member(data.paid_by):
        raise MemberNotFound("paidBy must be a member of the group")

    invalid = [member_id for member_id in _split_members(data) if not group.is_member(member_id)]
    if invalid:
        raise MemberNotFound(f"Some selected members are not in this group: {', '.join(invalid)}")

    params = _split_params(data)
    if not params:
        raise InvalidSplitInput(f"No split parameters supplied for {data.split_method.value} split")

    amount = round_money(data.amount)
    shares = [
        share.model_copy(update={"payment_status": PaymentStatus.PAID}) if share.member_id == data.paid_by else share
        for share in compute_shares(amount, data.split_method, params)
    ]

    return Expense(
        description=data.description.strip(),
        amount=amount,
        category=data.category,
        paid_by=data.paid_by,
        split_method=data.split_method,
        shares=shares,
        items=data.items or [],
        notes=data.notes.strip() if data.notes else "",
    )


def add_expense(group: Group, data: ExpenseCreate) -> Group:
    """Append a new expense to the group's history."""
    expense = build_expense(group, data)
    logger.info(f"Added expense {expense.id} ({expense.amount} by {expense.paid_by}) to group {group.id}")
    return group.model_copy(update={"expenses": group.expenses + [expense]})


def delete_expense(group: Group, expense_id: str) -> Group:
    """Remove an expense and all of its shares."""
    if group.get_expense(expense_id) is None:
        raise ExpenseNotFound("Expense not found")

    expenses = [expense for expense in group.expenses if expense.id != expense_id]
    logger.info(f"Deleted expense {expense_id} from group {group.id}")
    return group.model_copy(update={"expenses": expenses})
