"""Models package - domain types of the ledger."""
from splitledger.models.member import Member, MemberId, MemberRole
from splitledger.models.expense import (
    Expense,
    ExpenseCategory,
    Item,
    ItemAssignment,
    PaymentStatus,
    Share,
    SplitMethod,
)
from splitledger.models.group import Group
from splitledger.models.settlement import GroupSettlement, MemberBalance, SettlementTransaction

__all__ = [
    "Member",
    "MemberId",
    "MemberRole",
    "Expense",
    "ExpenseCategory",
    "Item",
    "ItemAssignment",
    "PaymentStatus",
    "Share",
    "SplitMethod",
    "Group",
    "GroupSettlement",
    "MemberBalance",
    "SettlementTransaction",
]
