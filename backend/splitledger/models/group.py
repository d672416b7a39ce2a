"""
Group aggregate owning the member roster and expense history.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime, timezone
from decimal import Decimal
import uuid

from splitledger.models.member import Member, MemberId, MemberRole
from splitledger.models.expense import Expense


class Group(BaseModel):
    """Group aggregate. Loaded, transformed and saved as a whole."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    description: str = ""
    currency: str = "USD"
    join_key: str = ""
    created_by: Optional[MemberId] = None
    members: List[Member] = []
    expenses: List[Expense] = []
    version: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def member_ids(self) -> List[MemberId]:
        return [member.id for member in self.members]

    @property
    def total_expenses(self) -> Decimal:
        return sum((expense.amount for expense in self.expenses), Decimal("0.00"))

    def get_member(self, member_id: MemberId) -> Optional[Member]:
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def is_member(self, member_id: MemberId) -> bool:
        return self.get_member(member_id) is not None

    def is_admin(self, member_id: MemberId) -> bool:
        member = self.get_member(member_id)
        return member is not None and member.role == MemberRole.ADMIN

    @property
    def admin_ids(self) -> List[MemberId]:
        return [member.id for member in self.members if member.role == MemberRole.ADMIN]

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        for expense in self.expenses:
            if expense.id == expense_id:
                return expense
        return None
