"""
Pydantic schemas for Group entity.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from splitledger.models.member import Member, MemberId, MemberRole
from splitledger.schemas.expense import ExpenseResponse


class GroupCreate(BaseModel):
    """Schema for group creation."""
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    currency: Optional[str] = None
    creator_name: str = ""
    creator_email: Optional[str] = None


class GroupUpdate(BaseModel):
    """Schema for group update. Omitted fields are left unchanged."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    currency: Optional[str] = None


class GroupJoin(BaseModel):
    """Schema for joining a group by its join key."""
    join_key: str
    name: str = ""
    email: Optional[str] = None


class MemberAdd(BaseModel):
    """Schema for adding a member to a group."""
    member_id: MemberId
    name: str = ""
    email: Optional[str] = None
    role: MemberRole = MemberRole.MEMBER


class MemberRoleUpdate(BaseModel):
    """Schema for changing a member's role."""
    role: MemberRole


class GroupResponse(BaseModel):
    """Schema for group response."""
    id: str
    name: str
    description: str
    currency: str
    join_key: str
    created_by: Optional[MemberId] = None
    members: List[Member] = []
    expenses: List[ExpenseResponse] = []
    total_expenses: Decimal
    version: int
    created_at: datetime

    class Config:
        from_attributes = True
