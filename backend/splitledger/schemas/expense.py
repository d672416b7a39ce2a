"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from splitledger.models.expense import ExpenseCategory, Item, Share, SplitMethod
from splitledger.models.member import MemberId
from splitledger.models.settlement import MemberBalance, SettlementTransaction


class ExpenseCreate(BaseModel):
    """Schema for expense creation."""
    description: str = Field(min_length=1, max_length=200)
    amount: Decimal = Field(gt=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    paid_by: MemberId
    split_method: SplitMethod = SplitMethod.EQUAL
    split_among: Optional[List[MemberId]] = None  # Member IDs for equal split, in remainder order
    percentages: Optional[Dict[MemberId, Decimal]] = None  # member -> percentage
    custom_amounts: Optional[Dict[MemberId, Decimal]] = None  # member -> amount
    items: Optional[List[Item]] = None
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("split_method", mode="before")
    @classmethod
    def parse_split_method(cls, v):
        """Accept legacy method names such as item-based."""
        return SplitMethod(v) if isinstance(v, str) else v

    @field_validator("category", mode="before")
    @classmethod
    def parse_category(cls, v):
        """Categories are matched case-insensitively."""
        return ExpenseCategory(v) if isinstance(v, str) else v


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: str
    description: str
    amount: Decimal
    category: ExpenseCategory
    paid_by: MemberId
    split_method: SplitMethod
    shares: List[Share] = []
    items: List[Item] = []
    notes: str = ""
    created_at: datetime

    class Config:
        from_attributes = True


class ExpenseAddedResponse(BaseModel):
    """New expense with the group's recomputed balances and settlement plan."""
    message: str
    expense: ExpenseResponse
    balances: List[MemberBalance]
    settlement_plan: List[SettlementTransaction]
