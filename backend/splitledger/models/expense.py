"""
Expense model for tracking shared spending.
"""
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime, timezone
from decimal import Decimal
import enum
import uuid

from splitledger.core.utils import round_money
from splitledger.models.member import MemberId


class SplitMethod(str, enum.Enum):
    """How an expense amount is divided among members."""
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    CUSTOM = "custom"
    ITEMS = "items"

    @classmethod
    def _missing_(cls, value):
        # Older clients send "item-based"
        if value == "item-based":
            return cls.ITEMS
        return None


class ExpenseCategory(str, enum.Enum):
    """Expense category enumeration."""
    FOOD = "Food"
    TRANSPORT = "Transport"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    ENTERTAINMENT = "Entertainment"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    TRAVEL = "Travel"
    OTHER = "Other"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


class PaymentStatus(str, enum.Enum):
    """Repayment lifecycle of a single share."""
    UNPAID = "unpaid"
    PENDING_CONFIRMATION = "pending_confirmation"
    PAID = "paid"


class ItemAssignment(BaseModel):
    """A member assigned to an item. Quantity is informational only."""
    model_config = ConfigDict(frozen=True)

    member_id: MemberId
    quantity: int = Field(default=1, ge=1)


class Item(BaseModel):
    """A line item for item-based splitting."""
    model_config = ConfigDict(frozen=True)

    name: str
    price: Decimal = Field(ge=0)
    assigned_to: List[ItemAssignment] = []


class Share(BaseModel):
    """One member's owed portion of a single expense."""
    model_config = ConfigDict(frozen=True)

    member_id: MemberId
    amount: Decimal = Field(ge=0)
    percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    payment_requested_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def absorb_legacy_paid_flag(cls, data):
        """Fold a stored is_paid/isPaid flag into the status enum."""
        if isinstance(data, dict) and ("is_paid" in data or "isPaid" in data):
            data = dict(data)
            legacy_flags = (data.pop("is_paid", False), data.pop("isPaid", False))
            if any(legacy_flags):
                data["payment_status"] = PaymentStatus.PAID
        return data

    @computed_field
    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID


class Expense(BaseModel):
    """A single charged amount paid by one member and split into shares."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    description: str
    amount: Decimal = Field(gt=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    paid_by: MemberId
    split_method: SplitMethod = SplitMethod.EQUAL
    shares: List[Share] = []
    items: List[Item] = []
    notes: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

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

    @field_validator("amount")
    @classmethod
    def round_amount(cls, v):
        """Stored amounts are whole cents."""
        v = round_money(v)
        if v <= 0:
            raise ValueError("Amount must be at least 0.01")
        return v
