"""
Pydantic schemas for balances, settlement and payment confirmation.
"""
from pydantic import BaseModel
from typing import List
from decimal import Decimal
from splitledger.models.member import MemberId
from splitledger.models.settlement import MemberBalance, SettlementTransaction


class BalanceSummary(BaseModel):
    """Counts shown next to the balance list."""
    total_members: int
    total_expenses: int
    total_amount: Decimal


class BalancesResponse(BaseModel):
    """Schema for group balances."""
    balances: List[MemberBalance]
    summary: BalanceSummary


class SettlementResponse(BaseModel):
    """Schema for a group's settlement plan."""
    balances: List[MemberBalance]
    settlement_plan: List[SettlementTransaction]
    total_transactions: int
    total_amount: Decimal
    summary: str


class PaymentRequest(BaseModel):
    """Debtor/creditor pair a payment transition applies to."""
    debtor_id: MemberId
    creditor_id: MemberId


class PaymentResponse(BaseModel):
    """Schema for the outcome of a payment transition."""
    message: str
    updated_count: int
    balances: List[MemberBalance]
    settlement_plan: List[SettlementTransaction]
