"""
Derived settlement values. Never persisted; stale as soon as any expense or
share changes.
"""
from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from decimal import Decimal

from splitledger.models.member import Member, MemberId


class SettlementTransaction(BaseModel):
    """A proposed transfer from a debtor to a creditor."""
    model_config = ConfigDict(frozen=True)

    from_member: MemberId
    to_member: MemberId
    amount: Decimal


class MemberBalance(BaseModel):
    """Display row for one member's net balance."""
    member_id: MemberId
    member: Optional[Member] = None
    net_balance: Decimal
    is_creditor: bool
    is_debtor: bool
    amount_owed: Decimal
    amount_to_receive: Decimal


class GroupSettlement(BaseModel):
    """Full balance and settlement picture for a group."""
    balances: List[MemberBalance]
    settlement_plan: List[SettlementTransaction]
    total_transactions: int
    total_amount: Decimal
