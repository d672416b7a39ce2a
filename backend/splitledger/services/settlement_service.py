"""
Settlement service for calculating who pays whom.

Uses a greedy algorithm to keep the number of transfers small:
1. Separate members into creditors (positive balance) and debtors (negative)
2. Sort both lists by amount, largest first
3. Match the largest creditor with the largest debtor for min(both)
4. Advance whichever side is settled and repeat

The greedy matching is deterministic and in practice lands on
min(#creditors, #debtors) transfers, but it is a heuristic: some inputs have a
plan with fewer transfers (finding it is a subset-sum style search).
"""
import logging
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence

from splitledger.core.config import settings
from splitledger.core.utils import Number, round_money
from splitledger.models.group import Group
from splitledger.models.member import Member, MemberId
from splitledger.models.settlement import GroupSettlement, MemberBalance, SettlementTransaction
from splitledger.services.balance_service import compute_balances

logger = logging.getLogger(__name__)


def compute_settlement(balances: Mapping[MemberId, Number]) -> List[SettlementTransaction]:
    """
    Minimize the number of transfers needed to settle debts.

    Example: {A: +300, B: -200, C: -100} gives B -> A 200, C -> A 100.
    """
    threshold = settings.SETTLEMENT_THRESHOLD

    # Separate creditors (positive balance) and debtors (negative balance)
    creditors = []
    debtors = []  # Stored as positive for easier calculation
    for member_id, balance in balances.items():
        balance = round_money(balance)
        if abs(balance) < threshold:
            continue
        if balance > 0:
            creditors.append([member_id, balance])
        else:
            debtors.append([member_id, -balance])

    # Sort in descending order; sort is stable so ties keep input order
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    transfers = []
    cred_idx = 0
    debt_idx = 0

    while cred_idx < len(creditors) and debt_idx < len(debtors):
        creditor = creditors[cred_idx]
        debtor = debtors[debt_idx]

        # Transfer the minimum of what's owed and what's needed
        transfer_amount = min(creditor[1], debtor[1])
        if transfer_amount > threshold:
            transfers.append(SettlementTransaction(
                from_member=debtor[0],
                to_member=creditor[0],
                amount=transfer_amount,
            ))

        creditor[1] = round_money(creditor[1] - transfer_amount)
        debtor[1] = round_money(debtor[1] - transfer_amount)

        if creditor[1] < threshold:
            cred_idx += 1
        if debtor[1] < threshold:
            debt_idx += 1

    logger.debug(f"Settlement plan: {len(transfers)} transfers for {len(creditors)} creditors, {len(debtors)} debtors")
    return transfers


def validate_settlement(
    balances: Mapping[MemberId, Decimal],
    transfers: Sequence[SettlementTransaction]
) -> bool:
    """
    Check a settlement plan against the balances it came from.

    Every transfer must move a positive amount from a debtor to a creditor,
    and nobody may pay or receive more than their balance.
    """
    remaining = {member_id: round_money(balance) for member_id, balance in balances.items()}

    for transfer in transfers:
        if not transfer.from_member or not transfer.to_member or transfer.amount <= 0:
            raise ValueError(f"Invalid settlement transaction: {transfer}")
        if balances.get(transfer.from_member, 0) >= 0 or balances.get(transfer.to_member, 0) <= 0:
            raise ValueError(f"Settlement transaction must go from a debtor to a creditor: {transfer}")
        remaining[transfer.from_member] = remaining.get(transfer.from_member, Decimal("0.00")) + transfer.amount
        remaining[transfer.to_member] = remaining.get(transfer.to_member, Decimal("0.00")) - transfer.amount

    overshoot = [
        member_id for member_id, balance in remaining.items()
        if round_money(balances.get(member_id, 0)) * balance < 0
        and abs(balance) >= settings.SETTLEMENT_THRESHOLD
    ]
    if overshoot:
        raise ValueError(f"Settlement overshoots the balances of {overshoot}")

    return True


def format_balances(
    balances: Mapping[MemberId, Decimal],
    members: Sequence[Member]
) -> List[MemberBalance]:
    """Non-zero balances with member info, creditors first, largest first."""
    member_map = {member.id: member for member in members}
    rows = [
        MemberBalance(
            member_id=member_id,
            member=member_map.get(member_id),
            net_balance=round_money(balance),
            is_creditor=balance > 0,
            is_debtor=balance < 0,
            amount_owed=round_money(-balance) if balance < 0 else Decimal("0.00"),
            amount_to_receive=round_money(balance) if balance > 0 else Decimal("0.00"),
        )
        for member_id, balance in balances.items()
        if abs(balance) > settings.SETTLEMENT_THRESHOLD
    ]
    rows.sort(key=lambda row: (not row.is_creditor, -abs(row.net_balance)))
    return rows


def calculate_group_settlement(group: Group) -> GroupSettlement:
    """
    Calculate balances and the settlement plan for a group.
    """
    balances = compute_balances(group.expenses, group.members)
    transfers = compute_settlement(balances)
    validate_settlement(balances, transfers)

    return GroupSettlement(
        balances=format_balances(balances, group.members),
        settlement_plan=transfers,
        total_transactions=len(transfers),
        total_amount=sum((t.amount for t in transfers), Decimal("0.00")),
    )


def render_summary(group: Group, result: Optional[GroupSettlement] = None) -> str:
    """Plain-text summary of a group's balances and transfers."""
    if result is None:
        result = calculate_group_settlement(group)

    names: Dict[MemberId, str] = {member.id: member.name or member.id for member in group.members}

    summary_lines = []
    summary_lines.append(f"Total expenses: {group.total_expenses:.2f} {group.currency}")
    summary_lines.append(f"Members: {len(group.members)}")
    summary_lines.append("\nNet balances:")
    for row in result.balances:
        summary_lines.append(f"  {names.get(row.member_id, row.member_id)}: {row.net_balance:+.2f} {group.currency}")
    summary_lines.append("\nTransfers:")
    for transfer in result.settlement_plan:
        summary_lines.append(
            f"  {names.get(transfer.from_member, transfer.from_member)} -> "
            f"{names.get(transfer.to_member, transfer.to_member)}: "
            f"{transfer.amount:.2f} {group.currency}"
        )
    return "\n".join(summary_lines)
