"""
Balance, settlement and payment confirmation routes.
"""
from fastapi import APIRouter, Depends
from splitledger.db.session import GroupStore, get_store
from splitledger.models.member import MemberId
from splitledger.schemas.settlement import (
    BalanceSummary, BalancesResponse, PaymentRequest, PaymentResponse, SettlementResponse
)
from splitledger.services.payment_service import (
    PaymentTransition, confirm_payment, dispute_payment, initiate_payment
)
from splitledger.services.settlement_service import calculate_group_settlement, render_summary
from splitledger.api.dependencies import check_group_access, get_current_member

router = APIRouter(prefix="/groups", tags=["settlement"])


@router.get("/{group_id}/balances", response_model=BalancesResponse)
async def get_balances(
    group_id: str,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Get net balances for every member with a non-zero balance."""
    group = check_group_access(group_id, current_member, store)
    result = calculate_group_settlement(group)

    return BalancesResponse(
        balances=result.balances,
        summary=BalanceSummary(
            total_members=len(group.members),
            total_expenses=len(group.expenses),
            total_amount=result.total_amount,
        ),
    )


@router.get("/{group_id}/settlement", response_model=SettlementResponse)
async def get_settlement(
    group_id: str,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Get the settlement plan for the group."""
    group = check_group_access(group_id, current_member, store)
    result = calculate_group_settlement(group)

    return SettlementResponse(
        balances=result.balances,
        settlement_plan=result.settlement_plan,
        total_transactions=result.total_transactions,
        total_amount=result.total_amount,
        summary=render_summary(group, result),
    )


def _payment_response(transition: PaymentTransition, store: GroupStore, message: str) -> PaymentResponse:
    group = store.save(transition.group)
    result = calculate_group_settlement(group)
    return PaymentResponse(
        message=message,
        updated_count=transition.updated_count,
        balances=result.balances,
        settlement_plan=result.settlement_plan,
    )


@router.post("/{group_id}/mark-payment-sent", response_model=PaymentResponse)
async def mark_payment_sent(
    group_id: str,
    payment: PaymentRequest,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Debtor marks payment as sent (step 1)."""
    group = check_group_access(group_id, current_member, store)
    transition = initiate_payment(group, current_member, payment.debtor_id, payment.creditor_id)
    return _payment_response(
        transition, store,
        f"Payment marked as sent for {transition.updated_count} share(s). Awaiting confirmation."
    )


@router.post("/{group_id}/mark-settlement", response_model=PaymentResponse)
async def mark_settlement_received(
    group_id: str,
    payment: PaymentRequest,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Creditor confirms payment received (step 2)."""
    group = check_group_access(group_id, current_member, store)
    transition = confirm_payment(group, current_member, payment.debtor_id, payment.creditor_id)
    return _payment_response(
        transition, store,
        f"Payment confirmed for {transition.updated_count} share(s)."
    )


@router.post("/{group_id}/dispute-payment", response_model=PaymentResponse)
async def dispute_pending_payment(
    group_id: str,
    payment: PaymentRequest,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Creditor disputes a pending payment, resetting it to unpaid."""
    group = check_group_access(group_id, current_member, store)
    transition = dispute_payment(group, current_member, payment.debtor_id, payment.creditor_id)
    return _payment_response(
        transition, store,
        f"Payment disputed for {transition.updated_count} share(s). Reset to unpaid."
    )
