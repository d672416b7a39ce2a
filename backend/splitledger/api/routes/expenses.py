"""
Expense management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from splitledger.db.session import GroupStore, get_store
from splitledger.models.member import MemberId
from splitledger.schemas.expense import ExpenseAddedResponse, ExpenseCreate, ExpenseResponse
from splitledger.schemas.group import GroupResponse
from splitledger.services import group_service
from splitledger.services.settlement_service import calculate_group_settlement
from splitledger.api.dependencies import check_group_access, get_current_member

router = APIRouter(prefix="/groups", tags=["expenses"])


@router.post("/{group_id}/expenses", response_model=ExpenseAddedResponse, status_code=status.HTTP_201_CREATED)
async def add_expense(
    group_id: str,
    expense_data: ExpenseCreate,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Add an expense to the group and return the updated settlement."""
    group = check_group_access(group_id, current_member, store)
    group = store.save(group_service.add_expense(group, expense_data))
    result = calculate_group_settlement(group)

    return ExpenseAddedResponse(
        message="Expense added successfully",
        expense=ExpenseResponse.model_validate(group.expenses[-1]),
        balances=result.balances,
        settlement_plan=result.settlement_plan,
    )


@router.delete("/{group_id}/expenses/{expense_id}", response_model=GroupResponse)
async def delete_expense(
    group_id: str,
    expense_id: str,
    current_member: MemberId = Depends(get_current_member),
    store: GroupStore = Depends(get_store)
):
    """Delete an expense. Only its payer or a group admin may do this."""
    group = check_group_access(group_id, current_member, store)

    expense = group.get_expense(expense_id)
    if expense is not None and expense.paid_by != current_member and not group.is_admin(current_member):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the payer or a group admin can delete this expense"
        )

    group = group_service.delete_expense(group, expense_id)
    return GroupResponse.model_validate(store.save(group))
