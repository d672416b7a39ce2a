"""
Tests for the payment confirmation state machine.
"""
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from splitledger.core.errors import (
    InvalidPaymentRequest,
    NoOutstandingPayment,
    NoPendingPayment,
    Unauthorized,
)
from splitledger.models.expense import PaymentStatus
from splitledger.schemas.expense import ExpenseCreate
from splitledger.services import group_service
from splitledger.services.balance_service import compute_balances
from splitledger.services.payment_service import confirm_payment, dispute_payment, initiate_payment

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def group():
    """Alice paid 90 for dinner, split equally with Bob and Carol."""
    group = group_service.create_group("Trip", "alice", creator_name="Alice")
    group = group_service.add_member(group, "bob", name="Bob")
    group = group_service.add_member(group, "carol", name="Carol")
    return group_service.add_expense(group, ExpenseCreate(
        description="Dinner",
        amount=Decimal("90"),
        paid_by="alice",
        split_among=["alice", "bob", "carol"],
    ))


def _status(group, member_id):
    return [
        share.payment_status
        for expense in group.expenses
        for share in expense.shares
        if share.member_id == member_id
    ]


def test_initiate_moves_unpaid_to_pending(group):
    """Debtor marks payment sent; the share awaits confirmation."""
    result = initiate_payment(group, "bob", "bob", "alice", now=NOW)

    assert result.updated_count == 1
    assert result.updated == [(group.expenses[0].id, "bob")]
    assert _status(result.group, "bob") == [PaymentStatus.PENDING_CONFIRMATION]
    assert result.group.expenses[0].shares[1].payment_requested_at == NOW
    # Pending does not clear the debt
    assert compute_balances(result.group.expenses, result.group.members)["bob"] == Decimal("-30.00")


def test_transitions_do_not_mutate_input(group):
    """The original aggregate keeps its statuses."""
    initiate_payment(group, "bob", "bob", "alice", now=NOW)

    assert _status(group, "bob") == [PaymentStatus.UNPAID]


def test_confirm_moves_pending_to_paid(group):
    """Creditor confirms; balances reflect the cleared share."""
    pending = initiate_payment(group, "bob", "bob", "alice", now=NOW).group
    result = confirm_payment(pending, "alice", "bob", "alice")

    assert result.updated_count == 1
    assert _status(result.group, "bob") == [PaymentStatus.PAID]
    assert result.group.expenses[0].shares[1].is_paid is True
    assert compute_balances(result.group.expenses, result.group.members) == {
        "alice": Decimal("30.00"), "bob": Decimal("0.00"), "carol": Decimal("-30.00"),
    }


def test_second_confirm_has_nothing_pending(group):
    """Confirming twice fails once nothing is pending for the pair."""
    pending = initiate_payment(group, "bob", "bob", "alice", now=NOW).group
    paid = confirm_payment(pending, "alice", "bob", "alice").group

    with pytest.raises(NoPendingPayment):
        confirm_payment(paid, "alice", "bob", "alice")


def test_confirm_without_initiate_fails(group):
    """A creditor cannot clear an unpaid share alone."""
    with pytest.raises(NoPendingPayment):
        confirm_payment(group, "alice", "bob", "alice")


def test_dispute_returns_share_to_unpaid_and_allows_retry(group):
    """Dispute resets to unpaid; the debtor can initiate again."""
    pending = initiate_payment(group, "bob", "bob", "alice", now=NOW).group
    disputed = dispute_payment(pending, "alice", "bob", "alice").group

    assert _status(disputed, "bob") == [PaymentStatus.UNPAID]
    assert disputed.expenses[0].shares[1].payment_requested_at is None

    retried = initiate_payment(disputed, "bob", "bob", "alice", now=NOW)
    assert _status(retried.group, "bob") == [PaymentStatus.PENDING_CONFIRMATION]


def test_dispute_without_pending_fails(group):
    """Nothing to dispute while the share is unpaid."""
    with pytest.raises(NoPendingPayment):
        dispute_payment(group, "alice", "bob", "alice")


def test_initiate_is_retryable_while_pending(group):
    """Re-sending a pending payment refreshes its timestamp."""
    later = datetime(2024, 5, 2, tzinfo=timezone.utc)
    pending = initiate_payment(group, "bob", "bob", "alice", now=NOW).group
    again = initiate_payment(pending, "bob", "bob", "alice", now=later)

    assert again.updated_count == 1
    assert again.group.expenses[0].shares[1].payment_requested_at == later


def test_initiate_after_paid_has_nothing_outstanding(group):
    """Paid is terminal."""
    pending = initiate_payment(group, "bob", "bob", "alice", now=NOW).group
    paid = confirm_payment(pending, "alice", "bob", "alice").group

    with pytest.raises(NoOutstandingPayment):
        initiate_payment(paid, "bob", "bob", "alice")


def test_initiate_without_debt_to_creditor_fails(group):
    """Carol owes Bob nothing."""
    with pytest.raises(NoOutstandingPayment):
        initiate_payment(group, "carol", "carol", "bob")


def test_transition_covers_every_expense_of_the_pair(group):
    """All of Bob's shares on Alice's expenses move together."""
    group = group_service.add_expense(group, ExpenseCreate(
        description="Taxi", amount=Decimal("20"), paid_by="alice", split_among=["alice", "bob"],
    ))
    group = group_service.add_expense(group, ExpenseCreate(
        description="Coffee", amount=Decimal("8"), paid_by="carol", split_among=["carol", "bob"],
    ))

    result = initiate_payment(group, "bob", "bob", "alice", now=NOW)

    assert result.updated_count == 2
    assert _status(result.group, "bob") == [
        PaymentStatus.PENDING_CONFIRMATION, PaymentStatus.PENDING_CONFIRMATION, PaymentStatus.UNPAID,
    ]


def test_only_debtor_can_initiate(group):
    """Someone else cannot mark Bob's payment as sent."""
    with pytest.raises(Unauthorized):
        initiate_payment(group, "carol", "bob", "alice")
    with pytest.raises(Unauthorized):
        initiate_payment(group, "alice", "bob", "alice")


def test_only_creditor_can_confirm_or_dispute(group):
    """The debtor cannot confirm their own payment."""
    pending = initiate_payment(group, "bob", "bob", "alice", now=NOW).group

    with pytest.raises(Unauthorized):
        confirm_payment(pending, "bob", "bob", "alice")
    with pytest.raises(Unauthorized):
        dispute_payment(pending, "carol", "bob", "alice")


def test_debtor_and_creditor_must_differ(group):
    """A member cannot pay themselves."""
    with pytest.raises(InvalidPaymentRequest):
        initiate_payment(group, "alice", "alice", "alice")


def test_pair_must_be_on_the_roster(group):
    """Payments between a member and an outsider are rejected."""
    with pytest.raises(InvalidPaymentRequest):
        initiate_payment(group, "zed", "zed", "alice")

    removed = group_service.remove_member(group, "bob")
    with pytest.raises(InvalidPaymentRequest):
        initiate_payment(removed, "bob", "bob", "alice")
    with pytest.raises(InvalidPaymentRequest):
        confirm_payment(removed, "alice", "bob", "alice")
