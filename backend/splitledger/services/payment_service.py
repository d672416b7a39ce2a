"""
Payment confirmation state machine.

    unpaid --initiate--> pending_confirmation --confirm--> paid
                         pending_confirmation --dispute--> unpaid

The debtor initiates, the creditor confirms or disputes, so neither side can
clear a balance alone. Each transition applies to every matching share of one
debtor/creditor pair across the whole group, and returns a new Group; the
input aggregate is left untouched.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Collection, List, NamedTuple, Optional, Tuple

from splitledger.core.errors import (
    InvalidPaymentRequest,
    NoOutstandingPayment,
    NoPendingPayment,
    Unauthorized,
)
from splitledger.models.expense import PaymentStatus, Share
from splitledger.models.group import Group
from splitledger.models.member import MemberId

logger = logging.getLogger(__name__)


class PaymentTransition(NamedTuple):
    """Result of a transition: the new aggregate and the (expense id, debtor) of each changed share."""
    group: Group
    updated: List[Tuple[str, MemberId]]

    @property
    def updated_count(self) -> int:
        return len(self.updated)


def _apply_to_pair(
    group: Group,
    debtor_id: MemberId,
    creditor_id: MemberId,
    from_statuses: Collection[PaymentStatus],
    change: Callable[[Share], Share],
) -> PaymentTransition:
    if debtor_id == creditor_id:
        raise InvalidPaymentRequest("Debtor and creditor must be different members")
    if not (group.is_member(debtor_id) and group.is_member(creditor_id)):
        raise InvalidPaymentRequest("Both debtor and creditor must be group members")

    updated = []
    expenses = []
    for expense in group.expenses:
        if expense.paid_by != creditor_id:
            expenses.append(expense)
            continue

        shares = []
        for share in expense.shares:
            if share.member_id == debtor_id and share.payment_status in from_statuses:
                share = change(share)
                updated.append((expense.id, debtor_id))
            shares.append(share)
        expenses.append(expense.model_copy(update={"shares": shares}))

    if not updated:
        return PaymentTransition(group=group, updated=[])
    return PaymentTransition(group=group.model_copy(update={"expenses": expenses}), updated=updated)


def initiate_payment(
    group: Group,
    actor: MemberId,
    debtor_id: MemberId,
    creditor_id: MemberId,
    now: Optional[datetime] = None
) -> PaymentTransition:
    """
    Debtor marks their payment to creditor as sent.

    Unpaid and already-pending shares move to pending_confirmation, so a
    debtor can retry after a dispute or re-send a reminder.
    """
    if actor != debtor_id:
        raise Unauthorized("You can only mark payment as sent for yourself")

    requested_at = now or datetime.now(timezone.utc)
    result = _apply_to_pair(
        group, debtor_id, creditor_id,
        (PaymentStatus.UNPAID, PaymentStatus.PENDING_CONFIRMATION),
        lambda share: share.model_copy(update={
            "payment_status": PaymentStatus.PENDING_CONFIRMATION,
            "payment_requested_at": requested_at,
        }),
    )
    if not result.updated:
        raise NoOutstandingPayment(
            "No outstanding payments found. All payments may already be confirmed."
        )

    logger.info(f"{debtor_id} marked {result.updated_count} share(s) to {creditor_id} as sent")
    return result


def confirm_payment(
    group: Group,
    actor: MemberId,
    debtor_id: MemberId,
    creditor_id: MemberId
) -> PaymentTransition:
    """Creditor confirms receipt; pending shares of the pair become paid."""
    if actor != creditor_id:
        raise Unauthorized("You can only confirm payments made to you")

    result = _apply_to_pair(
        group, debtor_id, creditor_id,
        (PaymentStatus.PENDING_CONFIRMATION,),
        lambda share: share.model_copy(update={"payment_status": PaymentStatus.PAID}),
    )
    if not result.updated:
        raise NoPendingPayment("No pending payments found to confirm")

    logger.info(f"{creditor_id} confirmed {result.updated_count} share(s) from {debtor_id}")
    return result


def dispute_payment(
    group: Group,
    actor: MemberId,
    debtor_id: MemberId,
    creditor_id: MemberId
) -> PaymentTransition:
    """Creditor rejects a pending payment; the shares return to unpaid."""
    if actor != creditor_id:
        raise Unauthorized("You can only dispute payments made to you")

    result = _apply_to_pair(
        group, debtor_id, creditor_id,
        (PaymentStatus.PENDING_CONFIRMATION,),
        lambda share: share.model_copy(update={
            "payment_status": PaymentStatus.UNPAID,
            "payment_requested_at": None,
        }),
    )
    if not result.updated:
        raise NoPendingPayment("No pending payments found to dispute")

    logger.info(f"{creditor_id} disputed {result.updated_count} share(s) from {debtor_id}")
    return result

