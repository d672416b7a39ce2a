"""
Balance aggregator: reduces an expense history into one net balance per member.
"""
import logging
import warnings
from decimal import Decimal
from typing import Dict, Iterable

from splitledger.core.config import settings
from splitledger.core.errors import ReconciliationWarning
from splitledger.core.utils import round_money
from splitledger.models.expense import Expense
from splitledger.models.member import Member, MemberId

logger = logging.getLogger(__name__)


def compute_balances(expenses: Iterable[Expense], members: Iterable[Member]) -> Dict[MemberId, Decimal]:
    """
    Calculate net balance for each member.

    Positive = member is owed money, negative = member owes money.
    The payer is credited the full amount of each expense. A paid share
    reduces the payer's credit (the debt was cleared); any other share is
    debited from the debtor.
    """
    balances: Dict[MemberId, Decimal] = {member.id: Decimal("0.00") for member in members}

    for expense in expenses:
        payer_id = expense.paid_by
        balances[payer_id] = round_money(balances.get(payer_id, Decimal("0.00")) + expense.amount)

        for share in expense.shares:
            if share.is_paid:
                balances[payer_id] = round_money(balances[payer_id] - share.amount)
            else:
                debtor_id = share.member_id
                balances[debtor_id] = round_money(balances.get(debtor_id, Decimal("0.00")) - share.amount)

    check_balance_total(balances)
    return balances


def check_balance_total(balances: Dict[MemberId, Decimal]) -> Decimal:
    """Warn when balances don't sum to zero. Returns the total."""
    total = sum(balances.values(), Decimal("0.00"))
    if abs(total) > settings.BALANCE_TOLERANCE:
        message = f"Balances don't sum to zero. Total: {total}. This may indicate a data issue."
        logger.warning(message)
        warnings.warn(message, ReconciliationWarning, stacklevel=2)
    return total
