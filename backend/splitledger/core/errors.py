"""
Error taxonomy for the ledger engine.

Every error carries the HTTP status the request layer should answer with, so
the API can translate engine failures without a lookup table of its own.
"""


class LedgerError(Exception):
    """Base class for all ledger errors."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidSplitInput(LedgerError):
    """Split parameters are malformed or do not reconcile with the amount."""


class NoOutstandingPayment(LedgerError):
    """Initiate found no unpaid or pending shares for the debtor/creditor pair."""


class NoPendingPayment(LedgerError):
    """Confirm or dispute found no pending shares for the debtor/creditor pair."""


class InvalidPaymentRequest(LedgerError):
    """Payment transition requested with an inconsistent debtor/creditor pair."""


class DuplicateMember(LedgerError):
    """Member is already in the group roster."""


class InvalidMemberChange(LedgerError):
    """Roster change would leave the group without its creator or any admin."""


class InvalidGroupDetails(LedgerError):
    """Group name, description or currency is not acceptable."""


class InvalidJoinKey(LedgerError):
    """Join key is not a 6-character code."""


class Unauthorized(LedgerError):
    """Actor is not allowed to perform the transition for the given pair."""
    status_code = 403


class MemberNotFound(LedgerError):
    status_code = 404


class ExpenseNotFound(LedgerError):
    status_code = 404


class GroupNotFound(LedgerError):
    status_code = 404


class ConcurrentModification(LedgerError):
    """The aggregate was saved by someone else since it was loaded."""
    status_code = 409


class ReconciliationWarning(UserWarning):
    """Shares or balances deviate from their expected total beyond tolerance."""
