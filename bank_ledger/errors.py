"""
Ledger error taxonomy.

Every failure the ledger core reports on purpose is one of three kinds.
Anything else (storage connectivity, constraint violations) propagates
unchanged and is treated as an internal failure by callers.
"""


class LedgerError(Exception):
    """Base exception for business-rule failures in the ledger."""

    kind = "ledger_error"

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class NotFoundError(LedgerError):
    """Referenced account or customer does not exist."""

    kind = "not_found"


class AccessDeniedError(LedgerError):
    """The caller does not own the referenced account or customer.

    The message is meant for logs. It must never be shown to the caller.
    """

    kind = "access_denied"


class InvalidArgumentError(LedgerError, ValueError):
    """Non-positive amount, same-account transfer or overdraft violation."""

    kind = "invalid_argument"
