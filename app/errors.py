class LedgerError(Exception):
    """Base for every failure the ledger reports to its callers."""

    reason = "LedgerError"
    default_message = "ledger error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class MissingField(LedgerError, ValueError):
    reason = "MissingField"
    default_message = "missing fields"


class InvalidAccount(LedgerError, ValueError):
    reason = "InvalidAccount"
    default_message = "invalid account"


class InvalidAmount(LedgerError, ValueError):
    reason = "InvalidAmount"
    default_message = "invalid amount"


class Unauthorized(LedgerError):
    reason = "Unauthorized"
    default_message = "wrong password"


class NotFound(LedgerError):
    reason = "NotFound"
    default_message = "transaction not found"


class StoreUnavailable(LedgerError):
    reason = "StoreUnavailable"
    default_message = "store unavailable"
