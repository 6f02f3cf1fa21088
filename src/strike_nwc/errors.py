"""NWC error taxonomy.

Every failure a wallet request can run into is classified as exactly one
ErrorCode before a response is built.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Error codes returned in the `error.code` field of a response."""
    UNAUTHORIZED = "UNAUTHORIZED"          # undecryptable content or foreign sender
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"    # method outside the supported set
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"      # spend would exceed the ceiling
    PAYMENT_FAILED = "PAYMENT_FAILED"      # provider refused or failed the payment
    NOT_FOUND = "NOT_FOUND"                # invoice not in the cache
    INVALID_PARAMS = "INVALID_PARAMS"      # params present but unusable
    INTERNAL = "INTERNAL"                  # anything else


class NwcError(Exception):
    """A classified request failure.

    Attributes:
        code: Member of the closed error taxonomy
        method: Request method, when it was decoded before the failure
        detail: Extra context for logs (never sent to the client)
    """

    def __init__(
        self,
        code: ErrorCode,
        detail: str = "",
        method: Optional[str] = None,
    ):
        self.code = code
        self.detail = detail
        self.method = method
        message = code.value if not detail else f"{code.value}: {detail}"
        super().__init__(message)


class QuotaExceededError(Exception):
    """Raised when a payment would push the sent total over the ceiling."""

    def __init__(self, amount: int, total_sent: int, ceiling: int):
        self.amount = amount
        self.total_sent = total_sent
        self.ceiling = ceiling
        super().__init__(
            f"Paying {amount} sats would exceed quota "
            f"({total_sent} already sent, ceiling {ceiling})"
        )
