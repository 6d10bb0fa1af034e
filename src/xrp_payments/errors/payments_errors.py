"""PaymentsError — base exception class for all xrp-payments errors."""

from __future__ import annotations


class PaymentsError(Exception):
    """Base error for all payments operations.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code string.
    """

    default_code = "payments-error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
