"""Errors raised by xrp-payments."""

from xrp_payments.errors.definitions import (
    BroadcastError,
    InsufficientBalanceError,
    KeyDerivationError,
    LedgerConnectionError,
    LedgerTimeoutError,
    NotFoundError,
    PassthroughError,
    ReadOnlyError,
    TransientTransportError,
    TransportErrorKind,
    UnsupportedTransactionError,
    ValidationError,
)
from xrp_payments.errors.payments_errors import PaymentsError

__all__ = [
    "BroadcastError",
    "InsufficientBalanceError",
    "KeyDerivationError",
    "LedgerConnectionError",
    "LedgerTimeoutError",
    "NotFoundError",
    "PassthroughError",
    "PaymentsError",
    "ReadOnlyError",
    "TransientTransportError",
    "TransportErrorKind",
    "UnsupportedTransactionError",
    "ValidationError",
]
