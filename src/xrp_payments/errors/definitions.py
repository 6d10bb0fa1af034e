"""Error taxonomy for payments, key derivation and the ledger boundary."""

from __future__ import annotations

import enum

from xrp_payments.errors.payments_errors import PaymentsError

# -- Error codes ------------------------------------------------------------

CODE_INVALID_ADDRESS = "invalid-address"
CODE_INVALID_EXTRA_ID = "invalid-extra-id"
CODE_INVALID_AMOUNT = "invalid-amount"
CODE_INVALID_INDEX = "invalid-index"
CODE_SELF_SEND = "self-send"
CODE_MISSING_PAYPORT_BALANCE = "missing-payport-balance"
CODE_INVALID_PAYPORT_BALANCE = "invalid-payport-balance"
CODE_UNSUPPORTED_FEE_RATE_TYPE = "unsupported-fee-rate-type"
CODE_INVALID_FEE_RATE = "invalid-fee-rate"
CODE_EXTRA_ID_REQUIRED = "extra-id-required"
CODE_DESTINATION_TAG_ALREADY_SET = "destination-tag-already-set"

CODE_INSUFFICIENT_RESERVE = "insufficient-reserve"
CODE_INSUFFICIENT_BALANCE = "insufficient-balance"
CODE_INSUFFICIENT_PAYPORT_BALANCE = "insufficient-payport-balance"


# -- Validation -------------------------------------------------------------


class ValidationError(PaymentsError, ValueError):
    """Malformed input: address, extraId, amount, config, or a missing option."""

    default_code = "validation-error"


class KeyDerivationError(PaymentsError, ValueError):
    """Key material cannot produce the requested key."""

    default_code = "key-derivation-error"


# -- Balance / signing / broadcast -----------------------------------------


class InsufficientBalanceError(PaymentsError):
    """Reserve, total value, or payport sub-balance shortfall."""

    default_code = CODE_INSUFFICIENT_BALANCE


class ReadOnlyError(PaymentsError):
    """Signing attempted without a private key or secret."""

    default_code = "read-only"


class NotFoundError(PaymentsError):
    """A transaction id could not be resolved by the ledger."""

    default_code = "not-found"


class UnsupportedTransactionError(PaymentsError):
    """Transaction type or asset is not an XRP payment."""

    default_code = "unsupported-transaction"


class BroadcastError(PaymentsError):
    """The ledger returned a non-success engine result for a submission."""

    default_code = "broadcast-failed"

    def __init__(self, message: str, *, result_code: str) -> None:
        super().__init__(message)
        self.result_code = result_code


# -- Ledger boundary --------------------------------------------------------


class TransportErrorKind(enum.StrEnum):
    """Retry classification tag set by ledger client adapters."""

    CONNECTION = "connection"
    TIMEOUT = "timeout"


class TransientTransportError(PaymentsError):
    """Retryable ledger transport failure, tagged with its kind."""

    default_code = "transient-transport-error"

    def __init__(self, message: str, *, kind: TransportErrorKind) -> None:
        super().__init__(message)
        self.kind = kind


class LedgerConnectionError(TransientTransportError):
    """Connection dropped or never established; retried after reconnecting."""

    def __init__(self, message: str = "ledger connection lost") -> None:
        super().__init__(message, kind=TransportErrorKind.CONNECTION)


class LedgerTimeoutError(TransientTransportError):
    """Ledger request timed out; retried without reconnecting."""

    def __init__(self, message: str = "ledger request timed out") -> None:
        super().__init__(message, kind=TransportErrorKind.TIMEOUT)


class PassthroughError(PaymentsError):
    """Any other failure reported by the ledger client.

    Attributes:
        name: Error name reported by the client (e.g. ``NotFoundError``).
    """

    default_code = "ledger-error"

    def __init__(self, message: str, *, name: str = "") -> None:
        super().__init__(message)
        self.name = name
