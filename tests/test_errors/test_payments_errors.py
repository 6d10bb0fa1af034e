"""Tests for the error taxonomy — errors/."""

from __future__ import annotations

import pytest

from xrp_payments.errors import (
    BroadcastError,
    InsufficientBalanceError,
    KeyDerivationError,
    LedgerConnectionError,
    LedgerTimeoutError,
    PassthroughError,
    PaymentsError,
    ReadOnlyError,
    TransientTransportError,
    TransportErrorKind,
    ValidationError,
)


class TestPaymentsError:
    def test_default_code(self) -> None:
        err = PaymentsError("boom")
        assert err.message == "boom"
        assert err.code == "payments-error"
        assert str(err) == "boom"

    def test_explicit_code(self) -> None:
        err = InsufficientBalanceError("low", code="insufficient-reserve")
        assert err.code == "insufficient-reserve"

    @pytest.mark.parametrize(
        ("cls", "code"),
        [
            (ValidationError, "validation-error"),
            (KeyDerivationError, "key-derivation-error"),
            (InsufficientBalanceError, "insufficient-balance"),
            (ReadOnlyError, "read-only"),
        ],
    )
    def test_subclass_codes(self, cls: type[PaymentsError], code: str) -> None:
        err = cls("x")
        assert isinstance(err, PaymentsError)
        assert err.code == code

    def test_validation_errors_are_value_errors(self) -> None:
        assert isinstance(ValidationError("x"), ValueError)
        assert isinstance(KeyDerivationError("x"), ValueError)


class TestLedgerErrors:
    def test_connection_kind(self) -> None:
        err = LedgerConnectionError()
        assert isinstance(err, TransientTransportError)
        assert err.kind is TransportErrorKind.CONNECTION

    def test_timeout_kind(self) -> None:
        assert LedgerTimeoutError("slow").kind is TransportErrorKind.TIMEOUT

    def test_broadcast_result_code(self) -> None:
        err = BroadcastError("rejected", result_code="tefPAST_SEQ")
        assert err.result_code == "tefPAST_SEQ"
        assert err.code == "broadcast-failed"

    def test_passthrough_name(self) -> None:
        err = PassthroughError("missing", name="NotFoundError")
        assert err.name == "NotFoundError"
        assert err.code == "ledger-error"
