"""Shared test fixtures for the xrp-payments test suite."""

from __future__ import annotations

import hashlib
import json
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

import pytest

from xrp_payments.ledger.models import (
    AccountSettings,
    Balance,
    LedgerHeader,
    LedgerTransaction,
    PreparedTransaction,
    ServerInfo,
    SignResult,
    SubmitResult,
)
from xrp_payments.units import format_decimal

_EPOCH = datetime(2020, 1, 1, tzinfo=UTC)


class FakeLedger:
    """In-memory LedgerClient double.

    ``errors`` maps a method name to exceptions raised (in order) before the
    method starts succeeding. ``calls`` records every remote call.
    """

    def __init__(self) -> None:
        self.connected = True
        self.connect_count = 0
        self.disconnect_count = 0
        self.base_fee = "0.00001"
        self.balances: dict[str, list[Balance]] = {}
        self.settings: dict[str, AccountSettings] = {}
        self.server_info = ServerInfo(complete_ledgers="1000-2000")
        self.transactions: dict[str, LedgerTransaction] = {}
        self.history: dict[str, list[LedgerTransaction]] = {}
        self.ledger_version = 2000
        self.submit_result = SubmitResult(
            result_code="tesSUCCESS", raw={"engine_result": "tesSUCCESS"}
        )
        self.subscribe_response: dict[str, Any] = {"status": "success"}
        self.errors: dict[str, list[BaseException]] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.listeners: list[Any] = []

    # -- Test helpers -------------------------------------------------------

    def set_xrp_balance(self, address: str, value: str) -> None:
        self.balances[address] = [Balance(currency="XRP", value=value)]

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    def push(self, tx: LedgerTransaction) -> None:
        for listener in list(self.listeners):
            listener(tx)

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        pending = self.errors.get(name)
        if pending:
            raise pending.pop(0)

    # -- LedgerClient -------------------------------------------------------

    async def connect(self) -> None:
        self.connect_count += 1
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnect_count += 1
        self.connected = False

    def is_connected(self) -> bool:
        return self.connected

    async def get_balances(self, address: str) -> list[Balance]:
        self._record("get_balances", address)
        return self.balances.get(address, [])

    async def get_fee(self, cushion: float) -> str:
        self._record("get_fee", cushion)
        return format_decimal(Decimal(self.base_fee) * Decimal(str(cushion)))

    async def get_settings(self, address: str) -> AccountSettings:
        self._record("get_settings", address)
        return self.settings.get(address, AccountSettings())

    async def get_server_info(self) -> ServerInfo:
        self._record("get_server_info")
        return self.server_info

    async def get_transaction(self, tx_id: str) -> LedgerTransaction:
        self._record("get_transaction", tx_id)
        return self.transactions[tx_id]

    async def get_transactions(self, address, query) -> list[LedgerTransaction]:
        self._record("get_transactions", address, query)
        txs = self.history.get(address, [])
        if query.start is not None:
            start = next(i for i, tx in enumerate(txs) if tx.id == query.start)
            return txs[start : start + query.limit]
        in_range = [
            tx
            for tx in txs
            if query.min_ledger_version <= tx.outcome.ledger_version <= query.max_ledger_version
        ]
        return in_range[: query.limit]

    async def get_ledger(self, ledger_version: int) -> LedgerHeader:
        self._record("get_ledger", ledger_version)
        return LedgerHeader(
            ledger_version=ledger_version,
            ledger_hash=f"LEDGERHASH{ledger_version}",
            close_time=_EPOCH + timedelta(seconds=ledger_version),
        )

    async def get_ledger_version(self) -> int:
        self._record("get_ledger_version")
        return self.ledger_version

    async def prepare_payment(self, address, payment, instructions) -> PreparedTransaction:
        self._record("prepare_payment", address, payment, instructions)
        tx = {"TransactionType": "Payment", "Account": address, **payment.to_dict()}
        return PreparedTransaction(
            tx_json=json.dumps(tx, sort_keys=True),
            instructions={
                "maxLedgerVersion": self.ledger_version + instructions.max_ledger_version_offset,
                "sequence": instructions.sequence or 1,
            },
        )

    async def prepare_settings(self, address, settings) -> PreparedTransaction:
        self._record("prepare_settings", address, settings)
        tx = {"TransactionType": "AccountSet", "Account": address, **settings}
        return PreparedTransaction(tx_json=json.dumps(tx, sort_keys=True))

    def sign(self, tx_json, secret) -> SignResult:
        self.calls.append(("sign", (tx_json, secret)))
        tx_id = hashlib.sha256(tx_json.encode()).hexdigest().upper()
        return SignResult(id=tx_id, signed_transaction=f"SIGNED{tx_id}")

    async def submit(self, signed_transaction: str) -> SubmitResult:
        self._record("submit", signed_transaction)
        return self.submit_result

    async def subscribe(self, accounts: list[str]) -> dict[str, Any]:
        self._record("subscribe", accounts)
        return self.subscribe_response

    def add_transaction_listener(self, listener) -> None:
        self.listeners.append(listener)

    def remove_transaction_listener(self, listener) -> None:
        self.listeners.remove(listener)


def make_payment_tx(
    tx_id: str,
    *,
    source: str,
    destination: str,
    value: str = "10",
    fee: str = "0.000012",
    ledger_version: int = 1500,
    index_in_ledger: int = 0,
    result: str = "tesSUCCESS",
    source_tag: int | None = None,
    destination_tag: int | None = None,
    currency: str = "XRP",
    tx_type: str = "payment",
) -> LedgerTransaction:
    """Build a ledger payment as a client would report it."""
    sent = format_decimal(-(Decimal(value) + Decimal(fee)))
    source_party: dict[str, Any] = {
        "address": source,
        "maxAmount": {"currency": currency, "value": value},
    }
    destination_party: dict[str, Any] = {
        "address": destination,
        "amount": {"currency": currency, "value": value},
    }
    if source_tag is not None:
        source_party["tag"] = source_tag
    if destination_tag is not None:
        destination_party["tag"] = destination_tag
    return LedgerTransaction.from_dict(
        {
            "id": tx_id,
            "type": tx_type,
            "address": source,
            "specification": {"source": source_party, "destination": destination_party},
            "outcome": {
                "result": result,
                "fee": fee,
                "ledgerVersion": ledger_version,
                "indexInLedger": index_in_ledger,
                "timestamp": (_EPOCH + timedelta(seconds=ledger_version)).isoformat(),
                "balanceChanges": {
                    source: [{"currency": currency, "value": sent}],
                    destination: [{"currency": currency, "value": value}],
                },
            },
        }
    )


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def make_tx():
    """Expose :func:`make_payment_tx` to tests."""
    return make_payment_tx
