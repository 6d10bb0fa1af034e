"""LedgerClient — the capability set payments needs from an XRP Ledger client.

Concrete clients (websocket, JSON-RPC, test doubles) live outside this
package. Adapters are expected to raise :class:`LedgerConnectionError` /
:class:`LedgerTimeoutError` for retryable transport failures and
:class:`PassthroughError` (with the client's error ``name``) for anything
else, so that retry classification never depends on type names.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from xrp_payments.ledger.models import (
        AccountSettings,
        Balance,
        Instructions,
        LedgerHeader,
        LedgerTransaction,
        PaymentSpecification,
        PreparedTransaction,
        ServerInfo,
        SignResult,
        SubmitResult,
        TransactionQuery,
    )
    from xrp_payments.payments.models import KeyPair

TransactionListener = Callable[["LedgerTransaction"], None]


@runtime_checkable
class LedgerClient(Protocol):
    """Async XRP Ledger client. ``sign`` is local and synchronous."""

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    def is_connected(self) -> bool: ...

    async def get_balances(self, address: str) -> list[Balance]: ...

    async def get_fee(self, cushion: float) -> str:
        """Return the current network fee in XRP, multiplied by ``cushion``."""
        ...

    async def get_settings(self, address: str) -> AccountSettings: ...

    async def get_server_info(self) -> ServerInfo: ...

    async def get_transaction(self, tx_id: str) -> LedgerTransaction: ...

    async def get_transactions(
        self, address: str, query: TransactionQuery
    ) -> list[LedgerTransaction]: ...

    async def get_ledger(self, ledger_version: int) -> LedgerHeader: ...

    async def get_ledger_version(self) -> int: ...

    async def prepare_payment(
        self,
        address: str,
        payment: PaymentSpecification,
        instructions: Instructions,
    ) -> PreparedTransaction: ...

    async def prepare_settings(
        self, address: str, settings: dict[str, Any]
    ) -> PreparedTransaction: ...

    def sign(self, tx_json: str, secret: KeyPair | str) -> SignResult: ...

    async def submit(self, signed_transaction: str) -> SubmitResult: ...

    async def subscribe(self, accounts: list[str]) -> dict[str, Any]: ...

    def add_transaction_listener(self, listener: TransactionListener) -> None:
        """Register a callback for transactions pushed by account subscriptions."""
        ...

    def remove_transaction_listener(self, listener: TransactionListener) -> None: ...
