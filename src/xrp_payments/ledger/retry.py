"""Reconnect-aware retry wrapper for ledger client calls.

Connection failures disconnect (if still connected), reconnect and retry;
timeouts retry on the same connection; everything else propagates on the
first failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, TypeVar

from xrp_payments.errors import (
    PassthroughError,
    PaymentsError,
    TransientTransportError,
    TransportErrorKind,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from xrp_payments.ledger.client import LedgerClient
    from xrp_payments.metrics.collector import PaymentsMetrics

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
RETRY_DELAY = 0.5  # seconds, doubled per attempt


def classify_error(error: BaseException) -> TransportErrorKind | None:
    """Return the retry kind of ``error``, or None when it is fatal."""
    if isinstance(error, TransientTransportError):
        return error.kind
    if isinstance(error, TimeoutError):
        return TransportErrorKind.TIMEOUT
    if isinstance(error, ConnectionError):
        return TransportErrorKind.CONNECTION
    return None


class RetryTransport:
    """Runs ledger operations with bounded, reconnecting retries.

    Usage::

        transport = RetryTransport(ledger)
        balances = await transport.call(lambda: ledger.get_balances(address))

    Not single-flight: concurrent calls for the same operation each retry
    independently.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        *,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY,
        metrics: PaymentsMetrics | None = None,
    ) -> None:
        self._ledger = ledger
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._metrics = metrics

    @property
    def ledger(self) -> LedgerClient:
        return self._ledger

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Await ``operation()``, retrying transient transport failures.

        Raises:
            TransientTransportError: The last transient error once retries
                are exhausted (built-in connection/timeout errors are
                re-raised unchanged).
            PaymentsError: Any non-transient payments error, immediately.
            PassthroughError: Wrapping any other exception, immediately.
        """
        attempt = 0
        while True:
            try:
                return await operation()
            except Exception as exc:
                kind = classify_error(exc)
                if kind is None:
                    if isinstance(exc, PaymentsError):
                        raise
                    raise PassthroughError(str(exc), name=type(exc).__name__) from exc
                if attempt >= self._max_retries:
                    raise
                attempt += 1
                remaining = self._max_retries - attempt
                if kind is TransportErrorKind.CONNECTION:
                    logger.info(
                        "Connection error during ledger call, reconnecting then retrying "
                        "(%d more after this): %s",
                        remaining,
                        exc,
                    )
                    await self._reconnect()
                else:
                    logger.info(
                        "Retryable error during ledger call, retrying (%d more after this): %s",
                        remaining,
                        exc,
                    )
                if self._metrics is not None:
                    self._metrics.record_retry(kind.value)
                if self._retry_delay > 0:
                    await asyncio.sleep(self._retry_delay * 2 ** (attempt - 1))

    async def _reconnect(self) -> None:
        if self._ledger.is_connected():
            await self._ledger.disconnect()
        await self._ledger.connect()
