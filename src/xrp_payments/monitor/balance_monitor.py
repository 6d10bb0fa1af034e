"""Balance monitor — reconstructs balance activity from ledger history.

Historical activity is read page by page through account transaction
history; live activity arrives via account subscriptions. Each ledger
transaction yields one :class:`BalanceActivity` per watched address whose
XRP balance it changed.

Live delivery: the ledger client's transaction listener only enqueues.
A single consumer task converts queued transactions into activities and
hands them to subscribers, so a slow subscriber never blocks the client.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from xrp_payments.address import assert_valid_address
from xrp_payments.constants import (
    ACTIVITY_PAGE_SIZE,
    CLAIMED_RESULT_PREFIX,
    NETWORK_SYMBOL,
    SUCCESS_RESULT_PREFIX,
)
from xrp_payments.ledger.models import TransactionQuery
from xrp_payments.ledger.retry import RETRY_DELAY, RetryTransport
from xrp_payments.payments.models import BalanceActivity, BalanceActivityType, NetworkType
from xrp_payments.units import to_decimal

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterable

    from xrp_payments.ledger.client import LedgerClient
    from xrp_payments.ledger.models import LedgerTransaction
    from xrp_payments.metrics.collector import PaymentsMetrics

logger = logging.getLogger(__name__)

LedgerBound = int | BalanceActivity | None


def activity_sequence(ledger_version: int, index_in_ledger: int, type_: BalanceActivityType) -> str:
    """Sortable position of an activity: ledger, index in ledger, then out before in."""
    leg = "00" if type_ is BalanceActivityType.OUT else "01"
    return f"{ledger_version:012d}.{index_in_ledger:08d}.{leg}"


def _ledger_number(bound: LedgerBound) -> int | None:
    if isinstance(bound, BalanceActivity):
        return bound.confirmation_number
    return bound


@dataclass(eq=False)
class Subscription:
    """Handle returned by :meth:`BalanceMonitor.on_balance_activity`."""

    monitor: BalanceMonitor = field(repr=False)
    callback: Callable[[BalanceActivity], Awaitable[None] | None]
    active: bool = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self.monitor._remove_subscription(self)


class BalanceMonitor:
    """Turns XRP Ledger transactions into balance activities.

    Usage::

        monitor = BalanceMonitor(ledger, network_type=NetworkType.TESTNET)
        await monitor.init()
        await monitor.subscribe_addresses([address])
        sub = monitor.on_balance_activity(handle)
        ...
        sub.unsubscribe()
        await monitor.destroy()
    """

    def __init__(
        self,
        ledger: LedgerClient,
        *,
        network_type: NetworkType = NetworkType.MAINNET,
        retry_delay: float = RETRY_DELAY,
        metrics: PaymentsMetrics | None = None,
    ) -> None:
        self._ledger = ledger
        self._network_type = NetworkType(network_type)
        self._transport = RetryTransport(ledger, retry_delay=retry_delay, metrics=metrics)
        self._watched: list[str] = []
        self._subscriptions: list[Subscription] = []
        self._queue: asyncio.Queue[LedgerTransaction] = asyncio.Queue()
        self._consumer: asyncio.Task[None] | None = None
        self._listening = False

    @property
    def network_type(self) -> NetworkType:
        return self._network_type

    @property
    def watched_addresses(self) -> list[str]:
        return list(self._watched)

    # -- Lifecycle ----------------------------------------------------------

    async def init(self) -> None:
        if not self._ledger.is_connected():
            await self._ledger.connect()

    async def destroy(self) -> None:
        """Stop live delivery and disconnect from the ledger."""
        for sub in list(self._subscriptions):
            sub.unsubscribe()
        if self._consumer is not None:
            self._consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer
            self._consumer = None
        # Undelivered txs are dropped so flush() cannot block on them
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
        if self._ledger.is_connected():
            await self._ledger.disconnect()

    # -- Live delivery ------------------------------------------------------

    async def subscribe_addresses(self, addresses: Iterable[str]) -> None:
        """Subscribe the ledger client to transactions affecting ``addresses``."""
        addresses = list(addresses)
        for address in addresses:
            assert_valid_address(address)
        try:
            res = await self._transport.call(lambda: self._ledger.subscribe(addresses))
        except Exception:
            logger.exception("Failed to subscribe to ripple addresses %s", addresses)
            raise
        if res.get("status", "success") == "success":
            logger.info("Ripple successfully subscribed to %d addresses", len(addresses))
        else:
            logger.warning("Ripple subscribe unsuccessful: %s", res)
        for address in addresses:
            if address not in self._watched:
                self._watched.append(address)

    def on_balance_activity(
        self, callback: Callable[[BalanceActivity], Awaitable[None] | None]
    ) -> Subscription:
        """Register ``callback`` for activities of subscribed addresses.

        ``callback`` may be a plain function or a coroutine function. It runs
        on the consumer task; exceptions it raises are logged and dropped.
        """
        sub = Subscription(monitor=self, callback=callback)
        self._subscriptions.append(sub)
        if not self._listening:
            self._ledger.add_transaction_listener(self._enqueue)
            self._listening = True
        return sub

    async def flush(self) -> None:
        """Wait until every transaction pushed so far has been delivered."""
        await self._queue.join()

    def _remove_subscription(self, sub: Subscription) -> None:
        with contextlib.suppress(ValueError):
            self._subscriptions.remove(sub)
        if not self._subscriptions and self._listening:
            self._ledger.remove_transaction_listener(self._enqueue)
            self._listening = False

    def _enqueue(self, tx: LedgerTransaction) -> None:
        self._queue.put_nowait(tx)
        if self._consumer is None or self._consumer.done():
            self._consumer = asyncio.get_running_loop().create_task(self._consume())

    async def _consume(self) -> None:
        while True:
            tx = await self._queue.get()
            try:
                activities = await self.tx_to_balance_activities(tx, self._watched)
                for activity in activities:
                    for sub in list(self._subscriptions):
                        await self._deliver(sub, activity)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Failed to process pushed ripple tx %s", tx.id)
            finally:
                self._queue.task_done()

    @staticmethod
    async def _deliver(sub: Subscription, activity: BalanceActivity) -> None:
        if not sub.active:
            return
        try:
            result = sub.callback(activity)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Balance activity callback failed for %s", activity.external_id)

    # -- History ------------------------------------------------------------

    async def resolve_from_to_ledgers(
        self, from_: LedgerBound = None, to: LedgerBound = None
    ) -> tuple[int, int]:
        """Clamp the requested ledger range to what the server holds.

        Returns:
            ``(from_ledger, to_ledger)``, both inclusive.
        """
        info = await self._transport.call(self._ledger.get_server_info)
        first, last = info.ledger_range()
        requested_from = _ledger_number(from_)
        requested_to = _ledger_number(to)
        if requested_from is not None:
            if requested_from < first:
                logger.warning(
                    "Server balance activity doesn't go back to ledger %d, using %d instead",
                    requested_from,
                    first,
                )
            else:
                first = requested_from
        if requested_to is not None:
            if requested_to > last:
                logger.warning(
                    "Server balance activity doesn't go up to ledger %d, using %d instead",
                    requested_to,
                    last,
                )
            else:
                last = requested_to
        return first, last

    async def iter_balance_activities(
        self, address: str, from_: LedgerBound = None, to: LedgerBound = None
    ) -> AsyncIterator[BalanceActivity]:
        """Yield the activities of ``address`` in ledger order."""
        assert_valid_address(address)
        from_ledger, to_ledger = await self.resolve_from_to_ledgers(from_, to)
        async for activity in self._iter_activities(address, from_ledger, to_ledger):
            yield activity

    async def retrieve_balance_activities(
        self,
        address: str,
        visit: Callable[[BalanceActivity], Awaitable[Any]],
        from_: LedgerBound = None,
        to: LedgerBound = None,
    ) -> tuple[int, int]:
        """Await ``visit`` for each activity of ``address``.

        An exception from ``visit`` stops retrieval and propagates as-is.

        Returns:
            The ``(from_ledger, to_ledger)`` range that was scanned.
        """
        assert_valid_address(address)
        from_ledger, to_ledger = await self.resolve_from_to_ledgers(from_, to)
        activities = self._iter_activities(address, from_ledger, to_ledger)
        async with contextlib.aclosing(activities):
            async for activity in activities:
                await visit(activity)
        return from_ledger, to_ledger

    async def _iter_activities(
        self, address: str, from_ledger: int, to_ledger: int
    ) -> AsyncIterator[BalanceActivity]:
        async for tx in self._iter_transactions(address, from_ledger, to_ledger):
            for activity in await self.tx_to_balance_activities(tx, [address]):
                yield activity

    async def _iter_transactions(
        self, address: str, from_ledger: int, to_ledger: int
    ) -> AsyncIterator[LedgerTransaction]:
        last_tx: LedgerTransaction | None = None
        page: list[LedgerTransaction] | None = None
        while page is None or (
            len(page) == ACTIVITY_PAGE_SIZE
            and last_tx is not None
            and last_tx.outcome is not None
            and last_tx.outcome.ledger_version <= to_ledger
        ):
            if last_tx is None:
                query = TransactionQuery(
                    min_ledger_version=from_ledger,
                    max_ledger_version=to_ledger,
                    limit=ACTIVITY_PAGE_SIZE,
                )
            else:
                query = TransactionQuery(start=last_tx.id, limit=ACTIVITY_PAGE_SIZE)
            page = await self._transport.call(
                lambda q=query: self._ledger.get_transactions(address, q)
            )
            logger.debug("Retrieved %d ripple txs for %s", len(page), address)
            for tx in page:
                if last_tx is not None and tx.id == last_tx.id:
                    continue
                if tx.outcome is not None and not (
                    from_ledger <= tx.outcome.ledger_version <= to_ledger
                ):
                    continue
                yield tx
            if page:
                last_tx = page[-1]

    # -- Conversion ---------------------------------------------------------

    async def tx_to_balance_activities(
        self, tx: LedgerTransaction, addresses: Iterable[str]
    ) -> list[BalanceActivity]:
        """Convert one transaction into activities for the watched ``addresses``.

        Transactions that did not apply (results other than ``tes*``/``tec*``)
        produce nothing. Every watched address with an XRP balance change
        gets its own record.
        """
        outcome = tx.outcome
        if outcome is None:
            logger.warning("Received ripple tx %s without outcome", tx.id)
            return []
        if not outcome.result.startswith((SUCCESS_RESULT_PREFIX, CLAIMED_RESULT_PREFIX)):
            logger.debug(
                "No balance activity for ripple tx %s because status is %s", tx.id, outcome.result
            )
            return []

        changes = []
        for address in dict.fromkeys(addresses):
            xrp_changes = (
                b for b in outcome.balance_changes.get(address, []) if b.currency == NETWORK_SYMBOL
            )
            change = next(xrp_changes, None)
            if change is None or to_decimal(change.value) == 0:
                logger.debug("No XRP balance change for %s in ripple tx %s", address, tx.id)
                continue
            changes.append((address, change))
        if not changes:
            return []

        ledger_version = outcome.ledger_version
        ledger = await self._transport.call(lambda: self._ledger.get_ledger(ledger_version))
        activities = []
        for address, change in changes:
            is_out = change.value.startswith("-")
            type_ = BalanceActivityType.OUT if is_out else BalanceActivityType.IN
            tag = None
            if tx.is_payment and tx.specification is not None:
                party = (
                    tx.specification.source
                    if type_ is BalanceActivityType.OUT
                    else tx.specification.destination
                )
                tag = party.tag
            activities.append(
                BalanceActivity(
                    type=type_,
                    network_type=self._network_type,
                    network_symbol=NETWORK_SYMBOL,
                    asset_symbol=change.currency,
                    address=address,
                    extra_id=None if tag is None else str(tag),
                    amount=change.value,
                    external_id=tx.id,
                    activity_sequence=activity_sequence(
                        ledger_version, outcome.index_in_ledger, type_
                    ),
                    confirmation_id=ledger.ledger_hash,
                    confirmation_number=ledger_version,
                    timestamp=ledger.close_time,
                )
            )
        activities.sort(key=lambda a: a.activity_sequence)
        return activities
