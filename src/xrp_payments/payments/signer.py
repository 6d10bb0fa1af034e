"""Signing and broadcasting of prepared payments."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from xrp_payments.errors import BroadcastError, ReadOnlyError, ValidationError
from xrp_payments.ledger.models import SignResult
from xrp_payments.payments.models import (
    BroadcastResult,
    SignedTransaction,
    TransactionStatus,
    UnsignedTransaction,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from xrp_payments.ledger.retry import RetryTransport
    from xrp_payments.metrics.collector import PaymentsMetrics
    from xrp_payments.payments.accounts import SignatorySource
    from xrp_payments.payments.models import TransactionInfo

logger = logging.getLogger(__name__)


class Signer:
    """Signs unsigned payments with the matching signatory's secret and submits them.

    Args:
        transport: Retrying access to the ledger client.
        signatories: Source of the hot and deposit signatories.
        lookup: Resolves a transaction id to its on-ledger info; used to
            flag rebroadcasts.
        metrics: Optional broadcast counter.
    """

    def __init__(
        self,
        transport: RetryTransport,
        signatories: SignatorySource,
        lookup: Callable[[str], Awaitable[TransactionInfo]],
        *,
        metrics: PaymentsMetrics | None = None,
    ) -> None:
        self._transport = transport
        self._signatories = signatories
        self._lookup = lookup
        self._metrics = metrics

    def sign(self, unsigned_tx: UnsignedTransaction) -> SignedTransaction:
        """Sign ``unsigned_tx`` locally.

        Raises:
            ValidationError: The source address is neither hot nor deposit.
            ReadOnlyError: The source signatory has no secret.
        """
        signatory = self._signatories.signatory_for(unsigned_tx.from_address)
        if signatory is None:
            raise ValidationError(
                f"Cannot sign ripple transaction from address {unsigned_tx.from_address}"
            )
        if not signatory.can_sign:
            raise ReadOnlyError(
                f"Cannot sign transaction from {signatory.address} with read only ripple "
                "payments (no xprv or secrets provided)"
            )
        tx_json = unsigned_tx.data.get("txJSON", "")
        logger.debug("Signing XRP transaction from %s", unsigned_tx.from_address)
        result = self._transport.ledger.sign(tx_json, signatory.secret)
        fields = {
            f.name: getattr(unsigned_tx, f.name) for f in dataclasses.fields(UnsignedTransaction)
        }
        fields.update(id=result.id, data=result.to_dict(), status=TransactionStatus.SIGNED)
        return SignedTransaction(**fields)

    async def broadcast(self, signed_tx: SignedTransaction) -> BroadcastResult:
        """Submit ``signed_tx`` to the ledger.

        Raises:
            BroadcastError: The engine result does not start with ``tes``.
        """
        signed = SignResult.from_dict(signed_tx.data)
        rebroadcast = False
        if signed_tx.id:
            try:
                existing = await self._lookup(signed_tx.id)
                rebroadcast = existing.id == signed_tx.id
            except Exception as exc:
                logger.debug("No prior record of %s before broadcast: %s", signed_tx.id, exc)

        ledger = self._transport.ledger
        result = await self._transport.call(lambda: ledger.submit(signed.signed_transaction))
        logger.debug("Broadcasted %s: %s", signed_tx.id, result)
        if not result.is_success:
            self._record("failed")
            raise BroadcastError(
                f"Failed to broadcast ripple tx {signed_tx.id} "
                f"with result code {result.result_code}",
                result_code=result.result_code,
            )
        self._record("rebroadcast" if rebroadcast else "success")
        logger.info("Broadcast XRP transaction %s (rebroadcast=%s)", signed_tx.id, rebroadcast)
        return BroadcastResult(id=signed_tx.id or "", rebroadcast=rebroadcast, data=result.raw)

    def _record(self, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.record_broadcast(outcome)
