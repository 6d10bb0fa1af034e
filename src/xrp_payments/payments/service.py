"""RipplePayments — the payments facade for one XRP account pair.

Composes a :class:`SignatorySource` with the payport resolver, fee resolver,
transaction builder and signer. All ledger access goes through one
:class:`RetryTransport`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from xrp_payments.constants import NETWORK_SYMBOL, NOT_FOUND_ERRORS, SUCCESS_RESULT_PREFIX
from xrp_payments.errors import (
    NotFoundError,
    PassthroughError,
    ReadOnlyError,
    UnsupportedTransactionError,
    ValidationError,
)
from xrp_payments.errors.definitions import CODE_DESTINATION_TAG_ALREADY_SET
from xrp_payments.keys import generate_new_keys
from xrp_payments.ledger.retry import RETRY_DELAY
from xrp_payments.payments.builder import TransactionBuilder
from xrp_payments.payments.fees import FeeResolver
from xrp_payments.payments.models import (
    BalanceResult,
    BroadcastResult,
    CreateTransactionOptions,
    FromTo,
    NetworkType,
    Payport,
    ResolvedFeeOption,
    Signatory,
    SignedTransaction,
    TransactionInfo,
    TransactionStatus,
    UnsignedTransaction,
)
from xrp_payments.payments.payport import PayportResolver
from xrp_payments.payments.signer import Signer
from xrp_payments.payments.utils import PaymentsUtils
from xrp_payments.units import Numeric, to_base_denomination_decimal, to_decimal

if TYPE_CHECKING:
    from xrp_payments.ledger.client import LedgerClient
    from xrp_payments.metrics.collector import PaymentsMetrics
    from xrp_payments.payments.accounts import SignatorySource
    from xrp_payments.payments.payport import PayportLike

logger = logging.getLogger(__name__)


def _is_not_found(error: PassthroughError) -> bool:
    text = f"{error.name} {error}"
    return any(name in text for name in NOT_FOUND_ERRORS)


class RipplePayments(PaymentsUtils):
    """Create, sign and broadcast XRP payments for a hot/deposit account pair.

    Usage::

        payments = RipplePayments(ledger, HdSignatories(xprv))
        await payments.init()
        tx = await payments.create_transaction(0, "rEb8TK3gBgk5auZkwc6sHnwrGVJH8DuaLh", "10")
        signed = payments.sign_transaction(tx)
        result = await payments.broadcast_transaction(signed)
    """

    generate_new_keys = staticmethod(generate_new_keys)

    def __init__(
        self,
        ledger: LedgerClient,
        signatories: SignatorySource,
        *,
        network_type: NetworkType = NetworkType.MAINNET,
        server: str | None = None,
        max_ledger_version_offset: int | None = None,
        retry_delay: float = RETRY_DELAY,
        metrics: PaymentsMetrics | None = None,
    ) -> None:
        super().__init__(ledger, network_type=network_type, retry_delay=retry_delay, metrics=metrics)
        self.server = server
        self.max_ledger_version_offset = max_ledger_version_offset
        self.signatories = signatories
        self.payports = PayportResolver(signatories)
        self.fees = FeeResolver(self.transport)
        self.builder = TransactionBuilder(
            self.transport,
            self.payports,
            self.fees,
            max_ledger_version_offset=max_ledger_version_offset,
            metrics=metrics,
        )
        self.signer = Signer(self.transport, signatories, self.get_transaction_info, metrics=metrics)

    # -- Accounts -----------------------------------------------------------

    @property
    def hot_signatory(self) -> Signatory:
        return self.signatories.hot_signatory

    @property
    def deposit_signatory(self) -> Signatory:
        return self.signatories.deposit_signatory

    def is_read_only(self) -> bool:
        return self.signatories.is_read_only()

    def get_public_config(self) -> dict[str, Any]:
        """Config safe to share: xpub or bare addresses, never secrets."""
        return {
            "network": self.network_type.value,
            "server": self.server,
            "max_ledger_version_offset": self.max_ledger_version_offset,
            **self.signatories.public_config(),
        }

    def get_account_ids(self) -> list[str]:
        return self.signatories.get_account_ids()

    def get_account_id(self, index: int) -> str:
        return self.signatories.get_account_id(index)

    def requires_balance_monitor(self) -> bool:
        return True

    def get_addresses_to_monitor(self) -> list[str]:
        return [self.hot_signatory.address, self.deposit_signatory.address]

    # -- Payports -----------------------------------------------------------

    def get_payport(self, index: int) -> Payport:
        return self.payports.get_payport(index)

    def resolve_payport(self, payport: PayportLike) -> Payport:
        return self.payports.resolve_payport(payport)

    def resolve_from_to(self, from_index: int, to: PayportLike) -> FromTo:
        return self.payports.resolve_from_to(from_index, to)

    def resolve_index_from_adjustment(self, address: str, tag: int | str | None) -> int | None:
        return self.payports.resolve_index_from_adjustment(address, tag)

    def is_sweepable_balance(self, balance: Numeric, payport: PayportLike | None = None) -> bool:
        if payport is not None:
            self.resolve_payport(payport)
        if not to_decimal(balance).is_finite():
            return False
        return to_base_denomination_decimal(balance) > 0

    # -- Balances and fees --------------------------------------------------

    async def get_balance(self, payport: PayportLike) -> BalanceResult:
        """Spendable balance of a bare address payport.

        Raises:
            ValidationError: For a payport with an extraId; sub-account
                balances are tracked through the balance monitor.
        """
        resolved = self.resolve_payport(payport)
        if resolved.extra_id is not None:
            raise ValidationError(
                f"Cannot getBalance of ripple payport with extraId {resolved.extra_id}, "
                "use BalanceMonitor instead"
            )
        return await self.builder.get_address_balance(resolved.address)

    async def resolve_fee_option(self, options: CreateTransactionOptions) -> ResolvedFeeOption:
        return await self.fees.resolve(options)

    # -- Transactions -------------------------------------------------------

    async def create_transaction(
        self,
        from_index: int,
        to: PayportLike,
        amount: Numeric,
        options: CreateTransactionOptions | None = None,
    ) -> UnsignedTransaction:
        return await self.builder.build(from_index, to, amount, options)

    async def create_sweep_transaction(
        self,
        from_index: int,
        to: PayportLike,
        options: CreateTransactionOptions | None = None,
    ) -> UnsignedTransaction:
        return await self.builder.build_sweep(from_index, to, options)

    def sign_transaction(self, unsigned_tx: UnsignedTransaction) -> SignedTransaction:
        return self.signer.sign(unsigned_tx)

    async def broadcast_transaction(self, signed_tx: SignedTransaction) -> BroadcastResult:
        return await self.signer.broadcast(signed_tx)

    async def get_transaction_info(self, tx_id: str) -> TransactionInfo:
        """Look up a payment on the ledger.

        Raises:
            NotFoundError: The ledger has no record of ``tx_id`` in its history.
            UnsupportedTransactionError: Not an XRP payment.
        """
        ledger = self.ledger
        try:
            tx = await self.transport.call(lambda: ledger.get_transaction(tx_id))
        except PassthroughError as exc:
            if _is_not_found(exc):
                raise NotFoundError(f"Transaction not found: {exc}") from exc
            raise
        logger.debug("get_transaction %s: %s", tx_id, tx)

        if not tx.is_payment or tx.specification is None:
            raise UnsupportedTransactionError(f"Unsupported ripple tx type {tx.type}")
        source, destination = tx.specification.source, tx.specification.destination
        amount = source.max_amount or source.amount
        if amount is None or amount.currency != NETWORK_SYMBOL:
            currency = amount.currency if amount is not None else None
            raise UnsupportedTransactionError(f"Unsupported ripple tx currency {currency}")
        outcome = tx.outcome
        if outcome is None:
            raise UnsupportedTransactionError(f"Ripple tx {tx.id} has no outcome")

        status = (
            TransactionStatus.CONFIRMED
            if outcome.result.startswith(SUCCESS_RESULT_PREFIX)
            else TransactionStatus.FAILED
        )
        confirmation_number = outcome.ledger_version
        header = await self.transport.call(lambda: ledger.get_ledger(confirmation_number))
        current_ledger_version = await self.transport.call(ledger.get_ledger_version)
        return TransactionInfo(
            id=tx.id,
            from_index=self.resolve_index_from_adjustment(source.address, source.tag),
            from_address=source.address,
            from_extra_id=None if source.tag is None else str(source.tag),
            to_index=self.resolve_index_from_adjustment(destination.address, destination.tag),
            to_address=destination.address,
            to_extra_id=None if destination.tag is None else str(destination.tag),
            amount=amount.value,
            fee=outcome.fee,
            status=status,
            confirmation_id=header.ledger_hash,
            confirmation_number=header.ledger_version,
            confirmation_timestamp=outcome.timestamp,
            confirmations=current_ledger_version - confirmation_number,
            is_executed=status is TransactionStatus.CONFIRMED,
            is_confirmed=True,
            data=tx.raw,
        )

    async def init_accounts(self) -> dict[str, Any]:
        """Enable ``requireDestinationTag`` on the deposit account.

        Raises:
            ReadOnlyError: The deposit signatory has no secret.
            ValidationError: The flag is already set.
        """
        deposit = self.deposit_signatory
        if not deposit.can_sign:
            raise ReadOnlyError(f"Cannot init ripple deposit account {deposit.address}: read only")
        ledger = self.ledger
        settings = await self.transport.call(lambda: ledger.get_settings(deposit.address))
        if settings.require_destination_tag:
            raise ValidationError(
                f"ripple requireDestinationTag already set for {deposit.address}",
                code=CODE_DESTINATION_TAG_ALREADY_SET,
            )
        unsigned = await self.transport.call(
            lambda: ledger.prepare_settings(deposit.address, {"requireDestinationTag": True})
        )
        signed = ledger.sign(unsigned.tx_json, deposit.secret)
        broadcast = await self.transport.call(lambda: ledger.submit(signed.signed_transaction))
        logger.info(
            "Submitted requireDestinationTag for %s as %s (%s)",
            deposit.address,
            signed.id,
            broadcast.result_code,
        )
        return {
            "tx_id": signed.id,
            "unsigned_tx": unsigned,
            "signed_tx": signed,
            "broadcast": broadcast,
        }
