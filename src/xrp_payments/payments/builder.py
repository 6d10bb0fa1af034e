"""Transaction builder — amount, reserve and payport-balance invariants.

Every build runs the same linear pipeline::

    resolve payports -> resolve fee -> resolve balances -> validate -> prepare

with exactly one fee query and one balance query against the ledger. The
balance reported for an address is always its spendable balance, i.e. the
on-ledger XRP balance minus the account reserve.
"""

from __future__ import annotations

import contextlib
import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from xrp_payments.constants import DEFAULT_MAX_LEDGER_VERSION_OFFSET, MIN_BALANCE, NETWORK_SYMBOL
from xrp_payments.errors import InsufficientBalanceError, ValidationError
from xrp_payments.errors.definitions import (
    CODE_INSUFFICIENT_BALANCE,
    CODE_INSUFFICIENT_PAYPORT_BALANCE,
    CODE_INSUFFICIENT_RESERVE,
    CODE_INVALID_AMOUNT,
    CODE_INVALID_PAYPORT_BALANCE,
    CODE_MISSING_PAYPORT_BALANCE,
    CODE_SELF_SEND,
)
from xrp_payments.ledger.models import Amount, Instructions, PaymentParty, PaymentSpecification
from xrp_payments.payments.models import (
    BalanceResult,
    CreateTransactionOptions,
    FromTo,
    Payport,
    ResolvedFeeOption,
    TransactionStatus,
    UnsignedTransaction,
)
from xrp_payments.units import Numeric, format_decimal, to_decimal

if TYPE_CHECKING:
    from xrp_payments.ledger.retry import RetryTransport
    from xrp_payments.metrics.collector import PaymentsMetrics
    from xrp_payments.payments.fees import FeeResolver
    from xrp_payments.payments.payport import PayportLike, PayportResolver

logger = logging.getLogger(__name__)

_RESERVE = Decimal(MIN_BALANCE)


def extra_id_to_tag(extra_id: str | None) -> int | None:
    return None if extra_id is None else int(extra_id)


def is_sweepable_address_balance(balance: Numeric) -> bool:
    return to_decimal(balance) > 0


class TransactionBuilder:
    """Builds unsigned XRP payments and sweeps.

    Args:
        transport: Retrying access to the ledger client.
        payports: Resolver for the account's payports.
        fees: Fee resolver.
        max_ledger_version_offset: Configured expiry offset; per-call
            options take precedence, then this, then 100 ledgers.
        metrics: Optional collector timing each build.
    """

    def __init__(
        self,
        transport: RetryTransport,
        payports: PayportResolver,
        fees: FeeResolver,
        *,
        max_ledger_version_offset: int | None = None,
        metrics: PaymentsMetrics | None = None,
    ) -> None:
        self._transport = transport
        self._payports = payports
        self._fees = fees
        self._max_ledger_version_offset = max_ledger_version_offset
        self._metrics = metrics

    # -- Balances -----------------------------------------------------------

    async def get_address_balance(self, address: str) -> BalanceResult:
        """Return the spendable XRP balance of ``address``.

        ``confirmed_balance`` is the on-ledger balance minus the reserve and
        may be negative for an underfunded account.
        """
        ledger = self._transport.ledger
        balances = await self._transport.call(lambda: ledger.get_balances(address))
        logger.debug("get_balances %s: %s", address, balances)
        xrp = next((b for b in balances if b.currency == NETWORK_SYMBOL), None)
        on_ledger = to_decimal(xrp.value) if xrp is not None and xrp.value else Decimal(0)
        spendable = on_ledger - _RESERVE
        return BalanceResult(
            confirmed_balance=format_decimal(spendable),
            unconfirmed_balance="0",
            sweepable=is_sweepable_address_balance(spendable),
        )

    @staticmethod
    def resolve_payport_balance(
        from_payport: Payport, spendable: Decimal, options: CreateTransactionOptions
    ) -> Decimal:
        """Return the balance available to the source payport.

        A bare address owns its whole spendable balance. A tagged sub-account
        shares the address with others, so the caller must say how much of
        it belongs to the payport via ``options.payport_balance``.
        """
        if from_payport.extra_id is None:
            return spendable
        if options.payport_balance is None:
            raise ValidationError(
                "ripple-payments createSweepTransaction missing required payportBalance option",
                code=CODE_MISSING_PAYPORT_BALANCE,
            )
        payport_balance = to_decimal(options.payport_balance)
        if payport_balance.is_nan():
            raise ValidationError(
                f"Invalid NaN payportBalance option provided: {options.payport_balance}",
                code=CODE_INVALID_PAYPORT_BALANCE,
            )
        return payport_balance

    # -- Build --------------------------------------------------------------

    async def build(
        self,
        from_index: int,
        to: PayportLike,
        amount: Numeric,
        options: CreateTransactionOptions | None = None,
    ) -> UnsignedTransaction:
        """Build an unsigned payment of ``amount`` XRP.

        Raises:
            ValidationError: Bad payports, amount, options, or a self-send.
            InsufficientBalanceError: Reserve, balance or payport shortfall.
        """
        options = options or CreateTransactionOptions()
        with self._track():
            from_to = self._payports.resolve_from_to(from_index, to)
            fee = await self._fees.resolve(options)
            spendable = await self._spendable(from_to.from_address)
            payport_balance = self.resolve_payport_balance(from_to.from_payport, spendable, options)
            return await self._create(
                from_to, fee, to_decimal(amount), spendable, payport_balance, options
            )

    async def build_sweep(
        self,
        from_index: int,
        to: PayportLike,
        options: CreateTransactionOptions | None = None,
    ) -> UnsignedTransaction:
        """Build a payment moving the source payport's whole balance, minus fee.

        Raises:
            InsufficientBalanceError: If the balance does not cover the fee;
                nothing is prepared in that case.
        """
        options = options or CreateTransactionOptions()
        with self._track():
            from_to = self._payports.resolve_from_to(from_index, to)
            fee = await self._fees.resolve(options)
            spendable = await self._spendable(from_to.from_address)
            payport_balance = self.resolve_payport_balance(from_to.from_payport, spendable, options)
            amount = payport_balance - to_decimal(fee.fee_main)
            if amount < 0:
                raise InsufficientBalanceError(
                    f"Insufficient balance to sweep from ripple payport with fee of "
                    f"{fee.fee_main} XRP: {from_to.from_payport} "
                    f"({format_decimal(payport_balance)} XRP)",
                    code=CODE_INSUFFICIENT_BALANCE,
                )
            return await self._create(from_to, fee, amount, spendable, payport_balance, options)

    # -- Internals ----------------------------------------------------------

    async def _spendable(self, address: str) -> Decimal:
        return to_decimal((await self.get_address_balance(address)).confirmed_balance)

    def _track(self) -> contextlib.AbstractContextManager[None]:
        if self._metrics is None:
            return contextlib.nullcontext()
        return self._metrics.track_build_transaction()

    def _validate(
        self,
        from_to: FromTo,
        fee: ResolvedFeeOption,
        amount: Decimal,
        spendable: Decimal,
        payport_balance: Decimal,
    ) -> None:
        if amount.is_nan() or not amount.is_finite() or amount <= 0:
            raise ValidationError(
                f"Invalid amount provided to ripple-payments createTransaction: {amount}",
                code=CODE_INVALID_AMOUNT,
            )
        if from_to.from_address == from_to.to_address:
            raise ValidationError(
                "Cannot create XRP payment transaction sending XRP to self", code=CODE_SELF_SEND
            )
        actual_balance = format_decimal(spendable + _RESERVE)
        if spendable < 0:
            raise InsufficientBalanceError(
                f"Cannot send from ripple address that has less than {MIN_BALANCE} XRP: "
                f"{from_to.from_address} ({actual_balance} XRP)",
                code=CODE_INSUFFICIENT_RESERVE,
            )
        total = amount + to_decimal(fee.fee_main)
        if spendable - total < 0:
            raise InsufficientBalanceError(
                f"Cannot send {format_decimal(amount)} XRP with fee of {fee.fee_main} XRP because "
                f"it would reduce the balance below the minimum required balance of "
                f"{MIN_BALANCE} XRP: {from_to.from_address} ({actual_balance} XRP)",
                code=CODE_INSUFFICIENT_BALANCE,
            )
        if from_to.from_extra_id is not None and total > payport_balance:
            raise InsufficientBalanceError(
                f"Insufficient payport balance of {format_decimal(payport_balance)} XRP to send "
                f"{format_decimal(amount)} XRP with fee of {fee.fee_main} XRP: "
                f"{from_to.from_payport}",
                code=CODE_INSUFFICIENT_PAYPORT_BALANCE,
            )

    def _instructions(self, options: CreateTransactionOptions) -> Instructions:
        return Instructions(
            max_ledger_version_offset=(
                options.max_ledger_version_offset
                or self._max_ledger_version_offset
                or DEFAULT_MAX_LEDGER_VERSION_OFFSET
            ),
            sequence=options.sequence,
        )

    async def _create(
        self,
        from_to: FromTo,
        fee: ResolvedFeeOption,
        amount: Decimal,
        spendable: Decimal,
        payport_balance: Decimal,
        options: CreateTransactionOptions,
    ) -> UnsignedTransaction:
        self._validate(from_to, fee, amount, spendable, payport_balance)
        amount_str = format_decimal(amount)
        payment = build_payment_specification(from_to, amount_str)
        instructions = self._instructions(options)
        ledger = self._transport.ledger
        prepared = await self._transport.call(
            lambda: ledger.prepare_payment(from_to.from_address, payment, instructions)
        )
        logger.info(
            "Prepared XRP payment %s -> %s of %s XRP (fee %s)",
            from_to.from_payport,
            from_to.to_payport,
            amount_str,
            fee.fee_main,
        )
        return UnsignedTransaction(
            from_index=from_to.from_index,
            from_address=from_to.from_address,
            from_extra_id=from_to.from_extra_id,
            to_index=from_to.to_index,
            to_address=from_to.to_address,
            to_extra_id=from_to.to_extra_id,
            amount=amount_str,
            fee=fee.fee_main,
            target_fee_level=fee.target_fee_level,
            target_fee_rate=fee.target_fee_rate,
            target_fee_rate_type=fee.target_fee_rate_type,
            status=TransactionStatus.UNSIGNED,
            id=None,
            data=prepared.to_dict(),
        )


def build_payment_specification(from_to: FromTo, amount: str) -> PaymentSpecification:
    """Payment spec capping the source at ``amount`` and delivering ``amount``."""
    value = Amount(currency=NETWORK_SYMBOL, value=amount)
    return PaymentSpecification(
        source=PaymentParty(
            address=from_to.from_address,
            tag=extra_id_to_tag(from_to.from_extra_id),
            max_amount=value,
        ),
        destination=PaymentParty(
            address=from_to.to_address,
            tag=extra_id_to_tag(from_to.to_extra_id),
            amount=value,
        ),
    )

