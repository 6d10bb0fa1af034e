"""Fee resolution — custom rates and cushioned network fees."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING

from xrp_payments.errors import ValidationError
from xrp_payments.errors.definitions import CODE_INVALID_FEE_RATE, CODE_UNSUPPORTED_FEE_RATE_TYPE
from xrp_payments.payments.models import (
    CreateTransactionOptions,
    FeeLevel,
    FeeRateType,
    ResolvedFeeOption,
)
from xrp_payments.units import (
    to_base_denomination_string,
    to_decimal,
    to_main_denomination_string,
)

if TYPE_CHECKING:
    from xrp_payments.ledger.retry import RetryTransport

logger = logging.getLogger(__name__)

# Multiplier applied to the server's reported fee per tier
FEE_LEVEL_CUSHIONS = MappingProxyType(
    {
        FeeLevel.LOW: 1.0,
        FeeLevel.MEDIUM: 1.2,
        FeeLevel.HIGH: 1.5,
    }
)


class FeeResolver:
    """Turns a fee request into concrete XRP and drop amounts."""

    def __init__(self, transport: RetryTransport) -> None:
        self._transport = transport

    async def resolve(self, options: CreateTransactionOptions) -> ResolvedFeeOption:
        """Resolve the fee for ``options``.

        A CUSTOM level converts ``fee_rate`` into the other denomination
        without touching the ledger. Any other level asks the ledger for
        its current fee, scaled by the tier's cushion.

        Raises:
            ValidationError: Custom rate with a type other than MAIN or BASE,
                or a rate that is not a finite non-negative number.
        """
        if options.fee_level == FeeLevel.CUSTOM:
            return self._resolve_custom(options)

        level = FeeLevel(options.fee_level or FeeLevel.MEDIUM)
        cushion = FEE_LEVEL_CUSHIONS[level]
        ledger = self._transport.ledger
        fee_main = await self._transport.call(lambda: ledger.get_fee(cushion))
        logger.debug("Resolved %s fee with cushion %s: %s XRP", level, cushion, fee_main)
        return ResolvedFeeOption(
            target_fee_level=level,
            target_fee_rate=fee_main,
            target_fee_rate_type=FeeRateType.MAIN,
            fee_main=fee_main,
            fee_base=to_base_denomination_string(fee_main),
        )

    @staticmethod
    def _resolve_custom(options: CreateTransactionOptions) -> ResolvedFeeOption:
        if options.fee_rate is None:
            raise ValidationError("Custom fee level requires a fee_rate")
        rate = str(options.fee_rate)
        rate_type = options.fee_rate_type
        if rate_type not in (FeeRateType.BASE, FeeRateType.MAIN):
            raise ValidationError(
                f"Unsupported ripple feeRateType {rate_type}",
                code=CODE_UNSUPPORTED_FEE_RATE_TYPE,
            )
        parsed = to_decimal(rate)
        if not parsed.is_finite() or parsed < 0:
            raise ValidationError(
                f"Invalid ripple custom fee rate {rate!r}", code=CODE_INVALID_FEE_RATE
            )
        if rate_type == FeeRateType.BASE:
            fee_base = rate
            fee_main = to_main_denomination_string(parsed)
        else:
            fee_main = rate
            fee_base = to_base_denomination_string(parsed)
        return ResolvedFeeOption(
            target_fee_level=FeeLevel.CUSTOM,
            target_fee_rate=rate,
            target_fee_rate_type=FeeRateType(rate_type),
            fee_main=fee_main,
            fee_base=fee_base,
        )
