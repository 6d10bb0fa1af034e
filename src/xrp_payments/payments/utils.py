"""Stateless payments helpers plus payport validation against the ledger."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from xrp_payments.address import is_valid_address, is_valid_extra_id
from xrp_payments.errors import ValidationError
from xrp_payments.errors.definitions import (
    CODE_EXTRA_ID_REQUIRED,
    CODE_INVALID_ADDRESS,
    CODE_INVALID_EXTRA_ID,
)
from xrp_payments.keys import is_valid_xprv, is_valid_xpub
from xrp_payments.ledger.retry import RETRY_DELAY, RetryTransport
from xrp_payments.payments.models import NetworkType, Payport
from xrp_payments.units import Numeric, to_base_denomination_string, to_main_denomination_string

if TYPE_CHECKING:
    from xrp_payments.ledger.client import LedgerClient
    from xrp_payments.metrics.collector import PaymentsMetrics

logger = logging.getLogger(__name__)


class PaymentsUtils:
    """Address, payport and unit helpers bound to one ledger connection."""

    def __init__(
        self,
        ledger: LedgerClient,
        *,
        network_type: NetworkType = NetworkType.MAINNET,
        retry_delay: float = RETRY_DELAY,
        metrics: PaymentsMetrics | None = None,
    ) -> None:
        self.ledger = ledger
        self.network_type = NetworkType(network_type)
        self.transport = RetryTransport(ledger, retry_delay=retry_delay, metrics=metrics)

    async def init(self) -> None:
        if not self.ledger.is_connected():
            await self.ledger.connect()

    async def destroy(self) -> None:
        if self.ledger.is_connected():
            await self.ledger.disconnect()

    # -- Validation ---------------------------------------------------------

    @staticmethod
    def is_valid_address(address: object) -> bool:
        return is_valid_address(address)

    @staticmethod
    def is_valid_extra_id(extra_id: object) -> bool:
        return is_valid_extra_id(extra_id)

    @staticmethod
    def is_valid_xprv(xprv: object) -> bool:
        return is_valid_xprv(xprv)

    @staticmethod
    def is_valid_xpub(xpub: object) -> bool:
        return is_valid_xpub(xpub)

    async def _payport_validation_error(self, payport: Payport) -> ValidationError | None:
        address, extra_id = payport.address, payport.extra_id
        if not is_valid_address(address):
            return ValidationError("Invalid payport address", code=CODE_INVALID_ADDRESS)
        require_extra_id = False
        try:
            settings = await self.transport.call(lambda: self.ledger.get_settings(address))
            require_extra_id = settings.require_destination_tag
        except Exception as exc:
            logger.debug("Failed to retrieve settings for %s - %s", address, exc)
        if extra_id is None:
            if require_extra_id:
                return ValidationError(
                    f"Payport extraId is required for address {address} with ripple "
                    "requireDestinationTag setting enabled",
                    code=CODE_EXTRA_ID_REQUIRED,
                )
        elif not is_valid_extra_id(extra_id):
            return ValidationError("Invalid payport extraId", code=CODE_INVALID_EXTRA_ID)
        return None

    async def validate_payport(self, payport: Payport) -> None:
        """Check ``payport`` locally and against the destination's account flags.

        Raises:
            ValidationError: Invalid address or extraId, or a missing extraId
                for an account that requires destination tags.
        """
        error = await self._payport_validation_error(payport)
        if error is not None:
            raise error

    async def is_valid_payport(self, payport: object) -> bool:
        if not isinstance(payport, Payport):
            return False
        return await self._payport_validation_error(payport) is None

    # -- Units --------------------------------------------------------------

    @staticmethod
    def to_main_denomination(amount: Numeric) -> str:
        return to_main_denomination_string(amount)

    @staticmethod
    def to_base_denomination(amount: Numeric) -> str:
        return to_base_denomination_string(amount)
