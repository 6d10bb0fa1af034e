"""Build payments and balance monitors from configuration."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from xrp_payments.config.settings import (
    AccountsConfig,
    BalanceMonitorConfig,
    BaseXrpConfig,
    HdAccountsConfig,
    PaymentsConfig,
    resolve_server,
)
from xrp_payments.errors import ValidationError
from xrp_payments.monitor.balance_monitor import BalanceMonitor
from xrp_payments.payments.accounts import AccountSignatories, HdSignatories, SignatorySource
from xrp_payments.payments.service import RipplePayments

if TYPE_CHECKING:
    from xrp_payments.ledger.client import LedgerClient
    from xrp_payments.metrics.collector import PaymentsMetrics

logger = logging.getLogger(__name__)

# Receives the resolved server URL (None for offline) and returns a client
LedgerFactory = Callable[[str | None], "LedgerClient"]

__all__ = [
    "LedgerFactory",
    "create_balance_monitor",
    "create_payments",
    "create_signatories",
    "resolve_server",
]


def create_signatories(accounts: AccountsConfig) -> SignatorySource:
    if isinstance(accounts, HdAccountsConfig):
        return HdSignatories(accounts.hd_key)
    return AccountSignatories(accounts.hot_account.to_entry(), accounts.deposit_account.to_entry())


def _resolve_ledger(
    config: BaseXrpConfig,
    ledger: LedgerClient | None,
    ledger_factory: LedgerFactory | None,
) -> LedgerClient:
    if ledger is not None:
        return ledger
    if ledger_factory is None:
        raise ValidationError("Either a ledger client or a ledger_factory is required")
    server = config.resolved_server
    logger.info("Creating XRP ledger client for %s (%s)", server or "offline", config.network)
    return ledger_factory(server)


def create_payments(
    config: PaymentsConfig,
    *,
    ledger: LedgerClient | None = None,
    ledger_factory: LedgerFactory | None = None,
    metrics: PaymentsMetrics | None = None,
) -> RipplePayments:
    """Instantiate payments for ``config``'s account mode.

    ``ledger`` takes precedence; otherwise ``ledger_factory`` is called with
    the resolved server URL.
    """
    return RipplePayments(
        _resolve_ledger(config, ledger, ledger_factory),
        create_signatories(config.accounts),
        network_type=config.network,
        server=config.resolved_server,
        max_ledger_version_offset=config.max_ledger_version_offset,
        retry_delay=config.retry_delay,
        metrics=metrics,
    )


def create_balance_monitor(
    config: BalanceMonitorConfig,
    *,
    ledger: LedgerClient | None = None,
    ledger_factory: LedgerFactory | None = None,
    metrics: PaymentsMetrics | None = None,
) -> BalanceMonitor:
    return BalanceMonitor(
        _resolve_ledger(config, ledger, ledger_factory),
        network_type=config.network,
        retry_delay=config.retry_delay,
        metrics=metrics,
    )
