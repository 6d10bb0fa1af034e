"""Configuration — environment and YAML backed settings."""

from xrp_payments.config.settings import (
    AccountsConfig,
    BalanceMonitorConfig,
    ExplicitAccountsConfig,
    HdAccountsConfig,
    PaymentsConfig,
    resolve_server,
)

__all__ = [
    "AccountsConfig",
    "BalanceMonitorConfig",
    "ExplicitAccountsConfig",
    "HdAccountsConfig",
    "PaymentsConfig",
    "resolve_server",
]
