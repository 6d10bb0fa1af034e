"""xrp-payments — XRP Ledger payments: keys, addresses, transactions, balance activity."""

from xrp_payments.config.settings import BalanceMonitorConfig, PaymentsConfig
from xrp_payments.keys import derive_signatory, generate_new_keys, xprv_to_xpub
from xrp_payments.monitor.balance_monitor import BalanceMonitor, Subscription
from xrp_payments.payments.accounts import AccountSignatories, HdSignatories, SignatorySource
from xrp_payments.payments.factory import create_balance_monitor, create_payments
from xrp_payments.payments.models import (
    BalanceActivity,
    BalanceActivityType,
    CreateTransactionOptions,
    FeeLevel,
    FeeRateType,
    KeyPair,
    NetworkType,
    Payport,
    Signatory,
    TransactionStatus,
)
from xrp_payments.payments.service import RipplePayments
from xrp_payments.payments.utils import PaymentsUtils

__version__ = "0.1.0"

__all__ = [
    "AccountSignatories",
    "BalanceActivity",
    "BalanceActivityType",
    "BalanceMonitor",
    "BalanceMonitorConfig",
    "CreateTransactionOptions",
    "FeeLevel",
    "FeeRateType",
    "HdSignatories",
    "KeyPair",
    "NetworkType",
    "PaymentsConfig",
    "PaymentsUtils",
    "RipplePayments",
    "Signatory",
    "SignatorySource",
    "Subscription",
    "TransactionStatus",
    "create_balance_monitor",
    "create_payments",
    "derive_signatory",
    "generate_new_keys",
    "xprv_to_xpub",
]
