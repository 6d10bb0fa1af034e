"""Ledger boundary — client protocol, typed payloads and retrying transport."""

from xrp_payments.ledger.client import LedgerClient, TransactionListener
from xrp_payments.ledger.models import (
    AccountSettings,
    Balance,
    Instructions,
    LedgerHeader,
    LedgerTransaction,
    PaymentSpecification,
    PreparedTransaction,
    ServerInfo,
    SignResult,
    SubmitResult,
    TransactionQuery,
)
from xrp_payments.ledger.retry import RetryTransport

__all__ = [
    "AccountSettings",
    "Balance",
    "Instructions",
    "LedgerClient",
    "LedgerHeader",
    "LedgerTransaction",
    "PaymentSpecification",
    "PreparedTransaction",
    "RetryTransport",
    "ServerInfo",
    "SignResult",
    "SubmitResult",
    "TransactionListener",
    "TransactionQuery",
]
