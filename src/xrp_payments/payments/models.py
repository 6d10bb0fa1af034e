"""Payments data models — signatories, payports, fee options, transactions.

Value records passed between the resolver, builder, signer and monitor.
Ledger payloads are kept opaque in ``data``.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class NetworkType(enum.StrEnum):
    """XRP Ledger network."""

    MAINNET = "mainnet"
    TESTNET = "testnet"


class FeeLevel(enum.StrEnum):
    """Requested fee tier; CUSTOM means an explicit rate is supplied."""

    CUSTOM = "custom"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FeeRateType(enum.StrEnum):
    """Denomination of an explicit fee rate."""

    MAIN = "main"
    BASE = "base"
    BASE_PER_BYTE = "base/byte"


class TransactionStatus(enum.StrEnum):
    """Lifecycle status of a payments transaction."""

    UNSIGNED = "unsigned"
    SIGNED = "signed"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class BalanceActivityType(enum.StrEnum):
    """Direction of a balance change."""

    IN = "in"
    OUT = "out"


# ---------------------------------------------------------------------------
# Keys and signatories
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyPair:
    """Hex-encoded key pair; an empty private key means watch-only."""

    public_key: str
    private_key: str = ""


@dataclass(frozen=True)
class Signatory:
    """An address plus whatever secret material can sign for it.

    ``secret`` is a :class:`KeyPair`, a ledger secret string, or ``""``.
    """

    address: str
    secret: KeyPair | str = ""

    @property
    def can_sign(self) -> bool:
        if isinstance(self.secret, KeyPair):
            return bool(self.secret.private_key)
        return bool(self.secret)


# ---------------------------------------------------------------------------
# Payports
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Payport:
    """An address with an optional numeric destination tag."""

    address: str
    extra_id: str | None = None

    def __str__(self) -> str:
        if self.extra_id is None:
            return self.address
        return f"{self.address}:{self.extra_id}"


@dataclass(frozen=True)
class FromTo:
    """Resolved source and destination of a transaction."""

    from_index: int
    from_payport: Payport
    to_index: int | None
    to_payport: Payport

    @property
    def from_address(self) -> str:
        return self.from_payport.address

    @property
    def from_extra_id(self) -> str | None:
        return self.from_payport.extra_id

    @property
    def to_address(self) -> str:
        return self.to_payport.address

    @property
    def to_extra_id(self) -> str | None:
        return self.to_payport.extra_id


# ---------------------------------------------------------------------------
# Fees and options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResolvedFeeOption:
    """A fee request resolved to concrete XRP and drops amounts."""

    target_fee_level: FeeLevel
    target_fee_rate: str
    target_fee_rate_type: FeeRateType
    fee_main: str
    fee_base: str


@dataclass
class CreateTransactionOptions:
    """Options accepted by transaction and sweep creation.

    Attributes:
        fee_level: Fee tier; defaults to MEDIUM when no custom rate is given.
        fee_rate: Explicit fee rate (custom level only).
        fee_rate_type: Denomination of ``fee_rate``.
        max_ledger_version_offset: Ledgers until the prepared tx expires.
        sequence: Explicit account sequence to use.
        payport_balance: Caller-tracked balance of a sub-account payport (XRP).
    """

    fee_level: FeeLevel | None = None
    fee_rate: str | None = None
    fee_rate_type: FeeRateType | str | None = None
    max_ledger_version_offset: int | None = None
    sequence: int | None = None
    payport_balance: str | None = None


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass
class UnsignedTransaction:
    """A prepared payment awaiting a signature."""

    from_index: int
    from_address: str
    from_extra_id: str | None
    to_index: int | None
    to_address: str
    to_extra_id: str | None
    amount: str
    fee: str
    target_fee_level: FeeLevel
    target_fee_rate: str
    target_fee_rate_type: FeeRateType
    status: TransactionStatus = TransactionStatus.UNSIGNED
    id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SignedTransaction(UnsignedTransaction):
    """A payment signed with the source signatory's secret."""

    status: TransactionStatus = TransactionStatus.SIGNED


@dataclass(frozen=True)
class BroadcastResult:
    """Outcome of submitting a signed transaction."""

    id: str
    rebroadcast: bool
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class TransactionInfo:
    """A confirmed (or failed) payment as recorded on the ledger."""

    id: str
    from_index: int | None
    from_address: str
    from_extra_id: str | None
    to_index: int | None
    to_address: str
    to_extra_id: str | None
    amount: str
    fee: str
    status: TransactionStatus
    confirmation_id: str
    confirmation_number: int
    confirmation_timestamp: datetime | None
    confirmations: int
    is_executed: bool
    is_confirmed: bool = True
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BalanceResult:
    """Spendable balance of an address (reserve already netted out)."""

    confirmed_balance: str
    unconfirmed_balance: str
    sweepable: bool


@dataclass(frozen=True)
class BalanceActivity:
    """A single balance-affecting event for one address.

    ``activity_sequence`` sorts lexicographically into ledger order with
    outgoing legs before incoming legs of the same transaction.
    """

    type: BalanceActivityType
    network_type: NetworkType
    network_symbol: str
    asset_symbol: str
    address: str
    extra_id: str | None
    amount: str
    external_id: str
    activity_sequence: str
    confirmation_id: str
    confirmation_number: int
    timestamp: datetime | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
