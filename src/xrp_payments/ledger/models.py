"""Ledger client data models — balances, ledgers, transactions, submissions.

Typed views of what the XRP Ledger client returns. ``from_dict`` accepts the
camelCase shapes produced by common XRP client libraries as well as
snake_case keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from xrp_payments.constants import SUCCESS_RESULT_PREFIX

# ---------------------------------------------------------------------------
# Account state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Balance:
    """One currency balance line of an account."""

    currency: str
    value: str
    counterparty: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Balance:
        return cls(
            currency=data.get("currency", ""),
            value=str(data.get("value", "0")),
            counterparty=data.get("counterparty"),
        )


@dataclass(frozen=True)
class AccountSettings:
    """Account flags relevant to payments."""

    require_destination_tag: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccountSettings:
        return cls(
            require_destination_tag=bool(
                data.get("requireDestinationTag", data.get("require_destination_tag", False))
            )
        )


@dataclass(frozen=True)
class ServerInfo:
    """Subset of server_info: the range of ledgers the server holds."""

    complete_ledgers: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServerInfo:
        return cls(complete_ledgers=data.get("completeLedgers", data.get("complete_ledgers", "")))

    def ledger_range(self) -> tuple[int, int]:
        """Return the most recent contiguous (first, last) ledger range.

        ``complete_ledgers`` looks like ``"32570-6595042"`` or, with gaps,
        ``"100-200,300-6595042"``.
        """
        last_range = self.complete_ledgers.strip().split(",")[-1]
        first, _, last = last_range.partition("-")
        return int(first), int(last or first)


@dataclass(frozen=True)
class LedgerHeader:
    """A closed ledger's identity and close time."""

    ledger_version: int
    ledger_hash: str
    close_time: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LedgerHeader:
        close_time = data.get("closeTime", data.get("close_time"))
        if isinstance(close_time, str):
            close_time = datetime.fromisoformat(close_time)
        return cls(
            ledger_version=int(data.get("ledgerVersion", data.get("ledger_version", 0))),
            ledger_hash=data.get("ledgerHash", data.get("ledger_hash", "")),
            close_time=close_time,
        )


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Amount:
    currency: str
    value: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Amount:
        return cls(currency=data.get("currency", ""), value=str(data.get("value", "0")))

    def to_dict(self) -> dict[str, Any]:
        return {"currency": self.currency, "value": self.value}


@dataclass(frozen=True)
class PaymentParty:
    """Source or destination side of a payment specification."""

    address: str
    tag: int | None = None
    amount: Amount | None = None
    max_amount: Amount | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PaymentParty:
        amount = data.get("amount")
        max_amount = data.get("maxAmount", data.get("max_amount"))
        return cls(
            address=data.get("address", ""),
            tag=data.get("tag"),
            amount=Amount.from_dict(amount) if amount else None,
            max_amount=Amount.from_dict(max_amount) if max_amount else None,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"address": self.address}
        if self.tag is not None:
            out["tag"] = self.tag
        if self.amount is not None:
            out["amount"] = self.amount.to_dict()
        if self.max_amount is not None:
            out["maxAmount"] = self.max_amount.to_dict()
        return out


@dataclass(frozen=True)
class PaymentSpecification:
    source: PaymentParty
    destination: PaymentParty

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PaymentSpecification:
        return cls(
            source=PaymentParty.from_dict(data.get("source", {})),
            destination=PaymentParty.from_dict(data.get("destination", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source.to_dict(), "destination": self.destination.to_dict()}


@dataclass(frozen=True)
class TransactionOutcome:
    """Result of an applied transaction.

    Attributes:
        result: Engine result code (``tesSUCCESS``, ``tecUNFUNDED``...).
        fee: Fee paid in XRP.
        balance_changes: Per-address list of signed balance deltas.
        ledger_version: Ledger the transaction was applied in.
        index_in_ledger: Position within that ledger.
        timestamp: Close time of that ledger, when the client supplies it.
    """

    result: str
    fee: str
    ledger_version: int
    index_in_ledger: int
    balance_changes: dict[str, list[Balance]] = field(default_factory=dict)
    timestamp: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransactionOutcome:
        raw_changes = data.get("balanceChanges", data.get("balance_changes", {}))
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(
            result=data.get("result", ""),
            fee=str(data.get("fee", "0")),
            ledger_version=int(data.get("ledgerVersion", data.get("ledger_version", 0))),
            index_in_ledger=int(data.get("indexInLedger", data.get("index_in_ledger", 0))),
            balance_changes={
                address: [Balance.from_dict(b) for b in changes]
                for address, changes in raw_changes.items()
            },
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class LedgerTransaction:
    """A transaction as returned by history queries and live pushes.

    ``specification`` is parsed only for payments; ``raw`` keeps the
    client's original payload.
    """

    id: str
    type: str
    address: str = ""
    specification: PaymentSpecification | None = None
    outcome: TransactionOutcome | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_payment(self) -> bool:
        return self.type == "payment"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LedgerTransaction:
        tx_type = data.get("type", "")
        spec = data.get("specification")
        outcome = data.get("outcome")
        return cls(
            id=data.get("id", ""),
            type=tx_type,
            address=data.get("address", ""),
            specification=(
                PaymentSpecification.from_dict(spec) if spec and tx_type == "payment" else None
            ),
            outcome=TransactionOutcome.from_dict(outcome) if outcome else None,
            raw=data,
        )


@dataclass(frozen=True)
class TransactionQuery:
    """Options for an account transaction history query."""

    min_ledger_version: int | None = None
    max_ledger_version: int | None = None
    start: str | None = None
    limit: int = 10
    earliest_first: bool = True
    exclude_failures: bool = False


# ---------------------------------------------------------------------------
# Prepare / sign / submit
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Instructions:
    max_ledger_version_offset: int
    sequence: int | None = None


@dataclass(frozen=True)
class PreparedTransaction:
    """Unsigned transaction JSON plus the instructions the client filled in."""

    tx_json: str
    instructions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreparedTransaction:
        return cls(
            tx_json=data.get("txJSON", data.get("tx_json", "")),
            instructions=data.get("instructions", {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"txJSON": self.tx_json, "instructions": self.instructions}


@dataclass(frozen=True)
class SignResult:
    id: str
    signed_transaction: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignResult:
        return cls(
            id=data.get("id", ""),
            signed_transaction=data.get(
                "signedTransaction", data.get("signed_transaction", "")
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "signedTransaction": self.signed_transaction}


@dataclass(frozen=True)
class SubmitResult:
    """Engine result of a submission."""

    result_code: str
    result_message: str = ""
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.result_code.startswith(SUCCESS_RESULT_PREFIX)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubmitResult:
        return cls(
            result_code=data.get("engine_result", data.get("resultCode", "")) or "",
            result_message=data.get(
                "engine_result_message", data.get("resultMessage", "")
            ) or "",
            raw=data,
        )
