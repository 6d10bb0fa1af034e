"""Payments settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``XRP_PAYMENTS_``, nested via ``__``)
2. YAML config file (``config_path`` or ``XRP_PAYMENTS_CONFIG_PATH``)
3. Defaults defined here

Accounts come in two mutually exclusive modes, selected by ``mode``::

    accounts:
      mode: hd
      hd_key: xpub6C...

    accounts:
      mode: account
      hot_account: {type: address, address: rHb9CJ...}
      deposit_account: {type: keypair, public_key: 03..., private_key: ""}
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Literal, Self

import yaml
from pydantic import AfterValidator, BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from xrp_payments.address import is_valid_address
from xrp_payments.constants import (
    DEFAULT_MAINNET_SERVER,
    DEFAULT_MAX_LEDGER_VERSION_OFFSET,
    DEFAULT_TESTNET_SERVER,
)
from xrp_payments.keys import is_valid_xprv, is_valid_xpub
from xrp_payments.ledger.retry import RETRY_DELAY
from xrp_payments.payments.models import KeyPair, NetworkType, Signatory

# ---------------------------------------------------------------------------
# Explicit account entries
# ---------------------------------------------------------------------------


def _check_address(value: str) -> str:
    if not is_valid_address(value):
        msg = f"Invalid XRP address: {value}"
        raise ValueError(msg)
    return value


XrpAddress = Annotated[str, AfterValidator(_check_address)]


class AddressAccountConfig(BaseModel):
    """Watch-only account given by its address."""

    type: Literal["address"] = "address"
    address: XrpAddress

    def to_entry(self) -> str:
        return self.address


class KeyPairAccountConfig(BaseModel):
    """Account given by its hex key pair; an empty private key is watch-only."""

    type: Literal["keypair"] = "keypair"
    public_key: str
    private_key: str = ""

    def to_entry(self) -> KeyPair:
        return KeyPair(public_key=self.public_key, private_key=self.private_key)


class SecretAccountConfig(BaseModel):
    """Account given by address plus ledger secret."""

    type: Literal["secret"] = "secret"
    address: XrpAddress
    secret: str = ""

    def to_entry(self) -> Signatory:
        return Signatory(address=self.address, secret=self.secret)


AccountConfig = Annotated[
    AddressAccountConfig | KeyPairAccountConfig | SecretAccountConfig,
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Account modes
# ---------------------------------------------------------------------------


class HdAccountsConfig(BaseModel):
    """Both signatories derived from one xprv or xpub."""

    mode: Literal["hd"] = "hd"
    hd_key: str

    @field_validator("hd_key")
    @classmethod
    def _check_hd_key(cls, value: str) -> str:
        if not (is_valid_xprv(value) or is_valid_xpub(value)):
            msg = "Account must be a valid xprv or xpub"
            raise ValueError(msg)
        return value


class ExplicitAccountsConfig(BaseModel):
    """Hot and deposit signatories supplied one by one."""

    mode: Literal["account"] = "account"
    hot_account: AccountConfig
    deposit_account: AccountConfig


AccountsConfig = Annotated[
    HdAccountsConfig | ExplicitAccountsConfig,
    Field(discriminator="mode"),
]


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {}


def resolve_server(network: NetworkType, server: str | None) -> str | None:
    """Pick the ledger server URL.

    ``""`` selects the default public server of ``network``; ``None``
    means offline (local signing only).
    """
    if server == "":
        return DEFAULT_TESTNET_SERVER if network == NetworkType.TESTNET else DEFAULT_MAINNET_SERVER
    return server


class BaseXrpConfig(BaseSettings):
    """Settings shared by payments and the balance monitor."""

    model_config = SettingsConfigDict(
        env_prefix="XRP_PAYMENTS_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    config_path: str = ""
    network: NetworkType = NetworkType.MAINNET
    server: str | None = Field(
        default="",
        description="Ledger websocket URL; empty for the network default, null for offline",
    )
    retry_delay: float = Field(default=RETRY_DELAY, ge=0)

    @property
    def resolved_server(self) -> str | None:
        return resolve_server(self.network, self.server)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        for key, val in yaml_data.items():
            if key not in values:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct the config loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))


class PaymentsConfig(BaseXrpConfig):
    """Configuration of a payments account."""

    max_ledger_version_offset: int = Field(default=DEFAULT_MAX_LEDGER_VERSION_OFFSET, gt=0)
    accounts: AccountsConfig


class BalanceMonitorConfig(BaseXrpConfig):
    """Configuration of a standalone balance monitor."""

    model_config = SettingsConfigDict(
        env_prefix="XRP_BALANCE_MONITOR_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )
