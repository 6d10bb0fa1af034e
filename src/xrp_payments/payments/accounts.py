"""Signatory sources — where the hot and deposit signatories come from.

Two variants:

- :class:`HdSignatories` derives both from one extended key (xprv or xpub).
- :class:`AccountSignatories` takes each one explicitly as an address, a
  key pair, or an address + secret.

Either may be secretless, in which case the payments account is read-only.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from xrp_payments.address import is_valid_address, public_key_to_address
from xrp_payments.errors import ValidationError
from xrp_payments.errors.definitions import CODE_INVALID_INDEX
from xrp_payments.keys import derive_signatory, is_valid_xprv, is_valid_xpub, xprv_to_xpub
from xrp_payments.payments.models import KeyPair, Signatory

logger = logging.getLogger(__name__)

AccountEntry = str | KeyPair | Signatory


class SignatorySource(ABC):
    """Supplies the hot (index 0) and deposit (index 1) signatories."""

    @property
    @abstractmethod
    def hot_signatory(self) -> Signatory: ...

    @property
    @abstractmethod
    def deposit_signatory(self) -> Signatory: ...

    @abstractmethod
    def get_account_ids(self) -> list[str]: ...

    @abstractmethod
    def get_account_id(self, index: int) -> str: ...

    @abstractmethod
    def public_config(self) -> dict[str, Any]:
        """Return the account part of the config with secrets removed."""

    def signatories(self) -> tuple[Signatory, Signatory]:
        return self.hot_signatory, self.deposit_signatory

    def is_read_only(self) -> bool:
        """True when either signatory lacks secret material."""
        return not all(s.can_sign for s in self.signatories())

    def signatory_for(self, address: str) -> Signatory | None:
        for signatory in self.signatories():
            if signatory.address == address:
                return signatory
        return None


# ---------------------------------------------------------------------------
# HD
# ---------------------------------------------------------------------------


class HdSignatories(SignatorySource):
    """Hot and deposit signatories derived from one extended key."""

    def __init__(self, hd_key: str) -> None:
        if is_valid_xprv(hd_key):
            self._xprv: str | None = hd_key
            self._xpub = xprv_to_xpub(hd_key)
        elif is_valid_xpub(hd_key):
            self._xprv = None
            self._xpub = hd_key
        else:
            raise ValidationError("Account must be a valid xprv or xpub")
        self._hot = derive_signatory(hd_key, 0)
        self._deposit = derive_signatory(hd_key, 1)
        logger.debug(
            "Derived HD signatories hot=%s deposit=%s", self._hot.address, self._deposit.address
        )

    @property
    def xpub(self) -> str:
        return self._xpub

    @property
    def hot_signatory(self) -> Signatory:
        return self._hot

    @property
    def deposit_signatory(self) -> Signatory:
        return self._deposit

    def get_account_ids(self) -> list[str]:
        return [self._xpub]

    def get_account_id(self, index: int) -> str:
        return self._xpub

    def public_config(self) -> dict[str, Any]:
        return {"hd_key": self._xpub}


# ---------------------------------------------------------------------------
# Explicit accounts
# ---------------------------------------------------------------------------


def account_entry_to_signatory(entry: AccountEntry) -> Signatory:
    """Normalise one explicit account entry into a :class:`Signatory`.

    Raises:
        ValidationError: If the entry is not a valid address, key pair or
            address + secret.
    """
    if isinstance(entry, KeyPair):
        return Signatory(address=public_key_to_address(entry.public_key), secret=entry)
    if isinstance(entry, Signatory):
        if not is_valid_address(entry.address):
            raise ValidationError(f"Invalid XRP address in account config: {entry.address}")
        return entry
    if is_valid_address(entry):
        return Signatory(address=entry, secret="")
    raise ValidationError("Invalid ripple account config provided to ripple payments")


class AccountSignatories(SignatorySource):
    """Hot and deposit signatories supplied directly."""

    def __init__(self, hot_account: AccountEntry, deposit_account: AccountEntry) -> None:
        self._hot = account_entry_to_signatory(hot_account)
        self._deposit = account_entry_to_signatory(deposit_account)

    @property
    def hot_signatory(self) -> Signatory:
        return self._hot

    @property
    def deposit_signatory(self) -> Signatory:
        return self._deposit

    def get_account_ids(self) -> list[str]:
        return [self._hot.address, self._deposit.address]

    def get_account_id(self, index: int) -> str:
        if index < 0:
            raise ValidationError(
                f"Invalid ripple payments accountId index {index}", code=CODE_INVALID_INDEX
            )
        if index == 0:
            return self._hot.address
        return self._deposit.address

    def public_config(self) -> dict[str, Any]:
        return {"hot_account": self._hot.address, "deposit_account": self._deposit.address}
