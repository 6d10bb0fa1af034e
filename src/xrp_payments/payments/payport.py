"""Payport resolution — indices, addresses and tagged sub-accounts.

Index 0 is the hot address, index 1 the deposit address, and any index
>= 2 is the deposit address tagged with that index as its extraId.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from xrp_payments.address import assert_valid_address, assert_valid_extra_id_or_none
from xrp_payments.errors import ValidationError
from xrp_payments.errors.definitions import CODE_INVALID_INDEX
from xrp_payments.payments.models import FromTo, Payport

if TYPE_CHECKING:
    from xrp_payments.payments.accounts import SignatorySource

PayportLike = int | str | Payport


class PayportResolver:
    """Maps indices and user-supplied destinations onto validated payports."""

    def __init__(self, signatories: SignatorySource) -> None:
        self._signatories = signatories

    @property
    def hot_address(self) -> str:
        return self._signatories.hot_signatory.address

    @property
    def deposit_address(self) -> str:
        return self._signatories.deposit_signatory.address

    def get_payport(self, index: int) -> Payport:
        """Return the payport for an account index.

        Raises:
            ValidationError: If ``index`` is negative.
        """
        if index < 0:
            raise ValidationError(f"Invalid payport index {index}", code=CODE_INVALID_INDEX)
        if index == 0:
            return Payport(self.hot_address)
        if index == 1:
            return Payport(self.deposit_address)
        return Payport(self.deposit_address, str(index))

    def resolve_payport(self, payport: PayportLike) -> Payport:
        """Resolve an index, address string or Payport into a validated Payport."""
        if isinstance(payport, int):
            return self.get_payport(payport)
        if isinstance(payport, str):
            assert_valid_address(payport)
            return Payport(payport)
        assert_valid_address(payport.address)
        assert_valid_extra_id_or_none(payport.extra_id)
        return payport

    def resolve_from_to(self, from_index: int, to: PayportLike) -> FromTo:
        from_payport = self.get_payport(from_index)
        to_payport = self.resolve_payport(to)
        return FromTo(
            from_index=from_index,
            from_payport=from_payport,
            to_index=to if isinstance(to, int) else None,
            to_payport=to_payport,
        )

    def resolve_index_from_adjustment(self, address: str, tag: int | str | None) -> int | None:
        """Map a ledger-side (address, tag) back to an account index.

        Returns 0 for the hot address, the tag (or 1 when untagged) for the
        deposit address, and None for any other address.
        """
        if address == self.hot_address:
            return 0
        if address == self.deposit_address:
            return int(tag) if tag else 1
        return None
