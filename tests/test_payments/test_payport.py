"""Tests for payport resolution — payments/payport.py."""

from __future__ import annotations

import pytest

from xrp_payments.errors import ValidationError
from xrp_payments.payments.accounts import AccountSignatories
from xrp_payments.payments.models import Payport
from xrp_payments.payments.payport import PayportResolver

_HOT = "rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh"
_DEPOSIT = "rPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe"
_EXTERNAL = "rEb8TK3gBgk5auZkwc6sHnwrGVJH8DuaLh"


@pytest.fixture
def resolver() -> PayportResolver:
    return PayportResolver(AccountSignatories(_HOT, _DEPOSIT))


class TestGetPayport:
    def test_hot(self, resolver) -> None:
        assert resolver.get_payport(0) == Payport(_HOT)

    def test_deposit(self, resolver) -> None:
        assert resolver.get_payport(1) == Payport(_DEPOSIT)

    def test_sub_account_tagged_with_index(self, resolver) -> None:
        payport = resolver.get_payport(42)
        assert payport == Payport(_DEPOSIT, "42")
        assert str(payport) == f"{_DEPOSIT}:42"

    def test_negative_index(self, resolver) -> None:
        with pytest.raises(ValidationError) as exc_info:
            resolver.get_payport(-1)
        assert exc_info.value.code == "invalid-index"


class TestResolvePayport:
    def test_index(self, resolver) -> None:
        assert resolver.resolve_payport(3) == Payport(_DEPOSIT, "3")

    def test_address_string(self, resolver) -> None:
        assert resolver.resolve_payport(_EXTERNAL) == Payport(_EXTERNAL)

    def test_invalid_address_string(self, resolver) -> None:
        with pytest.raises(ValidationError, match="Invalid XRP address"):
            resolver.resolve_payport("not-an-address")

    def test_payport_with_extra_id(self, resolver) -> None:
        payport = Payport(_EXTERNAL, "1234")
        assert resolver.resolve_payport(payport) is payport

    def test_payport_with_bad_extra_id(self, resolver) -> None:
        with pytest.raises(ValidationError) as exc_info:
            resolver.resolve_payport(Payport(_EXTERNAL, "12ab"))
        assert exc_info.value.code == "invalid-extra-id"


class TestResolveFromTo:
    def test_index_destination_records_to_index(self, resolver) -> None:
        from_to = resolver.resolve_from_to(0, 5)
        assert from_to.from_address == _HOT
        assert from_to.from_extra_id is None
        assert from_to.to_index == 5
        assert from_to.to_address == _DEPOSIT
        assert from_to.to_extra_id == "5"

    def test_external_destination_has_no_index(self, resolver) -> None:
        from_to = resolver.resolve_from_to(7, Payport(_EXTERNAL, "99"))
        assert from_to.from_payport == Payport(_DEPOSIT, "7")
        assert from_to.to_index is None
        assert from_to.to_extra_id == "99"


class TestResolveIndexFromAdjustment:
    @pytest.mark.parametrize(
        ("address", "tag", "expected"),
        [
            (_HOT, None, 0),
            (_HOT, 55, 0),
            (_DEPOSIT, None, 1),
            (_DEPOSIT, 55, 55),
            (_DEPOSIT, "12", 12),
            (_EXTERNAL, 55, None),
        ],
    )
    def test_mapping(self, resolver, address, tag, expected) -> None:
        assert resolver.resolve_index_from_adjustment(address, tag) == expected
