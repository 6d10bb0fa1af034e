"""Tests for config-driven construction — payments/factory.py."""

from __future__ import annotations

import pytest

from xrp_payments.config import BalanceMonitorConfig, PaymentsConfig
from xrp_payments.constants import DEFAULT_TESTNET_SERVER
from xrp_payments.errors import ValidationError
from xrp_payments.keys import derive_signatory
from xrp_payments.monitor import BalanceMonitor
from xrp_payments.payments.accounts import AccountSignatories, HdSignatories
from xrp_payments.payments.factory import (
    create_balance_monitor,
    create_payments,
    create_signatories,
)
from xrp_payments.payments.models import NetworkType, Signatory

_XPRV = (
    "xprv9s21ZrQH143K3QTDL4LXw2F7HEK3wJUD2nW2nRk4stbPy6cq3jPPqjiChkVvvNKmPG"
    "JxWUtg6LnF5kejMRNNU3TGtRBeJgk33yuGBxrMPHi"
)
_HOT = "rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh"
_DEPOSIT = "rPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe"

_HD_ACCOUNTS = {"mode": "hd", "hd_key": _XPRV}
_EXPLICIT_ACCOUNTS = {
    "mode": "account",
    "hot_account": {"type": "secret", "address": _HOT, "secret": "sHOT"},
    "deposit_account": {"type": "address", "address": _DEPOSIT},
}


class TestCreateSignatories:
    def test_hd(self) -> None:
        config = PaymentsConfig(accounts=_HD_ACCOUNTS)
        signatories = create_signatories(config.accounts)
        assert isinstance(signatories, HdSignatories)
        assert signatories.hot_signatory == derive_signatory(_XPRV, 0)

    def test_explicit(self) -> None:
        config = PaymentsConfig(accounts=_EXPLICIT_ACCOUNTS)
        signatories = create_signatories(config.accounts)
        assert isinstance(signatories, AccountSignatories)
        assert signatories.hot_signatory == Signatory(_HOT, "sHOT")
        assert signatories.is_read_only()


class TestCreatePayments:
    def test_with_ledger(self, fake_ledger) -> None:
        config = PaymentsConfig(
            accounts=_EXPLICIT_ACCOUNTS,
            network=NetworkType.TESTNET,
            max_ledger_version_offset=30,
            retry_delay=0,
        )
        payments = create_payments(config, ledger=fake_ledger)
        assert payments.ledger is fake_ledger
        assert payments.network_type == NetworkType.TESTNET
        assert payments.get_public_config() == {
            "network": "testnet",
            "server": DEFAULT_TESTNET_SERVER,
            "max_ledger_version_offset": 30,
            "hot_account": _HOT,
            "deposit_account": _DEPOSIT,
        }

    def test_factory_receives_resolved_server(self, fake_ledger) -> None:
        servers = []

        def factory(server):
            servers.append(server)
            return fake_ledger

        config = PaymentsConfig(accounts=_HD_ACCOUNTS, server="wss://node.test")
        payments = create_payments(config, ledger_factory=factory)
        assert servers == ["wss://node.test"]
        assert payments.ledger is fake_ledger

    def test_offline_server(self, fake_ledger) -> None:
        servers = []
        config = PaymentsConfig(accounts=_HD_ACCOUNTS, server=None)
        create_payments(config, ledger_factory=lambda s: servers.append(s) or fake_ledger)
        assert servers == [None]

    def test_ledger_wins_over_factory(self, fake_ledger) -> None:
        config = PaymentsConfig(accounts=_HD_ACCOUNTS)

        def factory(server):
            raise AssertionError("factory should not be called")

        assert create_payments(config, ledger=fake_ledger, ledger_factory=factory).ledger is (
            fake_ledger
        )

    def test_no_ledger(self) -> None:
        with pytest.raises(ValidationError, match="ledger"):
            create_payments(PaymentsConfig(accounts=_HD_ACCOUNTS))


class TestCreateBalanceMonitor:
    def test_with_ledger(self, fake_ledger) -> None:
        config = BalanceMonitorConfig(network=NetworkType.TESTNET)
        monitor = create_balance_monitor(config, ledger=fake_ledger)
        assert isinstance(monitor, BalanceMonitor)
        assert monitor.network_type == NetworkType.TESTNET

    def test_factory(self, fake_ledger) -> None:
        servers = []
        config = BalanceMonitorConfig(network=NetworkType.TESTNET)
        create_balance_monitor(config, ledger_factory=lambda s: servers.append(s) or fake_ledger)
        assert servers == [DEFAULT_TESTNET_SERVER]
