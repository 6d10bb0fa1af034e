"""Process-wide constants for XRP payments.

All values are immutable. Provenance is noted where a value is fixed by the
XRP Ledger protocol or by BIP44 rather than chosen here.
"""

from __future__ import annotations

import re

PACKAGE_NAME = "xrp-payments"

# 1 XRP = 1,000,000 drops
DECIMAL_PLACES = 6

# Base reserve in XRP that must stay on every funded account
MIN_BALANCE = 20

DEFAULT_MAX_LEDGER_VERSION_OFFSET = 100

NETWORK_SYMBOL = "XRP"

# ---------------------------------------------------------------------------
# Validation patterns
# ---------------------------------------------------------------------------

ADDRESS_REGEX = re.compile(r"^r[1-9A-HJ-NP-Za-km-z]{25,34}$")
EXTRA_ID_REGEX = re.compile(r"^[0-9]+$")
XPUB_REGEX = re.compile(r"^xpub[a-km-zA-HJ-NP-Z1-9]{100,108}$")
XPRV_REGEX = re.compile(r"^xprv[a-km-zA-HJ-NP-Z1-9]{100,108}$")

# ---------------------------------------------------------------------------
# Key derivation / address encoding
# ---------------------------------------------------------------------------

# BIP44 purpose 44', SLIP-44 coin type 144' (XRP), account 0'
DERIVATION_PATH = "m/44'/144'/0'"
DERIVATION_PATH_PARTS: tuple[str, ...] = tuple(DERIVATION_PATH.split("/")[1:])

# XRP Ledger base-58 dictionary (differs from Bitcoin's)
RIPPLE_B58_ALPHABET = b"rpshnaf39wBUDNEGHJKLM4PQRST7VWXYZ2bcdeCg65jkm8oFqi1tuvAxyz"
BITCOIN_B58_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

# Account ID type prefix
ADDRESS_TYPE_PREFIX = b"\x00"

# ---------------------------------------------------------------------------
# Ledger client
# ---------------------------------------------------------------------------

# Ledger client error names that mean "no such transaction in available history"
NOT_FOUND_ERRORS: tuple[str, ...] = ("MissingLedgerHistoryError", "NotFoundError")

# Engine result prefixes: tes = success, tec = claimed fee but failed
SUCCESS_RESULT_PREFIX = "tes"
CLAIMED_RESULT_PREFIX = "tec"

DEFAULT_MAINNET_SERVER = "wss://s1.ripple.com"
DEFAULT_TESTNET_SERVER = "wss://s.altnet.rippletest.net:51233"

# Page size used when walking transaction history
ACTIVITY_PAGE_SIZE = 10
