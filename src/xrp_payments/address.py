"""XRP address encoding and payport validation.

Classic XRP addresses are Base58Check over the XRP Ledger dictionary of a
one-byte type prefix (``0x00``) followed by the 20-byte account ID.
"""

from __future__ import annotations

from xrp_payments.codec import base58check_decode, base58check_encode, hash160
from xrp_payments.constants import (
    ADDRESS_REGEX,
    ADDRESS_TYPE_PREFIX,
    EXTRA_ID_REGEX,
    RIPPLE_B58_ALPHABET,
)
from xrp_payments.errors import ValidationError
from xrp_payments.errors.definitions import CODE_INVALID_ADDRESS, CODE_INVALID_EXTRA_ID

_PAYLOAD_LENGTH = 21


def encode_address(payload: bytes) -> str:
    """Encode a versioned payload (prefix + account ID) as an XRP address."""
    return base58check_encode(payload, RIPPLE_B58_ALPHABET)


def decode_address(address: str) -> bytes:
    """Decode an XRP address back to its versioned payload.

    Raises:
        ValueError: On an unknown character or checksum mismatch.
    """
    return base58check_decode(address, RIPPLE_B58_ALPHABET)


def public_key_to_address(pubkey_hex: str) -> str:
    """Derive the classic address for a hex-encoded public key.

    Args:
        pubkey_hex: 33-byte compressed (or ed25519-prefixed) public key in hex.

    Returns:
        ``r``-prefixed address string.
    """
    account_id = hash160(bytes.fromhex(pubkey_hex))
    return encode_address(ADDRESS_TYPE_PREFIX + account_id)


def address_to_account_id(address: str) -> bytes:
    """Extract the 20-byte account ID from an address.

    Raises:
        ValueError: If the address does not decode to a type-0 payload.
    """
    payload = decode_address(address)
    if len(payload) != _PAYLOAD_LENGTH or payload[:1] != ADDRESS_TYPE_PREFIX:
        msg = f"Invalid address payload: {payload.hex()}"
        raise ValueError(msg)
    return payload[1:]


# ---------------------------------------------------------------------------
# Pattern validation
# ---------------------------------------------------------------------------


def is_valid_address(address: object) -> bool:
    return isinstance(address, str) and ADDRESS_REGEX.match(address) is not None


def is_valid_extra_id(extra_id: object) -> bool:
    return isinstance(extra_id, str) and EXTRA_ID_REGEX.match(extra_id) is not None


def assert_valid_address(address: object) -> None:
    if not is_valid_address(address):
        raise ValidationError(f"Invalid XRP address: {address}", code=CODE_INVALID_ADDRESS)


def assert_valid_extra_id(extra_id: object) -> None:
    if not is_valid_extra_id(extra_id):
        raise ValidationError(f"Invalid XRP extraId: {extra_id}", code=CODE_INVALID_EXTRA_ID)


def assert_valid_extra_id_or_none(extra_id: object) -> None:
    if extra_id is not None:
        assert_valid_extra_id(extra_id)
