"""Hashing and Base58 helpers shared by address and extended-key encoding."""

from __future__ import annotations

import hashlib

from xrp_payments.constants import BITCOIN_B58_ALPHABET

# ---------------------------------------------------------------------------
# Hashes
# ---------------------------------------------------------------------------


def sha256(data: bytes) -> bytes:
    """Single SHA-256 hash."""
    return hashlib.sha256(data).digest()


def sha256d(data: bytes) -> bytes:
    """Double SHA-256 hash, used for Base58Check checksums."""
    return sha256(sha256(data))


def ripemd160(data: bytes) -> bytes:
    h = hashlib.new("ripemd160")
    h.update(data)
    return h.digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD-160(SHA-256(data)); for a public key this is the XRP account ID."""
    return ripemd160(sha256(data))


# ---------------------------------------------------------------------------
# Base58 / Base58Check
# ---------------------------------------------------------------------------


def base58_encode(payload: bytes, alphabet: bytes = BITCOIN_B58_ALPHABET) -> str:
    """Encode raw bytes to Base58 (no checksum) over ``alphabet``."""
    n = int.from_bytes(payload, "big")
    result: list[int] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(alphabet[remainder])
    # Each leading zero byte becomes one zero digit
    for byte in payload:
        if byte == 0:
            result.append(alphabet[0])
        else:
            break
    return bytes(reversed(result)).decode("ascii")


def base58_decode(s: str, alphabet: bytes = BITCOIN_B58_ALPHABET) -> bytes:
    """Decode a Base58 string to raw bytes (no checksum).

    Raises:
        ValueError: If ``s`` contains a character outside ``alphabet``.
    """
    n = 0
    for char in s:
        digit = alphabet.find(char.encode("ascii", errors="replace"))
        if digit < 0:
            msg = f"Invalid base58 character {char!r}"
            raise ValueError(msg)
        n = n * 58 + digit
    result = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    zero_digit = chr(alphabet[0])
    pad_count = len(s) - len(s.lstrip(zero_digit))
    return b"\x00" * pad_count + result


def base58check_encode(payload: bytes, alphabet: bytes = BITCOIN_B58_ALPHABET) -> str:
    """Encode bytes with a 4-byte SHA256d checksum (Base58Check)."""
    return base58_encode(payload + sha256d(payload)[:4], alphabet)


def base58check_decode(s: str, alphabet: bytes = BITCOIN_B58_ALPHABET) -> bytes:
    """Decode a Base58Check string, verifying the checksum.

    Raises:
        ValueError: If the string is too short or the checksum is invalid.
    """
    raw = base58_decode(s, alphabet)
    if len(raw) < 4:
        msg = "Base58Check string too short"
        raise ValueError(msg)
    payload, checksum = raw[:-4], raw[-4:]
    if checksum != sha256d(payload)[:4]:
        msg = "Base58Check checksum mismatch"
        raise ValueError(msg)
    return payload
