"""BIP32 HD key derivation for XRP signatories.

Implements the parts of BIP32 the payments account needs:
- Extended key serialization / deserialization (xpub/xprv)
- Child key derivation (hardened & normal), neutering
- Signatory derivation along ``m/44'/144'/0'/0/<index>``
- Fixed-width hex rendering of public/private keys
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import struct
from dataclasses import dataclass
from typing import Self

from ecdsa import SECP256k1, SigningKey
from ecdsa.ellipticcurve import INFINITY, Point, PointJacobi

from xrp_payments.address import public_key_to_address
from xrp_payments.codec import base58check_decode, base58check_encode, hash160
from xrp_payments.constants import (
    DERIVATION_PATH_PARTS,
    XPRV_REGEX,
    XPUB_REGEX,
)
from xrp_payments.errors import KeyDerivationError, ValidationError
from xrp_payments.payments.models import KeyPair, Signatory

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_CURVE = SECP256k1
_CURVE_ORDER = _CURVE.order
_CURVE_GEN = _CURVE.generator

# BIP32 version bytes (mainnet)
_XPUB_VERSION = b"\x04\x88\xb2\x1e"
_XPRV_VERSION = b"\x04\x88\xad\xe4"

_MASTER_HMAC_KEY = b"Bitcoin seed"

_HARDENED = 0x80000000

_SEED_BYTES = 32


# ---------------------------------------------------------------------------
# EC helpers
# ---------------------------------------------------------------------------


def private_key_to_public_key(privkey_bytes: bytes) -> bytes:
    """Derive the 33-byte compressed public key from a 32-byte private key."""
    vk = SigningKey.from_string(privkey_bytes, curve=_CURVE).get_verifying_key()
    return vk.to_string("compressed")


def _pubkey_to_point(compressed: bytes) -> PointJacobi:
    """Lift a compressed SEC1 public key back onto secp256k1."""
    if len(compressed) != 33 or compressed[0] not in (0x02, 0x03):
        msg = f"Invalid compressed public key: {compressed.hex()}"
        raise KeyDerivationError(msg)
    x = int.from_bytes(compressed[1:], "big")
    p = _CURVE.curve.p()
    # p % 4 == 3, so the square root is a single exponentiation
    y = pow((pow(x, 3, p) + 7) % p, (p + 1) // 4, p)
    if (y % 2 == 0) != (compressed[0] == 0x02):
        y = p - y
    return PointJacobi.from_affine(Point(_CURVE.curve, x, y))


def _point_to_compressed(point) -> bytes:  # type: ignore[no-untyped-def]
    prefix = b"\x02" if point.y() % 2 == 0 else b"\x03"
    return prefix + point.x().to_bytes(32, "big")


# ---------------------------------------------------------------------------
# Extended keys
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExtendedKey:
    """An xprv or xpub node of the HD tree.

    Attributes:
        key: Private scalar (32 bytes) or compressed public point (33 bytes).
        chain_code: Entropy mixed into every child derivation.
        depth: Number of derivation steps from the master node.
        parent_fingerprint: Hash160 prefix of the parent public key.
        child_index: Index this node was derived at (hardened bit included).
        is_private: Whether ``key`` is the private scalar.
    """

    key: bytes
    chain_code: bytes
    depth: int
    parent_fingerprint: bytes
    child_index: int
    is_private: bool

    @property
    def is_neutered(self) -> bool:
        return not self.is_private

    # -- Encoding ----------------------------------------------------------

    def serialize(self) -> bytes:
        """Pack into the 78-byte payload behind an xprv/xpub string."""
        version = _XPRV_VERSION if self.is_private else _XPUB_VERSION
        key_data = b"\x00" + self.key if self.is_private else self.key
        return (
            version
            + struct.pack("B", self.depth)
            + self.parent_fingerprint
            + struct.pack(">I", self.child_index)
            + self.chain_code
            + key_data
        )

    def to_string(self) -> str:
        """Encode as a Base58Check xpub/xprv string."""
        return base58check_encode(self.serialize())

    @classmethod
    def from_string(cls, s: str) -> Self:
        """Decode a Base58Check xpub/xprv string.

        Raises:
            ValidationError: If the string is not a well-formed xprv/xpub.
        """
        try:
            data = base58check_decode(s)
        except ValueError as exc:
            raise ValidationError(f"Invalid extended key: {exc}") from exc
        if len(data) != 78:
            raise ValidationError(f"Invalid extended key length: {len(data)}")
        version = data[:4]
        if version == _XPRV_VERSION:
            is_private = True
        elif version == _XPUB_VERSION:
            is_private = False
        else:
            raise ValidationError(f"Unknown extended key version bytes: {version.hex()}")
        return cls(
            key=data[46:78] if is_private else data[45:78],
            chain_code=data[13:45],
            depth=data[4],
            parent_fingerprint=data[5:9],
            child_index=struct.unpack(">I", data[9:13])[0],
            is_private=is_private,
        )

    @classmethod
    def from_seed(cls, seed: bytes) -> ExtendedKey:
        """Build the master xprv node for ``seed``.

        Raises:
            KeyDerivationError: If the seed length is out of range or the
                derived master key is invalid.
        """
        if not 16 <= len(seed) <= 64:
            raise KeyDerivationError(f"Seed must be 16-64 bytes, got {len(seed)}")
        hmac_result = hmac.new(_MASTER_HMAC_KEY, seed, hashlib.sha512).digest()
        il, ir = hmac_result[:32], hmac_result[32:]
        il_int = int.from_bytes(il, "big")
        if il_int == 0 or il_int >= _CURVE_ORDER:
            raise KeyDerivationError("Invalid seed (derived key out of range)")
        return cls(
            key=il,
            chain_code=ir,
            depth=0,
            parent_fingerprint=b"\x00\x00\x00\x00",
            child_index=0,
            is_private=True,
        )

    # -- Derivation --------------------------------------------------------

    def public_key(self) -> bytes:
        """Compressed public key of this node, computed from the scalar if needed."""
        if self.is_private:
            return private_key_to_public_key(self.key)
        return self.key

    def fingerprint(self) -> bytes:
        return hash160(self.public_key())[:4]

    def neuter(self) -> ExtendedKey:
        """Return the public-only counterpart of this key."""
        if not self.is_private:
            return self
        return ExtendedKey(
            key=self.public_key(),
            chain_code=self.chain_code,
            depth=self.depth,
            parent_fingerprint=self.parent_fingerprint,
            child_index=self.child_index,
            is_private=False,
        )

    def derive_child(self, index: int) -> ExtendedKey:
        """Return the child node at ``index``.

        Indices with the high bit set are hardened and need the private scalar.

        Raises:
            KeyDerivationError: If hardened derivation is requested on a
                public key, or if the derived key is invalid.
        """
        hardened = index >= _HARDENED
        if hardened and not self.is_private:
            raise KeyDerivationError("Cannot derive hardened child from neutered key")

        if hardened:
            data = b"\x00" + self.key + struct.pack(">I", index)
        else:
            data = self.public_key() + struct.pack(">I", index)

        hmac_result = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        il, ir = hmac_result[:32], hmac_result[32:]
        il_int = int.from_bytes(il, "big")
        if il_int >= _CURVE_ORDER:
            raise KeyDerivationError("Derived key is invalid (il >= curve order)")

        if self.is_private:
            key_int = (il_int + int.from_bytes(self.key, "big")) % _CURVE_ORDER
            if key_int == 0:
                raise KeyDerivationError("Derived key is invalid (key == 0)")
            child_key = key_int.to_bytes(32, "big")
        else:
            child_point = _CURVE_GEN * il_int + _pubkey_to_point(self.key)
            if child_point == INFINITY:
                raise KeyDerivationError("Derived key is invalid (point at infinity)")
            child_key = _point_to_compressed(child_point)

        return ExtendedKey(
            key=child_key,
            chain_code=ir,
            depth=self.depth + 1,
            parent_fingerprint=self.fingerprint(),
            child_index=index,
            is_private=self.is_private,
        )

    def derive_path(self, path: str) -> ExtendedKey:
        """Derive using a BIP32 path string like ``m/44'/144'/0'``.

        A trailing ``'`` or ``h`` marks a hardened step.
        """
        key = self
        for part in path.strip().split("/"):
            if part in ("m", "M", ""):
                continue
            hardened = part.endswith(("'", "h", "H"))
            idx = int(part.rstrip("'hH"))
            if hardened:
                idx += _HARDENED
            key = key.derive_child(idx)
        return key


# ---------------------------------------------------------------------------
# XRP signatory derivation
# ---------------------------------------------------------------------------


def is_valid_xprv(xprv: object) -> bool:
    return isinstance(xprv, str) and XPRV_REGEX.match(xprv) is not None


def is_valid_xpub(xpub: object) -> bool:
    return isinstance(xpub, str) and XPUB_REGEX.match(xpub) is not None


def _to_extended_key(hd_key: str | ExtendedKey) -> ExtendedKey:
    return ExtendedKey.from_string(hd_key) if isinstance(hd_key, str) else hd_key


def derive_base_path(key: ExtendedKey) -> ExtendedKey:
    """Derive the account node, skipping path segments the key already sits below.

    An account-level key (depth 3) is returned unchanged; a master key
    (depth 0) gets the full ``m/44'/144'/0'`` applied.
    """
    parts = DERIVATION_PATH_PARTS[key.depth :]
    if parts:
        return key.derive_path("m/" + "/".join(parts))
    return key


def hd_node_to_public_key(key: ExtendedKey) -> str:
    """Render the compressed public key as 66 upper-case hex chars."""
    return key.public_key().hex().rjust(66, "0").upper()


def hd_node_to_private_key(key: ExtendedKey) -> str:
    """Render the private key as 64 upper-case hex chars.

    Raises:
        KeyDerivationError: If the key is neutered.
    """
    if key.is_neutered:
        raise KeyDerivationError("Cannot derive private key from neutered bip32 node")
    return key.key.hex().rjust(64, "0").upper()


def derive_signatory(hd_key: str | ExtendedKey, index: int) -> Signatory:
    """Derive the signatory at ``m/44'/144'/0'/0/<index>``.

    Neutered keys yield a watch-only signatory whose private key is ``""``.
    """
    derived = derive_base_path(_to_extended_key(hd_key)).derive_child(0).derive_child(index)
    private_key = "" if derived.is_neutered else hd_node_to_private_key(derived)
    public_key = hd_node_to_public_key(derived)
    return Signatory(
        address=public_key_to_address(public_key),
        secret=KeyPair(public_key=public_key, private_key=private_key),
    )


def xprv_to_xpub(xprv: str | ExtendedKey) -> str:
    """Return the neutered account-level xpub for an xprv (or xpub)."""
    return derive_base_path(_to_extended_key(xprv)).neuter().to_string()


def generate_new_keys() -> dict[str, str]:
    """Create a fresh random master xprv and its account-level xpub."""
    key = ExtendedKey.from_seed(secrets.token_bytes(_SEED_BYTES))
    xprv = key.to_string()
    logger.debug("Generated new XRP HD key pair")
    return {"xprv": xprv, "xpub": xprv_to_xpub(key)}
