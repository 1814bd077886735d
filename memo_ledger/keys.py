"""
secp256k1 memo keys and their ledger string formats.

Formats:
- Private key: WIF, base58(0x80 || secret32 || sha256d(0x80 || secret32)[:4])
- Public key: prefix + base58(compressed33 || ripemd160(compressed33)[:4])

The shared secret between a private key a and a public key B is
SHA-512 of the 32-byte big-endian x coordinate of a*B, so both parties of a
memo derive the same 64 bytes.
"""

from __future__ import annotations

import hashlib
from typing import Optional

import base58
from Crypto.Hash import RIPEMD160
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from memo_ledger import DEFAULT_ADDRESS_PREFIX
from memo_ledger.errors import InvalidKeyError

# secp256k1 curve order
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

WIF_VERSION = b"\x80"
SECRET_SIZE = 32
COMPRESSED_SIZE = 33


def _sha256d(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()

def _ripemd160(data: bytes) -> bytes:
    return RIPEMD160.new(data).digest()

def _b58decode(s: str) -> bytes:
    try:
        return base58.b58decode(s)
    except ValueError as e:
        raise InvalidKeyError(f"Invalid base58 key: {e}") from e


class PublicKey:
    """Compressed secp256k1 point with a display prefix."""

    def __init__(self, compressed: bytes, prefix: str = DEFAULT_ADDRESS_PREFIX):
        if len(compressed) != COMPRESSED_SIZE:
            raise InvalidKeyError(
                f"Public key must be {COMPRESSED_SIZE} bytes, got {len(compressed)}"
            )
        try:
            self._point = ec.EllipticCurvePublicKey.from_encoded_point(
                ec.SECP256K1(), bytes(compressed)
            )
        except ValueError as e:
            raise InvalidKeyError("Public key is not a point on secp256k1") from e
        self.key = bytes(compressed)
        self.prefix = prefix

    @classmethod
    def from_string(cls, s: str, prefix: str = DEFAULT_ADDRESS_PREFIX) -> PublicKey:
        s = s.strip()
        if not s.startswith(prefix):
            raise InvalidKeyError(f"Public key must start with {prefix!r}")
        raw = _b58decode(s[len(prefix):])
        if len(raw) != COMPRESSED_SIZE + 4:
            raise InvalidKeyError("Public key has the wrong length")
        key, checksum = raw[:COMPRESSED_SIZE], raw[COMPRESSED_SIZE:]
        if _ripemd160(key)[:4] != checksum:
            raise InvalidKeyError("Public key checksum mismatch")
        return cls(key, prefix=prefix)

    def to_string(self, prefix: Optional[str] = None) -> str:
        checksum = _ripemd160(self.key)[:4]
        return (prefix or self.prefix) + base58.b58encode(self.key + checksum).decode("ascii")

    def to_ec(self) -> ec.EllipticCurvePublicKey:
        return self._point

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"PublicKey({self.to_string()!r})"


class PrivateKey:
    """
    secp256k1 private key.

    Construct from raw bytes, a WIF string, a seed, or login credentials.
    Parsing happens here, at the boundary; the crypto layer only ever sees
    PrivateKey/PublicKey objects.
    """

    def __init__(self, secret: bytes):
        if len(secret) != SECRET_SIZE:
            raise InvalidKeyError(f"Private key must be {SECRET_SIZE} bytes")
        value = int.from_bytes(secret, "big")
        if not (1 <= value < CURVE_ORDER):
            raise InvalidKeyError(f"Private key must be in [1, {CURVE_ORDER - 1}]")
        self.key = bytes(secret)
        self._key = ec.derive_private_key(value, ec.SECP256K1())

    @classmethod
    def from_wif(cls, wif: str) -> PrivateKey:
        raw = _b58decode(wif.strip())
        if len(raw) != 1 + SECRET_SIZE + 4:
            raise InvalidKeyError("WIF key has the wrong length")
        payload, checksum = raw[:-4], raw[-4:]
        if payload[:1] != WIF_VERSION:
            raise InvalidKeyError("WIF key has an unexpected version byte")
        if _sha256d(payload)[:4] != checksum:
            raise InvalidKeyError("WIF key checksum mismatch")
        return cls(payload[1:])

    from_string = from_wif

    @classmethod
    def from_seed(cls, seed: str | bytes) -> PrivateKey:
        """Deterministic key: SHA-256 of the seed."""
        if isinstance(seed, str):
            seed = seed.encode("utf-8")
        return cls(hashlib.sha256(seed).digest())

    @classmethod
    def from_login(cls, username: str, password: str, role: str = "memo") -> PrivateKey:
        """Key derived from account credentials, one per role (owner/active/posting/memo)."""
        return cls.from_seed(username + role + password)

    def to_wif(self) -> str:
        payload = WIF_VERSION + self.key
        return base58.b58encode(payload + _sha256d(payload)[:4]).decode("ascii")

    def public_key(self, prefix: str = DEFAULT_ADDRESS_PREFIX) -> PublicKey:
        compressed = self._key.public_key().public_bytes(
            Encoding.X962, PublicFormat.CompressedPoint
        )
        return PublicKey(compressed, prefix=prefix)

    def get_shared_secret(self, public_key: PublicKey) -> bytes:
        """ECDH shared secret: SHA-512 of the shared point's x coordinate."""
        shared_x = self._key.exchange(ec.ECDH(), public_key.to_ec())
        return hashlib.sha512(shared_x).digest()

    def __str__(self) -> str:
        return self.to_wif()

    def __repr__(self) -> str:
        return "PrivateKey(<hidden>)"
