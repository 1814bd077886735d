"""
Memo encryption keyed by an ECDH shared secret.

    S      = SHA-512(x(a * B))                  shared secret, 64 bytes
    ekm    = SHA-512(nonce_le64 || S)           encryption key material
    key    = ekm[0:32]
    iv     = ekm[32:48]
    check  = uint32_le(SHA-256(ekm)[0:4])

The check value only proves that the decrypting party derived the same key
material. It is not a MAC over the cipher text.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass
from typing import Optional

from memo_crypto.cipher import decrypt_block, encrypt_block
from memo_crypto.nonce import UINT64_MAX, NonceGenerator, default_generator
from memo_ledger.errors import InvalidKeyError, InvalidNonceError, MissingInputError
from memo_ledger.keys import PrivateKey, PublicKey

_UINT64 = struct.Struct("<Q")
_UINT32 = struct.Struct("<I")


@dataclass(frozen=True)
class KeyMaterial:
    key: bytes
    iv: bytes
    checksum: int


@dataclass(frozen=True)
class EncryptResult:
    nonce: int
    message: bytes
    checksum: int


def derive_key_material(nonce: int, shared_secret: bytes) -> KeyMaterial:
    if not 0 <= nonce <= UINT64_MAX:
        raise InvalidNonceError("nonce must be an unsigned 64-bit integer")
    if not shared_secret:
        raise InvalidKeyError("shared secret is empty")
    ekm = hashlib.sha512(_UINT64.pack(nonce) + shared_secret).digest()
    # ekm[48:64] is derived but unused
    check = _UINT32.unpack(hashlib.sha256(ekm).digest()[:4])[0]
    return KeyMaterial(key=ekm[:32], iv=ekm[32:48], checksum=check)

def _shared_secret(private_key: PrivateKey, public_key: PublicKey) -> bytes:
    if not isinstance(private_key, PrivateKey) or not isinstance(public_key, PublicKey):
        raise InvalidKeyError("memo encryption requires a PrivateKey and a PublicKey")
    return private_key.get_shared_secret(public_key)

def encrypt(
    private_key: PrivateKey,
    public_key: PublicKey,
    message: bytes,
    nonce: Optional[int] = None,
    generator: Optional[NonceGenerator] = None,
) -> EncryptResult:
    """
    Encrypt bytes for the holder of public_key.

    Args:
        private_key: Sender's key
        public_key: Recipient's key
        message: Plaintext bytes (already framed by the caller)
        nonce: Fixed nonce; drawn from the generator when omitted
        generator: Nonce source (default: process-wide generator)

    Returns:
        EncryptResult with the nonce used, cipher text and check value
    """
    if not message:
        raise MissingInputError("Missing plain text")
    if nonce is None:
        nonce = (generator or default_generator()).next()
    km = derive_key_material(nonce, _shared_secret(private_key, public_key))
    return EncryptResult(
        nonce=nonce,
        message=encrypt_block(km.key, km.iv, message),
        checksum=km.checksum,
    )

def decrypt(
    private_key: PrivateKey,
    public_key: PublicKey,
    nonce: int,
    message: bytes,
    checksum: int,
) -> bytes:
    """
    Decrypt bytes sent between private_key's owner and public_key's owner.

    Raises:
        InvalidNonceError: If the derived check value differs from checksum
        DecryptionError: If the cipher text is malformed
    """
    if not message:
        raise MissingInputError("Missing cipher text")
    km = derive_key_material(nonce, _shared_secret(private_key, public_key))
    if km.checksum != checksum:
        raise InvalidNonceError("Invalid nonce")
    return decrypt_block(km.key, km.iv, message)
