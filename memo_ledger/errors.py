"""
Error taxonomy for memo encryption.

All errors derive from MemoError (itself a ValueError) and propagate to the
caller of encode/decode. Nothing in the library retries.
"""

from __future__ import annotations


class MemoError(ValueError):
    """Base class for every memo encryption failure."""


class InvalidKeyError(MemoError):
    """Malformed or incompatible key material (bad WIF, prefix, point, checksum)."""


class InvalidNonceError(MemoError):
    """
    Checksum mismatch on decrypt.

    Raised when the derived key material does not reproduce the envelope's
    check value: wrong counterparty key, or a tampered nonce/checksum field.
    """


class DecryptionError(MemoError):
    """Cipher-layer failure: bad padding or ciphertext length."""


class MissingInputError(MemoError):
    """Empty plaintext or ciphertext passed to an encrypt/decrypt primitive."""


class SerializationError(MemoError):
    """Malformed envelope bytes, varint, or base58 payload."""
