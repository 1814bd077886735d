from __future__ import annotations

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from memo_ledger.errors import DecryptionError, MissingInputError

BLOCK_SIZE = 16  # AES block, bytes
KEY_SIZE = 32    # AES-256
IV_SIZE = 16


def _check_key(key: bytes, iv: bytes) -> None:
    if len(key) != KEY_SIZE or len(iv) != IV_SIZE:
        raise ValueError("AES-256-CBC requires a 32-byte key and a 16-byte IV")

def encrypt_block(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    """
    Encrypt with AES-256-CBC and PKCS#7 padding.

    Scheme: aes-256-cbc
    - No integrity protection here; callers verify the key checksum
    - Output length is always a non-zero multiple of 16
    """
    if not plaintext:
        raise MissingInputError("Missing plain text")
    _check_key(key, iv)
    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()

def decrypt_block(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """Decrypt AES-256-CBC and strip PKCS#7 padding."""
    if not ciphertext:
        raise MissingInputError("Missing cipher text")
    _check_key(key, iv)
    if len(ciphertext) % BLOCK_SIZE:
        raise DecryptionError(
            f"Cipher text length {len(ciphertext)} is not a multiple of {BLOCK_SIZE}"
        )
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise DecryptionError("Invalid padding in decrypted memo") from e
