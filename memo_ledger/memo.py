"""
Encrypted memo encoding.

Memos that start with '#' are encrypted for the pair (sender, recipient);
anything else is plain text and passes through encode and decode unchanged.

Encode:
    '#text' -> varint32(len) || utf8(text) -> AES (memo_crypto.aes)
            -> EncryptedMemo{from, to, nonce, check, encrypted}
            -> '#' + base58(bytes)

Decode reverses the steps. Either party can decode: if the caller's public
key is the envelope's `from`, the counterparty is `to`, otherwise `from`.
"""

from __future__ import annotations

import logging
from typing import Optional

import base58

from memo_crypto import aes
from memo_crypto.nonce import NonceGenerator
from memo_ledger import MEMO_MARKER
from memo_ledger.errors import DecryptionError, InvalidKeyError, SerializationError
from memo_ledger.keys import PrivateKey, PublicKey
from memo_ledger.models import EncryptedMemo
from memo_ledger.serializer import (
    deserialize_memo,
    read_vstring,
    serialize_memo,
    write_vstring,
)

logger = logging.getLogger(__name__)


def is_encrypted(memo: str) -> bool:
    return memo.startswith(MEMO_MARKER)

def encode(
    private_key: PrivateKey,
    public_key: PublicKey,
    memo: str,
    nonce: Optional[int] = None,
    generator: Optional[NonceGenerator] = None,
) -> str:
    """
    Encrypt a memo from private_key's owner to public_key's owner.

    Args:
        private_key: Sender's memo key
        public_key: Recipient's memo key
        memo: Memo text; only encrypted when it starts with '#'
        nonce: Fixed nonce (tests, reproducible output)
        generator: Nonce source when nonce is omitted

    Returns:
        '#' + base58 envelope, or memo unchanged if it is plain text
    """
    if not is_encrypted(memo):
        return memo

    result = aes.encrypt(
        private_key,
        public_key,
        write_vstring(memo[len(MEMO_MARKER):]),
        nonce=nonce,
        generator=generator,
    )
    envelope = EncryptedMemo(
        from_key=private_key.public_key(prefix=public_key.prefix),
        to=public_key,
        nonce=result.nonce,
        check=result.checksum,
        encrypted=result.message,
    )
    data = serialize_memo(envelope)
    logger.debug(f"Encoded memo envelope ({len(data)} bytes)")
    return MEMO_MARKER + base58.b58encode(data).decode("ascii")

def parse(memo: str) -> EncryptedMemo:
    """Decode the envelope of an encrypted memo without decrypting it."""
    if not is_encrypted(memo):
        raise SerializationError("Memo is not encrypted")
    try:
        data = base58.b58decode(memo[len(MEMO_MARKER):])
    except ValueError as e:
        raise SerializationError(f"Invalid base58 memo: {e}") from e
    return deserialize_memo(data)

def decode(private_key: PrivateKey, memo: str, strict_framing: bool = False) -> str:
    """
    Decrypt a memo with either the sender's or the recipient's private key.

    Args:
        private_key: Caller's memo key
        memo: Memo string; returned unchanged unless it starts with '#'
        strict_framing: Reject plaintext without a length prefix instead of
            reading it as raw UTF-8

    Returns:
        '#' + decrypted text, or memo unchanged if it is plain text

    Raises:
        InvalidKeyError: If private_key is not a PrivateKey
        InvalidNonceError: If private_key is not a party to the memo, or the
            nonce/check fields were altered
        DecryptionError: If the cipher text is malformed
        SerializationError: If the envelope cannot be parsed
    """
    if not is_encrypted(memo):
        return memo
    if not isinstance(private_key, PrivateKey):
        raise InvalidKeyError("memo decoding requires a PrivateKey")

    envelope = parse(memo)
    counterparty = envelope.counterparty(private_key.public_key())
    plain = aes.decrypt(
        private_key,
        counterparty,
        envelope.nonce,
        envelope.encrypted,
        envelope.check,
    )

    try:
        return MEMO_MARKER + read_vstring(plain)
    except SerializationError as e:
        if strict_framing:
            raise DecryptionError("Decrypted memo is not length-prefixed") from e
        # Sender did not length-prefix the memo
        logger.debug("Memo has no length prefix, reading raw UTF-8")
        return MEMO_MARKER + plain.decode("utf-8", errors="replace")
