"""
Binary codec for the EncryptedMemo envelope.

Layout (little-endian):
    from       33 bytes   compressed secp256k1 point
    to         33 bytes   compressed secp256k1 point
    nonce       8 bytes   uint64
    check       4 bytes   uint32
    encrypted  varint32 length + bytes

Varints are unsigned LEB128 limited to 32 bits (at most 5 bytes). The same
varint prefixes the UTF-8 memo text inside the plaintext.
"""

from __future__ import annotations

import struct
from typing import Tuple

from memo_ledger import DEFAULT_ADDRESS_PREFIX
from memo_ledger.errors import SerializationError
from memo_ledger.keys import COMPRESSED_SIZE, PublicKey
from memo_ledger.models import EncryptedMemo

_UINT64 = struct.Struct("<Q")
_UINT32 = struct.Struct("<I")
VARINT32_MAX_BYTES = 5


def write_varint32(value: int) -> bytes:
    if not 0 <= value <= 0xFFFFFFFF:
        raise SerializationError(f"varint32 out of range: {value}")
    out = bytearray()
    while True:
        b = value & 0x7F
        value >>= 7
        if value:
            out.append(b | 0x80)
        else:
            out.append(b)
            return bytes(out)

def read_varint32(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Read a varint32 at offset. Returns (value, next_offset)."""
    value = 0
    for i in range(VARINT32_MAX_BYTES):
        if offset >= len(data):
            raise SerializationError("Truncated varint32")
        b = data[offset]
        offset += 1
        value |= (b & 0x7F) << (7 * i)
        if not b & 0x80:
            return value & 0xFFFFFFFF, offset
    raise SerializationError("varint32 longer than 5 bytes")

def write_vstring(text: str) -> bytes:
    """Length-prefixed UTF-8."""
    raw = text.encode("utf-8")
    return write_varint32(len(raw)) + raw

def read_vstring(data: bytes) -> str:
    """
    Parse length-prefixed UTF-8 from the start of data.

    Bytes after the string are ignored.

    Raises:
        SerializationError: If the prefix is invalid, longer than the data,
            or the text is not valid UTF-8
    """
    length, offset = read_varint32(data)
    if offset + length > len(data):
        raise SerializationError(
            f"String length {length} exceeds remaining {len(data) - offset} bytes"
        )
    try:
        return data[offset:offset + length].decode("utf-8")
    except UnicodeDecodeError as e:
        raise SerializationError("String is not valid UTF-8") from e

def serialize_memo(memo: EncryptedMemo) -> bytes:
    return b"".join([
        memo.from_key.key,
        memo.to.key,
        _UINT64.pack(memo.nonce),
        _UINT32.pack(memo.check),
        write_varint32(len(memo.encrypted)),
        memo.encrypted,
    ])

def _take(data: bytes, offset: int, n: int) -> Tuple[bytes, int]:
    if offset + n > len(data):
        raise SerializationError(
            f"Envelope truncated at byte {offset} (need {n}, have {len(data) - offset})"
        )
    return data[offset:offset + n], offset + n

def deserialize_memo(data: bytes, prefix: str = DEFAULT_ADDRESS_PREFIX) -> EncryptedMemo:
    """
    Parse envelope bytes.

    Raises:
        SerializationError: If the data is truncated or has trailing bytes
        InvalidKeyError: If either public key is not a valid point
    """
    offset = 0
    from_raw, offset = _take(data, offset, COMPRESSED_SIZE)
    to_raw, offset = _take(data, offset, COMPRESSED_SIZE)
    nonce_raw, offset = _take(data, offset, _UINT64.size)
    check_raw, offset = _take(data, offset, _UINT32.size)
    length, offset = read_varint32(data, offset)
    encrypted, offset = _take(data, offset, length)
    if offset != len(data):
        raise SerializationError(f"{len(data) - offset} trailing bytes after envelope")
    if not encrypted:
        raise SerializationError("Envelope carries no cipher text")
    return EncryptedMemo(
        from_key=PublicKey(from_raw, prefix=prefix),
        to=PublicKey(to_raw, prefix=prefix),
        nonce=_UINT64.unpack(nonce_raw)[0],
        check=_UINT32.unpack(check_raw)[0],
        encrypted=encrypted,
    )
