from __future__ import annotations

from pydantic import BaseModel, Field

from memo_ledger.keys import PublicKey

UINT64_MAX = 2**64 - 1
UINT32_MAX = 2**32 - 1


class EncryptedMemo(BaseModel):
    """
    On-wire memo envelope.

    Field order is the serialization order: from, to, nonce, check, encrypted.
    """

    from_key: PublicKey = Field(alias="from")
    to: PublicKey
    nonce: int = Field(ge=0, le=UINT64_MAX)
    check: int = Field(ge=0, le=UINT32_MAX)  # truncated key checksum
    encrypted: bytes = Field(min_length=1)

    model_config = {
        "populate_by_name": True,
        "frozen": True,
        "arbitrary_types_allowed": True,
    }

    def counterparty(self, own: PublicKey) -> PublicKey:
        """The key on the other side of this memo from the caller's point of view."""
        return self.to if own == self.from_key else self.from_key
