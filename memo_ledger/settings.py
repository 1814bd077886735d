"""
Memo tool configuration.

Environment variables control behavior:
- MEMO_ADDRESS_PREFIX: Public key string prefix (default: STM)
- MEMO_KEY_ROLE: Role mixed into login-derived keys (default: memo)
- MEMO_LOG_LEVEL: Logging level for the CLI (default: WARNING)
- MEMO_STRICT_FRAMING: Reject memos without a length prefix (default: false)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from memo_ledger import DEFAULT_ADDRESS_PREFIX


def _opt(name: str, default: str) -> str:
    """Get optional environment variable with default."""
    return os.getenv(name, default)


def _opt_bool(name: str, default: bool) -> bool:
    """Parse boolean environment variable."""
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


@dataclass(frozen=True)
class Settings:
    """Memo encoding configuration."""

    ADDRESS_PREFIX: str = DEFAULT_ADDRESS_PREFIX
    KEY_ROLE: str = "memo"
    LOG_LEVEL: str = "WARNING"

    # Legacy senders skip the length prefix; accepted unless strict
    STRICT_FRAMING: bool = False

    @staticmethod
    def load() -> Settings:
        """Load settings from environment variables."""
        return Settings(
            ADDRESS_PREFIX=_opt("MEMO_ADDRESS_PREFIX", DEFAULT_ADDRESS_PREFIX),
            KEY_ROLE=_opt("MEMO_KEY_ROLE", "memo"),
            LOG_LEVEL=_opt("MEMO_LOG_LEVEL", "WARNING").upper(),
            STRICT_FRAMING=_opt_bool("MEMO_STRICT_FRAMING", False),
        )
