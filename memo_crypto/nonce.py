"""
Time-based unique nonces for memo encryption.

A nonce is a uint64: the current time in milliseconds in the high bits and a
16-bit counter in the low bits. The counter starts at a random offset so two
processes started in the same millisecond do not collide, and disambiguates
calls made within the same millisecond. A nonce can only repeat if two calls
land in the same millisecond after the counter wraps all the way around.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

UINT64_MAX = 0xFFFF_FFFF_FFFF_FFFF
ENTROPY_MASK = 0xFFFF


def _now_ms() -> int:
    return int(time.time() * 1000)


class NonceGenerator:
    """
    Process-wide source of unique nonces.

    The counter increment is guarded by a lock, so one instance can be shared
    between threads. Tests inject a clock and a starting entropy value, or
    bypass the generator entirely by passing an explicit nonce to encode.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], int]] = None,
        entropy: Optional[int] = None,
    ):
        self._clock = clock or _now_ms
        self._entropy = None if entropy is None else entropy & ENTROPY_MASK
        self._lock = threading.Lock()

    def next(self) -> int:
        """Return a fresh nonce."""
        with self._lock:
            if self._entropy is None:
                self._entropy = int.from_bytes(secrets.token_bytes(2), "big")
                logger.debug("Nonce entropy seeded")
            self._entropy = (self._entropy + 1) & ENTROPY_MASK
            entropy = self._entropy
            timestamp = self._clock()
        return ((timestamp << 16) | entropy) & UINT64_MAX


_default_generator = NonceGenerator()


def default_generator() -> NonceGenerator:
    return _default_generator


def unique_nonce() -> int:
    """Next nonce from the process-wide generator."""
    return _default_generator.next()
