"""
In-memory handoff store for token bundles (callback -> opener window).
Each entry is single-use and expires HANDOFF_TTL_SECONDS after it is stored.
One lock guards the map; sync routes run in FastAPI's threadpool.
"""
import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

from oauth_relay.config import HANDOFF_TTL_SECONDS

logger = logging.getLogger(__name__)


class HandoffError(LookupError):
    """Base for take() failures."""


class HandoffNotFound(HandoffError):
    """Id was never issued or has already been taken."""


class HandoffExpired(HandoffError):
    """Id was issued but its TTL passed before it was taken. The entry is gone after this."""


@dataclass
class HandoffEntry:
    payload: Any
    expires_at: float

    def expired(self, now: float) -> bool:
        return now > self.expires_at


def generate_handoff_id() -> str:
    """128-bit random id, hex encoded."""
    return secrets.token_hex(16)


class HandoffStore:
    def __init__(
        self,
        ttl_seconds: float = HANDOFF_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, HandoffEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def put(self, payload: Any) -> str:
        """Store payload under a fresh id and return the id."""
        handoff_id = generate_handoff_id()
        with self._lock:
            now = self._clock()
            self._sweep_locked(now)
            if handoff_id in self._entries:
                # Not expected with 128 bits; last write wins
                logger.warning("handoff id collision; overwriting live entry")
            self._entries[handoff_id] = HandoffEntry(payload=payload, expires_at=now + self.ttl_seconds)
        return handoff_id

    def take(self, handoff_id: str) -> Any:
        """
        Remove and return the payload for handoff_id.
        Raises HandoffNotFound if absent, HandoffExpired if present but past its TTL (entry removed).
        """
        with self._lock:
            entry = self._entries.pop(handoff_id, None)
            if entry is None:
                raise HandoffNotFound(handoff_id)
            if entry.expired(self._clock()):
                raise HandoffExpired(handoff_id)
            return entry.payload

    def sweep(self) -> int:
        """Drop all expired entries. Returns how many were removed."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if e.expired(now)]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("swept %d expired handoff entries", len(expired))
        return len(expired)
