"""Key-value storage substrate.

In-memory storage for serialized values with optional per-key expiry measured
on the service clock. Values are stored as JSON strings so every read hands out
a fresh copy.
"""

import threading
from typing import Callable, Dict, List, Optional, Tuple

from feed_subscriptions.logging_config import get_logger

logger = get_logger(__name__)

# (value, expires_at_millis or None)
_Entry = Tuple[str, Optional[int]]


class InMemoryStorage:
    """Thread-safe key-value store with optional TTL.

    Args:
        clock: callable returning the current time in milliseconds
    """

    def __init__(self, clock: Callable[[], int]):
        self._entries: Dict[str, _Entry] = {}
        self._clock = clock
        self._lock = threading.RLock()

    def _live_entry(self, key: str) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at = entry[1]
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            logger.debug("storage_entry_expired", key=key, expires_at=expires_at)
            return None
        return entry

    def get(self, key: str) -> Optional[str]:
        """Get a value by key, None if absent or expired."""
        with self._lock:
            entry = self._live_entry(key)
            return entry[0] if entry else None

    def set(self, key: str, value: str, ttl_millis: Optional[int] = None) -> None:
        """Store a value.

        Args:
            key: Storage key
            value: Serialized value
            ttl_millis: Lifetime from now; None keeps the current expiry of an
                existing key, or stores without expiry
        """
        with self._lock:
            if ttl_millis is not None:
                expires_at: Optional[int] = self._clock() + ttl_millis
            else:
                existing = self._live_entry(key)
                expires_at = existing[1] if existing else None
            self._entries[key] = (value, expires_at)

    def has(self, key: str) -> bool:
        """Check if a live value exists for key."""
        with self._lock:
            return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        """Delete a key.

        Returns:
            True if a live value was deleted, False if not found
        """
        with self._lock:
            if self._live_entry(key) is None:
                return False
            del self._entries[key]
            return True

    def extend_ttl(self, key: str, ttl_millis: int) -> bool:
        """Push the expiry of a key to at least ``now + ttl_millis``.

        Returns:
            True if the key exists, False otherwise
        """
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return False
            value, expires_at = entry
            if expires_at is not None:
                new_expiry = max(expires_at, self._clock() + ttl_millis)
                self._entries[key] = (value, new_expiry)
            return True

    def keys(self, prefix: str = "") -> List[str]:
        """List live keys starting with prefix."""
        with self._lock:
            return [k for k in list(self._entries) if k.startswith(prefix) and self._live_entry(k)]

    def snapshot(self) -> Dict[str, _Entry]:
        """Copy of the raw entries, used to roll back a failed call."""
        with self._lock:
            return dict(self._entries)

    def restore(self, snapshot: Dict[str, _Entry]) -> None:
        """Replace all entries with a snapshot taken earlier."""
        with self._lock:
            self._entries = dict(snapshot)

    def clear(self) -> None:
        """Remove all entries.

        Warning: This removes all data. Use with caution.
        """
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __repr__(self) -> str:
        return f"InMemoryStorage(entries={len(self)})"
