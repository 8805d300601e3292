"""
In-memory storage with TTL expiration.

Holds parsed uploads, CMS sessions and import jobs between requests.
Single-process only; everything is lost on restart.
"""
import threading
import uuid
from datetime import datetime, timedelta
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class TTLStore(Generic[T]):
    """
    Dict of id -> value that forgets entries after ttl_minutes.

    Guarded by a lock because import jobs update state from worker threads.
    """

    def __init__(self, ttl_minutes: int):
        self.ttl = timedelta(minutes=ttl_minutes)
        self._entries: dict[str, tuple[datetime, T]] = {}
        self._lock = threading.Lock()

    def put(self, value: T, key: Optional[str] = None) -> str:
        """Store a value, return its key (generated when not given)."""
        key = key or str(uuid.uuid4())
        with self._lock:
            self._entries[key] = (datetime.now() + self.ttl, value)
            self._cleanup_expired()
        return key

    def get(self, key: str) -> Optional[T]:
        """Value for key, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if datetime.now() > expires_at:
                del self._entries[key]
                return None
            return value

    def expires_at(self, key: str) -> Optional[datetime]:
        with self._lock:
            entry = self._entries.get(key)
            return entry[0] if entry else None

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def values(self) -> list[Any]:
        """All live values."""
        with self._lock:
            self._cleanup_expired()
            return [value for _, value in self._entries.values()]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._cleanup_expired()
            return len(self._entries)

    def _cleanup_expired(self) -> None:
        """Remove all expired entries. Caller holds the lock."""
        now = datetime.now()
        expired = [k for k, (exp, _) in self._entries.items() if now > exp]
        for k in expired:
            del self._entries[k]
