import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Protocol, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Cache(Protocol):
    def get(self, key: str) -> Tuple[Optional[datetime], bool]:
        """Returns when the key was recorded and whether it was found."""
        ...

    def set(self, key: str) -> None:
        """Records the key with the current time."""
        ...


class InMemoryCache:
    """
    Key -> timestamp store used as a freshness cache.
    Entries are never evicted; staleness is decided by the caller (see is_fresh).
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock
        self._entries: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Tuple[Optional[datetime], bool]:
        with self._lock:
            recorded_at = self._entries.get(key)
        return recorded_at, recorded_at is not None

    def set(self, key: str) -> None:
        now = self._clock()
        with self._lock:
            self._entries[key] = now

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def is_fresh(cache: Cache, key: str, max_age: timedelta, now: Optional[datetime] = None) -> bool:
    recorded_at, found = cache.get(key)
    if not found:
        return False
    now = now or utcnow()
    return now - recorded_at < max_age
