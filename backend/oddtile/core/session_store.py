"""Session store for active games.

Active games are keyed by an opaque session id. The store is an interface
so the in-memory implementation can be swapped for a TTL cache or a shared
store without touching the game routes.
"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, runtime_checkable

from ..config import get_settings

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionStore(Protocol):
    """Session store contract."""

    def create(self, session_id: str, state: Any) -> None:
        """Insert or replace the state for session_id."""
        ...

    def get(self, session_id: str) -> Optional[Any]:
        """Return the state for session_id, or None if absent or expired."""
        ...

    def update(self, session_id: str, state: Any) -> bool:
        """Replace existing state (last write wins). Returns False if absent."""
        ...

    def delete(self, session_id: str) -> None:
        """Remove session_id. Missing ids are ignored."""
        ...

    def expire(self) -> int:
        """Purge expired sessions and return how many were removed."""
        ...


class InMemorySessionStore:
    """Process-local session store with sliding expiry and LRU eviction.

    Every access refreshes a session's deadline. When more than
    ``max_sessions`` are held, the least recently used ones are evicted.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_sessions: int = 10000,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize store.

        Args:
            ttl_seconds: Idle time after which a session expires.
            max_sessions: Upper bound on stored sessions.
            clock: Monotonic time source (seconds). Defaults to time.monotonic.
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1")
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        # session_id -> (deadline, state), oldest access first
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, session_id: str) -> bool:
        # Membership does not count as access, so the deadline is left alone
        with self._lock:
            entry = self._entries.get(session_id)
            return entry is not None and entry[0] > self._clock()

    def create(self, session_id: str, state: Any) -> None:
        with self._lock:
            self._put(session_id, state)
            self._evict_overflow()

    def get(self, session_id: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            deadline, state = entry
            if deadline <= self._clock():
                del self._entries[session_id]
                logger.info("Session %s expired", session_id)
                return None
            self._put(session_id, state)
            return state

    def update(self, session_id: str, state: Any) -> bool:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None or entry[0] <= self._clock():
                self._entries.pop(session_id, None)
                return False
            self._put(session_id, state)
            return True

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._entries.pop(session_id, None)

    def expire(self) -> int:
        with self._lock:
            now = self._clock()
            stale = [sid for sid, (deadline, _) in self._entries.items() if deadline <= now]
            for sid in stale:
                del self._entries[sid]
        if stale:
            logger.info("Expired %d idle sessions", len(stale))
        return len(stale)

    def stats(self) -> Dict[str, Any]:
        """Return store occupancy for health reporting."""
        with self._lock:
            return {
                "active_sessions": len(self._entries),
                "max_sessions": self.max_sessions,
                "ttl_seconds": self.ttl_seconds,
            }

    def _put(self, session_id: str, state: Any) -> None:
        """Store state with a fresh deadline. Caller holds the lock."""
        self._entries[session_id] = (self._clock() + self.ttl_seconds, state)
        self._entries.move_to_end(session_id)

    def _evict_overflow(self) -> None:
        """Drop least recently used sessions beyond capacity. Caller holds the lock."""
        while len(self._entries) > self.max_sessions:
            evicted, _ = self._entries.popitem(last=False)
            logger.warning("Session store full, evicted %s", evicted)


# Singleton instance
_session_store = None


def get_session_store() -> InMemorySessionStore:
    """Get or create session store singleton instance."""
    global _session_store
    if _session_store is None:
        settings = get_settings()
        _session_store = InMemorySessionStore(
            ttl_seconds=settings.session_ttl_seconds,
            max_sessions=settings.max_sessions,
        )
    return _session_store
