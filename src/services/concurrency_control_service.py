"""
Concurrency Control Service for PartyRooms

Provides per-session locking so that every mutation of one session's state,
and the broadcast that follows it, runs one at a time.
"""

import threading
from contextlib import contextmanager
from typing import Dict


class ConcurrencyControlService:
    """Manages per-session locks."""

    def __init__(self):
        # Per-session locks for fine-grained control
        self._session_locks: Dict[str, threading.RLock] = {}
        # Lock for managing session locks themselves
        self._locks_lock = threading.Lock()

    def get_session_lock(self, session_id: str) -> threading.RLock:
        """Get or create a lock for a specific session."""
        with self._locks_lock:
            if session_id not in self._session_locks:
                self._session_locks[session_id] = threading.RLock()
            return self._session_locks[session_id]

    @contextmanager
    def session_operation(self, session_id: str):
        """Context manager for serialized session operations."""
        session_lock = self.get_session_lock(session_id)
        with session_lock:
            yield

    def active_lock_count(self) -> int:
        with self._locks_lock:
            return len(self._session_locks)
