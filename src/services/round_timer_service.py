"""
Round Timer Service - Cancellable countdowns keyed by session.

This service handles:
- Scheduling one countdown per session
- Cancelling a pending countdown when a round finishes early
- Dropping the handle once the countdown has fired
"""

import logging
import threading
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


class RoundTimerService:
    """Keeps at most one pending countdown per session."""

    def __init__(self, timer_factory: Optional[Callable[..., threading.Timer]] = None):
        """Initialize the timer service.

        Args:
            timer_factory: Callable with ``threading.Timer``'s signature, replaceable in tests
        """
        self._timer_factory = timer_factory or threading.Timer
        self._timers: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def start(self, session_id: str, seconds: float, callback: Callable[[], None]) -> bool:
        """
        Schedule ``callback`` after ``seconds`` unless a countdown is already pending.

        Returns:
            True if a countdown was scheduled, False if one was already pending
        """
        with self._lock:
            if session_id in self._timers:
                logger.debug(f"Countdown already pending for room {session_id}")
                return False

            def fire():
                with self._lock:
                    if self._timers.get(session_id) is timer:
                        del self._timers[session_id]
                callback()

            timer = self._timer_factory(seconds, fire)
            timer.daemon = True
            self._timers[session_id] = timer

        timer.start()
        logger.info(f"Countdown of {seconds}s started for room {session_id}")
        return True

    def cancel(self, session_id: str) -> bool:
        """Cancel the session's pending countdown. Returns True if one was pending."""
        with self._lock:
            timer = self._timers.pop(session_id, None)
        if timer is None:
            return False
        timer.cancel()
        logger.debug(f"Countdown cancelled for room {session_id}")
        return True

    def is_pending(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._timers

    def cancel_all(self):
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
