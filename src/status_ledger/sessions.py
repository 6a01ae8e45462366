"""
Per-session tracker registry.

A host serving several tables keeps one ConditionTracker per session id so
that conditions never leak between games.
"""

import logging
import threading

from .conditions.turns import NEAR_EXPIRY_ROUNDS
from .tracker import ConditionTracker

logger = logging.getLogger("status-ledger.sessions")


class SessionRegistry:
    """Thread-safe mapping of session id to its own ConditionTracker."""

    def __init__(self, near_expiry_rounds: int = NEAR_EXPIRY_ROUNDS) -> None:
        self._trackers: dict[str, ConditionTracker] = {}
        self._lock = threading.Lock()
        self.near_expiry_rounds = near_expiry_rounds

    def get(self, session_id: str) -> ConditionTracker:
        """Return the session's tracker, creating an empty one on first use."""
        with self._lock:
            tracker = self._trackers.get(session_id)
            if tracker is None:
                tracker = ConditionTracker(near_expiry_rounds=self.near_expiry_rounds)
                self._trackers[session_id] = tracker
                logger.debug(f"Created condition tracker for session '{session_id}'")
            return tracker

    def close(self, session_id: str) -> bool:
        """Forget a session's tracker. Returns False if there was none."""
        with self._lock:
            removed = self._trackers.pop(session_id, None)
        if removed is not None:
            logger.debug(f"Closed condition tracker for session '{session_id}'")
        return removed is not None

    def session_ids(self) -> list[str]:
        with self._lock:
            return list(self._trackers)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._trackers
