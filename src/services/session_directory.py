"""
Session Directory for PartyRooms

Tracks which participants belong to which session. Sessions are created on
first join and live for the process lifetime.
"""

import logging
import threading
from typing import Dict, List

from src.core.errors import InvalidStateError

logger = logging.getLogger(__name__)


class SessionDirectory:
    """Maps session ids to ordered participant lists."""

    def __init__(self, max_players_per_room: int = 8):
        self.max_players_per_room = max_players_per_room
        # Insertion order of each list is join order
        self._sessions: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def join(self, session_id: str, participant_id: str) -> List[str]:
        """
        Add a participant to a session, creating the session if needed.

        Re-joining as an existing member changes nothing.

        Returns:
            Copy of the session's participant list after the join

        Raises:
            InvalidStateError: If the session is already at capacity
        """
        with self._lock:
            participants = self._sessions.setdefault(session_id, [])
            if participant_id in participants:
                return list(participants)

            if len(participants) >= self.max_players_per_room:
                raise InvalidStateError(
                    "room full",
                    {"room_id": session_id, "max_players": self.max_players_per_room}
                )

            participants.append(participant_id)
            logger.info(f"Participant {participant_id} joined session {session_id}")
            return list(participants)

    def leave(self, session_id: str, participant_id: str) -> List[str]:
        """Remove a participant from a session. Removing a non-member is a no-op."""
        with self._lock:
            participants = self._sessions.get(session_id)
            if participants is None:
                return []
            if participant_id in participants:
                participants.remove(participant_id)
                logger.info(f"Participant {participant_id} left session {session_id}")
            return list(participants)

    def list_participants(self, session_id: str) -> List[str]:
        """Participants of a session in join order; empty for unknown sessions."""
        with self._lock:
            return list(self._sessions.get(session_id, []))

    def is_member(self, session_id: str, participant_id: str) -> bool:
        with self._lock:
            return participant_id in self._sessions.get(session_id, [])

    def purge(self, participant_id: str) -> List[str]:
        """
        Remove a participant from every session they belong to.

        Returns:
            Ids of the sessions the participant was removed from
        """
        affected = []
        with self._lock:
            for session_id, participants in self._sessions.items():
                if participant_id in participants:
                    participants.remove(participant_id)
                    affected.append(session_id)

        if affected:
            logger.info(f"Purged participant {participant_id} from sessions {affected}")
        return affected

    def get_all_sessions(self) -> List[str]:
        with self._lock:
            return list(self._sessions.keys())
