"""
Room State Presenter - Canonical payload shapes for broadcasts.

Every push event carries the full current state of what it describes,
never a delta, so clients can replace their local copy wholesale.
"""

import logging
from typing import Any, Dict, List, Optional

from src.core.game_phases import GameType

logger = logging.getLogger(__name__)


class RoomStatePresenter:
    """Builds client payloads from engine snapshots."""

    def __init__(self, round_timer_service=None, countdown_seconds: int = 10):
        """Initialize the room state presenter.

        Args:
            round_timer_service: Used to report whether a countdown is pending
            countdown_seconds: Length of a round countdown
        """
        self.round_timer_service = round_timer_service
        self.countdown_seconds = countdown_seconds

    def create_room_update(self, room_id: str, participants: List[str],
                           message: Optional[str] = None) -> Dict[str, Any]:
        """Membership payload for ``room_update``."""
        return {
            'room_id': room_id,
            'participants': list(participants),
            'participant_count': len(participants),
            'message': message,
        }

    def create_game_state_update(self, room_id: str, game_type: GameType,
                                 state: Optional[Dict[str, Any]],
                                 result: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Game payload for ``game_state_update``.

        Args:
            room_id: Room identifier
            game_type: Game the state belongs to
            state: Engine snapshot, or None when the game no longer exists
            result: Outcome of the command that produced the state, if any
        """
        if state is not None and game_type == GameType.ERATZ_IR:
            state = dict(state)
            state['countdown'] = self.create_countdown_info(room_id)

        return {
            'room_id': room_id,
            'game_type': game_type.value,
            'state': state,
            'result': result,
        }

    def create_countdown_info(self, room_id: str) -> Dict[str, Any]:
        pending = bool(self.round_timer_service and self.round_timer_service.is_pending(room_id))
        return {
            'pending': pending,
            'seconds': self.countdown_seconds,
        }

    def create_countdown_started(self, room_id: str, round_number: Optional[int]) -> Dict[str, Any]:
        """Payload for ``countdown_started``."""
        return {
            'room_id': room_id,
            'round': round_number,
            'seconds': self.countdown_seconds,
            'message': f'Round ends in {self.countdown_seconds} seconds',
        }
