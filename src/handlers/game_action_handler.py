"""
Game Action Handler

This module handles Socket.IO events that act on a room's games: the
generic ``game_action`` command and the word game shortcuts.
"""

import logging
from typing import Any, Dict, Optional

from src.core.commands import parse_command
from src.core.game_phases import GameType
from src.services.error_response_factory import with_error_handling
from .base_handler import BaseHandler

logger = logging.getLogger(__name__)


class GameActionHandler(BaseHandler):
    """Handler for game commands."""

    def _execute(self, handler_name: str, room_id: str, game_type: Any, action: Any,
                 payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        participant_id = self.current_participant()
        command = parse_command(game_type, action, payload, self.validation_service)
        snapshot = self.coordinator.execute(room_id, participant_id, command)

        self.log_handler_success(
            handler_name,
            f'{command.game_type.value}/{command.action} by {participant_id} in room {room_id}'
        )
        self.emit_success('game_action_result', snapshot)
        return snapshot

    @with_error_handling
    def handle_game_action(self, data):
        """
        Handle a game command.

        Expected data format:
        {
            'room_id': 'room_name',
            'game_type': 'war' | 'eratz-ir',
            'action': 'start',
            'payload': {...}
        }
        """
        self.log_handler_start('handle_game_action', data)
        validated_data, room_id = self.validate_room_data(data)
        self.validate_data_dict(validated_data, ['game_type', 'action'])

        self._execute(
            'handle_game_action',
            room_id,
            validated_data['game_type'],
            validated_data['action'],
            validated_data.get('payload'),
        )

    @with_error_handling
    def handle_reset_game(self, data):
        """Reset the room's word game to waiting."""
        self.log_handler_start('handle_reset_game', data)
        _, room_id = self.validate_room_data(data)
        self._execute('handle_reset_game', room_id, GameType.ERATZ_IR.value, 'resetGame')

    @with_error_handling
    def handle_start_round(self, data):
        """
        Start a word game round.

        Expected data format:
        {
            'room_id': 'room_name',
            'categories': ['...']   # optional
        }
        """
        self.log_handler_start('handle_start_round', data)
        validated_data, room_id = self.validate_room_data(data)
        payload = {}
        if validated_data.get('categories') is not None:
            payload['categories'] = validated_data['categories']
        self._execute('handle_start_round', room_id, GameType.ERATZ_IR.value, 'startRound', payload)

    @with_error_handling
    def handle_save_answers(self, data):
        """
        Save the requesting participant's answers for the current round.

        Expected data format:
        {
            'room_id': 'room_name',
            'answers': {'category': 'answer'}
        }
        """
        self.log_handler_start('handle_save_answers', data)
        validated_data, room_id = self.validate_room_data(data)
        self.validate_data_dict(validated_data, ['answers'])
        self._execute(
            'handle_save_answers', room_id, GameType.ERATZ_IR.value, 'saveAnswers',
            {'answers': validated_data['answers']}
        )

    @with_error_handling
    def handle_finish_round(self, data):
        """Score the current word game round."""
        self.log_handler_start('handle_finish_round', data)
        _, room_id = self.validate_room_data(data)
        self._execute('handle_finish_round', room_id, GameType.ERATZ_IR.value, 'finishRound')

    @with_error_handling
    def handle_start_countdown(self, data):
        """Start the countdown that finishes the current round."""
        self.log_handler_start('handle_start_countdown', data)
        _, room_id = self.validate_room_data(data)
        self._execute('handle_start_countdown', room_id, GameType.ERATZ_IR.value, 'startCountdown')
