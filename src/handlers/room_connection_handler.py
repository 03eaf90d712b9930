"""
Room Connection Handler

This module handles Socket.IO events related to room membership,
including joining rooms, leaving rooms, and getting room state.
"""

import logging

from src.services.error_response_factory import with_error_handling
from .base_handler import BaseHandler

logger = logging.getLogger(__name__)


class RoomConnectionHandler(BaseHandler):
    """Handler for room operations like join, leave, and state retrieval."""

    @with_error_handling
    def handle_join_room(self, data):
        """
        Handle a participant joining a room.

        Expected data format:
        {
            'room_id': 'room_name'
        }
        """
        self.log_handler_start('handle_join_room', data)

        _, room_id = self.validate_room_data(data)
        participant_id = self.current_participant()

        participants = self.coordinator.join(room_id, participant_id)

        self.log_handler_success(
            'handle_join_room',
            f'Participant {participant_id} joined room {room_id}'
        )
        self.emit_success('room_joined', {
            'room_id': room_id,
            'participant_id': participant_id,
            'participants': participants,
            'message': f'Successfully joined room {room_id}'
        })

    @with_error_handling
    def handle_leave_room(self, data):
        """Handle a participant leaving a room."""
        self.log_handler_start('handle_leave_room', data)

        _, room_id = self.validate_room_data(data)
        participant_id = self.current_participant()

        participants = self.coordinator.leave(room_id, participant_id)

        self.log_handler_success(
            'handle_leave_room',
            f'Participant {participant_id} left room {room_id}'
        )
        self.emit_success('room_left', {
            'room_id': room_id,
            'participants': participants,
            'message': f'Successfully left room {room_id}'
        })

    @with_error_handling
    def handle_get_room_state(self, data):
        """Send the room's membership and game snapshots to the requesting client."""
        self.log_handler_start('handle_get_room_state', data)

        _, room_id = self.validate_room_data(data)
        participant_id = self.current_participant()

        self.emit_success('room_state', self.coordinator.get_room_state(room_id, participant_id))
        self.log_handler_success('handle_get_room_state')
