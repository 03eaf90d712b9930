"""
Broadcast Service - Centralized Socket.IO message broadcasting.

This service handles all Socket.IO emissions in a centralized way:
- Membership updates to a room
- Game state snapshots to a room
- Countdown notifications
- Errors to a single connection
"""

import logging
from typing import Any, Dict, List, Optional

from src.core.game_phases import GameType
from src.services.room_state_presenter import RoomStatePresenter

logger = logging.getLogger(__name__)


class BroadcastService:
    """Centralized service for all Socket.IO broadcasting operations."""

    def __init__(self, socketio, room_state_presenter: RoomStatePresenter):
        """Initialize the broadcast service.

        Args:
            socketio: Flask-SocketIO instance for emitting messages
            room_state_presenter: Builds the payload shapes
        """
        self.socketio = socketio
        self.room_state_presenter = room_state_presenter

    # Core emission methods

    def emit_to_room(self, event: str, data: Dict[str, Any], room_id: str):
        """Emit an event to every connection in a room."""
        try:
            self.socketio.emit(event, data, to=room_id)
            logger.debug(f'Emitted {event} to room {room_id}')
        except Exception as e:
            logger.error(f'Error emitting {event} to room {room_id}: {e}')

    def emit_to_connection(self, event: str, data: Dict[str, Any], connection_id: str):
        """Emit an event to a single connection."""
        try:
            self.socketio.emit(event, data, to=connection_id)
            logger.debug(f'Emitted {event} to connection {connection_id}')
        except Exception as e:
            logger.error(f'Error emitting {event} to connection {connection_id}: {e}')

    def emit_error_to_connection(self, error_response: Dict[str, Any], connection_id: str):
        """Emit an error message to a single connection."""
        error_code = error_response.get('error', {}).get('code', 'unknown')
        self.emit_to_connection('error', error_response, connection_id)
        logger.debug(f'Emitted error {error_code} to connection {connection_id}')

    def add_connection_to_room(self, connection_id: str, room_id: str):
        """Subscribe a connection to a room's broadcasts."""
        self.socketio.server.enter_room(connection_id, room_id, namespace='/')
        logger.debug(f'Connection {connection_id} entered room {room_id}')

    def remove_connection_from_room(self, connection_id: str, room_id: str):
        """Unsubscribe a connection from a room's broadcasts."""
        self.socketio.server.leave_room(connection_id, room_id, namespace='/')
        logger.debug(f'Connection {connection_id} left room {room_id}')

    # High-level broadcast methods

    def broadcast_room_update(self, room_id: str, participants: List[str], message: Optional[str] = None):
        """Broadcast the room's current participant list."""
        payload = self.room_state_presenter.create_room_update(room_id, participants, message)
        self.emit_to_room('room_update', payload, room_id)

    def broadcast_game_state(self, room_id: str, game_type: GameType,
                             state: Optional[Dict[str, Any]], result: Optional[Dict[str, Any]] = None):
        """Broadcast the room's current game snapshot."""
        payload = self.room_state_presenter.create_game_state_update(room_id, game_type, state, result)
        self.emit_to_room('game_state_update', payload, room_id)

    def broadcast_countdown_started(self, room_id: str, round_number: Optional[int]):
        payload = self.room_state_presenter.create_countdown_started(room_id, round_number)
        self.emit_to_room('countdown_started', payload, room_id)
