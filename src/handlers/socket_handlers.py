"""
Socket.IO event handlers for PartyRooms.

This module provides the registration function and the connection and
disconnection handlers. Connections authenticate once, at connect time,
with ``auth={'token': ...}``; every later event reuses that identity.
"""

import logging

from flask import request
from flask_socketio import ConnectionRefusedError, emit

from src.core.errors import UnauthenticatedError
from .game_action_handler import GameActionHandler
from .room_connection_handler import RoomConnectionHandler
from .socket_event_router import SocketEventRouter, empty_payload_middleware

logger = logging.getLogger(__name__)


def register_socket_handlers(socketio_instance, container) -> SocketEventRouter:
    """Register all socket handlers with the SocketIO instance."""
    router = SocketEventRouter(socketio_instance)
    router.add_middleware(empty_payload_middleware)

    room_handler = RoomConnectionHandler(container)
    game_handler = GameActionHandler(container)

    # Connection lifecycle handlers bypass the router
    socketio_instance.on_event('connect', _make_connect_handler(container))
    socketio_instance.on_event('disconnect', _make_disconnect_handler(container))

    router.register_route('join_room', room_handler.handle_join_room)
    router.register_route('leave_room', room_handler.handle_leave_room)
    router.register_route('get_room_state', room_handler.handle_get_room_state)

    router.register_route('game_action', game_handler.handle_game_action)
    router.register_route('reset_game', game_handler.handle_reset_game)
    router.register_route('start_round', game_handler.handle_start_round)
    router.register_route('save_answers', game_handler.handle_save_answers)
    router.register_route('finish_round', game_handler.handle_finish_round)
    router.register_route('start_countdown', game_handler.handle_start_countdown)

    router.register_with_socketio()

    logger.info(f"Registered {len(router.get_registered_events())} socket event handlers")
    return router


def _make_connect_handler(container):
    identity_service = container.get('IdentityService')

    def handle_connect(auth=None):
        """Authenticate the connection and bind it to its participant."""
        token = auth.get('token') if isinstance(auth, dict) else None
        try:
            participant_id = identity_service.connect(request.sid, token)
        except UnauthenticatedError as e:
            logger.warning(f'Rejecting connection {request.sid}: {e.message}')
            raise ConnectionRefusedError(e.message)

        logger.info(f'Client connected: {request.sid} as {participant_id}')
        emit('connected', {
            'status': 'Connected to PartyRooms server',
            'participant_id': participant_id,
        })

    return handle_connect


def _make_disconnect_handler(container):
    coordinator = container.get('GameCoordinator')

    def handle_disconnect(reason=None):
        """Unbind the connection and purge its participant if it was their last one."""
        logger.info(f'Client disconnected: {request.sid}')
        affected = coordinator.disconnect(request.sid)
        if affected:
            logger.info(f'Removed disconnected client {request.sid} from rooms {affected}')

    return handle_disconnect
