"""
REST API endpoints for PartyRooms.

Room and game endpoints require ``Authorization: Bearer <token>`` and go through
the same coordinator as Socket.IO events, so their effects are broadcast too.
"""

import logging

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import HTTPException

from src.core.commands import parse_command
from src.core.errors import ErrorCode, GameError, InvalidArgumentError, UnauthenticatedError

logger = logging.getLogger(__name__)


def create_api_blueprint(container):
    """Create and configure the API Blueprint with service dependencies."""
    coordinator = container.get('GameCoordinator')
    identity_service = container.get('IdentityService')
    validation_service = container.get('ValidationService')
    error_response_factory = container.get('ErrorResponseFactory')
    session_directory = container.get('SessionDirectory')
    concurrency_control = container.get('ConcurrencyControlService')

    api = Blueprint('api', __name__, url_prefix='/api')

    def authenticated_participant() -> str:
        header = request.headers.get('Authorization', '')
        scheme, _, token = header.partition(' ')
        if scheme.lower() != 'bearer' or not token.strip():
            raise UnauthenticatedError("Bearer token required")
        return identity_service.authenticate(token.strip())

    def request_json() -> dict:
        body = request.get_json(silent=True)
        if body is None:
            return {}
        if not isinstance(body, dict):
            raise InvalidArgumentError("Request body must be a JSON object")
        return body

    @api.errorhandler(GameError)
    def handle_game_error(error: GameError):
        status = error_response_factory.http_status_for(error.code)
        logger.info(f'{request.method} {request.path} failed: {error.code.value} - {error.message}')
        return jsonify(error_response_factory.create_game_error_response(error)), status

    @api.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        if isinstance(error, HTTPException):
            return error
        error_code, message = error_response_factory.handle_exception(error, request.path)
        return (jsonify(error_response_factory.create_error_response(error_code, message)),
                error_response_factory.http_status_for(ErrorCode.INTERNAL_ERROR))

    @api.route('/health')
    def health():
        """Liveness check with in-memory room and connection counts."""
        return {
            'status': 'ok',
            'rooms': len(session_directory.get_all_sessions()),
            'locked_sessions': concurrency_control.active_lock_count(),
            'connections': identity_service.get_connection_count(),
        }

    @api.route('/game/<room_id>/action', methods=['POST'])
    def game_action(room_id):
        """Apply a game command and return the updated snapshot."""
        participant_id = authenticated_participant()
        room_id = validation_service.validate_room_id(room_id)
        body = request_json()

        command = parse_command(body.get('game_type'), body.get('action'),
                                body.get('payload'), validation_service)
        logger.info(f'Handling {command.game_type.value}/{command.action} for room {room_id} from {participant_id}')

        snapshot = coordinator.execute(room_id, participant_id, command)
        return jsonify(error_response_factory.create_success_response(snapshot))

    @api.route('/rooms/<room_id>/join', methods=['POST'])
    def join_room(room_id):
        participant_id = authenticated_participant()
        room_id = validation_service.validate_room_id(room_id)
        participants = coordinator.join(room_id, participant_id)
        return jsonify(error_response_factory.create_success_response({
            'room_id': room_id,
            'participants': participants,
        }))

    @api.route('/rooms/<room_id>/leave', methods=['POST'])
    def leave_room(room_id):
        participant_id = authenticated_participant()
        room_id = validation_service.validate_room_id(room_id)
        participants = coordinator.leave(room_id, participant_id)
        return jsonify(error_response_factory.create_success_response({
            'room_id': room_id,
            'participants': participants,
        }))

    @api.route('/rooms/<room_id>/participants')
    def list_participants(room_id):
        """Participants of a room in join order, for its members."""
        participant_id = authenticated_participant()
        room_id = validation_service.validate_room_id(room_id)
        return jsonify(error_response_factory.create_success_response({
            'room_id': room_id,
            'participants': coordinator.list_participants(room_id, participant_id),
        }))

    return api
