"""
Base Handler Classes

This module provides base classes for Socket.IO handlers with common patterns
for validation, identity lookup and response formatting.
"""

import logging
from abc import ABC
from typing import Any, Dict, Optional, Tuple

from flask import request
from flask_socketio import emit

from src.core.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class BaseHandler(ABC):
    """
    Abstract base class for all Socket.IO handlers.

    Provides service access through the container it is given, identity
    lookup for the requesting connection and standardized responses.
    """

    def __init__(self, container):
        self._container = container

    @property
    def coordinator(self):
        """Get the game coordinator."""
        return self._container.get('GameCoordinator')

    @property
    def identity_service(self):
        """Get the identity service."""
        return self._container.get('IdentityService')

    @property
    def validation_service(self):
        """Get the validation service."""
        return self._container.get('ValidationService')

    @property
    def error_response_factory(self):
        """Get the error response factory service."""
        return self._container.get('ErrorResponseFactory')

    def current_participant(self) -> str:
        """
        Participant bound to the requesting connection.

        Raises:
            UnauthenticatedError: If the connection was never authenticated
        """
        return self.identity_service.resolve(request.sid)  # type: ignore[attr-defined]

    def validate_data_dict(self, data: Any, required_fields: Optional[list] = None) -> Dict[str, Any]:
        """
        Validate that data is a dictionary and contains required fields.

        Raises:
            InvalidArgumentError: If validation fails
        """
        if not isinstance(data, dict):
            raise InvalidArgumentError("Invalid data format - expected dictionary")

        for field in required_fields or []:
            if field not in data:
                raise InvalidArgumentError(f"Missing required field: {field}")

        return data

    def validate_room_data(self, data: Any) -> Tuple[Dict[str, Any], str]:
        """Validate event data carrying a ``room_id``, returning the data and clean room id."""
        validated_data = self.validate_data_dict(data, ['room_id'])
        room_id = self.validation_service.validate_room_id(validated_data['room_id'])
        return validated_data, room_id

    def emit_success(self, event_name: str, data: Optional[Dict[str, Any]] = None) -> None:
        """
        Emit a success response to the requesting client.

        Args:
            event_name: The name of the event to emit
            data: Optional data to include in the response
        """
        response = self.error_response_factory.create_success_response(data or {})
        emit(event_name, response)

    def log_handler_start(self, handler_name: str, data: Any = None) -> None:
        """Log the start of handler execution."""
        logger.info(f'{handler_name} called by client: {request.sid}')  # type: ignore[attr-defined]
        if data:
            logger.debug(f'{handler_name} data: {data}')

    def log_handler_success(self, handler_name: str, message: Optional[str] = None) -> None:
        """Log successful handler completion."""
        log_msg = f'{handler_name} completed successfully for client: {request.sid}'  # type: ignore[attr-defined]
        if message:
            log_msg += f' - {message}'
        logger.info(log_msg)
