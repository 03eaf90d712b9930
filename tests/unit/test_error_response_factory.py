"""
Unit tests for ErrorResponseFactory and the handler error decorator.
"""

from unittest.mock import patch

from src.core.errors import (
    ErrorCode,
    GameError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    UnauthenticatedError,
)
from src.services.error_response_factory import ErrorResponseFactory, with_error_handling


class TestErrorResponseFactory:
    """Test response shapes."""

    def setup_method(self):
        """Set up test fixtures."""
        self.factory = ErrorResponseFactory()

    def test_success_response(self):
        """Test the success envelope."""
        assert self.factory.create_success_response({'x': 1}) == {'success': True, 'data': {'x': 1}}

    def test_error_response(self):
        """Test the error envelope."""
        response = self.factory.create_error_response(ErrorCode.NOT_FOUND, "gone")

        assert response == {
            'success': False,
            'error': {'code': 'NOT_FOUND', 'message': 'gone', 'details': {}},
        }

    def test_game_error_response(self):
        """Test building a response from a game error."""
        error = InvalidStateError("room full", {'max_players': 8})

        response = self.factory.create_game_error_response(error)

        assert response['error']['code'] == 'INVALID_STATE'
        assert response['error']['details'] == {'max_players': 8}

    def test_http_status(self):
        """Test the error code to HTTP status mapping."""
        assert self.factory.http_status_for(InvalidArgumentError.code) == 400
        assert self.factory.http_status_for(UnauthenticatedError.code) == 401
        assert self.factory.http_status_for(NotFoundError.code) == 404
        assert self.factory.http_status_for(InvalidStateError.code) == 409
        assert self.factory.http_status_for(GameError.code) == 500

    def test_handle_exception(self):
        """Test that unexpected exceptions become internal errors."""
        assert self.factory.handle_exception(NotFoundError("nope")) == (ErrorCode.NOT_FOUND, "nope")
        assert self.factory.handle_exception(KeyError("x"), "ctx") == (
            ErrorCode.INTERNAL_ERROR, "An internal error occurred"
        )


class TestWithErrorHandling:
    """Test the handler decorator."""

    @patch('src.services.error_response_factory.emit')
    def test_game_error_is_emitted(self, mock_emit):
        """Test that game errors become error events."""
        @with_error_handling
        def handler():
            raise InvalidArgumentError("bad", {'field': 'room_id'})

        handler()

        mock_emit.assert_called_once_with('error', {
            'success': False,
            'error': {'code': 'INVALID_ARGUMENT', 'message': 'bad', 'details': {'field': 'room_id'}},
        })

    @patch('src.services.error_response_factory.emit')
    def test_unexpected_error_is_masked(self, mock_emit):
        """Test that unexpected exceptions are reported without internals."""
        @with_error_handling
        def handler():
            raise RuntimeError("secret internals")

        handler()

        event, payload = mock_emit.call_args.args
        assert event == 'error'
        assert payload['error']['code'] == 'INTERNAL_ERROR'
        assert 'secret' not in payload['error']['message']

    @patch('src.services.error_response_factory.emit')
    def test_success_passes_through(self, mock_emit):
        """Test that a successful handler is untouched."""
        @with_error_handling
        def handler(value):
            return value * 2

        assert handler(21) == 42
        assert handler.__name__ == 'handler'
        mock_emit.assert_not_called()
