"""
Core error definitions for PartyRooms

Provides error codes and the game error hierarchy that don't depend on other services.
"""

from enum import Enum
from typing import Dict, Optional


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_STATE = "INVALID_STATE"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class GameError(Exception):
    """Base exception for errors surfaced to the caller of a command."""

    code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidArgumentError(GameError):
    """Malformed or missing fields, wrong participant count."""
    code = ErrorCode.INVALID_ARGUMENT


class InvalidStateError(GameError):
    """Action attempted in a state that forbids it (already started, room full)."""
    code = ErrorCode.INVALID_STATE


class NotFoundError(GameError):
    """Operating on a session or game instance that does not exist."""
    code = ErrorCode.NOT_FOUND


class UnauthenticatedError(GameError):
    """Identity could not be established."""
    code = ErrorCode.UNAUTHENTICATED
