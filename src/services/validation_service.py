"""
Validation Service for PartyRooms

Provides input validation and sanitization for identifiers and word game answers.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from src.core.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class ValidationService:
    """Service responsible for input validation and sanitization."""

    MAX_ROOM_ID_LENGTH = 64
    MAX_PARTICIPANT_ID_LENGTH = 64
    MAX_CATEGORY_LENGTH = 40
    MAX_CATEGORIES = 12

    # Room ID pattern: alphanumeric, hyphens, underscores (UUIDs included)
    ROOM_ID_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')

    def __init__(self, max_answer_length: int = 100):
        self.max_answer_length = max_answer_length

    def validate_room_id(self, room_id: Any) -> str:
        """
        Validate and sanitize room ID.

        Args:
            room_id: Raw room ID value

        Returns:
            Sanitized room ID

        Raises:
            InvalidArgumentError: If room ID is invalid
        """
        if not room_id or not isinstance(room_id, str):
            raise InvalidArgumentError("Room ID is required")

        room_id = room_id.strip()

        if not room_id:
            raise InvalidArgumentError("Room ID cannot be empty")

        if len(room_id) > self.MAX_ROOM_ID_LENGTH:
            raise InvalidArgumentError(
                f"Room ID must be {self.MAX_ROOM_ID_LENGTH} characters or less",
                {"max_length": self.MAX_ROOM_ID_LENGTH, "actual_length": len(room_id)}
            )

        if not self.ROOM_ID_PATTERN.match(room_id):
            raise InvalidArgumentError(
                "Room ID can only contain letters, numbers, hyphens, and underscores"
            )

        return room_id

    def validate_participant_id(self, participant_id: Any, field_name: str = "participant") -> str:
        """Validate a participant identifier."""
        if not isinstance(participant_id, str) or not participant_id.strip():
            raise InvalidArgumentError(f"{field_name} must be a non-empty string")

        participant_id = participant_id.strip()
        if len(participant_id) > self.MAX_PARTICIPANT_ID_LENGTH:
            raise InvalidArgumentError(
                f"{field_name} must be {self.MAX_PARTICIPANT_ID_LENGTH} characters or less"
            )
        return participant_id

    def validate_participant_list(self, players: Any) -> List[str]:
        """Validate a list of participant identifiers, preserving order."""
        if not isinstance(players, (list, tuple)):
            raise InvalidArgumentError("players must be a list")
        return [self.validate_participant_id(p, "player") for p in players]

    def validate_categories(self, categories: Any) -> Optional[List[str]]:
        """
        Validate an optional list of round categories.

        Returns:
            The stripped categories, or None when none were given
        """
        if categories is None:
            return None

        if not isinstance(categories, list) or not categories:
            raise InvalidArgumentError("categories must be a non-empty list")

        if len(categories) > self.MAX_CATEGORIES:
            raise InvalidArgumentError(
                f"At most {self.MAX_CATEGORIES} categories are allowed",
                {"max_categories": self.MAX_CATEGORIES, "actual": len(categories)}
            )

        cleaned = []
        for category in categories:
            if not isinstance(category, str) or not category.strip():
                raise InvalidArgumentError("categories must be non-empty strings")
            category = category.strip()
            if len(category) > self.MAX_CATEGORY_LENGTH:
                raise InvalidArgumentError(
                    f"Category must be {self.MAX_CATEGORY_LENGTH} characters or less"
                )
            if category in cleaned:
                raise InvalidArgumentError(f"Duplicate category: {category}")
            cleaned.append(category)
        return cleaned

    def validate_answers(self, answers: Any) -> Dict[str, str]:
        """
        Validate a category -> answer text map.

        Answers are kept as submitted apart from the length check; trimming
        is the scorer's business.
        """
        if not isinstance(answers, dict):
            raise InvalidArgumentError("answers must be an object mapping category to text")

        validated = {}
        for category, text in answers.items():
            if not isinstance(category, str) or not category.strip():
                raise InvalidArgumentError("answer categories must be non-empty strings")
            if text is None:
                text = ''
            if not isinstance(text, str):
                raise InvalidArgumentError(f"answer for '{category}' must be a string")
            if len(text) > self.max_answer_length:
                raise InvalidArgumentError(
                    f"answer for '{category}' must be {self.max_answer_length} characters or less",
                    {"max_length": self.max_answer_length, "actual_length": len(text)}
                )
            validated[category.strip()] = text
        return validated
