"""
Game Settings Configuration Module

Provides the game-facing subset of the application configuration,
replacing hardcoded constants throughout the codebase.
"""

import logging
from typing import List, Optional

logger = logging.getLogger(__name__)

# 22 letters of the Hebrew alphabet, final forms excluded
DEFAULT_LETTERS = list('אבגדהוזחטיכלמנסעפצקרשת')

# City, country, animal, plant
DEFAULT_CATEGORIES = ['עיר', 'ארץ', 'חי', 'צומח']


class GameSettings:
    """Game settings derived from an AppConfig."""

    def __init__(self, app_config=None, letters: Optional[List[str]] = None,
                 categories: Optional[List[str]] = None):
        """
        Initialize game settings.

        Args:
            app_config: Application configuration instance from config_factory
            letters: Prompt letter alphabet, overriding the built-in one
            categories: Default round categories, overriding the built-in ones
        """
        self._config = app_config
        self._letters = list(letters) if letters else list(DEFAULT_LETTERS)
        self._categories = list(categories) if categories else list(DEFAULT_CATEGORIES)

    @property
    def max_players_per_room(self) -> int:
        """Maximum players allowed in one session."""
        if self._config is None:
            return 8
        return self._config.max_players_per_room

    @property
    def min_players_required(self) -> int:
        """Minimum players required to start a word game."""
        if self._config is None:
            return 2
        return self._config.min_players_required

    @property
    def round_countdown_seconds(self) -> int:
        """Seconds between a countdown start and automatic round resolution."""
        if self._config is None:
            return 10
        return self._config.round_countdown_seconds

    @property
    def auto_countdown_on_first_submission(self) -> bool:
        """Whether the first answer of a round starts the countdown."""
        if self._config is None:
            return True
        return self._config.auto_countdown_on_first_submission

    @property
    def max_answer_length(self) -> int:
        """Maximum characters accepted for a single category answer."""
        if self._config is None:
            return 100
        return self._config.max_answer_length

    @property
    def scoring_oracle_timeout_seconds(self) -> float:
        """Upper bound on a single scoring oracle call."""
        if self._config is None:
            return 5.0
        return self._config.scoring_oracle_timeout_seconds

    @property
    def letters(self) -> List[str]:
        """Prompt letter alphabet."""
        return list(self._letters)

    @property
    def default_categories(self) -> List[str]:
        """Categories used when a round is started without any."""
        return list(self._categories)
