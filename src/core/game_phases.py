"""
Game Phase Enumerations

Defines the game types and status values used throughout the application.
"""

from enum import Enum


class GameType(Enum):
    """Games a session can host."""
    WAR = "war"
    ERATZ_IR = "eratz-ir"


class CardGameStatus(Enum):
    """Card game status enumeration."""
    ONGOING = "ongoing"
    FINISHED = "finished"


class WordRoundStatus(Enum):
    """Word game status enumeration."""
    WAITING = "waiting"
    IN_PROGRESS = "in-progress"
    PLAYING_ROUND = "playing-round"
    ENDED = "ended"
