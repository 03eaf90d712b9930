"""
Services package for PartyRooms

Contains the service classes the composition root wires together.
"""

from .session_directory import SessionDirectory
from .identity_service import IdentityService, SignedTokenVerifier
from .concurrency_control_service import ConcurrencyControlService
from .scoring_service import ScoringService
from .round_timer_service import RoundTimerService
from .game_coordinator import GameCoordinator

__all__ = [
    'SessionDirectory',
    'IdentityService',
    'SignedTokenVerifier',
    'ConcurrencyControlService',
    'ScoringService',
    'RoundTimerService',
    'GameCoordinator'
]
