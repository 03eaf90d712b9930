"""
Service Container - Composition root for PartyRooms.

Builds every service exactly once, in dependency order, and hands out the
references explicitly. There is no global container: each call to
``build_container`` returns an independent object graph.
"""

import logging
import random
from typing import Any, Callable, Dict, Optional

from config_factory import AppConfig
from src.config.game_settings import GameSettings
from src.engines.card_game_engine import CardGameEngine
from src.engines.word_round_engine import WordRoundEngine
from src.services.broadcast_service import BroadcastService
from src.services.concurrency_control_service import ConcurrencyControlService
from src.services.error_response_factory import ErrorResponseFactory
from src.services.game_coordinator import GameCoordinator
from src.services.identity_service import IdentityService, SignedTokenVerifier
from src.services.room_state_presenter import RoomStatePresenter
from src.services.round_timer_service import RoundTimerService
from src.services.scoring_service import ScoringService, create_scoring_oracle
from src.services.session_directory import SessionDirectory
from src.services.validation_service import ValidationService

logger = logging.getLogger(__name__)


class ServiceNotFoundError(Exception):
    """Raised when requested service is not registered"""
    pass


class ServiceContainer:
    """
    Holds the application's services by name.

    Services are registered by the composition root; nothing is created lazily.
    """

    def __init__(self, app_config: AppConfig):
        self.app_config = app_config
        self._services: Dict[str, Any] = {}

    def register(self, name: str, instance: Any) -> 'ServiceContainer':
        """
        Register a service instance.

        Returns:
            Self for method chaining
        """
        if name in self._services:
            raise ValueError(f"Service '{name}' is already registered")
        self._services[name] = instance
        logger.debug(f"Registered service: {name}")
        return self

    def get(self, name: str) -> Any:
        """
        Get a registered service.

        Raises:
            ServiceNotFoundError: If service is not registered
        """
        if name not in self._services:
            raise ServiceNotFoundError(f"Service '{name}' is not registered")
        return self._services[name]

    def has_service(self, name: str) -> bool:
        return name in self._services

    def get_service_names(self):
        return list(self._services.keys())

    def shutdown(self):
        """Stop background work owned by the services."""
        self.get('RoundTimerService').cancel_all()
        self.get('ScoringService').shutdown()
        logger.info("Service container shut down")

    def __repr__(self) -> str:
        return f"ServiceContainer(services={len(self._services)})"


def build_container(socketio, app_config: AppConfig,
                    game_settings: Optional[GameSettings] = None,
                    scoring_oracle=None,
                    rng: Optional[random.Random] = None,
                    timer_factory: Optional[Callable] = None) -> ServiceContainer:
    """
    Build the PartyRooms object graph.

    Args:
        socketio: Flask-SocketIO instance used for broadcasts
        app_config: Validated application configuration
        game_settings: Game settings, derived from app_config when omitted
        scoring_oracle: Oracle overriding the configured one
        rng: Random source shared by the engines
        timer_factory: ``threading.Timer`` replacement for countdowns

    Returns:
        Container holding every service
    """
    game_settings = game_settings or GameSettings(app_config)
    container = ServiceContainer(app_config)

    # Leaf services - no dependencies
    validation_service = ValidationService(max_answer_length=game_settings.max_answer_length)
    error_response_factory = ErrorResponseFactory()
    concurrency_control = ConcurrencyControlService()
    session_directory = SessionDirectory(max_players_per_room=game_settings.max_players_per_room)
    identity_service = IdentityService(
        SignedTokenVerifier(app_config.secret_key, app_config.token_max_age_seconds)
    )
    round_timer_service = RoundTimerService(timer_factory)
    scoring_service = ScoringService(
        oracle=scoring_oracle or create_scoring_oracle(app_config.scoring_oracle),
        timeout_seconds=game_settings.scoring_oracle_timeout_seconds,
    )

    # Engines
    card_game_engine = CardGameEngine(rng=rng)
    word_round_engine = WordRoundEngine(session_directory, scoring_service, game_settings, rng=rng)

    # Broadcasting
    room_state_presenter = RoomStatePresenter(round_timer_service, game_settings.round_countdown_seconds)
    broadcast_service = BroadcastService(socketio, room_state_presenter)

    coordinator = GameCoordinator(
        session_directory=session_directory,
        identity_service=identity_service,
        card_game_engine=card_game_engine,
        word_round_engine=word_round_engine,
        round_timer_service=round_timer_service,
        broadcast_service=broadcast_service,
        concurrency_control=concurrency_control,
        game_settings=game_settings,
    )

    (container
        .register('GameSettings', game_settings)
        .register('ValidationService', validation_service)
        .register('ErrorResponseFactory', error_response_factory)
        .register('ConcurrencyControlService', concurrency_control)
        .register('SessionDirectory', session_directory)
        .register('IdentityService', identity_service)
        .register('RoundTimerService', round_timer_service)
        .register('ScoringService', scoring_service)
        .register('CardGameEngine', card_game_engine)
        .register('WordRoundEngine', word_round_engine)
        .register('RoomStatePresenter', room_state_presenter)
        .register('BroadcastService', broadcast_service)
        .register('GameCoordinator', coordinator))

    logger.info(f"Built {container!r} with scoring oracle '{app_config.scoring_oracle}'")
    return container
