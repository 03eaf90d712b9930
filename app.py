"""
PartyRooms - Multiplayer party games (Eretz-Ir and War) over Socket.IO.
Main Flask application entry point focusing on app creation, service wiring and handler registration.
"""

from flask import Flask
from flask_socketio import SocketIO
import os
import logging
import sys
import yaml

from config_factory import AppConfig, ConfigurationFactory
from container import build_container
from src.config.game_settings import GameSettings
from src.content_manager import ContentManager, ContentValidationError
from src.handlers.socket_handlers import register_socket_handlers
from src.routes.api import create_api_blueprint

logger = logging.getLogger(__name__)


def configure_logging(app_config: AppConfig):
    logging.basicConfig(
        level=getattr(logging, app_config.log_level.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def load_game_settings(app_config: AppConfig) -> GameSettings:
    """Game settings with the word list from the YAML file when it exists."""
    if not os.path.exists(app_config.word_game_file):
        logger.info(f"{app_config.word_game_file} not found, using built-in letters and categories")
        return GameSettings(app_config)

    content_manager = ContentManager(app_config.word_game_file)
    content_manager.load_from_yaml()
    return GameSettings(
        app_config,
        letters=content_manager.letters,
        categories=content_manager.categories,
    )


def create_app(app_config: AppConfig = None, **container_overrides):
    """
    Create the Flask app, its SocketIO server and the service graph.

    Args:
        app_config: Configuration to use, loaded from the environment when omitted
        **container_overrides: Passed to build_container (rng, timer_factory, scoring_oracle)

    Returns:
        Tuple of (app, socketio, container)
    """
    config_factory = ConfigurationFactory()
    if app_config is None:
        app_config = config_factory.load_from_environment()
    else:
        config_factory.use_config(app_config)

    configure_logging(app_config)

    app = Flask(__name__)
    app.config.update(config_factory.get_flask_config())

    # In production, restrict to explicitly allowed origins from SOCKETIO_CORS_ALLOWED_ORIGINS (comma-separated)
    allowed_origins_env = os.environ.get('SOCKETIO_CORS_ALLOWED_ORIGINS', '')
    if app_config.is_production:
        cors_allowed = [o.strip() for o in allowed_origins_env.split(',') if o.strip()]
        socketio = SocketIO(app, cors_allowed_origins=cors_allowed or [],
                            async_mode=app_config.socketio_async_mode)
    else:
        socketio = SocketIO(app, cors_allowed_origins="*", async_mode=app_config.socketio_async_mode)

    game_settings = container_overrides.pop('game_settings', None) or load_game_settings(app_config)
    container = build_container(socketio, app_config, game_settings=game_settings, **container_overrides)

    app.register_blueprint(create_api_blueprint(container))
    register_socket_handlers(socketio, container)

    app.extensions['partyrooms'] = container
    logger.info(f"PartyRooms app created for environment: {app_config.environment.value}")
    return app, socketio, container


if __name__ == '__main__':
    try:
        app, socketio, container = create_app()
    except (FileNotFoundError, yaml.YAMLError, ContentValidationError) as e:
        logging.basicConfig(level=logging.INFO)
        logger.critical(f"FATAL: Word game file validation failed. Server shutting down. Error: {e}")
        sys.exit(1)

    app_config = container.app_config
    logger.info(f"Starting PartyRooms server on {app_config.host}:{app_config.port}")
    try:
        socketio.run(app, host=app_config.host, port=app_config.port, debug=app_config.debug)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
    finally:
        container.shutdown()
