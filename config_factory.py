"""
Configuration Factory - Centralized configuration management for PartyRooms
Provides type-safe configuration with validation and environment-specific settings.
"""

import os
import logging
from typing import Any, Dict, Optional, Type
from enum import Enum
from dataclasses import dataclass, field


DEV_SECRET_KEY = 'dev-secret-key-change-in-production'

SCORING_ORACLES = ('none', 'letter')


class Environment(Enum):
    """Environment types for configuration"""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ConfigError(Exception):
    """Configuration-related errors"""
    pass


@dataclass
class AppConfig:
    """Application configuration with type safety and validation"""

    # Core Flask settings
    secret_key: str = field(default_factory=lambda: DEV_SECRET_KEY)
    debug: bool = False
    flask_env: str = 'development'

    # Server settings
    host: str = '0.0.0.0'
    port: int = 5000
    socketio_async_mode: str = 'eventlet'

    # Room settings
    max_players_per_room: int = 8
    min_players_required: int = 2  # minimum players to start a word game

    # Word game settings
    round_countdown_seconds: int = 10
    auto_countdown_on_first_submission: bool = True
    word_game_file: str = 'word_game.yaml'
    max_answer_length: int = 100  # characters per category answer

    # Scoring oracle settings
    scoring_oracle: str = 'none'
    scoring_oracle_timeout_seconds: float = 5.0

    # Identity settings
    token_max_age_seconds: int = 86400

    # Gunicorn settings (for production deployment)
    worker_connections: int = 1000
    timeout: int = 30
    keepalive: int = 2
    log_level: str = 'info'

    # Environment
    environment: Environment = Environment.DEVELOPMENT

    def __post_init__(self):
        """Validate configuration after initialization"""
        self._validate()

    def _validate(self):
        """Validate configuration values"""
        if self.port < 1 or self.port > 65535:
            raise ConfigError(f"Invalid port number: {self.port}")

        if self.max_players_per_room < 2 or self.max_players_per_room > 50:
            raise ConfigError(f"Invalid max_players_per_room: {self.max_players_per_room}")

        if self.min_players_required < 2 or self.min_players_required > self.max_players_per_room:
            raise ConfigError(f"Invalid min_players_required: {self.min_players_required}")

        if self.round_countdown_seconds < 1 or self.round_countdown_seconds > 600:
            raise ConfigError(f"Invalid round_countdown_seconds: {self.round_countdown_seconds}")

        if self.max_answer_length < 1 or self.max_answer_length > 1000:
            raise ConfigError(f"Invalid max_answer_length: {self.max_answer_length}")

        if self.scoring_oracle not in SCORING_ORACLES:
            raise ConfigError(f"Invalid scoring_oracle: {self.scoring_oracle}")

        if self.scoring_oracle_timeout_seconds <= 0 or self.scoring_oracle_timeout_seconds > 120:
            raise ConfigError(f"Invalid scoring_oracle_timeout_seconds: {self.scoring_oracle_timeout_seconds}")

        if self.token_max_age_seconds < 1:
            raise ConfigError(f"Invalid token_max_age_seconds: {self.token_max_age_seconds}")

        if self.socketio_async_mode not in ('eventlet', 'threading', 'gevent'):
            raise ConfigError(f"Invalid socketio_async_mode: {self.socketio_async_mode}")

        if self.environment == Environment.PRODUCTION and self.secret_key == DEV_SECRET_KEY:
            raise ConfigError("Production environment requires a secure SECRET_KEY")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode"""
        return self.environment == Environment.TESTING


class ConfigurationFactory:
    """
    Factory for creating application configuration.

    Features:
    - Environment variable loading with type conversion
    - Configuration validation
    - Environment-specific defaults
    """

    def __init__(self):
        """Initialize the configuration factory"""
        self._logger = logging.getLogger(__name__)
        self._env_overrides: Dict[str, Any] = {}
        self._config: Optional[AppConfig] = None

    def load_from_environment(self, env_prefix: str = '') -> AppConfig:
        """
        Load configuration from environment variables.

        Args:
            env_prefix: Optional prefix for environment variables (e.g., 'PARTYROOMS_')

        Returns:
            Configured AppConfig instance
        """
        def get_env_var(key: str, default: Any = None, var_type: Type = str) -> Any:
            """Get environment variable with type conversion"""
            env_key = f"{env_prefix}{key}" if env_prefix else key
            value = os.environ.get(env_key)

            if value is None:
                return default

            if var_type == bool:
                return value.lower() in ('true', '1', 'yes', 'on')
            elif var_type == int:
                try:
                    return int(value)
                except ValueError:
                    self._logger.warning(f"Invalid integer value for {env_key}: {value}, using default: {default}")
                    return default
            elif var_type == float:
                try:
                    return float(value)
                except ValueError:
                    self._logger.warning(f"Invalid float value for {env_key}: {value}, using default: {default}")
                    return default
            else:
                return value

        flask_env = get_env_var('FLASK_ENV', 'development')
        if flask_env == 'development':
            environment = Environment.DEVELOPMENT
            debug = True
        elif flask_env == 'testing':
            environment = Environment.TESTING
            debug = True
        else:
            environment = Environment.PRODUCTION
            debug = False

        config = AppConfig(
            # Core Flask settings
            secret_key=get_env_var('SECRET_KEY', DEV_SECRET_KEY),
            debug=get_env_var('DEBUG', debug, bool),
            flask_env=flask_env,

            # Server settings
            host=get_env_var('HOST', '0.0.0.0'),
            port=get_env_var('PORT', 5000, int),
            socketio_async_mode=get_env_var('SOCKETIO_ASYNC_MODE', 'eventlet'),

            # Room settings
            max_players_per_room=get_env_var('MAX_PLAYERS_PER_ROOM', 8, int),
            min_players_required=get_env_var('MIN_PLAYERS_REQUIRED', 2, int),

            # Word game settings
            round_countdown_seconds=get_env_var('ROUND_COUNTDOWN_SECONDS', 10, int),
            auto_countdown_on_first_submission=get_env_var('AUTO_COUNTDOWN_ON_FIRST_SUBMISSION', True, bool),
            word_game_file=get_env_var('WORD_GAME_FILE', 'word_game.yaml'),
            max_answer_length=get_env_var('MAX_ANSWER_LENGTH', 100, int),

            # Scoring oracle settings
            scoring_oracle=get_env_var('SCORING_ORACLE', 'none'),
            scoring_oracle_timeout_seconds=get_env_var('SCORING_ORACLE_TIMEOUT_SECONDS', 5.0, float),

            # Identity settings
            token_max_age_seconds=get_env_var('TOKEN_MAX_AGE_SECONDS', 86400, int),

            # Gunicorn settings
            worker_connections=get_env_var('WORKER_CONNECTIONS', 1000, int),
            timeout=get_env_var('TIMEOUT', 30, int),
            keepalive=get_env_var('KEEPALIVE', 2, int),
            log_level=get_env_var('LOG_LEVEL', 'info'),

            environment=environment
        )

        for key, value in self._env_overrides.items():
            if hasattr(config, key):
                setattr(config, key, value)
        config._validate()

        self._config = config
        self._logger.info(f"Configuration loaded for environment: {environment.value}")
        return config

    def load_from_dict(self, config_dict: Dict[str, Any]) -> AppConfig:
        """
        Load configuration from dictionary (useful for testing).

        Args:
            config_dict: Dictionary of configuration values

        Returns:
            Configured AppConfig instance
        """
        config_dict = dict(config_dict)
        if 'environment' in config_dict and isinstance(config_dict['environment'], str):
            config_dict['environment'] = Environment(config_dict['environment'])

        self._config = AppConfig(**config_dict)
        return self._config

    def use_config(self, config: AppConfig) -> AppConfig:
        """Adopt an already-built configuration."""
        self._config = config
        return config

    def override_setting(self, key: str, value: Any) -> 'ConfigurationFactory':
        """
        Override a specific configuration setting.

        Args:
            key: Configuration key to override
            value: New value for the setting

        Returns:
            Self for method chaining
        """
        self._env_overrides[key] = value

        if self._config and hasattr(self._config, key):
            setattr(self._config, key, value)
            self._config._validate()

        return self

    def get_config(self) -> AppConfig:
        """
        Get the configuration loaded by this factory.

        Raises:
            ConfigError: If no configuration has been loaded
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded. Call load_from_environment() or load_from_dict() first.")
        return self._config

    def to_dict(self) -> Dict[str, Any]:
        """Convert current configuration to dictionary"""
        if self._config is None:
            raise ConfigError("Configuration not loaded")

        config_dict = {}
        for field_info in self._config.__dataclass_fields__.values():
            value = getattr(self._config, field_info.name)
            if isinstance(value, Environment):
                config_dict[field_info.name] = value.value
            else:
                config_dict[field_info.name] = value

        return config_dict

    def get_flask_config(self) -> Dict[str, Any]:
        """
        Get Flask-compatible configuration dictionary.

        Returns:
            Dictionary suitable for Flask app.config.update()
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded")

        return {
            'SECRET_KEY': self._config.secret_key,
            'DEBUG': self._config.debug,
            'ENV': self._config.flask_env,
            'TESTING': self._config.is_testing,
            'MAX_PLAYERS_PER_ROOM': self._config.max_players_per_room,
            'MIN_PLAYERS_REQUIRED': self._config.min_players_required,
            'ROUND_COUNTDOWN_SECONDS': self._config.round_countdown_seconds,
            'WORD_GAME_FILE': self._config.word_game_file,
        }


def load_config(env_prefix: str = '') -> AppConfig:
    """Load configuration from environment variables"""
    return ConfigurationFactory().load_from_environment(env_prefix)


def load_config_from_dict(config_dict: Dict[str, Any]) -> AppConfig:
    """Load configuration from dictionary"""
    return ConfigurationFactory().load_from_dict(config_dict)
