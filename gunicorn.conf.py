"""
Gunicorn configuration for PartyRooms.
Optimized for Socket.IO with eventlet workers.
"""

import os
import sys
import logging
import yaml
from src.content_manager import ContentManager, ContentValidationError


def on_starting(server):
    """
    Server hook that runs when the master process is starting.
    We use this to validate the word game YAML file before workers are forked.
    If validation fails, we exit, preventing the server from starting.
    """
    logger = logging.getLogger(__name__)
    word_game_file = app_config.word_game_file
    if not os.path.exists(word_game_file):
        logger.info(f"{word_game_file} not found, workers will use built-in letters and categories")
        return

    logger.info(f"Validating {word_game_file} before starting workers...")
    try:
        content_manager = ContentManager(word_game_file)
        content_manager.load_from_yaml()
        logger.info(f"Successfully validated {len(content_manager.letters)} letters "
                    f"and {len(content_manager.categories)} categories.")
    except (yaml.YAMLError, ContentValidationError) as e:
        logger.critical(f"FATAL: Word game file validation failed. Server shutting down. Error: {e}")
        sys.exit(1)

from config_factory import load_config

# Load configuration (renamed to avoid conflicts with gunicorn's internal 'config')
app_config = load_config()

# Server socket
bind = f"{app_config.host}:{app_config.port}"
backlog = 2048

# Worker processes
workers = 1  # Must be 1: sessions live in process memory
worker_class = "eventlet"
worker_connections = app_config.worker_connections
timeout = app_config.timeout
keepalive = app_config.keepalive

# Logging
accesslog = "-"
errorlog = "-"
loglevel = app_config.log_level
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

# Process naming
proc_name = "partyrooms"

# Server mechanics
preload_app = False  # Don't preload for Socket.IO
daemon = False
pidfile = None
user = None
group = None
tmp_upload_dir = None

# SSL (for production)
keyfile = None
certfile = None
