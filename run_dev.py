#!/usr/bin/env python3
"""
Development server runner using Gunicorn with eventlet workers.

Checks the word game file before starting, and prints a connection token for
every participant id given on the command line:

    python run_dev.py alice bob
"""

import os
import subprocess
import sys

import yaml

from config_factory import load_config
from src.content_manager import ContentManager, ContentValidationError
from src.services.identity_service import SignedTokenVerifier


def check_word_game_file(word_game_file: str) -> bool:
    """Validate the word game file; a missing file means built-in defaults."""
    if not os.path.exists(word_game_file):
        print(f"{word_game_file} not found, using built-in letters and categories")
        return True

    content_manager = ContentManager(word_game_file)
    try:
        content_manager.load_from_yaml()
    except (yaml.YAMLError, ContentValidationError) as e:
        print(f"Invalid word game file {word_game_file}: {e}")
        return False

    print(f"Word game: {len(content_manager.letters)} letters, "
          f"{len(content_manager.categories)} default categories")
    return True


def main(participant_ids):
    """Run the development server with Gunicorn."""
    os.environ.setdefault('FLASK_ENV', 'development')
    os.environ.setdefault('PORT', '8000')

    config = load_config()
    if not check_word_game_file(config.word_game_file):
        sys.exit(1)

    if participant_ids:
        verifier = SignedTokenVerifier(config.secret_key, config.token_max_age_seconds)
        print("Connect with auth={'token': ...}, or send 'Authorization: Bearer ...':")
        for participant_id in participant_ids:
            print(f"  {participant_id}: {verifier.issue_token(participant_id)}")

    cmd = [
        'gunicorn',
        '--config', 'gunicorn.conf.py',
        '--reload',
        '--log-level', 'info',
        'wsgi:app'
    ]

    print("Starting PartyRooms development server with Gunicorn...")
    print(f"Server will be available at: http://{config.host}:{config.port}")
    print("Press Ctrl+C to stop the server")
    print("-" * 50)

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        print("\nShutting down development server...")
    except subprocess.CalledProcessError as e:
        print(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main(sys.argv[1:])
