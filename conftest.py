"""
Global pytest configuration and fixtures.
Builds an isolated app, SocketIO server and service container for every test.
"""

import os
import random

import pytest

from config_factory import load_config_from_dict
from tests.helpers.fakes import ManualTimerFactory

# Ensure testing environment
os.environ['TESTING'] = '1'


@pytest.fixture(scope="function")
def app_config():
    """Testing configuration with the threading async mode."""
    return load_config_from_dict({
        'environment': 'testing',
        'flask_env': 'testing',
        'secret_key': 'test-secret-key',
        'debug': True,
        'socketio_async_mode': 'threading',
        'scoring_oracle': 'none',
        'scoring_oracle_timeout_seconds': 2.0,
    })


@pytest.fixture(scope="function")
def timer_factory():
    """Countdown timers that only fire when a test fires them."""
    return ManualTimerFactory()


@pytest.fixture(scope="function")
def app_bundle(app_config, timer_factory):
    from app import create_app

    app, socketio, container = create_app(
        app_config, timer_factory=timer_factory, rng=random.Random(1234)
    )
    yield app, socketio, container
    container.shutdown()


@pytest.fixture(scope="function")
def app(app_bundle):
    """Flask app for testing."""
    return app_bundle[0]


@pytest.fixture(scope="function")
def socketio(app_bundle):
    """SocketIO instance for testing."""
    return app_bundle[1]


@pytest.fixture(scope="function")
def container(app_bundle):
    """Service container behind the test app."""
    return app_bundle[2]


@pytest.fixture(scope="function")
def issue_token(container):
    """Issue identity tokens signed with the test secret."""
    return container.get('IdentityService').verifier.issue_token


@pytest.fixture(scope="function")
def connect_client(app, socketio, issue_token):
    """Connect authenticated Socket.IO test clients, disconnecting them afterwards."""
    clients = []

    def _connect(participant_id):
        client = socketio.test_client(app, auth={'token': issue_token(participant_id)})
        clients.append(client)
        return client

    yield _connect

    for client in clients:
        if client.is_connected():
            client.disconnect()


@pytest.fixture(scope="function")
def http_client(app):
    return app.test_client()
