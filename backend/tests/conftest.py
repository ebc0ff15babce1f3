import os
import sys
import pytest

# Ensure the backend root (containing the `ludo_server` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from ludo_server import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    SERVER_VERSION = 'test'
    LOG_LEVEL = 'DEBUG'
    CORS_ALLOWED_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    SOCKETIO_ASYNC_MODE = 'threading'
    SOCKETIO_LOGGER = False
    ENGINEIO_LOGGER = False
    DEFAULT_GAME_MODE = 'multiplayer'
    ROOM_CODE_LENGTH = 4


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    """Factory for Socket.IO test clients; every client is disconnected afterwards."""
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        if test_client.is_connected():
            test_client.disconnect()


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()
