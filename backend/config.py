import os


def _flag(name, default='0'):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SERVER_VERSION = os.environ.get('SERVER_VERSION', '1.0.0')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Comma-separated list; '*' allows any origin (mobile clients)
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # None lets Flask-SocketIO pick eventlet/gevent/threading
    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE') or None
    SOCKETIO_LOGGER = _flag('SOCKETIO_LOGGER')
    ENGINEIO_LOGGER = _flag('ENGINEIO_LOGGER')
    DEFAULT_GAME_MODE = os.environ.get('DEFAULT_GAME_MODE', 'multiplayer')
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '4'))
