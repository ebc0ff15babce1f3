from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config
from ludo_server.services.games import RoomRegistry, SessionMap

socketio = SocketIO()
rooms = RoomRegistry()
sessions = SessionMap()


def _allowed_origins(value):
    if not value or value.strip() == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = _allowed_origins(flask_app.config.get('CORS_ALLOWED_ORIGINS'))
    CORS(flask_app, origins=origins)

    socketio.init_app(
        flask_app,
        cors_allowed_origins=origins,
        async_mode=flask_app.config.get('SOCKETIO_ASYNC_MODE'),
        logger=flask_app.config.get('SOCKETIO_LOGGER', False),
        engineio_logger=flask_app.config.get('ENGINEIO_LOGGER', False),
    )

    # Rooms live in process memory only; a new app starts with none
    rooms.init_app(flask_app)
    sessions.init_app(flask_app)

    from ludo_server.main import main
    flask_app.register_blueprint(main)

    from ludo_server.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    flask_app.logger.info(
        f"[startup] version={flask_app.config.get('SERVER_VERSION')} namespace={flask_app.config.get('SOCKETIO_NAMESPACE', '/')}"
    )
    return flask_app
