from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from buzzer.config import Config

cors = CORS()
socketio = SocketIO(async_mode=None)

REGISTRY_EXTENSION = 'buzzer_registry'


def get_registry(flask_app=None):
    """Return the room registry owned by the given (or current) app."""
    if flask_app is None:
        from flask import current_app
        flask_app = current_app
    return flask_app.extensions[REGISTRY_EXTENSION]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS', [])
    cors.init_app(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry per app; it owns every room for the app's lifetime
    from buzzer.registry import RoomRegistry
    flask_app.extensions[REGISTRY_EXTENSION] = RoomRegistry(
        code_length=flask_app.config.get('ROOM_CODE_LENGTH', 6),
        alphabet=flask_app.config.get('ROOM_CODE_ALPHABET'),
    )

    from buzzer.routes import main
    flask_app.register_blueprint(main)

    from buzzer.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from buzzer.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    return flask_app
