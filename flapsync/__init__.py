from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__, static_folder=config_class.STATIC_DIR, static_url_path='')
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config['CORS_ORIGINS']
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # The registry lives on the app so each app (and each test) gets its own rooms
    from flapsync.services.registry import RoomRegistry
    from flapsync.services.relay import RelayService
    registry = RoomRegistry(
        start_delay_ms=flask_app.config['ROOM_START_DELAY_MS'],
        name_max_length=flask_app.config['PLAYER_NAME_MAX_LENGTH'],
        logger=flask_app.logger,
    )
    flask_app.extensions['flapsync'] = RelayService(
        registry,
        default_room_id=flask_app.config['DEFAULT_ROOM_ID'],
        chat_max_length=flask_app.config['CHAT_MAX_LENGTH'],
        logger=flask_app.logger,
    )

    from flapsync.routes import main
    flask_app.register_blueprint(main)

    from flapsync.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config['SOCKETIO_NAMESPACE'])

    return flask_app
