from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config
from baucua.services.games import RoomRegistry, RoundScheduler, BackgroundTimers

cors = CORS()
socketio = SocketIO(async_mode=None)
registry = RoomRegistry()
scheduler = RoundScheduler()


def room_channel(code):
    return f"room:{code}"


def create_app(config_class=Config, timers=None, rng=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = flask_app.config.get('CORS_ORIGINS') or '*'
    cors.init_app(flask_app, supports_credentials=True, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')

    def broadcast(code, event, payload):
        socketio.emit(event, payload, to=room_channel(code), namespace=namespace)

    # Rooms live in memory only; a new app starts with an empty registry
    registry.init_app(flask_app)
    scheduler.init_app(
        flask_app,
        timers=timers or BackgroundTimers(socketio),
        emit=broadcast,
        rng=rng,
    )

    from baucua.main import main
    flask_app.register_blueprint(main)

    from baucua.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace, broadcast=broadcast)

    flask_app.logger.info(f"[startup] namespace={namespace} max_players={registry.max_players}")
    return flask_app
