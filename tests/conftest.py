import os
import sys
import pytest

# Ensure the project root (containing the `baucua` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from baucua import create_app, socketio, registry
from baucua.services.games import TimerHandle, RoundScheduler, GameRoom

NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SOCKETIO_NAMESPACE = NAMESPACE
    CORS_ORIGINS = ['http://localhost:3000']
    LOG_LEVEL = 'DEBUG'
    MIN_PLAYERS = 2
    MAX_PLAYERS = 8
    DEFAULT_TIME_LIMIT = 30
    DEFAULT_ROUND_LIMIT = 5
    DEFAULT_STARTING_BALANCE = 10
    CHAT_HISTORY_LIMIT = 100


class ManualTimers:
    """Records scheduled callbacks; tests fire them one at a time."""

    def __init__(self):
        self.pending = []

    def schedule(self, delay, callback, *args):
        handle = TimerHandle(delay)
        self.pending.append((handle, callback, args))
        return handle

    @property
    def live(self):
        return [entry for entry in self.pending if not entry[0].cancelled]

    def fire_next(self):
        while self.pending:
            handle, callback, args = self.pending.pop(0)
            if handle.cancelled:
                continue
            callback(handle, *args)
            return handle
        return None

    def run_until(self, predicate, limit=500):
        for _ in range(limit):
            if predicate():
                return
            if self.fire_next() is None:
                break
        assert predicate(), 'timers drained before condition was met'


class FixedRng:
    """Stands in for random: ``choice`` hands out faces from a script."""

    def __init__(self, faces=None):
        self.faces = list(faces or [])

    def script(self, *faces):
        self.faces.extend(faces)

    def choice(self, seq):
        return self.faces.pop(0) if self.faces else seq[0]


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, code, event, payload):
        self.events.append((code, event, payload))

    def names(self):
        return [e[1] for e in self.events]

    def payloads(self, name):
        return [e[2] for e in self.events if e[1] == name]


@pytest.fixture()
def timers():
    return ManualTimers()


@pytest.fixture()
def rng():
    return FixedRng()


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def round_scheduler(timers, recorder, rng):
    return RoundScheduler(timers=timers, emit=recorder, rng=rng)


@pytest.fixture()
def game_room():
    """A lobby with Alice (host) and Bob."""
    room = GameRoom('ABCDEF')
    room.add_player('alice', 'Alice')
    room.add_player('bob', 'Bob')
    return room


@pytest.fixture()
def flask_app(timers, rng):
    application = create_app(TestConfig, timers=timers, rng=rng)
    yield application
    registry.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace=NAMESPACE
    )
    yield test_client
    try:
        test_client.disconnect(namespace=NAMESPACE)
    except Exception:
        pass


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        c = socketio.test_client(flask_app, namespace=NAMESPACE)
        clients.append(c)
        return c

    yield _make
    for c in clients:
        try:
            c.disconnect(namespace=NAMESPACE)
        except Exception:
            pass
