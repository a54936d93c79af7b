import os
import sys
from types import SimpleNamespace

import pytest

# Ensure the backend root (containing the `trivia` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from trivia.game.engine import RoundEngine
from trivia.game.history import HistoryStore
from trivia.game.players import PlayerRegistry
from trivia.game.rooms import RoomStore
from trivia.server import create_app


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ORIGINS = '*'
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = 'threading'
    LOG_LEVEL = 'DEBUG'
    PUBLIC_DIR = ''
    MAX_ROUNDS = 3
    PACING_DELAY_SEC = 0


class Recorder:
    """Stands in for socketio.emit: keeps every (sid, event, payload)."""

    def __init__(self):
        self.sent = []

    def __call__(self, sid, event, payload):
        self.sent.append((sid, event, payload))

    def events(self, sid, name=None):
        return [(e, p) for s, e, p in self.sent if s == sid and (name is None or e == name)]

    def payloads(self, sid, name):
        return [p for e, p in self.events(sid, name)]

    def clear(self):
        self.sent.clear()


class ManualScheduler:
    """Collects pacing callbacks so a test decides when they fire."""

    def __init__(self):
        self.pending = []

    def __call__(self, delay, fn, *args):
        self.pending.append((delay, fn, args))

    def fire_next(self):
        delay, fn, args = self.pending.pop(0)
        fn(*args)
        return delay

    def fire_all(self):
        while self.pending:
            self.fire_next()


@pytest.fixture()
def session(tmp_path):
    sent = Recorder()
    scheduler = ManualScheduler()
    players = PlayerRegistry()
    rooms = RoomStore()
    history = HistoryStore(tmp_path / 'rooms.json')
    engine = RoundEngine(rooms, history, emit=sent, schedule=scheduler, max_rounds=3, pacing_delay=5)
    return SimpleNamespace(sent=sent, scheduler=scheduler, players=players, rooms=rooms, history=history, engine=engine)


@pytest.fixture()
def seat(session):
    """seat('h', 'p') -> (room, [host, p]) with every pid identified on sid-<pid>."""

    def _seat(*pids):
        seated = [session.players.identify(pid, f'sid-{pid}')[0] for pid in pids]
        room = session.rooms.create(session.rooms.generate_code(), seated[0])
        for p in seated[1:]:
            session.rooms.add_player(room, p)
        return room, seated

    return _seat


@pytest.fixture()
def make_app(tmp_path):
    def _make_app(**overrides):
        settings = {'HISTORY_FILE': str(tmp_path / 'rooms.json')}
        settings.update(overrides)
        application, sio = create_app(type('Config', (TestConfig,), settings))
        application.config['SOCKETIO'] = sio
        return application

    return _make_app


@pytest.fixture()
def flask_app(make_app):
    yield make_app()


@pytest.fixture()
def socketio(flask_app):
    return flask_app.config['SOCKETIO']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app, socketio):
    """connect('pid') -> identified Socket.IO test client."""
    clients = []

    def _connect(pid=None):
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        if pid is not None:
            test_client.emit('IDENTIFY', {'pid': pid})
        clients.append(test_client)
        return test_client

    yield _connect

    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
