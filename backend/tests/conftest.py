import os
import sys
import pytest

# Ensure the backend root (containing the `buzzer` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from buzzer import create_app, socketio, get_registry
from buzzer.registry import RoomRegistry
from buzzer.services.channel import EventChannel


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    ROOM_CODE_LENGTH = 6
    ROOM_CODE_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'
    BUZZ_BROADCAST = 'ledger'
    SOCKETIO_NAMESPACE = '/'
    CORS_ALLOWED_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'


class FixedCodes:
    """Stand-in for ``random`` that hands out predetermined room codes."""

    def __init__(self, *codes):
        self.codes = list(codes)

    def choices(self, alphabet, k):
        code = self.codes.pop(0)
        assert len(code) == k
        return list(code)


class RecordingChannel(EventChannel):
    """Event channel that records every call instead of sending anything."""

    def __init__(self):
        self.sent = []
        self.subscriptions = set()

    def emit_to_connection(self, connection_id, event, payload=None):
        self.sent.append(('connection', connection_id, event, payload))

    def emit_to_room(self, room_code, event, payload=None):
        self.sent.append(('room', room_code, event, payload))

    def subscribe(self, connection_id, room_code):
        self.subscriptions.add((connection_id, room_code))

    def unsubscribe(self, connection_id, room_code):
        self.subscriptions.discard((connection_id, room_code))

    def close_room(self, room_code):
        self.subscriptions = {s for s in self.subscriptions if s[1] != room_code}

    def events(self, name):
        return [s for s in self.sent if s[2] == name]


@pytest.fixture()
def registry():
    return RoomRegistry()


@pytest.fixture()
def channel():
    return RecordingChannel()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def app_registry(flask_app):
    return get_registry(flask_app)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Builds connected Socket.IO test clients and disconnects them afterwards."""
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except RuntimeError:
            pass


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()
