import os
import sys
import pytest

# Ensure the project root (containing `config.py` and the `flapsync` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config import Config
from flapsync import create_app, socketio


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SOCKETIO_NAMESPACE = '/'


class RecordingTransport:
    """Stands in for Socket.IO: records what one connection sends and joins."""

    def __init__(self, network, sid):
        self.network = network
        self.sid = sid

    def enter(self, room_id):
        self.network.members.setdefault(room_id, set()).add(self.sid)

    def leave(self, room_id):
        self.network.members.get(room_id, set()).discard(self.sid)

    def send(self, event, data):
        self.network.inbox(self.sid).append((event, data))

    def broadcast(self, room_id, event, data):
        for sid in list(self.network.members.get(room_id, ())):
            if sid != self.sid:
                self.network.inbox(sid).append((event, data))


class FakeNetwork:
    def __init__(self):
        self.members = {}
        self.inboxes = {}

    def inbox(self, sid):
        return self.inboxes.setdefault(sid, [])

    def transport(self, sid):
        return RecordingTransport(self, sid)

    def received(self, sid, event=None):
        """Pop everything delivered to ``sid``, optionally only one event type."""
        packets = self.inboxes.pop(sid, [])
        return [data for name, data in packets if event is None or name == event]


@pytest.fixture()
def network():
    return FakeNetwork()


@pytest.fixture()
def static_dir(tmp_path):
    (tmp_path / 'index.html').write_text('<!doctype html><title>flapsync</title>')
    (tmp_path / 'game.js').write_text('console.log("flap");')
    return tmp_path


@pytest.fixture()
def flask_app(static_dir):
    class _Config(TestConfig):
        STATIC_DIR = str(static_dir)

    application = create_app(_Config)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def relay(flask_app):
    return flask_app.extensions['flapsync']


@pytest.fixture()
def sio_client_factory(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
        )
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except RuntimeError:
            pass
