import json
from collections import defaultdict

import pytest

from meld.config import Config
from meld.game.room import Room
from meld.server import create_app
from meld.storage import MemoryStore, state_key


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SOCKETIO_ASYNC_MODE = "threading"
    TRUST_PROXY_HEADERS = False
    REDIS_URL = ""


class RoomHarness:
    """Drives a Room directly with an in-memory store and a recording transport."""

    def __init__(self, code="TEST", **options):
        self.code = code
        self.store = MemoryStore()
        self.sent = defaultdict(list)
        self.dead = set()
        self.room = Room(code, self.store, self._send, **options)

    def _send(self, sid, message):
        if sid in self.dead:
            raise ConnectionError("socket closed")
        # Mirror the wire: recipients only ever see serialized JSON.
        self.sent[sid].append(json.loads(json.dumps(message)))

    def connect(self, sid):
        self.room.connect(sid)
        return sid

    def disconnect(self, sid):
        self.room.disconnect(sid)

    def send(self, sid, payload):
        self.room.receive(sid, json.dumps(payload))

    def join(self, sid, name):
        self.connect(sid)
        self.send(sid, {"type": "join", "playerName": name})
        return sid

    def state(self):
        return self.store.get(state_key("meld", self.code))

    def messages(self, sid):
        return list(self.sent[sid])

    def last_state(self, sid):
        states = [m for m in self.sent[sid] if m["type"] == "state"]
        return states[-1] if states else None

    def start_game(self, *players, **start_fields):
        ids = []
        for i, name in enumerate(players, start=1):
            ids.append(self.join(f"p{i}", name))
        self.send(ids[0], {"type": "start", **start_fields})
        return ids


@pytest.fixture()
def harness():
    return RoomHarness()


@pytest.fixture()
def app_and_socketio():
    return create_app(TestConfig)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def socketio(app_and_socketio):
    return app_and_socketio[1]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app, socketio):
    clients = []

    def _connect(room_code="ABCD"):
        test_client = socketio.test_client(flask_app, query_string=f"room={room_code}")
        clients.append(test_client)
        return test_client

    yield _connect

    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
