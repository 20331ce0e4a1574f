import json
import os
import sys

import pytest

# Ensure the repository root (containing the app modules) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from app import create_app
from connections import ConnectionManager
from registry import RoomRegistry
from session import SessionRouter


class FakeWebSocket:
    """Records what the server would have sent to a client."""

    def __init__(self):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.sent = []

    async def send_text(self, data):
        self.sent.append(json.loads(data))

    def close(self):
        self.client_state = WebSocketState.DISCONNECTED

    def types(self):
        return [message["type"] for message in self.sent]


@pytest.fixture()
def registry():
    return RoomRegistry()


@pytest.fixture()
def connections():
    return ConnectionManager()


@pytest.fixture()
def session_router(registry, connections):
    return SessionRouter(registry, connections)


@pytest.fixture()
def make_connection(connections):
    def _make():
        return connections.register(FakeWebSocket())
    return _make


@pytest.fixture()
def static_dir(tmp_path):
    (tmp_path / "index.html").write_text("<h1>剪刀石头布</h1>", encoding="utf-8")
    (tmp_path / "game.js").write_text("console.log('ok');")
    (tmp_path / "logo.png").write_bytes(b"\x89PNG\r\n")
    (tmp_path / "notes.xyz").write_text("raw")
    return tmp_path


@pytest.fixture()
def server_app(registry, static_dir):
    return create_app(registry=registry, static_dir=str(static_dir))


@pytest.fixture()
def client(server_app):
    # one portal for every socket, so server-side sends between sessions share a loop
    with TestClient(server_app) as test_client:
        yield test_client
