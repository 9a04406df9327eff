"""
Shared fixtures: fake transport connections, an in-memory call store, and a
TestClient wired to a fresh signaling hub for every test.
"""

import json
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app import app
from backend import get_call_store
from relay import SignalingHub


class FakeConnection:
    """Stands in for a WebSocket: records every frame sent to it."""

    def __init__(self, name: str = "conn", fail: bool = False):
        self.name = name
        self.fail = fail
        self.sent = []

    async def send_text(self, text: str):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(json.loads(text))

    def events(self):
        return [message["event"] for message in self.sent]

    def __repr__(self):
        return f"FakeConnection({self.name!r})"


class InMemoryCallStore:
    """Same interface as RedisBackend, backed by a dict."""

    def __init__(self):
        self.calls = {}

    def ping(self):
        return True

    def create_call(self, room_id, call_data):
        record = {
            "room_id": room_id,
            "status": "initiated",
            "duration_seconds": 0,
            "created_at": datetime.now().isoformat(),
            **{k: v for k, v in call_data.items() if v is not None},
        }
        self.calls[room_id] = record
        return dict(record)

    def get_call(self, room_id):
        record = self.calls.get(room_id)
        return dict(record) if record else None

    def list_calls_for(self, user_id, user_type, limit=50):
        matches = [
            call for call in self.calls.values()
            if (call["caller_id"] == user_id and call["caller_type"] == user_type)
            or (call["receiver_id"] == user_id and call["receiver_type"] == user_type)
        ]
        matches.sort(key=lambda call: call["created_at"], reverse=True)
        return [dict(call) for call in matches[:limit]]

    def update_call_status(self, room_id, status, duration=None):
        record = self.calls.get(room_id)
        if record is None:
            return None
        record["status"] = status
        if status == "started":
            record["started_at"] = datetime.now().isoformat()
        elif status == "ended":
            record["ended_at"] = datetime.now().isoformat()
            record["duration_seconds"] = duration or 0
        return dict(record)


@pytest.fixture
def hub():
    return SignalingHub()


@pytest.fixture
def connections():
    """Factory for named fake connections."""
    def make(name, fail=False):
        return FakeConnection(name, fail=fail)
    return make


@pytest.fixture
def call_store():
    return InMemoryCallStore()


@pytest.fixture
def client(call_store):
    app.state.hub = SignalingHub()
    app.dependency_overrides[get_call_store] = lambda: call_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
