"""
Shared pytest fixtures.

Every test gets its own in-memory SQLite database and an application built
around an explicit context with a fake WhatsApp bridge.
"""
import os
import sys
from pathlib import Path

# Configure before any inbox module reads the environment
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-0123456789abcdef0123456789"
os.environ["WHATSAPP_PHONE_ID"] = ""
os.environ["WHATSAPP_TOKEN"] = ""
os.environ["VERIFY_TOKEN"] = ""

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from fastapi.testclient import TestClient

from inbox.context import AppContext
from inbox.db.session import build_engine, build_session_factory, init_db


class FakeBridge:
    """Stands in for WhatsAppBridge: records handlers and outbound sends"""

    def __init__(self):
        self.handlers = []
        self.sent = []
        self.fail = False

    def on_message(self, handler):
        self.handlers.append(handler)
        return handler

    def send_text(self, number, text):
        if self.fail:
            raise RuntimeError("bridge offline")
        self.sent.append((number, text))

    def emit(self, event):
        for handler in self.handlers:
            handler(event)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def bridge():
    return FakeBridge()


@pytest.fixture
def context(session_factory, bridge):
    return AppContext(session_factory=session_factory, bridge=bridge)


@pytest.fixture
def app(context):
    from inbox.main import create_app
    return create_app(context)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client):
    """Register a user through the API; returns (headers, user_json)"""
    counter = {"n": 0}

    def _register(name="Agent", email=None, password="secret123", role=None):
        counter["n"] += 1
        body = {
            "name": name,
            "email": email or f"agent{counter['n']}@example.com",
            "password": password,
        }
        if role:
            body["role"] = role
        response = client.post("/api/auth/register", json=body)
        assert response.status_code == 201, response.text
        data = response.json()
        return {"x-auth-token": data["token"]}, data["user"]

    return _register


@pytest.fixture
def agent(register):
    return register(name="Ana Agent", email="ana@example.com")


@pytest.fixture
def admin(register):
    return register(name="Root Admin", email="root@example.com", role="admin")


@pytest.fixture
def chat(client, agent):
    headers, _ = agent
    response = client.post(
        "/api/chats",
        json={"contact": {"name": "Carlos", "number": "5511988887777"}},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
