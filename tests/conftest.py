# tests/conftest.py

import pytest
from fastapi.testclient import TestClient
from core.config import Settings
from main import create_app


SECRET = "test-secret"


class FakeModerator:
    """
    Stands in for the chat-completions moderator. `verdict` is returned as is;
    `error` is raised instead when set.
    """
    configured = True

    def __init__(self):
        self.verdict = True
        self.error = None
        self.calls = []

    def is_clean(self, title, content):
        self.calls.append((title, content))
        if self.error is not None:
            raise self.error
        return self.verdict


@pytest.fixture
def settings():
    return Settings(jwt_secret=SECRET, database_url="sqlite://", log_level="WARNING")


@pytest.fixture
def moderator():
    return FakeModerator()


@pytest.fixture
def app(settings, moderator):
    return create_app(settings=settings, moderator=moderator)


@pytest.fixture
def client(app):
    # https so the Secure session cookie is sent back like a browser would.
    with TestClient(app, base_url="https://testserver") as c:
        yield c


@pytest.fixture
def db(app, client):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def register(client, username="alice", email="a@x.com", password="longpassword", full_name=""):
    return client.post("/api/auth/register", json={
        "username": username,
        "email": email,
        "password": password,
        "full_name": full_name,
    })


def login(client, email="a@x.com", password="longpassword"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


@pytest.fixture
def logged_in(client):
    """
    Client holding a valid session cookie for 'alice'.
    """
    assert register(client).status_code == 201
    assert login(client).status_code == 200
    return client
