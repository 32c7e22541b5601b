# tests/test_auth.py

from datetime import datetime
from sqlalchemy.exc import OperationalError
from conftest import login, register
from core.errors import ValidationError
from database import get_db
from models.user import User


def test_register_returns_user_without_password(client):
    res = register(client, full_name="Alice Liddell")
    assert res.status_code == 201
    body = res.json()
    assert body["id"] > 0
    assert body["username"] == "alice"
    assert body["email"] == "a@x.com"
    assert body["full_name"] == "Alice Liddell"
    assert body["is_active"] is True
    assert body["deleted_at"] is None
    assert "password" not in body
    assert "hashed_password" not in body
    assert "longpassword" not in res.text


def test_register_stores_hash_not_plaintext(client, db):
    register(client)
    user = db.query(User).filter(User.username == "alice").one()
    assert user.hashed_password != "longpassword"
    assert "longpassword" not in user.hashed_password


def test_register_validation(client):
    cases = [
        {"username": "al", "email": "a@x.com", "password": "longpassword"},
        {"username": "a" * 51, "email": "a@x.com", "password": "longpassword"},
        {"username": "alice", "email": "not-an-email", "password": "longpassword"},
        {"username": "alice", "email": "a@x.com", "password": "short"},
        {"email": "a@x.com", "password": "longpassword"},
    ]
    for payload in cases:
        res = client.post("/api/auth/register", json=payload)
        assert res.status_code == 422, payload
        assert res.json()["kind"] == "validation"
        assert res.json()["error"]


def test_register_rejects_malformed_json(client):
    res = client.post(
        "/api/auth/register",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert res.status_code == 400
    assert res.json() == {"error": "invalid JSON", "kind": "bad_request"}


def test_register_conflicts_on_username_or_email(client):
    assert register(client).status_code == 201

    same_name = register(client, email="other@x.com")
    assert same_name.status_code == 409
    assert same_name.json() == {"error": "username or email already in use", "kind": "conflict"}

    same_email = register(client, username="bob")
    assert same_email.status_code == 409


def test_soft_deleted_user_frees_username(client, db):
    register(client)
    user = db.query(User).filter(User.username == "alice").one()
    user.deleted_at = datetime.now()
    db.commit()

    assert register(client).status_code == 201


def test_login_sets_session_cookie(client):
    register(client)
    res = login(client)
    assert res.status_code == 200

    body = res.json()
    assert body["message"] == "login successful"
    assert body["user"]["username"] == "alice"
    assert body["user"]["email"] == "a@x.com"
    assert "password" not in body["user"]
    assert "token" not in res.text.lower()

    cookie = res.headers["set-cookie"]
    assert cookie.startswith("auth_token=")
    lowered = cookie.lower()
    assert "httponly" in lowered
    assert "secure" in lowered
    assert "samesite=strict" in lowered
    assert "path=/" in lowered
    assert "expires=" in lowered


def test_login_failures_are_indistinguishable(client):
    register(client)

    wrong_password = login(client, password="wrong")
    unknown_email = login(client, email="nobody@x.com")

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["error"] == "invalid email or password"
    assert "set-cookie" not in wrong_password.headers


def test_login_requires_valid_email(client):
    res = login(client, email="nope")
    assert res.status_code == 422


def test_logout_expires_cookie(logged_in):
    res = logged_in.post("/api/auth/logout")
    assert res.status_code == 200
    assert res.json() == {"message": "logout successful"}

    cookie = res.headers["set-cookie"].lower()
    assert cookie.startswith("auth_token=")
    assert "max-age=0" in cookie
    assert "httponly" in cookie
    assert "samesite=strict" in cookie

    assert logged_in.get("/api/posts").status_code == 401


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok", "database": "connected"}

    root = client.get("/")
    assert root.json()["status"] == "success"


def test_unknown_route_uses_error_shape(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.json()["kind"] == "bad_request"


def test_soft_deleted_user_cannot_log_in(client, db):
    register(client)
    user = db.query(User).filter(User.username == "alice").one()
    user.deleted_at = datetime.now()
    db.commit()

    res = login(client)
    assert res.status_code == 401
    assert res.json() == {"error": "invalid email or password", "kind": "auth"}


def test_validation_errors_use_validation_error_status(client):
    res = register(client, username="al")
    assert res.status_code == ValidationError.status_code
    assert res.json()["kind"] == ValidationError.kind.value
    assert res.json()["error"].startswith("username:")


# -------------------------------
# Storage failures
# -------------------------------

class StubQuery:
    def __init__(self, session):
        self.session = session

    def filter(self, *args):
        return self

    def count(self):
        if self.session.fail_on == "count":
            raise OperationalError("SELECT count(*)", {}, Exception("disk I/O error"))
        return 0


class StubSession:
    def __init__(self, fail_on):
        self.fail_on = fail_on
        self.rolled_back = False

    def query(self, *args):
        return StubQuery(self)

    def add(self, obj):
        pass

    def commit(self):
        if self.fail_on == "commit":
            raise OperationalError("INSERT INTO users", {}, Exception("disk I/O error"))

    def refresh(self, obj):
        pass

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


def _register_with(app, client, session):
    app.dependency_overrides[get_db] = lambda: session
    try:
        return register(client)
    finally:
        app.dependency_overrides.clear()


def test_register_duplicate_check_failure_is_storage_error(app, client):
    res = _register_with(app, client, StubSession(fail_on="count"))
    assert res.status_code == 500
    assert res.json() == {"error": "db error", "kind": "storage"}
    assert "disk" not in res.text


def test_register_insert_failure_is_storage_error(app, client):
    session = StubSession(fail_on="commit")
    res = _register_with(app, client, session)
    assert res.status_code == 500
    assert res.json() == {"error": "insert error", "kind": "storage"}
    assert session.rolled_back
