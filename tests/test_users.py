# tests/test_users.py

from todo_api.config import AUTH_HEADER
from todo_api.models import User

from .helpers import auth


def test_register_returns_user_and_token(client):
    resp = client.post("/users", json={"email": "alice@mail.com", "password": "secret123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["email"] == "alice@mail.com"
    assert body["id"]
    assert "password" not in body
    assert "hashed_password" not in body
    assert "tokens" not in body
    assert resp.headers[AUTH_HEADER]


def test_password_is_hashed_at_rest(client, register, db_session_factory):
    user, _ = register("alice@mail.com", "secret123")
    db = db_session_factory()
    try:
        stored = db.get(User, user["id"])
        assert stored.hashed_password != "secret123"
        assert stored.hashed_password.startswith("$2")
        assert len(stored.tokens) == 1
        assert stored.tokens[0]["access"] == "auth"
    finally:
        db.close()


def test_duplicate_email_is_rejected(client, register):
    register("alice@mail.com")
    resp = client.post("/users", json={"email": "alice@mail.com", "password": "another1"})
    assert resp.status_code == 400


def test_register_validation_errors_are_400(client):
    assert client.post("/users", json={"email": "not-an-email", "password": "secret123"}).status_code == 400
    assert client.post("/users", json={"email": "bob@mail.com", "password": "123"}).status_code == 400
    assert client.post("/users", json={"email": "bob@mail.com"}).status_code == 400


def test_me_requires_token(client):
    assert client.get("/users/me").status_code == 401
    assert client.get("/users/me", headers=auth("garbage")).status_code == 401


def test_me_returns_caller(client, register):
    user, token = register("alice@mail.com")
    resp = client.get("/users/me", headers=auth(token))
    assert resp.status_code == 200
    assert resp.json() == {"id": user["id"], "email": "alice@mail.com"}


def test_login_issues_new_token(client, register):
    user, first = register("alice@mail.com", "secret123")
    resp = client.post("/users/login", json={"email": "alice@mail.com", "password": "secret123"})
    assert resp.status_code == 200
    assert resp.json()["id"] == user["id"]
    second = resp.headers[AUTH_HEADER]
    assert second != first
    assert client.get("/users/me", headers=auth(second)).status_code == 200


def test_login_with_bad_credentials(client, register):
    register("alice@mail.com", "secret123")
    wrong_password = client.post("/users/login", json={"email": "alice@mail.com", "password": "wrong-one"})
    assert wrong_password.status_code == 400
    assert AUTH_HEADER not in wrong_password.headers
    unknown = client.post("/users/login", json={"email": "nobody@mail.com", "password": "secret123"})
    assert unknown.status_code == 400


def test_logout_revokes_only_presented_token(client, register):
    register("alice@mail.com", "secret123")
    login = client.post("/users/login", json={"email": "alice@mail.com", "password": "secret123"})
    first = login.headers[AUTH_HEADER]
    login = client.post("/users/login", json={"email": "alice@mail.com", "password": "secret123"})
    second = login.headers[AUTH_HEADER]

    resp = client.delete("/users/me/token", headers=auth(first))
    assert resp.status_code == 200
    assert resp.content == b""

    assert client.get("/users/me", headers=auth(first)).status_code == 401
    assert client.get("/users/me", headers=auth(second)).status_code == 200


def test_logout_requires_token(client):
    assert client.delete("/users/me/token").status_code == 401
