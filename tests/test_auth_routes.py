import pytest

from tests.factories import create_user

pytestmark = pytest.mark.db_isolation


def test_register_logs_in(client):
    resp = client.post("/register", json={"username": "newuser", "password": "secret123"})
    assert resp.status_code == 201
    assert resp.get_json()["user"]["username"] == "newuser"
    # Session cookie lets the turn API through
    assert client.post("/game/api/turn", json={"action": []}).status_code == 200


def test_register_duplicate_username_case_insensitive(client):
    create_user("Dup", "pw")
    resp = client.post("/register", data={"username": "dup", "password": "pw"})
    assert resp.status_code == 409
    assert resp.get_json() == {"error": "username_taken"}


def test_register_requires_both_fields(client):
    resp = client.post("/register", json={"username": "someone"})
    assert resp.status_code == 400


def test_login_success_and_logout(client):
    create_user("loginuser", "pass123")
    resp = client.post("/login", data={"username": "LoginUser", "password": "pass123"})
    assert resp.status_code == 200
    assert resp.get_json()["ok"] is True
    assert client.post("/logout").status_code == 200
    assert client.post("/game/api/turn", json={"action": []}).status_code == 401


def test_login_failure(client):
    create_user("someone", "right")
    resp = client.post("/login", json={"username": "someone", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "invalid_credentials"}


def test_logout_requires_auth(client):
    resp = client.post("/logout")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "login_required"}
