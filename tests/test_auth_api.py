"""
Integration tests for authentication endpoints
"""
import pytest

pytestmark = pytest.mark.integration


def _register(client, **overrides):
    body = {
        "username": "maria",
        "email": "maria@example.com",
        "password": "long-enough-1",
        "first_name": "Maria",
    }
    body.update(overrides)
    return client.post("/api/auth/register", json=body)


def test_register_sends_welcome_email(client, sender):
    response = _register(client)

    assert response.status_code == 201
    data = response.json()
    assert data["username"] == "maria"
    assert data["has_coaching_access"] is False
    assert "password_hash" not in data
    assert len(sender.sent) == 1
    assert sender.sent[0]["to"] == "maria@example.com"
    assert sender.sent[0]["from"] == "welcome@thrivemidlife.com"


def test_register_duplicate_username(client):
    _register(client)

    response = _register(client, email="other@example.com")

    assert response.status_code == 400
    assert "already exists" in response.json()["message"]


def test_register_invalid_body(client):
    response = _register(client, email="not-an-email")

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid credentials data"}


def test_login_with_username_or_email(client):
    _register(client)

    by_name = client.post("/api/auth/login", json={"username": "maria", "password": "long-enough-1"})
    by_email = client.post("/api/auth/login", json={"username": "maria@example.com", "password": "long-enough-1"})

    assert by_name.status_code == 200
    assert by_email.status_code == 200
    assert by_name.json()["user"]["email"] == "maria@example.com"
    assert by_name.json()["token"]


def test_login_wrong_password(client):
    _register(client)

    response = client.post("/api/auth/login", json={"username": "maria", "password": "nope-nope"})

    assert response.status_code == 401
    assert response.json() == {"message": "Invalid username or password"}


def test_bearer_and_cookie_sessions(client):
    _register(client)
    login = client.post("/api/auth/login", json={"username": "maria", "password": "long-enough-1"})
    token = login.json()["token"]

    via_cookie = client.get("/api/auth/user")
    client.cookies.clear()
    via_header = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})

    assert via_cookie.status_code == 200
    assert via_header.status_code == 200
    assert via_header.json()["username"] == "maria"


def test_unauthenticated_user_is_rejected(client):
    response = client.get("/api/auth/user")

    assert response.status_code == 401
    assert response.json() == {"message": "Not authenticated"}


def test_logout_invalidates_session(client):
    _register(client)
    token = client.post("/api/auth/login", json={"username": "maria", "password": "long-enough-1"}).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    assert client.post("/api/auth/logout", headers=headers).status_code == 204
    client.cookies.clear()

    assert client.get("/api/auth/user", headers=headers).status_code == 401
