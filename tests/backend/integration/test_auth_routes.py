import uuid

import pytest


pytestmark = pytest.mark.asyncio


async def register_user(client, username: str, email: str, password: str):
    return await client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": email, "password": password},
    )


async def login_user(client, username: str, password: str):
    return await client.post(
        "/api/v1/auth/login",
        json={"username": username, "password": password},
    )


async def test_register_and_login_flow(client):
    username = f"user_{uuid.uuid4().hex[:6]}"
    email = f"{username}@Example.com"
    password = "StrongPass!23"

    resp = await register_user(client, username, email, password)
    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["username"] == username
    assert body["data"]["email"] == email.lower()

    # Duplicate username should fail
    dup_resp = await register_user(client, username, "other@example.com", password)
    assert dup_resp.json()["success"] is False
    assert dup_resp.json()["error"]["code"] == "USERNAME_EXISTS"

    # Duplicate email (case-insensitive) should fail
    dup_email = await register_user(client, "someone_else", email.upper(), password)
    assert dup_email.json()["error"]["code"] == "EMAIL_EXISTS"

    login_resp = await login_user(client, username, password)
    login_body = login_resp.json()
    assert login_resp.status_code == 200
    assert login_body["success"] is True
    assert "accessToken" in login_body["data"]
    assert "accessToken" in login_resp.cookies

    bad_login = await login_user(client, username, "wrong")
    assert bad_login.status_code == 401
    assert bad_login.json()["detail"]["code"] == "AUTH_INVALID_CREDENTIALS"


async def test_register_requires_password(client):
    resp = await register_user(client, "nopass", "nopass@example.com", "")
    assert resp.json()["success"] is False
    assert resp.json()["error"]["code"] == "BAD_REQUEST"


async def test_me_and_logout(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.username, password)

    me_resp = await client.get("/api/v1/auth/me", headers=headers)
    assert me_resp.status_code == 200
    assert me_resp.json()["data"]["username"] == user.username
    assert me_resp.json()["data"]["role"] == "user"
    assert set(me_resp.json()["data"]) == {"id", "username", "email", "role"}
    assert me_resp.json()["data"]["id"] == str(user.id)

    logout_resp = await client.post("/api/v1/auth/logout", headers=headers)
    assert logout_resp.status_code == 200
    assert logout_resp.json()["success"] is True


async def test_auth_requires_token(client):
    unauth_me = await client.get("/api/v1/auth/me")
    assert unauth_me.status_code == 401
    assert unauth_me.json()["detail"] == "AUTH_REQUIRED"

    bad_token = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert bad_token.status_code == 401
    assert bad_token.json()["detail"] == "AUTH_INVALID_TOKEN"
