"""Authentication endpoint tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from jose import jwt

from tests.support import SeededUser

pytestmark = pytest.mark.asyncio

LOGIN_URL = "/api/v1/authentication/login"


async def _login(client: AsyncClient, email: str, password: str):
    return await client.post(LOGIN_URL, json={"email": email, "password": password})


async def test_health(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["message"] == "Healthy"


async def test_login_and_me(async_client: AsyncClient, seeded_user: SeededUser) -> None:
    response = await _login(async_client, seeded_user.email, seeded_user.password)
    assert response.status_code == 200, response.text
    payload = response.json()
    assert payload["email"] == seeded_user.email
    assert payload["name"] == seeded_user.name
    assert payload["user_id"] == str(seeded_user.id)

    me = await async_client.get(
        "/api/v1/authentication/me",
        headers={"Authorization": f"Bearer {payload['token']}"},
    )
    assert me.status_code == 200
    assert me.json() == {"id": str(seeded_user.id), "name": "Alice", "email": seeded_user.email}


async def test_wrong_password_and_unknown_email_look_alike(
    async_client: AsyncClient, seeded_user: SeededUser
) -> None:
    wrong = await _login(async_client, seeded_user.email, "not-the-password")
    unknown = await _login(async_client, "ghost@example.com", "whatever")

    for response in (wrong, unknown):
        assert response.status_code == 403
        body = response.json()
        assert body["error"]["type"] == "invalid_credentials"
        assert body["error"]["message"] == "Wrong email or password"


async def test_fifth_failure_locks_email(async_client: AsyncClient, seeded_user: SeededUser) -> None:
    for _ in range(4):
        response = await _login(async_client, seeded_user.email, "bad-password")
        assert response.json()["error"]["message"] == "Wrong email or password"

    response = await _login(async_client, seeded_user.email, "bad-password")
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Too many failed login attempts"

    # Correct credentials are refused while the lock holds.
    response = await _login(async_client, seeded_user.email, seeded_user.password)
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Too many failed login attempts"


async def test_lockout_is_per_email(async_client: AsyncClient, seeded_user: SeededUser) -> None:
    for _ in range(5):
        await _login(async_client, "ghost@example.com", "bad-password")

    response = await _login(async_client, seeded_user.email, seeded_user.password)
    assert response.status_code == 200


async def test_success_resets_failures(async_client: AsyncClient, seeded_user: SeededUser) -> None:
    for _ in range(4):
        await _login(async_client, seeded_user.email, "bad-password")
    assert (await _login(async_client, seeded_user.email, seeded_user.password)).status_code == 200

    response = await _login(async_client, seeded_user.email, "bad-password")
    assert response.json()["error"]["message"] == "Wrong email or password"


async def test_login_validation_error_envelope(async_client: AsyncClient) -> None:
    response = await async_client.post(LOGIN_URL, json={"email": "alice@example.com"})
    assert response.status_code == 422
    body = response.json()
    assert body["status"] == 422
    assert body["error"]["type"] == "validation_error"
    assert body["path"] == LOGIN_URL
    assert body["method"] == "POST"


async def test_me_requires_token(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/v1/authentication/me")
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Not authenticated"


async def test_me_rejects_bad_tokens(async_client: AsyncClient, seeded_user: SeededUser) -> None:
    garbage = await async_client.get(
        "/api/v1/authentication/me", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert garbage.status_code == 401
    assert garbage.json()["error"]["message"] == "Invalid token"

    forged = jwt.encode(
        {"sub": str(seeded_user.id), "type": "access"}, "some-other-secret", algorithm="HS256"
    )
    response = await async_client.get(
        "/api/v1/authentication/me", headers={"Authorization": f"Bearer {forged}"}
    )
    assert response.status_code == 401


async def test_expired_token_is_rejected(async_client: AsyncClient, seeded_user: SeededUser) -> None:
    now = datetime.now(tz=timezone.utc)
    token = jwt.encode(
        {"sub": str(seeded_user.id), "type": "access", "exp": now - timedelta(minutes=1)},
        "test-secret-key-for-tests",
        algorithm="HS256",
    )
    response = await async_client.get(
        "/api/v1/authentication/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid token"


async def test_correlation_id_is_echoed(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/v1/health", headers={"X-Correlation-ID": "abc-123"})
    assert response.headers["X-Correlation-ID"] == "abc-123"

    error = await async_client.get("/api/v1/authentication/me", headers={"X-Correlation-ID": "abc-456"})
    assert error.json()["correlation_id"] == "abc-456"
