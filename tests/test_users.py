"""User administration endpoint tests."""

from __future__ import annotations

from uuid import uuid4

import pytest
from httpx import AsyncClient

from marketplace_api.services.users import UsersService
from tests.support import SeededUser, create_user

pytestmark = pytest.mark.asyncio

USERS_URL = "/api/v1/users"


def _new_user(**overrides):
    payload = {
        "name": "Bob",
        "email": "bob@example.com",
        "password": "hunter22",
        "password_confirm": "hunter22",
    }
    payload.update(overrides)
    return payload


async def test_requires_authentication(async_client: AsyncClient) -> None:
    response = await async_client.get(USERS_URL)
    assert response.status_code == 401


async def test_create_user(async_client: AsyncClient, auth_headers) -> None:
    response = await async_client.post(USERS_URL, json=_new_user(), headers=auth_headers)
    assert response.status_code == 200, response.text
    assert response.json() == {"name": "Bob", "email": "bob@example.com"}

    login = await async_client.post(
        "/api/v1/authentication/login",
        json={"email": "bob@example.com", "password": "hunter22"},
    )
    assert login.status_code == 200


async def test_create_user_rejects_taken_email(
    async_client: AsyncClient, auth_headers, seeded_user: SeededUser
) -> None:
    response = await async_client.post(
        USERS_URL, json=_new_user(email=seeded_user.email), headers=auth_headers
    )
    assert response.status_code == 422
    assert response.json()["error"]["type"] == "email_already_taken"
    assert response.json()["error"]["message"] == "Email is already registered"


async def test_create_user_rejects_mismatched_confirmation(async_client: AsyncClient, auth_headers) -> None:
    response = await async_client.post(
        USERS_URL, json=_new_user(password_confirm="hunter23"), headers=auth_headers
    )
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Password confirmation mismatched"


@pytest.mark.parametrize(
    "overrides",
    [
        {"email": "not-an-email"},
        {"password": "short", "password_confirm": "short"},
        {"password": "x" * 33, "password_confirm": "x" * 33},
        {"name": ""},
    ],
)
async def test_create_user_validation(async_client: AsyncClient, auth_headers, overrides) -> None:
    response = await async_client.post(USERS_URL, json=_new_user(**overrides), headers=auth_headers)
    assert response.status_code == 422
    assert response.json()["error"]["type"] == "validation_error"


async def test_get_user(async_client: AsyncClient, auth_headers, seeded_user: SeededUser) -> None:
    response = await async_client.get(f"{USERS_URL}/{seeded_user.id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"id": str(seeded_user.id), "name": "Alice", "email": seeded_user.email}

    missing = await async_client.get(f"{USERS_URL}/{uuid4()}", headers=auth_headers)
    assert missing.status_code == 422
    assert missing.json()["error"]["message"] == "Unknown user"


async def test_list_users_plain_and_paged(async_client: AsyncClient, auth_headers) -> None:
    for name in ("Carol", "Dave", "Erin"):
        await create_user(name, f"{name.lower()}@example.com", "secret123")

    plain = await async_client.get(USERS_URL, headers=auth_headers)
    assert plain.status_code == 200
    assert [u["name"] for u in plain.json()] == ["Alice", "Carol", "Dave", "Erin"]

    page = await async_client.get(
        USERS_URL, params={"page_number": 2, "page_size": 3}, headers=auth_headers
    )
    body = page.json()
    assert body["page_number"] == 2
    assert body["page_size"] == 3
    assert body["count"] == 1
    assert body["total_pages"] == 2
    assert body["has_previous_page"] is True
    assert body["has_next_page"] is False
    assert [u["name"] for u in body["data"]] == ["Erin"]

    # Page size alone does not paginate.
    only_size = await async_client.get(USERS_URL, params={"page_size": 1}, headers=auth_headers)
    assert isinstance(only_size.json(), list)
    assert len(only_size.json()) == 4


async def test_list_users_search_and_sort(async_client: AsyncClient, auth_headers) -> None:
    await create_user("bob", "bob@corp.test", "secret123")
    await create_user("Zed", "zed@corp.test", "secret123")

    found = await async_client.get(USERS_URL, params={"search": "email:CORP"}, headers=auth_headers)
    assert sorted(u["name"] for u in found.json()) == ["Zed", "bob"]

    ordered = await async_client.get(USERS_URL, params={"sort": "name:desc"}, headers=auth_headers)
    assert [u["name"] for u in ordered.json()] == ["Zed", "bob", "Alice"]

    empty = await async_client.get(
        USERS_URL,
        params={"search": "name:nobody", "page_number": 1, "page_size": 10},
        headers=auth_headers,
    )
    assert empty.json()["total_pages"] == 0
    assert empty.json()["has_next_page"] is False
    assert empty.json()["data"] == []


@pytest.mark.parametrize(
    "params, message",
    [
        ({"search": "password:abc"}, "invalid search field"),
        ({"sort": "hashed_password:asc"}, "invalid sort field"),
        ({"sort": "name:sideways"}, "invalid sort key"),
    ],
)
async def test_list_users_rejects_bad_listing_params(
    async_client: AsyncClient, auth_headers, params, message
) -> None:
    response = await async_client.get(USERS_URL, params=params, headers=auth_headers)
    assert response.status_code == 422
    assert response.json()["error"]["message"] == message


async def test_update_user(async_client: AsyncClient, auth_headers, seeded_user: SeededUser) -> None:
    response = await async_client.put(
        f"{USERS_URL}/{seeded_user.id}",
        json={"name": "Alicia", "email": seeded_user.email},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"id": str(seeded_user.id)}

    fetched = await async_client.get(f"{USERS_URL}/{seeded_user.id}", headers=auth_headers)
    assert fetched.json()["name"] == "Alicia"


async def test_update_user_rejects_email_of_another_user(
    async_client: AsyncClient, auth_headers, seeded_user: SeededUser
) -> None:
    other = await create_user("Frank", "frank@example.com", "secret123")
    response = await async_client.put(
        f"{USERS_URL}/{seeded_user.id}",
        json={"name": "Alice", "email": other.email},
        headers=auth_headers,
    )
    assert response.status_code == 422
    assert response.json()["error"]["type"] == "email_already_taken"


async def test_update_unknown_user(async_client: AsyncClient, auth_headers) -> None:
    response = await async_client.put(
        f"{USERS_URL}/{uuid4()}",
        json={"name": "Nobody", "email": "nobody@example.com"},
        headers=auth_headers,
    )
    assert response.status_code == 422
    assert response.json()["error"]["message"] == "Failed to update user"


async def test_delete_user(async_client: AsyncClient, auth_headers) -> None:
    victim = await create_user("Gina", "gina@example.com", "secret123")

    response = await async_client.delete(f"{USERS_URL}/{victim.id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"id": str(victim.id)}

    again = await async_client.delete(f"{USERS_URL}/{victim.id}", headers=auth_headers)
    assert again.status_code == 422
    assert again.json()["error"]["message"] == "Failed to delete user"


async def test_change_password(async_client: AsyncClient, auth_headers, seeded_user: SeededUser) -> None:
    url = f"{USERS_URL}/{seeded_user.id}/change-password"

    mismatch = await async_client.patch(
        url,
        json={"password_old": seeded_user.password, "password_new": "newpass1", "password_confirm": "newpass2"},
        headers=auth_headers,
    )
    assert mismatch.status_code == 403
    assert mismatch.json()["error"]["message"] == "Password confirmation mismatched"

    wrong_old = await async_client.patch(
        url,
        json={"password_old": "wrongpass", "password_new": "newpass1", "password_confirm": "newpass1"},
        headers=auth_headers,
    )
    assert wrong_old.status_code == 403
    assert wrong_old.json()["error"]["message"] == "Wrong password"

    response = await async_client.patch(
        url,
        json={"password_old": seeded_user.password, "password_new": "newpass1", "password_confirm": "newpass1"},
        headers=auth_headers,
    )
    assert response.status_code == 200

    login = await async_client.post(
        "/api/v1/authentication/login",
        json={"email": seeded_user.email, "password": "newpass1"},
    )
    assert login.status_code == 200


async def test_change_password_unknown_user(async_client: AsyncClient, auth_headers) -> None:
    response = await async_client.patch(
        f"{USERS_URL}/{uuid4()}/change-password",
        json={"password_old": "secret123", "password_new": "newpass1", "password_confirm": "newpass1"},
        headers=auth_headers,
    )
    assert response.status_code == 422
    assert response.json()["error"]["message"] == "Unknown user"


async def test_email_taken_between_check_and_write(
    async_client: AsyncClient, auth_headers, seeded_user: SeededUser, monkeypatch: pytest.MonkeyPatch
) -> None:
    other = await create_user("Hank", "hank@example.com", "secret123")

    async def email_looks_free(self, email, *, exclude_id=None):
        return False

    monkeypatch.setattr(UsersService, "email_is_registered", email_looks_free)

    created = await async_client.post(
        USERS_URL, json=_new_user(email=seeded_user.email), headers=auth_headers
    )
    assert created.status_code == 422
    assert created.json()["error"]["type"] == "email_already_taken"

    updated = await async_client.put(
        f"{USERS_URL}/{other.id}",
        json={"name": "Hank", "email": seeded_user.email},
        headers=auth_headers,
    )
    assert updated.status_code == 422
    assert updated.json()["error"]["message"] == "Email is already registered"
