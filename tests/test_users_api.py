"""Profile tests — read and partial update of the signed-in account."""

import pytest


@pytest.mark.asyncio
async def test_get_profile(client, alice):
    r = await client.get("/api/users/profile", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json() == {"id": alice["id"], "name": "Alice", "email": "alice@example.com"}


@pytest.mark.asyncio
async def test_update_name_keeps_email(client, alice):
    r = await client.put(
        "/api/users/profile", json={"name": "Alice Liddell"}, headers=alice["headers"]
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Alice Liddell"
    assert r.json()["email"] == "alice@example.com"


@pytest.mark.asyncio
async def test_empty_fields_are_ignored(client, alice):
    r = await client.put(
        "/api/users/profile",
        json={"name": "", "email": "", "password": ""},
        headers=alice["headers"],
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Alice"
    assert r.json()["email"] == "alice@example.com"

    # Old password still works
    r = await client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "password_123"}
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_password_change_is_rehashed(client, alice):
    r = await client.put(
        "/api/users/profile", json={"password": "brand_new_pw"}, headers=alice["headers"]
    )
    assert r.status_code == 200

    old = await client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "password_123"}
    )
    new = await client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "brand_new_pw"}
    )
    assert old.status_code == 401
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_change_email_then_login_with_it(client, alice):
    r = await client.put(
        "/api/users/profile", json={"email": "alice@wonderland.org"}, headers=alice["headers"]
    )
    assert r.json()["email"] == "alice@wonderland.org"

    r = await client.post(
        "/api/auth/login", json={"email": "alice@wonderland.org", "password": "password_123"}
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_cannot_take_another_users_email(client, alice, bob):
    r = await client.put(
        "/api/users/profile", json={"email": "bob@example.com"}, headers=alice["headers"]
    )
    assert r.status_code == 400
    assert r.json()["message"] == "User already exists"


@pytest.mark.asyncio
async def test_profile_requires_token(client):
    r = await client.put("/api/users/profile", json={"name": "x"})
    assert r.status_code == 401
