"""User administration endpoints"""

import pytest
from fastapi import status

NEW_USER = {"name": "Grace Wanjiru", "email": "grace@example.com", "password": "securepass1"}


@pytest.mark.asyncio
async def test_create_user_with_role(client, admin_headers, seeded):
    response = await client.post(
        "/users", json={**NEW_USER, "role_id": seeded["Teacher"]}, headers=admin_headers
    )

    assert response.status_code == status.HTTP_201_CREATED
    user = response.json()
    assert user["status"] == "ACTIVE"
    assert "password" not in user and "password_hash" not in user

    roles = await client.get(f"/users/{user['id']}/roles", headers=admin_headers)
    assert [role["name"] for role in roles.json()] == ["Teacher"]


@pytest.mark.asyncio
async def test_create_user_duplicate_email(client, admin_headers, admin_user):
    response = await client.post(
        "/users", json={**NEW_USER, "email": admin_user.email.upper()}, headers=admin_headers
    )

    assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.asyncio
async def test_create_user_unknown_role(client, admin_headers):
    response = await client.post(
        "/users", json={**NEW_USER, "role_id": "no-such-role"}, headers=admin_headers
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    listing = await client.get("/users", headers=admin_headers)
    assert NEW_USER["email"] not in [u["email"] for u in listing.json()]


@pytest.mark.asyncio
async def test_update_user(client, admin_headers, make_user):
    user = await make_user()

    response = await client.put(
        f"/users/{user.id}", json={"name": "Renamed User"}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Renamed User"
    assert response.json()["email"] == user.email


@pytest.mark.asyncio
async def test_soft_deleted_user_disappears(client, admin_headers, make_user):
    user = await make_user()

    deleted = await client.delete(f"/users/{user.id}", headers=admin_headers)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT

    assert (await client.get(f"/users/{user.id}", headers=admin_headers)).status_code == 404
    listing = await client.get("/users", headers=admin_headers)
    assert user.id not in [u["id"] for u in listing.json()]


@pytest.mark.asyncio
async def test_activate_and_deactivate(client, admin_headers, make_user):
    user = await make_user()

    deactivated = await client.post(f"/users/{user.id}/deactivate", headers=admin_headers)
    assert deactivated.json()["status"] == "INACTIVE"

    inactive = await client.get("/users", params={"status": "INACTIVE"}, headers=admin_headers)
    assert [u["id"] for u in inactive.json()] == [user.id]

    activated = await client.post(f"/users/{user.id}/activate", headers=admin_headers)
    assert activated.json()["status"] == "ACTIVE"


@pytest.mark.asyncio
async def test_assign_role_twice_conflicts(client, admin_headers, make_user, seeded):
    user = await make_user()
    url = f"/users/{user.id}/assign-role"

    first = await client.post(url, json={"role_id": seeded["Clerk"]}, headers=admin_headers)
    second = await client.post(url, json={"role_id": seeded["Clerk"]}, headers=admin_headers)

    assert first.status_code == status.HTTP_201_CREATED
    assert second.status_code == status.HTTP_409_CONFLICT


@pytest.mark.asyncio
async def test_user_changes_are_audited(client, admin_headers, admin_user):
    created = await client.post("/users", json=NEW_USER, headers=admin_headers)

    logs = await client.get(
        "/logs", params={"module": "USER_MANAGEMENT", "user_id": admin_user.id}, headers=admin_headers
    )

    entries = logs.json()["items"]
    assert any(
        e["action"] == "created" and e["entity_id"] == created.json()["id"] for e in entries
    )
