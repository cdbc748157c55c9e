"""User endpoints and the user <-> role association routes."""

import pytest

from tests.conftest import fetch_audit_logs

MISSING_ID = 9999999


async def _create_user(client, headers, email="linus@example.com"):
    response = await client.post(
        "/api/v1/users",
        json={"name": "Linus", "email": email, "password": "Kern3l#91x", "department": "Kernel"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_create_user_response_envelope(async_client, auth_headers):
    response = await async_client.post(
        "/api/v1/users",
        json={"name": "Ada Lovelace", "email": "ada@example.com", "password": "Engin3!ne"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["bizCode"] == 0
    assert body["message"] == "User created"
    user = body["data"]
    assert user["email"] == "ada@example.com"
    assert user["status"] == "active"
    assert user["roles"] == []
    assert "createdAt" in user
    assert "password" not in user and "passwordHash" not in user


@pytest.mark.asyncio
async def test_weak_password_rejected(async_client, auth_headers):
    response = await async_client.post(
        "/api/v1/users",
        json={"name": "Weak", "email": "weak@example.com", "password": "password"},
        headers=auth_headers,
    )
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "INVALID_INPUT"
    assert "password" in body["errors"]


@pytest.mark.asyncio
async def test_list_users_paginated_and_filtered(async_client, auth_headers):
    await _create_user(async_client, auth_headers, "one@example.com")
    await _create_user(async_client, auth_headers, "two@example.com")

    response = await async_client.get("/api/v1/users?page=1&pageSize=2", headers=auth_headers)
    assert response.status_code == 200
    page = response.json()["data"]
    assert page["total"] == 3
    assert page["page"] == 1
    assert page["pageSize"] == 2
    assert len(page["items"]) == 2

    filtered = await async_client.get("/api/v1/users?email=two", headers=auth_headers)
    assert [u["email"] for u in filtered.json()["data"]["items"]] == ["two@example.com"]


@pytest.mark.asyncio
async def test_update_user_records_before_and_after(async_client, auth_headers, session_factory):
    user = await _create_user(async_client, auth_headers)

    response = await async_client.put(
        f"/api/v1/users/{user['id']}", json={"department": "Ops"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["department"] == "Ops"

    update_log = (await fetch_audit_logs(session_factory))[-1]
    assert (update_log.action, update_log.resource, update_log.resource_id) == ("UPDATE", "USER", user["id"])
    assert update_log.details["before"]["department"] == "Kernel"
    assert update_log.details["after"]["department"] == "Ops"


@pytest.mark.asyncio
async def test_delete_user(async_client, auth_headers, session_factory):
    user = await _create_user(async_client, auth_headers)

    response = await async_client.delete(f"/api/v1/users/{user['id']}", headers=auth_headers)
    assert response.status_code == 200

    missing = await async_client.get(f"/api/v1/users/{user['id']}", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["code"] == "RESOURCE_NOT_FOUND"

    delete_log = [log for log in await fetch_audit_logs(session_factory) if log.action == "DELETE"]
    assert len(delete_log) == 1
    assert delete_log[0].resource_id == user["id"]
    assert delete_log[0].details["deletedObj"]["email"] == user["email"]


@pytest.mark.asyncio
async def test_assign_and_remove_roles(async_client, auth_headers, admin, roles, session_factory):
    r1, r2, _ = roles
    url = f"/api/v1/users/{admin['id']}/roles"

    assigned = await async_client.post(url, json={"roleIds": [r1, r2]}, headers=auth_headers)
    assert assigned.status_code == 200, assigned.text
    assert [r["id"] for r in assigned.json()["data"]] == [r1, r2]

    rejected = await async_client.request(
        "DELETE", url, json={"roleIds": [r1, MISSING_ID]}, headers=auth_headers
    )
    assert rejected.status_code == 400
    error = rejected.json()
    assert error["code"] == "INVALID_ASSOCIATION_IDS"
    assert error["errors"]["missingIds"] == [MISSING_ID]

    current = await async_client.get(url, headers=auth_headers)
    assert [r["id"] for r in current.json()["data"]] == [r1, r2]

    removed = await async_client.request("DELETE", url, json={"roleIds": [r1]}, headers=auth_headers)
    assert removed.status_code == 200
    assert [r["id"] for r in removed.json()["data"]] == [r2]

    logs = [log for log in await fetch_audit_logs(session_factory) if log.action in ("CREATE", "DELETE")]
    assert [(log.action, log.resource, log.resource_id) for log in logs] == [
        ("CREATE", "USER", admin["id"]),
        ("DELETE", "USER", admin["id"]),
    ]
    assert logs[0].details == {"userId": admin["id"], "roleIds": [r1, r2]}


@pytest.mark.asyncio
async def test_assign_empty_list(async_client, auth_headers, admin, roles):
    url = f"/api/v1/users/{admin['id']}/roles"
    await async_client.post(url, json={"roleIds": [roles[0]]}, headers=auth_headers)

    response = await async_client.post(url, json={"roleIds": []}, headers=auth_headers)

    assert response.status_code == 200
    assert [r["id"] for r in response.json()["data"]] == [roles[0]]


@pytest.mark.asyncio
async def test_assign_roles_to_missing_user(async_client, auth_headers, roles):
    response = await async_client.post(
        f"/api/v1/users/{MISSING_ID}/roles", json={"roleIds": roles}, headers=auth_headers
    )

    assert response.status_code == 404
    assert response.json()["code"] == "TARGET_NOT_FOUND"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"roleIds": "1,2"}, {"roles": [1]}, [1, 2]])
async def test_malformed_role_payload(async_client, auth_headers, admin, body):
    response = await async_client.post(
        f"/api/v1/users/{admin['id']}/roles", json=body, headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_role_routes_require_a_token(async_client, admin, roles):
    response = await async_client.post(
        f"/api/v1/users/{admin['id']}/roles", json={"roleIds": roles}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_invalid_token(async_client, admin):
    response = await async_client.get(
        "/api/v1/users", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["POST", "DELETE"])
@pytest.mark.parametrize("bad_id", [2 ** 70, 2 ** 31, 0])
async def test_out_of_range_role_ids(async_client, auth_headers, admin, roles, method, bad_id):
    url = f"/api/v1/users/{admin['id']}/roles"

    response = await async_client.request(
        method, url, json={"roleIds": [roles[0], bad_id]}, headers=auth_headers
    )

    assert response.status_code == 400, response.text
    body = response.json()
    assert body["code"] == "INVALID_INPUT"
    current = await async_client.get(url, headers=auth_headers)
    assert current.json()["data"] == []
