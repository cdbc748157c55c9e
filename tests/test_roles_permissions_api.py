"""Role and permission endpoints, including /permissions/roles/{roleId}."""

from typing import List

import pytest

from tests.conftest import fetch_audit_logs

MISSING_ID = 9999999


async def _create_permissions(client, headers) -> List[int]:
    ids = []
    for action in ("create", "read", "update"):
        response = await client.post(
            "/api/v1/permissions",
            json={"name": f"asset:{action}", "resource": "asset", "action": action},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        ids.append(response.json()["data"]["id"])
    return ids


async def _create_role(client, headers, name="operator") -> dict:
    response = await client.post(
        "/api/v1/roles", json={"name": name, "description": "Day-to-day operations"}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_role_crud(async_client, auth_headers, session_factory):
    role = await _create_role(async_client, auth_headers)

    duplicate = await async_client.post("/api/v1/roles", json={"name": "operator"}, headers=auth_headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "RESOURCE_ALREADY_EXISTS"

    updated = await async_client.put(
        f"/api/v1/roles/{role['id']}", json={"description": "On call"}, headers=auth_headers
    )
    assert updated.json()["data"]["description"] == "On call"

    listing = await async_client.get("/api/v1/roles?name=oper", headers=auth_headers)
    assert [r["name"] for r in listing.json()["data"]["items"]] == ["operator"]

    deleted = await async_client.delete(f"/api/v1/roles/{role['id']}", headers=auth_headers)
    assert deleted.status_code == 200
    gone = await async_client.get(f"/api/v1/roles/{role['id']}", headers=auth_headers)
    assert gone.status_code == 404

    writes = [
        (log.action, log.resource, log.resource_id)
        for log in await fetch_audit_logs(session_factory)
        if log.action != "READ"
    ]
    assert writes == [
        ("CREATE", "ROLE", role["id"]),
        ("UPDATE", "ROLE", role["id"]),
        ("DELETE", "ROLE", role["id"]),
    ]


@pytest.mark.asyncio
async def test_role_detail_counts_users(async_client, auth_headers, admin):
    role = await _create_role(async_client, auth_headers)
    p1, _, _ = await _create_permissions(async_client, auth_headers)
    await async_client.post(f"/api/v1/permissions/roles/{role['id']}", json=[p1], headers=auth_headers)
    await async_client.post(
        f"/api/v1/users/{admin['id']}/roles", json={"roleIds": [role["id"]]}, headers=auth_headers
    )

    response = await async_client.get(f"/api/v1/roles/{role['id']}", headers=auth_headers)

    detail = response.json()["data"]
    assert detail["userCount"] == 1
    assert [p["id"] for p in detail["permissions"]] == [p1]


@pytest.mark.asyncio
async def test_permission_crud(async_client, auth_headers):
    p1, _, _ = await _create_permissions(async_client, auth_headers)

    duplicate = await async_client.post(
        "/api/v1/permissions",
        json={"name": "asset:create", "resource": "asset", "action": "create"},
        headers=auth_headers,
    )
    assert duplicate.status_code == 409

    invalid = await async_client.post(
        "/api/v1/permissions",
        json={"name": "bad", "resource": "Asset Type", "action": "read"},
        headers=auth_headers,
    )
    assert invalid.status_code == 400

    filtered = await async_client.get("/api/v1/permissions?action=read", headers=auth_headers)
    assert [p["name"] for p in filtered.json()["data"]["items"]] == ["asset:read"]

    updated = await async_client.put(
        f"/api/v1/permissions/{p1}", json={"description": "Register assets"}, headers=auth_headers
    )
    assert updated.json()["data"]["description"] == "Register assets"

    deleted = await async_client.delete(f"/api/v1/permissions/{p1}", headers=auth_headers)
    assert deleted.status_code == 200
    gone = await async_client.get(f"/api/v1/permissions/{p1}", headers=auth_headers)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_add_and_remove_role_permissions(async_client, auth_headers, admin, session_factory):
    role = await _create_role(async_client, auth_headers)
    p1, p2, p3 = await _create_permissions(async_client, auth_headers)
    url = f"/api/v1/permissions/roles/{role['id']}"

    added = await async_client.post(url, json=[p1, p2], headers=auth_headers)
    assert added.status_code == 200, added.text
    assert [p["id"] for p in added.json()["data"]] == [p1, p2]

    rejected = await async_client.post(url, json=[p3, MISSING_ID], headers=auth_headers)
    assert rejected.status_code == 400
    assert rejected.json()["errors"] == {"entity": "permission", "missingIds": [MISSING_ID]}

    removed = await async_client.request("DELETE", url, json=[p1, p3], headers=auth_headers)
    assert removed.status_code == 200
    assert [p["id"] for p in removed.json()["data"]] == [p2]

    current = await async_client.get(url, headers=auth_headers)
    assert [p["id"] for p in current.json()["data"]] == [p2]

    association_logs = [
        log for log in await fetch_audit_logs(session_factory)
        if log.resource == "ROLE" and log.action in ("CREATE", "DELETE") and log.details.get("permissionIds")
    ]
    assert [(log.action, log.resource_id, log.details["permissionIds"]) for log in association_logs] == [
        ("CREATE", role["id"], [p1, p2]),
        ("DELETE", role["id"], [p1, p3]),
    ]
    assert association_logs[0].user_id == admin["id"]


@pytest.mark.asyncio
async def test_role_permissions_missing_role(async_client, auth_headers):
    p1, _, _ = await _create_permissions(async_client, auth_headers)

    response = await async_client.post(
        f"/api/v1/permissions/roles/{MISSING_ID}", json=[p1], headers=auth_headers
    )

    assert response.status_code == 404
    assert response.json()["code"] == "TARGET_NOT_FOUND"


@pytest.mark.asyncio
async def test_role_permissions_require_a_list(async_client, auth_headers):
    role = await _create_role(async_client, auth_headers)

    response = await async_client.post(
        f"/api/v1/permissions/roles/{role['id']}", json={"permissionIds": [1]}, headers=auth_headers
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_deleting_permission_detaches_it(async_client, auth_headers):
    role = await _create_role(async_client, auth_headers)
    p1, p2, _ = await _create_permissions(async_client, auth_headers)
    url = f"/api/v1/permissions/roles/{role['id']}"
    await async_client.post(url, json=[p1, p2], headers=auth_headers)

    await async_client.delete(f"/api/v1/permissions/{p1}", headers=auth_headers)

    current = await async_client.get(url, headers=auth_headers)
    assert [p["id"] for p in current.json()["data"]] == [p2]


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["POST", "DELETE"])
@pytest.mark.parametrize("bad_id", [2 ** 70, 2 ** 31, 0, -3])
async def test_role_permissions_out_of_range_ids(async_client, auth_headers, session_factory, method, bad_id):
    role = await _create_role(async_client, auth_headers)
    p1, _, _ = await _create_permissions(async_client, auth_headers)
    url = f"/api/v1/permissions/roles/{role['id']}"

    response = await async_client.request(method, url, json=[p1, bad_id], headers=auth_headers)

    assert response.status_code == 400, response.text
    assert response.json()["code"] == "INVALID_INPUT"
    current = await async_client.get(url, headers=auth_headers)
    assert current.json()["data"] == []
    logs = await fetch_audit_logs(session_factory)
    assert not [log for log in logs if isinstance(log.details, dict) and "permissionIds" in log.details]


@pytest.mark.asyncio
async def test_out_of_range_role_id_in_path(async_client, auth_headers):
    response = await async_client.get(f"/api/v1/roles/{2 ** 70}", headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"
