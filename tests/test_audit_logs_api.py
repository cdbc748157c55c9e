"""Querying the audit trail through GET /api/v1/audit-logs."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from opsadmin.application.use_cases.audit_log_use_cases import AsyncAuditRecorder
from opsadmin.domain.models.audit_domain_model import AuditAction, AuditEntry

ENTRIES = [
    (1, "alice", AuditAction.CREATE, "USER", 10),
    (1, "alice", AuditAction.UPDATE, "USER", 10),
    (2, "bob", AuditAction.DELETE, "ROLE", 4),
    (2, "bob", AuditAction.CREATE, "RESPONSIBILITY_GROUP", 0),
    (3, "carol", AuditAction.READ, "USER", 11),
]


@pytest_asyncio.fixture()
async def audit_trail(session_factory):
    recorder = AsyncAuditRecorder(session_factory)
    for user_id, username, action, resource, resource_id in ENTRIES:
        assert await recorder.record(
            AuditEntry(
                user_id=user_id,
                username=username,
                action=action,
                resource=resource,
                resource_id=resource_id,
                details={"seq": resource_id},
            )
        )


@pytest.mark.asyncio
async def test_lists_newest_first(async_client, auth_headers, audit_trail):
    response = await async_client.get("/api/v1/audit-logs", headers=auth_headers)

    assert response.status_code == 200
    page = response.json()["data"]
    assert page["total"] == len(ENTRIES)
    assert [item["username"] for item in page["items"]] == ["carol", "bob", "bob", "alice", "alice"]
    first = page["items"][0]
    assert set(first) == {
        "id", "userId", "username", "action", "resource", "resourceId",
        "details", "ipAddress", "userAgent", "createdAt",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "query, expected",
    [
        ("userId=1", 2),
        ("action=CREATE", 2),
        ("action=create", 2),
        ("resource=user", 3),
        ("resource=USER&resourceId=10", 2),
        ("userId=2&action=DELETE", 1),
        ("resourceId=0", 1),
        ("userId=99", 0),
    ],
)
async def test_filters(async_client, auth_headers, audit_trail, query, expected):
    response = await async_client.get(f"/api/v1/audit-logs?{query}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["total"] == expected


@pytest.mark.asyncio
async def test_date_range_is_inclusive(async_client, auth_headers, audit_trail):
    today = datetime.now(timezone.utc).date()
    tomorrow = today + timedelta(days=1)
    yesterday = today - timedelta(days=1)

    same_day = await async_client.get(
        f"/api/v1/audit-logs?startDate={today}&endDate={today}", headers=auth_headers
    )
    future = await async_client.get(f"/api/v1/audit-logs?startDate={tomorrow}", headers=auth_headers)
    past = await async_client.get(f"/api/v1/audit-logs?endDate={yesterday}", headers=auth_headers)

    assert same_day.json()["data"]["total"] == len(ENTRIES)
    assert future.json()["data"]["total"] == 0
    assert past.json()["data"]["total"] == 0


@pytest.mark.asyncio
async def test_inverted_date_range(async_client, auth_headers):
    response = await async_client.get(
        "/api/v1/audit-logs?startDate=2024-02-01&endDate=2024-01-01", headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_malformed_date(async_client, auth_headers):
    response = await async_client.get("/api/v1/audit-logs?startDate=yesterday", headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_pagination(async_client, auth_headers, audit_trail):
    response = await async_client.get("/api/v1/audit-logs?page=2&pageSize=2", headers=auth_headers)

    page = response.json()["data"]
    assert (page["total"], page["page"], page["pageSize"]) == (len(ENTRIES), 2, 2)
    assert [item["username"] for item in page["items"]] == ["bob", "alice"]


@pytest.mark.asyncio
async def test_page_size_is_bounded(async_client, auth_headers):
    response = await async_client.get("/api/v1/audit-logs?pageSize=500", headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_single_record(async_client, auth_headers, audit_trail):
    listing = await async_client.get("/api/v1/audit-logs?resource=ROLE", headers=auth_headers)
    [item] = listing.json()["data"]["items"]

    response = await async_client.get(f"/api/v1/audit-logs/{item['id']}", headers=auth_headers)

    assert response.status_code == 200
    record = response.json()["data"]
    assert record == item
    assert record["details"] == {"seq": 4}


@pytest.mark.asyncio
async def test_missing_record(async_client, auth_headers):
    response = await async_client.get("/api/v1/audit-logs/12345", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["code"] == "RESOURCE_NOT_FOUND"


@pytest.mark.asyncio
async def test_requires_authentication(async_client):
    response = await async_client.get("/api/v1/audit-logs")
    assert response.status_code == 401
