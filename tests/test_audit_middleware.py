"""Audit recorder and middleware: what gets recorded, and what never does."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from opsadmin.adapters.outbound.persistence.models import AuditLog, ImmutableAuditLogError
from opsadmin.application.use_cases.audit_log_use_cases import AsyncAuditRecorder, encode_details
from opsadmin.domain.models.audit_domain_model import AuditAction, AuditEntry
from opsadmin.main import create_app
from tests.conftest import fetch_audit_logs

NEW_USER = {
    "name": "Grace Hopper",
    "email": "grace@example.com",
    "password": "C0bol@1959",
    "department": "Platform",
}


def _entry(**overrides) -> AuditEntry:
    values = dict(
        user_id=1,
        username="Admin User",
        action=AuditAction.UPDATE,
        resource="USER",
        resource_id=3,
        details={"before": {"name": "a"}, "after": {"name": "b"}},
        ip_address="10.0.0.1",
        user_agent="pytest",
    )
    values.update(overrides)
    return AuditEntry(**values)


# -- recorder -----------------------------------------------------------------

@pytest.mark.asyncio
async def test_recorder_persists_entry(session_factory):
    recorder = AsyncAuditRecorder(session_factory)

    assert await recorder.record(_entry()) is True

    [log] = await fetch_audit_logs(session_factory)
    assert (log.user_id, log.username, log.action, log.resource, log.resource_id) == (
        1, "Admin User", "UPDATE", "USER", 3
    )
    assert log.details == {"before": {"name": "a"}, "after": {"name": "b"}}
    assert log.ip_address == "10.0.0.1"
    assert log.user_agent == "pytest"
    assert log.created_at is not None


@pytest.mark.asyncio
async def test_recorder_contains_storage_failures(caplog):
    def broken_session_factory():
        raise RuntimeError("database is down")

    recorder = AsyncAuditRecorder(broken_session_factory)

    assert await recorder.record(_entry()) is False
    assert "Failed to record audit entry" in caplog.text


def test_encode_details():
    assert encode_details(None) == {}
    assert encode_details({"ids": (1, 2)}) == {"ids": [1, 2]}
    assert encode_details(object()) == {}


@pytest.mark.asyncio
async def test_audit_rows_are_append_only(session_factory):
    await AsyncAuditRecorder(session_factory).record(_entry())

    async with session_factory() as db:
        log = (await db.execute(select(AuditLog))).scalar_one()
        log.username = "someone else"
        with pytest.raises(ImmutableAuditLogError):
            await db.commit()

    async with session_factory() as db:
        log = (await db.execute(select(AuditLog))).scalar_one()
        await db.delete(log)
        with pytest.raises(ImmutableAuditLogError):
            await db.commit()


# -- middleware ---------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_user_records_one_entry(async_client, auth_headers, admin, session_factory):
    response = await async_client.post("/api/v1/users", json=NEW_USER, headers=auth_headers)

    assert response.status_code == 201, response.text
    new_id = response.json()["data"]["id"]

    [log] = await fetch_audit_logs(session_factory)
    assert (log.action, log.resource, log.resource_id) == ("CREATE", "USER", new_id)
    assert (log.user_id, log.username) == (admin["id"], admin["name"])
    assert log.details["action"] == "CREATE"
    assert log.details["entity"]["email"] == NEW_USER["email"]
    assert "password" not in log.details["entity"]


@pytest.mark.asyncio
async def test_default_detail_and_request_metadata(async_client, auth_headers, admin, session_factory):
    headers = {**auth_headers, "User-Agent": "audit-test/1.0", "X-Forwarded-For": "203.0.113.9"}
    response = await async_client.get(f"/api/v1/users/{admin['id']}", headers=headers)
    assert response.status_code == 200

    [log] = await fetch_audit_logs(session_factory)
    assert (log.action, log.resource, log.resource_id) == ("READ", "USER", admin["id"])
    assert log.details == {
        "requestPath": f"/api/v1/users/{admin['id']}",
        "method": "GET",
        "status": 200,
    }
    assert log.user_agent == "audit-test/1.0"
    # Forwarded headers are ignored unless proxies are trusted
    assert log.ip_address == "127.0.0.1"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, path",
    [
        ("GET", "/health"),
        ("GET", "/api/v1/audit-logs"),
        ("GET", "/api/v1/audit-logs/1"),
    ],
)
async def test_skip_listed_paths_are_not_recorded(async_client, auth_headers, session_factory, method, path):
    await async_client.request(method, path, headers=auth_headers)

    assert await fetch_audit_logs(session_factory) == []


@pytest.mark.asyncio
async def test_login_is_not_recorded(async_client, admin, session_factory):
    response = await async_client.post(
        "/api/v1/auth/login", json={"email": admin["email"], "password": admin["password"]}
    )
    assert response.status_code == 200

    assert await fetch_audit_logs(session_factory) == []


@pytest.mark.asyncio
async def test_error_responses_are_not_recorded(async_client, auth_headers, session_factory):
    not_found = await async_client.get("/api/v1/users/424242", headers=auth_headers)
    invalid = await async_client.post("/api/v1/users", json={"name": "x"}, headers=auth_headers)
    conflict = await async_client.post(
        "/api/v1/users", json={**NEW_USER, "email": "admin@example.com"}, headers=auth_headers
    )

    assert (not_found.status_code, invalid.status_code, conflict.status_code) == (404, 400, 409)
    assert await fetch_audit_logs(session_factory) == []


@pytest.mark.asyncio
async def test_same_request_recorded_once_when_successful(async_client, auth_headers, session_factory):
    first = await async_client.post("/api/v1/users", json=NEW_USER, headers=auth_headers)
    second = await async_client.post("/api/v1/users", json=NEW_USER, headers=auth_headers)

    assert (first.status_code, second.status_code) == (201, 409)
    logs = await fetch_audit_logs(session_factory)
    assert len(logs) == 1


@pytest.mark.asyncio
async def test_unauthenticated_requests_are_not_recorded(async_client, session_factory):
    response = await async_client.get("/api/v1/users")

    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"
    assert await fetch_audit_logs(session_factory) == []


@pytest.mark.asyncio
async def test_recorder_failure_does_not_change_response(app, async_client, auth_headers, session_factory):
    async def failing_append(db, entry):
        raise RuntimeError("disk full")

    app.state.audit_recorder.repository.append = failing_append

    response = await async_client.post("/api/v1/users", json=NEW_USER, headers=auth_headers)

    assert response.status_code == 201
    assert response.json()["data"]["email"] == NEW_USER["email"]
    assert await fetch_audit_logs(session_factory) == []


@pytest.mark.asyncio
async def test_read_requests_can_be_disabled(app, settings, auth_headers, session_factory):
    quiet_app = create_app(settings.model_copy(update={"AUDIT_READ_REQUESTS": False}))
    transport = ASGITransport(app=quiet_app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            read = await client.get("/api/v1/users", headers=auth_headers)
            write = await client.post("/api/v1/users", json=NEW_USER, headers=auth_headers)
    finally:
        await quiet_app.state.engine.dispose()

    assert (read.status_code, write.status_code) == (200, 201)
    logs = await fetch_audit_logs(session_factory)
    assert [log.action for log in logs] == ["CREATE"]


@pytest.mark.asyncio
async def test_trusted_proxy_address(app, settings, auth_headers, session_factory):
    proxied_app = create_app(settings.model_copy(update={"TRUST_PROXY_HEADERS": True}))
    transport = ASGITransport(app=proxied_app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            await client.get(
                "/api/v1/users", headers={**auth_headers, "X-Forwarded-For": "203.0.113.9, 10.0.0.2"}
            )
    finally:
        await proxied_app.state.engine.dispose()

    [log] = await fetch_audit_logs(session_factory)
    assert log.ip_address == "203.0.113.9"
