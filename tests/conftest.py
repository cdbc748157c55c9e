"""Shared pytest fixtures: a fresh SQLite-backed app per test."""

from typing import Any, AsyncIterator, Dict, List

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from opsadmin.adapters.configuration.config import Settings
from opsadmin.adapters.outbound.persistence.models import AuditLog, Base, Role
from opsadmin.adapters.outbound.persistence.repositories import AsyncUserCRUD
from opsadmin.application.dtos.user_dto import UserCreate
from opsadmin.main import create_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Adm1n@Pass"
ADMIN_NAME = "Admin User"


@pytest.fixture()
def settings(tmp_path) -> Settings:
    """Settings pointing at a file-backed SQLite database in ``tmp_path``."""

    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'opsadmin.db'}",
        SECRET_KEY="test-secret-key",
        ENVIRONMENT="testing",
        LOG_LEVEL="WARNING",
        SEED_ON_STARTUP=False,
    )


@pytest_asyncio.fixture()
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    application = create_app(settings)
    async with application.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield application
    await application.state.engine.dispose()


@pytest.fixture()
def session_factory(app: FastAPI) -> async_sessionmaker:
    return app.state.session_factory


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture()
async def admin(app: FastAPI, session_factory: async_sessionmaker) -> Dict[str, Any]:
    """An active user plus a bearer token for it."""

    async with session_factory() as db:
        user = await AsyncUserCRUD().create_with_password(
            db,
            obj_in=UserCreate(name=ADMIN_NAME, email=ADMIN_EMAIL, password=ADMIN_PASSWORD),
        )
    token, _ = app.state.auth_manager.create_access_token(user.id, user.name, user.email)
    return {
        "id": user.id,
        "name": user.name,
        "email": ADMIN_EMAIL,
        "password": ADMIN_PASSWORD,
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest.fixture()
def auth_headers(admin: Dict[str, Any]) -> Dict[str, str]:
    return admin["headers"]


@pytest_asyncio.fixture()
async def roles(session_factory: async_sessionmaker) -> List[int]:
    """Three persisted roles; returns their IDs."""

    async with session_factory() as db:
        created = [
            Role(name=name, description=f"{name} role", permissions=[])
            for name in ("operator", "viewer", "auditor")
        ]
        db.add_all(created)
        await db.commit()
        return [role.id for role in created]


async def fetch_audit_logs(session_factory: async_sessionmaker) -> List[AuditLog]:
    async with session_factory() as db:
        result = await db.execute(select(AuditLog).order_by(AuditLog.id))
        return list(result.scalars().all())
