"""Atomic user<->role and role<->permission association changes."""

from typing import List

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from opsadmin.adapters.outbound.persistence.models import Permission, user_roles
from opsadmin.adapters.outbound.persistence.repositories import AsyncRoleCRUD
from opsadmin.application.use_cases.association_use_cases import AsyncAssociationService
from opsadmin.domain.exceptions import (
    AssociationCandidateNotFoundException,
    TargetNotFoundException,
)

MISSING_ID = 9999999


async def role_ids_of(session_factory: async_sessionmaker, user_id: int) -> List[int]:
    async with session_factory() as db:
        roles = await AsyncAssociationService(db).get_user_roles(user_id)
        return [role.id for role in roles]


async def permission_ids_of(session_factory: async_sessionmaker, role_id: int) -> List[int]:
    async with session_factory() as db:
        permissions = await AsyncAssociationService(db).get_role_permissions(role_id)
        return [p.id for p in permissions]


@pytest_asyncio.fixture()
async def permissions(session_factory: async_sessionmaker) -> List[int]:
    async with session_factory() as db:
        created = [
            Permission(name=f"user:{action}", resource="user", action=action)
            for action in ("create", "read", "update")
        ]
        db.add_all(created)
        await db.commit()
        return [p.id for p in created]


@pytest.mark.asyncio
async def test_assign_roles(session_factory, admin, roles):
    r1, r2, _ = roles
    async with session_factory() as db:
        result = await AsyncAssociationService(db).assign_roles(admin["id"], [r2, r1, r2])

    assert sorted(role.id for role in result) == [r1, r2]
    assert await role_ids_of(session_factory, admin["id"]) == [r1, r2]


@pytest.mark.asyncio
async def test_assign_is_additive(session_factory, admin, roles):
    r1, r2, r3 = roles
    async with session_factory() as db:
        await AsyncAssociationService(db).assign_roles(admin["id"], [r1])
    async with session_factory() as db:
        await AsyncAssociationService(db).assign_roles(admin["id"], [r1, r3])

    assert await role_ids_of(session_factory, admin["id"]) == [r1, r3]


@pytest.mark.asyncio
async def test_failed_assignment_changes_nothing(session_factory, admin, roles):
    r1, r2, _ = roles
    async with session_factory() as db:
        await AsyncAssociationService(db).assign_roles(admin["id"], [r1])

    async with session_factory() as db:
        with pytest.raises(AssociationCandidateNotFoundException) as exc_info:
            await AsyncAssociationService(db).assign_roles(admin["id"], [r2, MISSING_ID])

    assert exc_info.value.missing_ids == [MISSING_ID]
    assert exc_info.value.details == {"entity": "role", "missingIds": [MISSING_ID]}
    assert await role_ids_of(session_factory, admin["id"]) == [r1]


@pytest.mark.asyncio
async def test_failed_removal_changes_nothing(session_factory, admin, roles):
    r1, r2, _ = roles
    async with session_factory() as db:
        await AsyncAssociationService(db).assign_roles(admin["id"], [r1, r2])

    async with session_factory() as db:
        with pytest.raises(AssociationCandidateNotFoundException):
            await AsyncAssociationService(db).remove_roles(admin["id"], [r1, MISSING_ID])

    assert await role_ids_of(session_factory, admin["id"]) == [r1, r2]


@pytest.mark.asyncio
@pytest.mark.parametrize("operation", ["assign_roles", "remove_roles"])
async def test_empty_list_is_a_no_op(session_factory, admin, roles, operation):
    r1, _, _ = roles
    async with session_factory() as db:
        await AsyncAssociationService(db).assign_roles(admin["id"], [r1])

    async with session_factory() as db:
        service = AsyncAssociationService(db)
        result = await getattr(service, operation)(admin["id"], [])

    assert [role.id for role in result] == [r1]
    assert await role_ids_of(session_factory, admin["id"]) == [r1]


@pytest.mark.asyncio
async def test_removal_is_set_difference(session_factory, admin, roles):
    r1, r2, r3 = roles
    async with session_factory() as db:
        await AsyncAssociationService(db).assign_roles(admin["id"], [r1, r2])

    # r3 exists but is not held: skipped
    async with session_factory() as db:
        await AsyncAssociationService(db).remove_roles(admin["id"], [r1, r3])

    assert await role_ids_of(session_factory, admin["id"]) == [r2]


@pytest.mark.asyncio
async def test_missing_target_is_reported_first(session_factory, roles):
    async with session_factory() as db:
        with pytest.raises(TargetNotFoundException) as exc_info:
            await AsyncAssociationService(db).assign_roles(MISSING_ID, [MISSING_ID])

    assert exc_info.value.internal_code == "TARGET_NOT_FOUND"
    assert exc_info.value.details == {"entity": "User", "id": MISSING_ID}


@pytest.mark.asyncio
async def test_missing_target_with_empty_list(session_factory):
    async with session_factory() as db:
        with pytest.raises(TargetNotFoundException):
            await AsyncAssociationService(db).remove_roles(MISSING_ID, [])


@pytest.mark.asyncio
async def test_soft_deleted_role_is_not_a_candidate(session_factory, admin, roles):
    r1, r2, _ = roles
    async with session_factory() as db:
        await AsyncAssociationService(db).assign_roles(admin["id"], [r1])
    async with session_factory() as db:
        await AsyncRoleCRUD().soft_delete(db, id=r2)

    async with session_factory() as db:
        with pytest.raises(AssociationCandidateNotFoundException) as exc_info:
            await AsyncAssociationService(db).assign_roles(admin["id"], [r2])

    assert exc_info.value.missing_ids == [r2]
    assert await role_ids_of(session_factory, admin["id"]) == [r1]


@pytest.mark.asyncio
async def test_deleting_a_role_drops_its_assignments(session_factory, admin, roles):
    r1, r2, _ = roles
    async with session_factory() as db:
        await AsyncAssociationService(db).assign_roles(admin["id"], [r1, r2])
    async with session_factory() as db:
        await AsyncRoleCRUD().soft_delete(db, id=r1)

    async with session_factory() as db:
        result = await db.execute(
            select(func.count()).select_from(user_roles).where(user_roles.c.role_id == r1)
        )
        assert result.scalar_one() == 0
    assert await role_ids_of(session_factory, admin["id"]) == [r2]


@pytest.mark.asyncio
async def test_role_permissions(session_factory, roles, permissions):
    role_id = roles[0]
    p1, p2, p3 = permissions

    async with session_factory() as db:
        added = await AsyncAssociationService(db).add_permissions_to_role(role_id, [p1, p2])
    assert [p.id for p in added] == [p1, p2]

    async with session_factory() as db:
        with pytest.raises(AssociationCandidateNotFoundException) as exc_info:
            await AsyncAssociationService(db).add_permissions_to_role(role_id, [p3, MISSING_ID])
    assert exc_info.value.details["entity"] == "permission"
    assert await permission_ids_of(session_factory, role_id) == [p1, p2]

    async with session_factory() as db:
        await AsyncAssociationService(db).remove_permissions_from_role(role_id, [p1, p3])
    assert await permission_ids_of(session_factory, role_id) == [p2]


@pytest.mark.asyncio
async def test_missing_role_target(session_factory, permissions):
    async with session_factory() as db:
        with pytest.raises(TargetNotFoundException) as exc_info:
            await AsyncAssociationService(db).add_permissions_to_role(MISSING_ID, permissions)
    assert exc_info.value.details["entity"] == "Role"
