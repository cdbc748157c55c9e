# opsadmin/adapters/inbound/api/v1/endpoints/user_endpoint.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi_pagination import Params
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.inbound.api.deps import get_audit, get_current_user, get_logger, get_session
from opsadmin.adapters.outbound.persistence.models import User
from opsadmin.application.dtos.base_dto import MAX_ENTITY_ID
from opsadmin.application.dtos.response_dto import ApiResponse, PaginatedData, success
from opsadmin.application.dtos.user_dto import (
    RoleBrief,
    UserCreate,
    UserOutput,
    UserRolesInput,
    UserStatus,
    UserUpdate,
)
from opsadmin.application.use_cases.association_use_cases import AsyncAssociationService
from opsadmin.application.use_cases.user_use_cases import AsyncUserService
from opsadmin.domain.models.audit_domain_model import (
    AuditContext,
    change_detail,
    creation_detail,
    deletion_detail,
)
from opsadmin.shared.utils.pagination import pagination_params

# Every route requires an authenticated user
router = APIRouter(dependencies=[Depends(get_current_user)])

ROLE_ERRORS = {
    400: {"description": "One or more role IDs do not exist"},
    401: {"description": "Not authenticated or invalid token"},
    404: {"description": "User not found"},
}


@router.get(
    "",
    response_model=ApiResponse[PaginatedData[UserOutput]],
    summary="List Users",
    description="Paginated list of users, filterable by name, email, status and department.",
)
async def list_users(
        params: Params = Depends(pagination_params),
        name: Optional[str] = Query(None, description="Substring of the name"),
        email: Optional[str] = Query(None, description="Substring of the email"),
        user_status: Optional[UserStatus] = Query(None, alias="status"),
        department: Optional[str] = Query(None),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
):
    service = AsyncUserService(db, logger)
    page = await service.list_users(
        params, name=name, email=email, status=user_status, department=department
    )
    return success(page)


@router.post(
    "",
    response_model=ApiResponse[UserOutput],
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    description="""
    Creates a new user. The password must have at least 8 characters with
    one upper case letter, one lower case letter, one digit and one special
    character.
    """,
    responses={409: {"description": "Email already in use"}},
)
async def create_user(
        data: UserCreate,
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncUserService(db, logger)
    user = await service.create_user(data)
    output = UserOutput.model_validate(user)
    audit.override_resource_id = user.id
    audit.detail = creation_detail(output.to_wire())
    return success(output, message="User created")


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserOutput],
    summary="Get User",
    responses={404: {"description": "User not found"}},
)
async def get_user(
        user_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="User ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
):
    service = AsyncUserService(db, logger)
    return success(UserOutput.model_validate(await service.get_user(user_id)))


@router.put(
    "/{user_id}",
    response_model=ApiResponse[UserOutput],
    summary="Update User",
    description="Updates the fields present in the body. Roles are managed through /users/{userId}/roles.",
)
async def update_user(
        data: UserUpdate,
        user_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="User ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncUserService(db, logger)
    before = UserOutput.model_validate(await service.get_user(user_id)).to_wire()
    user = await service.update_user(user_id, data)
    output = UserOutput.model_validate(user)
    audit.detail = change_detail(before, output.to_wire())
    return success(output, message="User updated")


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    summary="Delete User",
    description="Soft delete. The user's role assignments are removed.",
)
async def delete_user(
        user_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="User ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncUserService(db, logger)
    before = UserOutput.model_validate(await service.get_user(user_id)).to_wire()
    await service.delete_user(user_id)
    audit.detail = deletion_detail(before)
    return success(message="User deleted")


@router.get(
    "/{user_id}/roles",
    response_model=ApiResponse[List[RoleBrief]],
    summary="Get User Roles",
    responses=ROLE_ERRORS,
)
async def get_user_roles(
        user_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="User ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
):
    service = AsyncAssociationService(db, logger)
    roles = await service.get_user_roles(user_id)
    return success([RoleBrief.model_validate(role) for role in roles])


@router.post(
    "/{user_id}/roles",
    response_model=ApiResponse[List[RoleBrief]],
    summary="Assign Roles",
    description="""
    Adds every listed role to the user, or none of them when any role ID
    does not exist. An empty list changes nothing.
    """,
    responses=ROLE_ERRORS,
)
async def assign_roles(
        data: UserRolesInput,
        user_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="User ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncAssociationService(db, logger)
    roles = await service.assign_roles(user_id, data.role_ids)
    audit.detail = {"userId": user_id, "roleIds": data.role_ids}
    return success([RoleBrief.model_validate(role) for role in roles], message="Roles assigned")


@router.delete(
    "/{user_id}/roles",
    response_model=ApiResponse[List[RoleBrief]],
    summary="Remove Roles",
    description="""
    Removes the listed roles from the user. Roles the user does not hold
    are skipped, but every role ID must exist.
    """,
    responses=ROLE_ERRORS,
)
async def remove_roles(
        data: UserRolesInput,
        user_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="User ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncAssociationService(db, logger)
    roles = await service.remove_roles(user_id, data.role_ids)
    audit.detail = {"userId": user_id, "roleIds": data.role_ids}
    return success([RoleBrief.model_validate(role) for role in roles], message="Roles removed")
