# opsadmin/adapters/inbound/api/v1/endpoints/role_endpoint.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi_pagination import Params
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.inbound.api.deps import get_audit, get_current_user, get_logger, get_session
from opsadmin.application.dtos.base_dto import MAX_ENTITY_ID
from opsadmin.application.dtos.response_dto import ApiResponse, PaginatedData, success
from opsadmin.application.dtos.role_dto import RoleCreate, RoleDetailOutput, RoleOutput, RoleUpdate
from opsadmin.application.use_cases.role_use_cases import AsyncRoleService
from opsadmin.domain.models.audit_domain_model import (
    AuditContext,
    change_detail,
    creation_detail,
    deletion_detail,
)
from opsadmin.shared.utils.pagination import pagination_params

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get(
    "",
    response_model=ApiResponse[PaginatedData[RoleOutput]],
    summary="List Roles",
)
async def list_roles(
        params: Params = Depends(pagination_params),
        name: Optional[str] = Query(None, description="Substring of the role name"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
):
    service = AsyncRoleService(db, logger)
    return success(await service.list_roles(params, name=name))


@router.post(
    "",
    response_model=ApiResponse[RoleOutput],
    status_code=status.HTTP_201_CREATED,
    summary="Create Role",
    responses={409: {"description": "Role name already in use"}},
)
async def create_role(
        data: RoleCreate,
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncRoleService(db, logger)
    role = await service.create_role(data)
    output = RoleOutput.model_validate(role)
    audit.override_resource_id = role.id
    audit.detail = creation_detail(output.to_wire())
    return success(output, message="Role created")


@router.get(
    "/{role_id}",
    response_model=ApiResponse[RoleDetailOutput],
    summary="Get Role",
    description="Role with its permissions and the number of users holding it.",
    responses={404: {"description": "Role not found"}},
)
async def get_role(
        role_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="Role ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
):
    service = AsyncRoleService(db, logger)
    return success(await service.get_role_detail(role_id))


@router.put(
    "/{role_id}",
    response_model=ApiResponse[RoleOutput],
    summary="Update Role",
    description="Updates name and description. Permissions are managed through /permissions/roles/{roleId}.",
)
async def update_role(
        data: RoleUpdate,
        role_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="Role ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncRoleService(db, logger)
    before = RoleOutput.model_validate(await service.get_role(role_id)).to_wire()
    role = await service.update_role(role_id, data)
    output = RoleOutput.model_validate(role)
    audit.detail = change_detail(before, output.to_wire())
    return success(output, message="Role updated")


@router.delete(
    "/{role_id}",
    response_model=ApiResponse[None],
    summary="Delete Role",
    description="Soft delete. Users stop holding the role.",
)
async def delete_role(
        role_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="Role ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncRoleService(db, logger)
    before = RoleOutput.model_validate(await service.get_role(role_id)).to_wire()
    await service.delete_role(role_id)
    audit.detail = deletion_detail(before)
    return success(message="Role deleted")
