# opsadmin/adapters/inbound/api/v1/endpoints/permission_endpoint.py

"""
Permission CRUD and the role <-> permission association routes.

The association routes live under ``/permissions/roles/{roleId}`` and
take a bare JSON array of permission IDs. Their audit subject is the
role, not the permission.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status
from fastapi_pagination import Params
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.inbound.api.deps import get_audit, get_current_user, get_logger, get_session
from opsadmin.application.dtos.base_dto import MAX_ENTITY_ID, EntityId
from opsadmin.application.dtos.permission_dto import PermissionCreate, PermissionOutput, PermissionUpdate
from opsadmin.application.dtos.response_dto import ApiResponse, PaginatedData, success
from opsadmin.application.use_cases.association_use_cases import AsyncAssociationService
from opsadmin.application.use_cases.permission_use_cases import AsyncPermissionService
from opsadmin.domain.models.audit_domain_model import (
    AuditContext,
    change_detail,
    creation_detail,
    deletion_detail,
)
from opsadmin.shared.utils.pagination import pagination_params

router = APIRouter(dependencies=[Depends(get_current_user)])

ROLE_PERMISSION_ERRORS = {
    400: {"description": "One or more permission IDs do not exist"},
    401: {"description": "Not authenticated or invalid token"},
    404: {"description": "Role not found"},
}

PermissionIds = List[EntityId]


@router.get(
    "",
    response_model=ApiResponse[PaginatedData[PermissionOutput]],
    summary="List Permissions",
)
async def list_permissions(
        params: Params = Depends(pagination_params),
        resource: Optional[str] = Query(None),
        action: Optional[str] = Query(None),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
):
    service = AsyncPermissionService(db, logger)
    return success(await service.list_permissions(params, resource=resource, action=action))


@router.post(
    "",
    response_model=ApiResponse[PermissionOutput],
    status_code=status.HTTP_201_CREATED,
    summary="Create Permission",
    responses={409: {"description": "Name or resource/action pair already in use"}},
)
async def create_permission(
        data: PermissionCreate,
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncPermissionService(db, logger)
    permission = await service.create_permission(data)
    output = PermissionOutput.model_validate(permission)
    audit.override_resource_id = permission.id
    audit.detail = creation_detail(output.to_wire())
    return success(output, message="Permission created")


@router.get(
    "/roles/{role_id}",
    response_model=ApiResponse[List[PermissionOutput]],
    summary="Get Role Permissions",
    responses=ROLE_PERMISSION_ERRORS,
)
async def get_role_permissions(
        role_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="Role ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
):
    service = AsyncAssociationService(db, logger)
    permissions = await service.get_role_permissions(role_id)
    return success([PermissionOutput.model_validate(p) for p in permissions])


@router.post(
    "/roles/{role_id}",
    response_model=ApiResponse[List[PermissionOutput]],
    summary="Add Permissions To Role",
    description="""
    Adds every listed permission to the role, or none of them when any
    permission ID does not exist. An empty array changes nothing.
    """,
    responses=ROLE_PERMISSION_ERRORS,
)
async def add_permissions_to_role(
        permission_ids: PermissionIds = Body(..., description="Permission IDs"),
        role_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="Role ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncAssociationService(db, logger)
    permissions = await service.add_permissions_to_role(role_id, permission_ids)
    audit.override_resource = "ROLE"
    audit.detail = {"roleId": role_id, "permissionIds": permission_ids}
    return success([PermissionOutput.model_validate(p) for p in permissions], message="Permissions added")


@router.delete(
    "/roles/{role_id}",
    response_model=ApiResponse[List[PermissionOutput]],
    summary="Remove Permissions From Role",
    description="""
    Removes the listed permissions from the role. Permissions the role
    does not carry are skipped, but every permission ID must exist.
    """,
    responses=ROLE_PERMISSION_ERRORS,
)
async def remove_permissions_from_role(
        permission_ids: PermissionIds = Body(..., description="Permission IDs"),
        role_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="Role ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncAssociationService(db, logger)
    permissions = await service.remove_permissions_from_role(role_id, permission_ids)
    audit.override_resource = "ROLE"
    audit.detail = {"roleId": role_id, "permissionIds": permission_ids}
    return success([PermissionOutput.model_validate(p) for p in permissions], message="Permissions removed")


@router.get(
    "/{permission_id}",
    response_model=ApiResponse[PermissionOutput],
    summary="Get Permission",
    responses={404: {"description": "Permission not found"}},
)
async def get_permission(
        permission_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="Permission ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
):
    service = AsyncPermissionService(db, logger)
    return success(PermissionOutput.model_validate(await service.get_permission(permission_id)))


@router.put(
    "/{permission_id}",
    response_model=ApiResponse[PermissionOutput],
    summary="Update Permission",
)
async def update_permission(
        data: PermissionUpdate,
        permission_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="Permission ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncPermissionService(db, logger)
    before = PermissionOutput.model_validate(await service.get_permission(permission_id)).to_wire()
    permission = await service.update_permission(permission_id, data)
    output = PermissionOutput.model_validate(permission)
    audit.detail = change_detail(before, output.to_wire())
    return success(output, message="Permission updated")


@router.delete(
    "/{permission_id}",
    response_model=ApiResponse[None],
    summary="Delete Permission",
    description="Soft delete. Roles stop carrying the permission.",
)
async def delete_permission(
        permission_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="Permission ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
        audit: AuditContext = Depends(get_audit),
):
    service = AsyncPermissionService(db, logger)
    before = PermissionOutput.model_validate(await service.get_permission(permission_id)).to_wire()
    await service.delete_permission(permission_id)
    audit.detail = deletion_detail(before)
    return success(message="Permission deleted")
