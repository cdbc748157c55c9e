# opsadmin/adapters/inbound/api/v1/endpoints/audit_log_endpoint.py

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from fastapi_pagination import Params
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.inbound.api.deps import get_current_user, get_logger, get_session
from opsadmin.application.dtos.base_dto import MAX_ENTITY_ID
from opsadmin.application.dtos.audit_log_dto import AuditLogFilter, AuditLogOutput
from opsadmin.application.dtos.response_dto import ApiResponse, PaginatedData, success
from opsadmin.application.use_cases.audit_log_use_cases import AsyncAuditLogService
from opsadmin.shared.utils.pagination import pagination_params

router = APIRouter(dependencies=[Depends(get_current_user)])


def audit_log_filters(
        user_id: Optional[int] = Query(None, ge=0, le=MAX_ENTITY_ID, alias="userId"),
        action: Optional[str] = Query(None, description="CREATE, UPDATE, DELETE or READ"),
        resource: Optional[str] = Query(None, description="Resource token, e.g. USER"),
        resource_id: Optional[int] = Query(None, ge=0, le=MAX_ENTITY_ID, alias="resourceId"),
        start_date: Optional[date] = Query(None, alias="startDate", description="YYYY-MM-DD, inclusive"),
        end_date: Optional[date] = Query(None, alias="endDate", description="YYYY-MM-DD, inclusive"),
) -> AuditLogFilter:
    return AuditLogFilter(
        user_id=user_id,
        action=action,
        resource=resource,
        resource_id=resource_id,
        start_date=start_date,
        end_date=end_date,
    )


@router.get(
    "",
    response_model=ApiResponse[PaginatedData[AuditLogOutput]],
    summary="List Audit Logs",
    description="Audit records matching every given filter, newest first.",
    responses={400: {"description": "startDate is after endDate"}},
)
async def list_audit_logs(
        filters: AuditLogFilter = Depends(audit_log_filters),
        params: Params = Depends(pagination_params),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
):
    service = AsyncAuditLogService(db, logger)
    return success(await service.list_logs(filters, params))


@router.get(
    "/{log_id}",
    response_model=ApiResponse[AuditLogOutput],
    summary="Get Audit Log",
    responses={404: {"description": "Audit log not found"}},
)
async def get_audit_log(
        log_id: int = Path(..., ge=1, le=MAX_ENTITY_ID, description="Audit log ID"),
        db: AsyncSession = Depends(get_session),
        logger: logging.Logger = Depends(get_logger),
):
    service = AsyncAuditLogService(db, logger)
    return success(await service.get_log(log_id))
