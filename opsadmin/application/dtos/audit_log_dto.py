# opsadmin/application/dtos/audit_log_dto.py

"""
Schemas for the audit log query surface.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import Field

from opsadmin.application.dtos.base_dto import CustomBaseModel


class AuditLogOutput(CustomBaseModel):
    """
    Audit record as stored, returned verbatim.
    """
    id: int
    user_id: int
    username: str
    action: str
    resource: str
    resource_id: int
    details: Optional[Any] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class AuditLogFilter(CustomBaseModel):
    """
    Filters accepted by ``GET /audit-logs``. ``end_date`` is inclusive.
    """
    user_id: Optional[int] = Field(None, ge=0)
    action: Optional[str] = None
    resource: Optional[str] = None
    resource_id: Optional[int] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
