# opsadmin/application/use_cases/audit_log_use_cases.py

"""
Audit trail services.

``AsyncAuditRecorder`` writes records on behalf of the audit middleware
through its own session, so a failed audit write can never touch the
request's business transaction. ``AsyncAuditLogService`` is the read
side behind ``GET /audit-logs``.
"""

import dataclasses
import logging
from datetime import datetime, time, timezone
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi_pagination import Params
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from opsadmin.adapters.outbound.persistence.database import get_db_context
from opsadmin.adapters.outbound.persistence.repositories import AsyncAuditLogCRUD
from opsadmin.application.dtos.audit_log_dto import AuditLogFilter, AuditLogOutput
from opsadmin.application.dtos.response_dto import PaginatedData
from opsadmin.application.ports.inbound import IAuditLogQueryUseCase
from opsadmin.application.ports.outbound import IAuditRecorder
from opsadmin.application.use_cases.base_use_cases import BaseService
from opsadmin.domain.exceptions import InvalidInputException
from opsadmin.domain.models.audit_domain_model import AuditEntry
from opsadmin.shared.utils.pagination import paginate_query


def encode_details(details: Any) -> Any:
    """
    JSON-compatible copy of ``details``. Unserializable payloads become ``{}``.
    """
    if details is None:
        return {}
    try:
        return jsonable_encoder(details)
    except (TypeError, ValueError):
        return {}


class AsyncAuditRecorder(IAuditRecorder):
    """
    Best-effort audit writer.

    ``record`` never raises: a failed write is logged as a warning and
    reported through the return value.
    """

    def __init__(self, session_factory: async_sessionmaker, logger: Optional[logging.Logger] = None):
        self.session_factory = session_factory
        parent = logger or logging.getLogger("opsadmin")
        self.logger = parent.getChild("audit.recorder")
        self.repository = AsyncAuditLogCRUD(logger=self.logger)

    async def record(self, entry: AuditEntry) -> bool:
        entry = dataclasses.replace(entry, details=encode_details(entry.details))
        try:
            async with get_db_context(self.session_factory) as db:
                await self.repository.append(db, entry)
        except Exception as e:
            self.logger.warning(
                f"Failed to record audit entry {entry.action.value} {entry.resource}#{entry.resource_id} "
                f"for user {entry.user_id}: {str(e)}"
            )
            return False

        self.logger.debug(f"Audit entry recorded: {entry.action.value} {entry.resource}#{entry.resource_id}")
        return True


class AsyncAuditLogService(BaseService, IAuditLogQueryUseCase):
    """
    Query side of the audit trail.
    """

    service_name = "audit_logs"

    def __init__(self, db_session: AsyncSession, logger: Optional[logging.Logger] = None):
        super().__init__(db_session, logger)
        self.repository = AsyncAuditLogCRUD(logger=self.logger)

    async def list_logs(self, filters: AuditLogFilter, params: Params) -> PaginatedData[AuditLogOutput]:
        """
        Filtered audit records, newest first.

        ``start_date`` and ``end_date`` are whole UTC days, both inclusive.

        Raises:
            InvalidInputException: If ``start_date`` is after ``end_date``
        """
        if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
            raise InvalidInputException(
                detail="Invalid date range",
                fields={"startDate": "must not be after endDate"},
            )

        created_from = created_to = None
        if filters.start_date:
            created_from = datetime.combine(filters.start_date, time.min, tzinfo=timezone.utc)
        if filters.end_date:
            created_to = datetime.combine(filters.end_date, time.max, tzinfo=timezone.utc)

        query = self.repository.filtered_query(
            user_id=filters.user_id,
            action=filters.action.upper() if filters.action else None,
            resource=filters.resource.upper() if filters.resource else None,
            resource_id=filters.resource_id,
            created_from=created_from,
            created_to=created_to,
        )
        return await paginate_query(self.db, query, params, AuditLogOutput)

    async def get_log(self, log_id: int) -> AuditLogOutput:
        """
        Raises:
            ResourceNotFoundException: If no record has this ID
        """
        log = await self._get_or_404(self.repository, log_id, "Audit log")
        return AuditLogOutput.model_validate(log)
