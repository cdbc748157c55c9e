# opsadmin/adapters/outbound/persistence/repositories/audit_log_repository.py

"""
Repository for the append-only audit trail.

Rows are only ever inserted. The ORM listeners on ``AuditLog`` refuse
updates and deletes, so only the read side of ``AsyncCRUDBase`` is used.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.models import AuditLog
from opsadmin.adapters.outbound.persistence.repositories.base_repository import AsyncCRUDBase
from opsadmin.application.ports.outbound import IAuditLogRepository
from opsadmin.domain.exceptions import DatabaseOperationException
from opsadmin.domain.models.audit_domain_model import AuditEntry


class AsyncAuditLogCRUD(AsyncCRUDBase[AuditLog, BaseModel, BaseModel], IAuditLogRepository):

    def __init__(self, logger=None):
        super().__init__(AuditLog, logger=logger)

    async def append(self, db: AsyncSession, entry: AuditEntry) -> AuditLog:
        """
        Insert one audit record and commit.

        Raises:
            DatabaseOperationException: If the insert or the commit fails
        """
        db_obj = AuditLog(
            user_id=entry.user_id,
            username=entry.username,
            action=entry.action.value,
            resource=entry.resource,
            resource_id=entry.resource_id,
            details=entry.details,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
        )
        try:
            db.add(db_obj)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            self.logger.error(f"Error writing audit log: {str(e)}")
            raise DatabaseOperationException(
                detail="Error writing audit log",
                original_error=e
            )
        return db_obj

    def filtered_query(
            self,
            *,
            user_id: Optional[int] = None,
            action: Optional[str] = None,
            resource: Optional[str] = None,
            resource_id: Optional[int] = None,
            created_from: Optional[datetime] = None,
            created_to: Optional[datetime] = None,
    ):
        """
        Select statement for the audit listing, newest first.
        """
        query = self._apply_filters(
            self._base_query(),
            {"user_id": user_id, "action": action, "resource": resource, "resource_id": resource_id},
        )
        if created_from is not None:
            query = query.where(AuditLog.created_at >= created_from)
        if created_to is not None:
            query = query.where(AuditLog.created_at <= created_to)
        return query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
