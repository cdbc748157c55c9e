# opsadmin/adapters/outbound/persistence/models/audit_log_model.py

"""
Audit log model.

Append-only record of who did what to which resource. The acting
user's display name is copied at write time so that records stay
meaningful after the user is renamed or deleted.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from opsadmin.adapters.outbound.persistence.models.base_model import Base, utcnow


class ImmutableAuditLogError(RuntimeError):
    """Raised when code tries to update or delete an audit record."""


class AuditLog(Base):
    """
    Attributes:
        id: Unique identifier
        user_id: Acting user id
        username: Acting user display name at write time
        action: CREATE / UPDATE / DELETE / READ
        resource: Upper-case resource token (ex: USER, RESPONSIBILITY_GROUP)
        resource_id: Target id, 0 when unknown
        details: Structured detail payload
        ip_address: Caller address
        user_agent: Caller user agent
        created_at: Write time
    """
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    action: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    resource: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    resource_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    details: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<AuditLog(action={self.action}, resource={self.resource}, resource_id={self.resource_id})>"


@event.listens_for(AuditLog, "before_update")
def _refuse_update(mapper, connection, target):
    raise ImmutableAuditLogError(f"Audit log {target.id} is append-only and cannot be updated")


@event.listens_for(AuditLog, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise ImmutableAuditLogError(f"Audit log {target.id} is append-only and cannot be deleted")
