# opsadmin/adapters/outbound/persistence/models/permission_model.py

"""
Permission model.

A permission is an atomic capability, named uniquely and decomposed
into a ``resource`` / ``action`` pair (e.g. ``user`` / ``create``).
"""

from typing import Optional

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from opsadmin.adapters.outbound.persistence.models.base_model import Base, TimestampMixin


class Permission(TimestampMixin, Base):
    """
    Attributes:
        id: Unique identifier
        name: Unique readable name (ex: "user:create")
        description: Free text
        resource: Resource part (ex: "user")
        action: Action part (ex: "create")
    """
    __tablename__ = "permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    resource: Mapped[str] = mapped_column(String(50), nullable=False)
    action: Mapped[str] = mapped_column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("resource", "action", name="uq_permission_resource_action"),
    )

    def __repr__(self) -> str:
        return f"<Permission(name={self.name})>"
