# opsadmin/adapters/outbound/persistence/models/role_model.py

"""
Role model.

A role is a named bundle of permissions that can be assigned to users.
"""

from typing import List, Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from opsadmin.adapters.outbound.persistence.models.base_model import Base, TimestampMixin
from opsadmin.adapters.outbound.persistence.models.role_permission_model import role_permissions


class Role(TimestampMixin, Base):
    """
    Attributes:
        id: Unique identifier
        name: Role name (ex: "admin", "operator")
        description: Free text
        permissions: Permissions bundled in the role
    """
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # selectin keeps the collection usable from async code
    permissions: Mapped[List["Permission"]] = relationship(
        "Permission",
        secondary=role_permissions,
        lazy="selectin",
        order_by="Permission.id",
    )

    def __repr__(self) -> str:
        return f"<Role(name={self.name})>"

    def has_permission(self, resource: str, action: str) -> bool:
        return any(p.resource == resource and p.action == action for p in self.permissions)
