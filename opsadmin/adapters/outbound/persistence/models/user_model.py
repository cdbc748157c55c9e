# opsadmin/adapters/outbound/persistence/models/user_model.py

"""
User model.

Users reference roles through the ``user_roles`` association table;
neither side owns the other's lifecycle.
"""

from typing import List, Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from opsadmin.adapters.outbound.persistence.models.base_model import Base, TimestampMixin
from opsadmin.adapters.outbound.persistence.models.user_role_model import user_roles

USER_STATUS_ACTIVE = "active"
USER_STATUS_INACTIVE = "inactive"
USER_STATUS_PENDING = "pending"
USER_STATUSES = (USER_STATUS_ACTIVE, USER_STATUS_INACTIVE, USER_STATUS_PENDING)


class User(TimestampMixin, Base):
    """
    System user.

    Attributes:
        id: Unique identifier
        name: Display name, copied into audit records
        email: Login, unique
        password_hash: bcrypt hash
        department: Optional organisational unit
        status: active / inactive / pending
        roles: Roles assigned to the user
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=USER_STATUS_ACTIVE, nullable=False, index=True)

    roles: Mapped[List["Role"]] = relationship(
        "Role",
        secondary=user_roles,
        lazy="selectin",
        order_by="Role.id",
    )

    def __repr__(self) -> str:
        return f"<User(email={self.email}, status={self.status})>"

    @property
    def is_active(self) -> bool:
        return self.status == USER_STATUS_ACTIVE

    @property
    def role_ids(self) -> List[int]:
        return [role.id for role in self.roles]
