# opsadmin/adapters/outbound/persistence/models/role_permission_model.py

"""
Association table between roles and permissions.
"""

from sqlalchemy import Column, ForeignKey, Integer, Table

from opsadmin.adapters.outbound.persistence.models.base_model import Base

role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", Integer, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
    comment="Many-to-many association between roles and permissions",
)
