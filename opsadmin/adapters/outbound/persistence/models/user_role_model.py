# opsadmin/adapters/outbound/persistence/models/user_role_model.py

from sqlalchemy import Column, ForeignKey, Integer, Table

from opsadmin.adapters.outbound.persistence.models.base_model import Base

########################################################################
# Many-to-many association between users and roles
########################################################################

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    comment="Many-to-many association between users and roles",
)
