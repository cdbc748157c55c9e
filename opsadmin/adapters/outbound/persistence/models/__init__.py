# opsadmin/adapters/outbound/persistence/models/__init__.py

"""
Data models.

Exports every SQLAlchemy model so that the metadata is complete
as soon as this package is imported.
"""

from opsadmin.adapters.outbound.persistence.models.base_model import Base

# Identity store
from opsadmin.adapters.outbound.persistence.models.permission_model import Permission
from opsadmin.adapters.outbound.persistence.models.role_model import Role
from opsadmin.adapters.outbound.persistence.models.user_model import User

# Association tables
from opsadmin.adapters.outbound.persistence.models.user_role_model import user_roles
from opsadmin.adapters.outbound.persistence.models.role_permission_model import role_permissions

# Audit trail
from opsadmin.adapters.outbound.persistence.models.audit_log_model import AuditLog, ImmutableAuditLogError

__all__ = [
    "Base",

    "User",
    "Role",
    "Permission",

    "user_roles",
    "role_permissions",

    "AuditLog",
    "ImmutableAuditLogError",
]
