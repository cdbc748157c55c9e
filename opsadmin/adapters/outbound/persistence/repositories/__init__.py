# opsadmin/adapters/outbound/persistence/repositories/__init__.py

"""
Repositories.

Each repository is constructed by the service that owns it, with the
service's logger.
"""

from opsadmin.adapters.outbound.persistence.repositories.base_repository import AsyncCRUDBase
from opsadmin.adapters.outbound.persistence.repositories.user_repository import AsyncUserCRUD
from opsadmin.adapters.outbound.persistence.repositories.role_repository import AsyncRoleCRUD
from opsadmin.adapters.outbound.persistence.repositories.permission_repository import AsyncPermissionCRUD
from opsadmin.adapters.outbound.persistence.repositories.audit_log_repository import AsyncAuditLogCRUD

__all__ = [
    "AsyncCRUDBase",
    "AsyncUserCRUD",
    "AsyncRoleCRUD",
    "AsyncPermissionCRUD",
    "AsyncAuditLogCRUD",
]
