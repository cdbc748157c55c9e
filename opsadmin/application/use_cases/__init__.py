# opsadmin/application/use_cases/__init__.py

"""
Application services, organized by functional domain.
"""

from opsadmin.application.use_cases.base_use_cases import BaseService
from opsadmin.application.use_cases.association_use_cases import AsyncAssociationService
from opsadmin.application.use_cases.audit_log_use_cases import AsyncAuditLogService, AsyncAuditRecorder
from opsadmin.application.use_cases.auth_use_cases import AsyncAuthService
from opsadmin.application.use_cases.permission_use_cases import AsyncPermissionService
from opsadmin.application.use_cases.role_use_cases import AsyncRoleService
from opsadmin.application.use_cases.user_use_cases import AsyncUserService

__all__ = [
    "BaseService",
    "AsyncAssociationService",
    "AsyncAuditLogService",
    "AsyncAuditRecorder",
    "AsyncAuthService",
    "AsyncPermissionService",
    "AsyncRoleService",
    "AsyncUserService",
]
