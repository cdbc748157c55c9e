# opsadmin/shared/middleware/__init__.py

from opsadmin.shared.middleware.audit_middleware import AuditMiddleware, client_ip, get_audit_context
from opsadmin.shared.middleware.exception_middleware import AsyncExceptionMiddleware, request_validation_handler
from opsadmin.shared.middleware.logging_middleware import AsyncRequestLoggingMiddleware

__all__ = [
    "AuditMiddleware",
    "AsyncExceptionMiddleware",
    "AsyncRequestLoggingMiddleware",
    "client_ip",
    "get_audit_context",
    "request_validation_handler",
]
