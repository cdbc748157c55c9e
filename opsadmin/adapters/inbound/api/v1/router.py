# opsadmin/adapters/inbound/api/v1/router.py

from fastapi import APIRouter

from opsadmin.adapters.inbound.api.v1.endpoints import (
    audit_log_endpoint,
    auth_endpoint,
    permission_endpoint,
    role_endpoint,
    user_endpoint,
)
from opsadmin.domain.services.audit_classifier import ResourceRegistry

# (URL segment, router, tags). The segment doubles as the audit resource name.
RESOURCE_ROUTERS = (
    ("auth", auth_endpoint.router, ["Auth"]),
    ("users", user_endpoint.router, ["Users"]),
    ("roles", role_endpoint.router, ["Roles"]),
    ("permissions", permission_endpoint.router, ["Permissions"]),
    ("audit-logs", audit_log_endpoint.router, ["Audit Logs"]),
)

api_router = APIRouter()

for segment, router, tags in RESOURCE_ROUTERS:
    api_router.include_router(router, prefix=f"/{segment}", tags=tags)


def register_resources(registry: ResourceRegistry) -> ResourceRegistry:
    """Register every mounted segment with the audit resource registry."""
    for segment, _router, _tags in RESOURCE_ROUTERS:
        registry.register(segment)
    return registry
