# opsadmin/domain/models/audit_domain_model.py

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class AuditAction(str, Enum):
    """Closed set of audited actions."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    READ = "READ"


# HTTP method -> action. Methods outside the table are not audited.
METHOD_ACTIONS = {
    "POST": AuditAction.CREATE,
    "PUT": AuditAction.UPDATE,
    "PATCH": AuditAction.UPDATE,
    "DELETE": AuditAction.DELETE,
    "GET": AuditAction.READ,
}


@dataclass(frozen=True)
class Actor:
    """Authenticated identity performing a request."""
    user_id: int
    username: str


@dataclass(frozen=True)
class Classification:
    """Semantic subject of a request: what was done to which resource."""
    action: AuditAction
    resource: str
    resource_id: int = 0


@dataclass
class AuditContext:
    """
    Per-request audit state.

    A fresh instance is attached to every request before the handler runs.
    The auth dependency fills ``actor``; handlers with ambiguous or
    multi-resource effects may set the override fields and ``detail``.
    """
    actor: Optional[Actor] = None
    override_resource: Optional[str] = None
    override_action: Optional[AuditAction] = None
    override_resource_id: Optional[int] = None
    detail: Optional[Any] = None
    classification: Optional[Classification] = field(default=None, repr=False)

    def has_overrides(self) -> bool:
        return (
            self.override_resource is not None
            or self.override_action is not None
            or self.override_resource_id is not None
        )


@dataclass(frozen=True)
class AuditEntry:
    """Everything the recorder needs to persist one audit record."""
    user_id: int
    username: str
    action: AuditAction
    resource: str
    resource_id: int
    details: Any
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def creation_detail(entity: Any) -> dict:
    """Detail payload for a creation."""
    return {"action": AuditAction.CREATE.value, "entity": entity}


def change_detail(before: Any, after: Any) -> dict:
    """Detail payload for an update: state before and after."""
    return {"before": before, "after": after}


def deletion_detail(entity: Any) -> dict:
    """Detail payload for a deletion."""
    return {"action": AuditAction.DELETE.value, "deletedObj": entity}
