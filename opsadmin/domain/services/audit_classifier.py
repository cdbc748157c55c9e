# opsadmin/domain/services/audit_classifier.py

"""
Request classification for the audit trail.

Maps an HTTP method and path to a ``Classification`` (action, resource,
resource id), or decides the request is not audit-worthy.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from opsadmin.domain.models.audit_domain_model import (
    METHOD_ACTIONS,
    AuditAction,
    AuditContext,
    Classification,
)

IdExtractor = Callable[[str], Optional[int]]

DEFAULT_SKIP_PREFIXES = (
    "/api/v1/auth/login",
    "/api/v1/docs",
    "/healthz",
    "/health",
    "/metrics",
    "/api/v1/audit-logs",
)

# URL segments recognised as resource names when no explicit registration exists
KNOWN_RESOURCE_SEGMENTS = (
    "users", "roles", "permissions", "responsibilities", "responsibility-groups",
    "environments", "assets", "services", "service-types", "service-instances",
    "businesses", "bugs", "audit-logs", "projects", "teams", "settings",
)

UNSINGULARIZED_TOKENS = frozenset({"BUSINESS"})

_NUMERIC_ID = re.compile(r"^[0-9]+$")
_MAX_RESOURCE_ID = 2 ** 32 - 1


def parse_numeric_id(segment: str) -> Optional[int]:
    """Default id extractor: an unsigned 32-bit decimal integer."""
    if not _NUMERIC_ID.match(segment):
        return None
    value = int(segment)
    if value > _MAX_RESOURCE_ID:
        return None
    return value


def normalize_resource_token(segment: str) -> str:
    """
    Heuristic resource token for a URL segment.

    ``responsibility-groups`` -> ``RESPONSIBILITY_GROUP``,
    ``businesses`` -> ``BUSINESS``.
    """
    token = segment.replace("-", "_").upper()
    if token in UNSINGULARIZED_TOKENS:
        return token
    if token.endswith("SSES"):
        return token[:-2]
    if token.endswith("S"):
        return token[:-1]
    return token


@dataclass(frozen=True)
class ResourceDefinition:
    segment: str
    token: str
    id_extractor: IdExtractor = parse_numeric_id


class ResourceRegistry:
    """
    Explicit mapping from URL segment to resource token and id extractor.

    Routers register their segments at setup time. Segments that were never
    registered fall back to ``normalize_resource_token``.
    """

    def __init__(self):
        self._definitions: Dict[str, ResourceDefinition] = {}

    @classmethod
    def with_defaults(cls) -> "ResourceRegistry":
        registry = cls()
        for segment in KNOWN_RESOURCE_SEGMENTS:
            registry.register(segment)
        return registry

    def register(
            self,
            segment: str,
            token: Optional[str] = None,
            id_extractor: IdExtractor = parse_numeric_id,
    ) -> ResourceDefinition:
        definition = ResourceDefinition(
            segment=segment,
            token=(token or normalize_resource_token(segment)).upper(),
            id_extractor=id_extractor,
        )
        self._definitions[segment] = definition
        return definition

    def get(self, segment: str) -> Optional[ResourceDefinition]:
        return self._definitions.get(segment)

    def resolve_token(self, segment: str) -> str:
        definition = self._definitions.get(segment)
        if definition is not None:
            return definition.token
        return normalize_resource_token(segment)

    def extract_resource_id(self, segments: Sequence[str]) -> int:
        """
        Scan the segments; the one following a registered resource segment
        is handed to that resource's extractor. First success wins.
        """
        for previous, current in zip(segments, segments[1:]):
            definition = self._definitions.get(previous)
            if definition is None:
                continue
            resource_id = definition.id_extractor(current)
            if resource_id is not None:
                return resource_id
        return 0

    def __contains__(self, segment: str) -> bool:
        return segment in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


class AuditClassifier:
    """
    Stateless request classifier.

    ``classify`` runs before the handler; ``apply_overrides`` runs after it,
    once the handler had a chance to fill the ``AuditContext``.
    """

    def __init__(
            self,
            registry: Optional[ResourceRegistry] = None,
            skip_prefixes: Iterable[str] = DEFAULT_SKIP_PREFIXES,
            audit_read_requests: bool = True,
            logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry if registry is not None else ResourceRegistry.with_defaults()
        self.skip_prefixes: List[str] = list(skip_prefixes)
        self.audit_read_requests = audit_read_requests
        self.logger = logger or logging.getLogger("opsadmin.audit.classifier")

    def should_skip(self, path: str) -> bool:
        """Prefixes match whole path segments: ``/health`` skips ``/health/db`` but not ``/healthcheck``."""
        for prefix in self.skip_prefixes:
            prefix = prefix.rstrip("/")
            if path == prefix or path.startswith(prefix + "/"):
                return True
        return False

    def classify(
            self,
            method: str,
            path: str,
            overrides: Optional[AuditContext] = None,
    ) -> Optional[Classification]:
        if self.should_skip(path):
            return None

        segments = path.strip("/").split("/")
        if len(segments) < 3 or not segments[2]:
            return None

        action = METHOD_ACTIONS.get(method.upper())
        if action is None:
            return None

        classification = Classification(
            action=action,
            resource=self.registry.resolve_token(segments[2]),
            resource_id=self.registry.extract_resource_id(segments),
        )
        # Without a context the READ filter is deferred to apply_overrides,
        # so a handler can still promote a GET through override_action.
        if overrides is None:
            return classification
        return self.apply_overrides(classification, overrides)

    def apply_overrides(
            self,
            classification: Optional[Classification],
            context: AuditContext,
    ) -> Optional[Classification]:
        if classification is None:
            return None

        action = classification.action
        resource = classification.resource
        resource_id = classification.resource_id

        if context.override_action is not None:
            action = AuditAction(context.override_action)
        if context.override_resource:
            resource = context.override_resource.upper()
        if context.override_resource_id is not None:
            resource_id = context.override_resource_id

        if action is AuditAction.READ and not self.audit_read_requests:
            self.logger.debug("Skipping READ classification for resource %s", resource)
            return None

        return Classification(action=action, resource=resource, resource_id=resource_id)
