# opsadmin/shared/middleware/audit_middleware.py

"""
Audit trail middleware.

Attaches a fresh ``AuditContext`` to every request, classifies the
request before the handler runs, and records exactly one audit entry
once the handler produced a 2xx response. Exceptions escaping the
handler pass through unrecorded.
"""

import logging
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from opsadmin.application.ports.outbound import IAuditRecorder
from opsadmin.domain.models.audit_domain_model import AuditContext, AuditEntry
from opsadmin.domain.services.audit_classifier import AuditClassifier


def client_ip(request: Request, trust_proxy_headers: bool = False) -> Optional[str]:
    """
    Caller address. ``X-Forwarded-For`` is only honoured behind a trusted proxy.
    """
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()
    return request.client.host if request.client else None


def get_audit_context(request: Request) -> AuditContext:
    """
    The request's audit context. Requests that did not go through the
    middleware get a detached context, so handlers never need to check.
    """
    context = getattr(request.state, "audit", None)
    if context is None:
        context = AuditContext()
        request.state.audit = context
    return context


class AuditMiddleware(BaseHTTPMiddleware):

    def __init__(
            self,
            app,
            classifier: AuditClassifier,
            recorder: IAuditRecorder,
            logger: Optional[logging.Logger] = None,
            trust_proxy_headers: bool = False,
    ):
        super().__init__(app)
        self.classifier = classifier
        self.recorder = recorder
        parent = logger or logging.getLogger("opsadmin")
        self.logger = parent.getChild("audit")
        self.trust_proxy_headers = trust_proxy_headers

    async def dispatch(self, request: Request, call_next):
        context = AuditContext()
        request.state.audit = context

        method = request.method
        path = request.url.path
        context.classification = self.classifier.classify(method, path)

        response = await call_next(request)

        if context.classification is None:
            return response
        if not 200 <= response.status_code < 300:
            return response

        classification = self.classifier.apply_overrides(context.classification, context)
        if classification is None:
            return response

        if context.actor is None:
            self.logger.warning(
                f"No authenticated user for audited request {method} {path}; audit entry skipped"
            )
            return response

        details = context.detail
        if details is None:
            details = {
                "requestPath": path,
                "method": method,
                "status": response.status_code,
            }

        await self.recorder.record(
            AuditEntry(
                user_id=context.actor.user_id,
                username=context.actor.username,
                action=classification.action,
                resource=classification.resource,
                resource_id=classification.resource_id,
                details=details,
                ip_address=client_ip(request, self.trust_proxy_headers),
                user_agent=request.headers.get("user-agent"),
            )
        )
        return response
