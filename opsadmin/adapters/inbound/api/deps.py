# opsadmin/adapters/inbound/api/deps.py

"""
Dependencies for injection into API endpoints.

Database sessions, the application logger, and the authenticated user.
Authenticating a request also binds the caller as the actor of the
request's audit context.
"""

import logging
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.database import get_db
from opsadmin.adapters.outbound.persistence.models import User
from opsadmin.adapters.outbound.security.auth_user_manager import UserAuthManager
from opsadmin.application.use_cases.auth_use_cases import AsyncAuthService
from opsadmin.domain.exceptions import InvalidCredentialsException
from opsadmin.domain.models.audit_domain_model import Actor, AuditContext
from opsadmin.shared.middleware.audit_middleware import get_audit_context

# Missing credentials are reported by get_current_user, not by FastAPI
bearer_scheme = HTTPBearer(auto_error=False)

get_session = get_db


def get_logger(request: Request) -> logging.Logger:
    return request.app.state.logger


def get_auth_manager(request: Request) -> UserAuthManager:
    return request.app.state.auth_manager


def get_audit(request: Request) -> AuditContext:
    """Per-request audit context, for handlers that declare overrides or details."""
    return get_audit_context(request)


async def get_current_user(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
        db: AsyncSession = Depends(get_session),
        auth_manager: UserAuthManager = Depends(get_auth_manager),
        logger: logging.Logger = Depends(get_logger),
) -> User:
    """
    Get the current user from the bearer token.

    Raises:
        InvalidCredentialsException: Missing or invalid token, or the user
            doesn't exist or is inactive
    """
    if credentials is None or not credentials.credentials:
        raise InvalidCredentialsException(detail="Not authenticated")

    service = AsyncAuthService(db, auth_manager, logger)
    user = await service.get_user_from_token(credentials.credentials)

    get_audit_context(request).actor = Actor(user_id=user.id, username=user.name)
    return user
