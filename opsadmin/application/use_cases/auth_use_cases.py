# opsadmin/application/use_cases/auth_use_cases.py

"""
Service for user authentication.

Login by email and password, and resolution of a bearer token back to
the live user it was issued for.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.models import User
from opsadmin.adapters.outbound.persistence.repositories import AsyncUserCRUD
from opsadmin.adapters.outbound.security.auth_user_manager import UserAuthManager
from opsadmin.application.dtos.auth_dto import LoginRequest, LoginResponse
from opsadmin.application.dtos.user_dto import UserOutput
from opsadmin.application.use_cases.base_use_cases import BaseService
from opsadmin.domain.exceptions import InvalidCredentialsException


class AsyncAuthService(BaseService):

    service_name = "auth"

    def __init__(
            self,
            db_session: AsyncSession,
            auth_manager: UserAuthManager,
            logger: Optional[logging.Logger] = None,
    ):
        super().__init__(db_session, logger)
        self.auth_manager = auth_manager
        self.users = AsyncUserCRUD(logger=self.logger)

    async def login_user(self, credentials: LoginRequest) -> LoginResponse:
        """
        Authenticate a user and issue an access token.

        Raises:
            InvalidCredentialsException: Unknown email, wrong password or inactive account
        """
        user = await self.users.get_by_email(self.db, email=credentials.email)
        if not user or not await UserAuthManager.verify_password(credentials.password, user.password_hash):
            self.logger.warning(f"Failed login attempt for {credentials.email}")
            raise InvalidCredentialsException(detail="Incorrect email or password")

        if not user.is_active:
            self.logger.warning(f"Login attempt on inactive account {credentials.email}")
            raise InvalidCredentialsException(detail="User account is not active")

        token, expires_at = self.auth_manager.create_access_token(
            user_id=user.id, name=user.name, email=user.email
        )
        self.logger.info(f"User {user.id} logged in")
        return LoginResponse(token=token, expires_at=expires_at, user=UserOutput.model_validate(user))

    async def get_user_from_token(self, token: str) -> User:
        """
        Raises:
            InvalidCredentialsException: Invalid token, or the user is gone or inactive
        """
        payload = self.auth_manager.verify_access_token(token)
        user = await self.users.get(self.db, int(payload["sub"]))
        if user is None or not user.is_active:
            raise InvalidCredentialsException(detail="User not found or inactive")
        return user
