# opsadmin/application/use_cases/user_use_cases.py

"""
Service for user management.
"""

import logging
from typing import Optional

from fastapi_pagination import Params
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.models import User
from opsadmin.adapters.outbound.persistence.repositories import AsyncUserCRUD
from opsadmin.application.dtos.response_dto import PaginatedData
from opsadmin.application.dtos.user_dto import UserCreate, UserOutput, UserUpdate
from opsadmin.application.use_cases.base_use_cases import BaseService
from opsadmin.shared.utils.pagination import paginate_query


class AsyncUserService(BaseService):
    """
    User CRUD. Role membership is handled by ``AsyncAssociationService``.
    """

    service_name = "users"

    def __init__(self, db_session: AsyncSession, logger: Optional[logging.Logger] = None):
        super().__init__(db_session, logger)
        self.repository = AsyncUserCRUD(logger=self.logger)

    async def list_users(
            self,
            params: Params,
            *,
            name: Optional[str] = None,
            email: Optional[str] = None,
            status: Optional[str] = None,
            department: Optional[str] = None,
    ) -> PaginatedData[UserOutput]:
        query = self.repository.list_query(
            name=f"%{name}%" if name else None,
            email=f"%{email}%" if email else None,
            status=status,
            department=department,
        )
        return await paginate_query(self.db, query, params, UserOutput)

    async def get_user(self, user_id: int) -> User:
        return await self._get_or_404(self.repository, user_id, "User")

    async def create_user(self, data: UserCreate) -> User:
        """
        Raises:
            ResourceAlreadyExistsException: If the email is already in use
        """
        user = await self.repository.create_with_password(self.db, obj_in=data)
        self.logger.info(f"User created: {user.email} (ID {user.id})")
        return user

    async def update_user(self, user_id: int, data: UserUpdate) -> User:
        user = await self.get_user(user_id)
        return await self.repository.update_with_password(self.db, db_obj=user, obj_in=data)

    async def delete_user(self, user_id: int) -> None:
        """Soft delete. The user's role associations are dropped with it."""
        await self.repository.soft_delete(self.db, id=user_id)
