# opsadmin/adapters/outbound/persistence/repositories/user_repository.py

"""
Repository for user operations.

Implements ``IUserRepository``: email lookup, password-aware create and
update, and the in-session role set changes used by the association
use cases.
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.models import Role, User
from opsadmin.adapters.outbound.persistence.repositories.base_repository import AsyncCRUDBase
from opsadmin.adapters.outbound.security.auth_user_manager import UserAuthManager
from opsadmin.application.dtos.user_dto import UserCreate, UserUpdate
from opsadmin.application.ports.outbound import IUserRepository
from opsadmin.domain.exceptions import ResourceAlreadyExistsException


class AsyncUserCRUD(AsyncCRUDBase[User, UserCreate, UserUpdate], IUserRepository[User]):
    """
    Async CRUD repository for the User entity.
    """

    def __init__(self, logger=None):
        super().__init__(User, logger=logger)

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """
        Find a live user by email.

        Raises:
            DatabaseOperationException: In case of database error
        """
        return await self.get_by_field(db, "email", email)

    async def create_with_password(self, db: AsyncSession, *, obj_in: UserCreate) -> User:
        """
        Create a new user, hashing the password.

        Raises:
            ResourceAlreadyExistsException: If the email is already in use
            DatabaseOperationException: In case of database error
        """
        existing_user = await self.get_by_email(db, email=obj_in.email)
        if existing_user:
            self.logger.warning(f"Attempt to create user with existing email: {obj_in.email}")
            raise ResourceAlreadyExistsException(
                detail=f"User with email '{obj_in.email}' already exists"
            )

        obj_in_data = obj_in.model_dump()
        password = obj_in_data.pop("password")
        obj_in_data["password_hash"] = await UserAuthManager.hash_password(password)
        obj_in_data["roles"] = []
        return await self.create(db, obj_in=obj_in_data)

    async def update_with_password(
            self,
            db: AsyncSession,
            *,
            db_obj: User,
            obj_in: Union[UserUpdate, Dict[str, Any]]
    ) -> User:
        """
        Update a user, optionally including password.

        Raises:
            ResourceAlreadyExistsException: If the new email is already in use
            DatabaseOperationException: In case of database error
        """
        update_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)

        if update_data.get("email") and update_data["email"] != db_obj.email:
            existing = await self.get_by_email(db, email=update_data["email"])
            if existing and existing.id != db_obj.id:
                raise ResourceAlreadyExistsException(
                    detail=f"Email '{update_data['email']}' is already in use"
                )

        password = update_data.pop("password", None)
        if password:
            update_data["password_hash"] = await UserAuthManager.hash_password(password)

        # Required columns cannot be cleared by an explicit null
        for field in ("name", "email", "status"):
            if field in update_data and update_data[field] is None:
                del update_data[field]

        return await self.update(db, db_obj=db_obj, obj_in=update_data)

    def attach_roles(self, user: User, roles: List[Role]) -> List[int]:
        current = set(user.role_ids)
        added = []
        for role in roles:
            if role.id not in current:
                user.roles.append(role)
                current.add(role.id)
                added.append(role.id)
        return added

    def detach_roles(self, user: User, role_ids: Iterable[int]) -> List[int]:
        to_remove = set(role_ids)
        removed = [role.id for role in user.roles if role.id in to_remove]
        if removed:
            user.roles = [role for role in user.roles if role.id not in to_remove]
        return removed

    async def _before_soft_delete(self, db: AsyncSession, obj: User) -> None:
        obj.roles = []
