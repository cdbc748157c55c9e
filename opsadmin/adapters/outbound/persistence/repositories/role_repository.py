# opsadmin/adapters/outbound/persistence/repositories/role_repository.py

"""
Repository for roles and their permission set.
"""

from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.models import Permission, Role, User, user_roles
from opsadmin.adapters.outbound.persistence.repositories.base_repository import AsyncCRUDBase
from opsadmin.application.dtos.role_dto import RoleCreate, RoleUpdate
from opsadmin.application.ports.outbound import IRoleRepository
from opsadmin.domain.exceptions import DatabaseOperationException


class AsyncRoleCRUD(AsyncCRUDBase[Role, RoleCreate, RoleUpdate], IRoleRepository[Role]):

    def __init__(self, logger=None):
        super().__init__(Role, logger=logger)

    async def get_by_name(self, db: AsyncSession, name: str) -> Optional[Role]:
        return await self.get_by_field(db, "name", name)

    async def count_users(self, db: AsyncSession, role_id: int) -> int:
        """
        Number of live users holding the role.

        Raises:
            DatabaseOperationException: In case of database error
        """
        try:
            query = (
                select(func.count())
                .select_from(user_roles)
                .join(User, User.id == user_roles.c.user_id)
                .where(user_roles.c.role_id == role_id, User.deleted_at.is_(None))
            )
            result = await db.execute(query)
            return result.scalar_one()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting users of role {role_id}: {str(e)}")
            raise DatabaseOperationException(
                detail="Error counting role users",
                original_error=e
            )

    def attach_permissions(self, role: Role, permissions: List[Permission]) -> List[int]:
        current = {permission.id for permission in role.permissions}
        added = []
        for permission in permissions:
            if permission.id not in current:
                role.permissions.append(permission)
                current.add(permission.id)
                added.append(permission.id)
        return added

    def detach_permissions(self, role: Role, permission_ids: Iterable[int]) -> List[int]:
        to_remove = set(permission_ids)
        removed = [p.id for p in role.permissions if p.id in to_remove]
        if removed:
            role.permissions = [p for p in role.permissions if p.id not in to_remove]
        return removed

    async def _before_soft_delete(self, db: AsyncSession, obj: Role) -> None:
        # Users stop holding a deleted role
        await db.execute(delete(user_roles).where(user_roles.c.role_id == obj.id))
        obj.permissions = []
