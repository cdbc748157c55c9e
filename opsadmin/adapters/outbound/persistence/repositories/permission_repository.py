# opsadmin/adapters/outbound/persistence/repositories/permission_repository.py

from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.models import Permission, role_permissions
from opsadmin.adapters.outbound.persistence.repositories.base_repository import AsyncCRUDBase
from opsadmin.application.dtos.permission_dto import PermissionCreate, PermissionUpdate
from opsadmin.application.ports.outbound import IPermissionRepository


class AsyncPermissionCRUD(
    AsyncCRUDBase[Permission, PermissionCreate, PermissionUpdate],
    IPermissionRepository[Permission],
):

    def __init__(self, logger=None):
        super().__init__(Permission, logger=logger)

    async def get_by_name(self, db: AsyncSession, name: str) -> Optional[Permission]:
        return await self.get_by_field(db, "name", name)

    async def _before_soft_delete(self, db: AsyncSession, obj: Permission) -> None:
        await db.execute(delete(role_permissions).where(role_permissions.c.permission_id == obj.id))
