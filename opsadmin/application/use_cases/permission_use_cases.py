# opsadmin/application/use_cases/permission_use_cases.py

import logging
from typing import Optional

from fastapi_pagination import Params
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.models import Permission
from opsadmin.adapters.outbound.persistence.repositories import AsyncPermissionCRUD
from opsadmin.application.dtos.permission_dto import PermissionCreate, PermissionOutput, PermissionUpdate
from opsadmin.application.dtos.response_dto import PaginatedData
from opsadmin.application.use_cases.base_use_cases import BaseService
from opsadmin.domain.exceptions import ResourceAlreadyExistsException
from opsadmin.shared.utils.pagination import paginate_query


class AsyncPermissionService(BaseService):

    service_name = "permissions"

    def __init__(self, db_session: AsyncSession, logger: Optional[logging.Logger] = None):
        super().__init__(db_session, logger)
        self.repository = AsyncPermissionCRUD(logger=self.logger)

    async def list_permissions(
            self,
            params: Params,
            *,
            resource: Optional[str] = None,
            action: Optional[str] = None,
    ) -> PaginatedData[PermissionOutput]:
        query = self.repository.list_query(resource=resource, action=action)
        return await paginate_query(self.db, query, params, PermissionOutput)

    async def get_permission(self, permission_id: int) -> Permission:
        return await self._get_or_404(self.repository, permission_id, "Permission")

    async def create_permission(self, data: PermissionCreate) -> Permission:
        """
        Raises:
            ResourceAlreadyExistsException: Name or resource/action pair already taken
        """
        if await self.repository.get_by_name(self.db, data.name):
            raise ResourceAlreadyExistsException(detail=f"Permission '{data.name}' already exists")
        return await self.repository.create(self.db, obj_in=data)

    async def update_permission(self, permission_id: int, data: PermissionUpdate) -> Permission:
        permission = await self.get_permission(permission_id)
        update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None or k == "description"}
        return await self.repository.update(self.db, db_obj=permission, obj_in=update_data)

    async def delete_permission(self, permission_id: int) -> None:
        """Soft delete. Roles stop carrying the permission."""
        await self.repository.soft_delete(self.db, id=permission_id)
