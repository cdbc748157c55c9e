# opsadmin/application/use_cases/role_use_cases.py

import logging
from typing import Optional

from fastapi_pagination import Params
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.models import Role
from opsadmin.adapters.outbound.persistence.repositories import AsyncRoleCRUD
from opsadmin.application.dtos.response_dto import PaginatedData
from opsadmin.application.dtos.role_dto import RoleCreate, RoleDetailOutput, RoleOutput, RoleUpdate
from opsadmin.application.use_cases.base_use_cases import BaseService
from opsadmin.domain.exceptions import ResourceAlreadyExistsException
from opsadmin.shared.utils.pagination import paginate_query


class AsyncRoleService(BaseService):
    """
    Role CRUD. Permission membership is handled by ``AsyncAssociationService``.
    """

    service_name = "roles"

    def __init__(self, db_session: AsyncSession, logger: Optional[logging.Logger] = None):
        super().__init__(db_session, logger)
        self.repository = AsyncRoleCRUD(logger=self.logger)

    async def list_roles(self, params: Params, *, name: Optional[str] = None) -> PaginatedData[RoleOutput]:
        query = self.repository.list_query(name=f"%{name}%" if name else None)
        return await paginate_query(self.db, query, params, RoleOutput)

    async def get_role(self, role_id: int) -> Role:
        return await self._get_or_404(self.repository, role_id, "Role")

    async def get_role_detail(self, role_id: int) -> RoleDetailOutput:
        role = await self.get_role(role_id)
        user_count = await self.repository.count_users(self.db, role.id)
        detail = RoleDetailOutput.model_validate(role)
        detail.user_count = user_count
        return detail

    async def create_role(self, data: RoleCreate) -> Role:
        if await self.repository.get_by_name(self.db, data.name):
            raise ResourceAlreadyExistsException(detail=f"Role '{data.name}' already exists")
        return await self.repository.create(self.db, obj_in={**data.model_dump(), "permissions": []})

    async def update_role(self, role_id: int, data: RoleUpdate) -> Role:
        role = await self.get_role(role_id)
        if data.name and data.name != role.name and await self.repository.get_by_name(self.db, data.name):
            raise ResourceAlreadyExistsException(detail=f"Role '{data.name}' already exists")
        update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None or k == "description"}
        return await self.repository.update(self.db, db_obj=role, obj_in=update_data)

    async def delete_role(self, role_id: int) -> None:
        """Soft delete. Users stop holding the role and its permission set is cleared."""
        await self.repository.soft_delete(self.db, id=role_id)
