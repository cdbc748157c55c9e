# opsadmin/application/use_cases/association_use_cases.py

"""
Bulk role and permission association management.

Every operation follows the same unit of work: lock and load the target,
validate the whole candidate ID set with one batch lookup, apply the
set change, commit once. Any failure rolls the session back, so a
rejected batch never leaves partial associations behind.
"""

import logging
from typing import Callable, Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.models import Permission, Role
from opsadmin.adapters.outbound.persistence.repositories import (
    AsyncCRUDBase,
    AsyncPermissionCRUD,
    AsyncRoleCRUD,
    AsyncUserCRUD,
)
from opsadmin.adapters.outbound.persistence.repositories.base_repository import missing_ids
from opsadmin.application.ports.inbound import IAssociationUseCase
from opsadmin.application.use_cases.base_use_cases import BaseService
from opsadmin.domain.exceptions import (
    AssociationCandidateNotFoundException,
    DatabaseOperationException,
    DomainException,
    TargetNotFoundException,
)


def unique_ids(ids: Iterable[int]) -> List[int]:
    """De-duplicate while keeping the caller's order."""
    return list(dict.fromkeys(ids))


class AsyncAssociationService(BaseService, IAssociationUseCase):
    """
    Atomic add/remove of user<->role and role<->permission associations.
    """

    service_name = "association"

    def __init__(self, db_session: AsyncSession, logger: Optional[logging.Logger] = None):
        super().__init__(db_session, logger)
        self.users = AsyncUserCRUD(logger=self.logger)
        self.roles = AsyncRoleCRUD(logger=self.logger)
        self.permissions = AsyncPermissionCRUD(logger=self.logger)

    async def assign_roles(self, user_id: int, role_ids: Sequence[int]) -> List[Role]:
        """
        Add roles to a user. Roles already held are left as they are.

        Raises:
            TargetNotFoundException: The user does not exist
            AssociationCandidateNotFoundException: At least one role ID does not exist
            DatabaseOperationException: Storage failure, nothing was changed
        """
        user = await self._apply(
            target_repository=self.users,
            target_label="User",
            target_id=user_id,
            candidate_repository=self.roles,
            candidate_label="role",
            candidate_ids=role_ids,
            change=lambda target, candidates: self.users.attach_roles(target, candidates),
            verb="assigned to",
        )
        return list(user.roles)

    async def remove_roles(self, user_id: int, role_ids: Sequence[int]) -> List[Role]:
        """
        Remove roles from a user (set difference).

        Every ID must reference an existing role; a role that the user
        does not hold is skipped.
        """
        user = await self._apply(
            target_repository=self.users,
            target_label="User",
            target_id=user_id,
            candidate_repository=self.roles,
            candidate_label="role",
            candidate_ids=role_ids,
            change=lambda target, candidates: self.users.detach_roles(target, [c.id for c in candidates]),
            verb="removed from",
        )
        return list(user.roles)

    async def add_permissions_to_role(self, role_id: int, permission_ids: Sequence[int]) -> List[Permission]:
        role = await self._apply(
            target_repository=self.roles,
            target_label="Role",
            target_id=role_id,
            candidate_repository=self.permissions,
            candidate_label="permission",
            candidate_ids=permission_ids,
            change=lambda target, candidates: self.roles.attach_permissions(target, candidates),
            verb="added to",
        )
        return list(role.permissions)

    async def remove_permissions_from_role(self, role_id: int, permission_ids: Sequence[int]) -> List[Permission]:
        role = await self._apply(
            target_repository=self.roles,
            target_label="Role",
            target_id=role_id,
            candidate_repository=self.permissions,
            candidate_label="permission",
            candidate_ids=permission_ids,
            change=lambda target, candidates: self.roles.detach_permissions(target, [c.id for c in candidates]),
            verb="removed from",
        )
        return list(role.permissions)

    async def get_user_roles(self, user_id: int) -> List[Role]:
        user = await self.users.get(self.db, user_id)
        if user is None:
            raise TargetNotFoundException("User", user_id)
        return list(user.roles)

    async def get_role_permissions(self, role_id: int) -> List[Permission]:
        role = await self.roles.get(self.db, role_id)
        if role is None:
            raise TargetNotFoundException("Role", role_id)
        return list(role.permissions)

    async def _apply(
            self,
            *,
            target_repository: AsyncCRUDBase,
            target_label: str,
            target_id: int,
            candidate_repository: AsyncCRUDBase,
            candidate_label: str,
            candidate_ids: Sequence[int],
            change: Callable,
            verb: str,
    ):
        try:
            target = await target_repository.get_for_update(self.db, target_id)
            if target is None:
                self.logger.warning(f"{target_label} not found: ID {target_id}")
                raise TargetNotFoundException(target_label, target_id)

            requested = unique_ids(candidate_ids)
            if not requested:
                await self.db.commit()
                return target

            candidates = await candidate_repository.get_many(self.db, requested)
            missing = missing_ids(requested, candidates)
            if missing:
                self.logger.warning(
                    f"Rejected {candidate_label} batch for {target_label} {target_id}: unknown IDs {missing}"
                )
                raise AssociationCandidateNotFoundException(candidate_label, missing)

            changed = change(target, candidates)
            await self.db.commit()

        except DomainException:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            self.logger.error(f"Error updating {candidate_label}s of {target_label} {target_id}: {str(e)}")
            raise DatabaseOperationException(
                detail=f"Error updating {target_label.lower()} {candidate_label}s",
                original_error=e
            )

        self.logger.info(f"{candidate_label.capitalize()}s {changed} {verb} {target_label} {target_id}")
        return target
