# opsadmin/application/ports/inbound.py

from abc import ABC, abstractmethod
from typing import Any, List, Sequence


class IAssociationUseCase(ABC):
    """Interface for role / permission association use cases."""

    @abstractmethod
    async def assign_roles(self, user_id: int, role_ids: Sequence[int]) -> List[Any]:
        """Add roles to a user, all or nothing."""
        pass

    @abstractmethod
    async def remove_roles(self, user_id: int, role_ids: Sequence[int]) -> List[Any]:
        """Remove roles from a user, all or nothing."""
        pass

    @abstractmethod
    async def add_permissions_to_role(self, role_id: int, permission_ids: Sequence[int]) -> List[Any]:
        """Add permissions to a role, all or nothing."""
        pass

    @abstractmethod
    async def remove_permissions_from_role(self, role_id: int, permission_ids: Sequence[int]) -> List[Any]:
        """Remove permissions from a role, all or nothing."""
        pass

    @abstractmethod
    async def get_user_roles(self, user_id: int) -> List[Any]:
        pass

    @abstractmethod
    async def get_role_permissions(self, role_id: int) -> List[Any]:
        pass


class IAuditLogQueryUseCase(ABC):
    """Read side of the audit trail."""

    @abstractmethod
    async def list_logs(self, filters: Any, params: Any) -> Any:
        """Filtered, paginated audit records, newest first."""
        pass

    @abstractmethod
    async def get_log(self, log_id: int) -> Any:
        """Single audit record."""
        pass
