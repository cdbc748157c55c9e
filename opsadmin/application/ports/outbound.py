# opsadmin/application/ports/outbound.py

from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, List, Optional, TypeVar

from opsadmin.domain.models.audit_domain_model import AuditEntry

T = TypeVar('T')


class IRepository(Generic[T], ABC):
    """Generic repository interface."""

    @abstractmethod
    async def get(self, db, id: Any) -> Optional[T]:
        """Get entity by ID."""
        pass

    @abstractmethod
    async def get_for_update(self, db, id: Any) -> Optional[T]:
        """Get entity by ID, locking its row until the transaction ends."""
        pass

    @abstractmethod
    async def get_many(self, db, ids: Iterable[Any]) -> List[T]:
        """Batch lookup of several IDs in one query."""
        pass

    @abstractmethod
    async def soft_delete(self, db, *, id: Any) -> T:
        """Mark an entity as deleted."""
        pass


class IUserRepository(IRepository[T], ABC):
    """User repository interface."""

    @abstractmethod
    async def get_by_email(self, db, email: str) -> Optional[T]:
        """Get user by email."""
        pass

    @abstractmethod
    def attach_roles(self, user: T, roles: List[Any]) -> List[int]:
        """Add roles to the user's role set. Returns the IDs actually added."""
        pass

    @abstractmethod
    def detach_roles(self, user: T, role_ids: Iterable[int]) -> List[int]:
        """Remove roles from the user's role set. Returns the IDs actually removed."""
        pass


class IRoleRepository(IRepository[T], ABC):
    """Role repository interface."""

    @abstractmethod
    async def get_by_name(self, db, name: str) -> Optional[T]:
        pass

    @abstractmethod
    async def count_users(self, db, role_id: int) -> int:
        """Number of live users holding the role."""
        pass

    @abstractmethod
    def attach_permissions(self, role: T, permissions: List[Any]) -> List[int]:
        pass

    @abstractmethod
    def detach_permissions(self, role: T, permission_ids: Iterable[int]) -> List[int]:
        pass


class IPermissionRepository(IRepository[T], ABC):
    """Permission repository interface."""

    @abstractmethod
    async def get_by_name(self, db, name: str) -> Optional[T]:
        pass


class IAuditLogRepository(ABC):
    """Append-only audit log storage."""

    @abstractmethod
    async def append(self, db, entry: AuditEntry) -> Any:
        """Persist one audit entry and commit."""
        pass

    @abstractmethod
    async def get(self, db, id: Any) -> Optional[Any]:
        pass


class IAuditRecorder(ABC):
    """Write side of the audit trail, used by the audit middleware."""

    @abstractmethod
    async def record(self, entry: AuditEntry) -> bool:
        """
        Persist ``entry``. Never raises: returns False when the write failed.
        """
        pass
