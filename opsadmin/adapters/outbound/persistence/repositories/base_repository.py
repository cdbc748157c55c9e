# opsadmin/adapters/outbound/persistence/repositories/base_repository.py

import logging
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.models.base_model import Base, utcnow
from opsadmin.domain.exceptions import (
    DatabaseOperationException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
)

# Define generic type for SQLAlchemy models
ModelType = TypeVar("ModelType", bound=Base)
# Define generic types for Pydantic DTOs
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class AsyncCRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Async base class for implementing the Repository pattern.

    Provides generic CRUD operations that can be used by any entity.
    Soft-deleted rows (``deleted_at`` set) are invisible to every read.

    Methods whose name does not say otherwise never commit: the caller
    owns the transaction. ``create``, ``update`` and ``soft_delete``
    commit and roll back on failure.

    Attributes:
        model: SQLAlchemy model class
        logger: Logger injected by the owning service
    """

    def __init__(self, model: Type[ModelType], logger: Optional[logging.Logger] = None):
        """
        Initialize the repository with an SQLAlchemy model.

        Args:
            model: SQLAlchemy model class associated with this repository
            logger: Parent logger; a ``repositories.<Model>`` child is used
        """
        self.model = model
        parent = logger or logging.getLogger("opsadmin")
        self.logger = parent.getChild(f"repositories.{model.__name__}")

    def _base_query(self):
        query = select(self.model)
        if hasattr(self.model, "deleted_at"):
            query = query.where(self.model.deleted_at.is_(None))
        return query

    def _apply_filters(self, query, filters: Dict[str, Any]):
        for field, value in filters.items():
            if hasattr(self.model, field) and value is not None:
                if isinstance(value, str) and value.startswith("%") and value.endswith("%"):
                    # LIKE filter for strings with wildcards
                    query = query.where(getattr(self.model, field).ilike(value))
                else:
                    query = query.where(getattr(self.model, field) == value)
        return query

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """
        Get an entity by ID.

        Returns:
            Entity found or None if it doesn't exist or is soft-deleted
        """
        try:
            result = await db.execute(self._base_query().where(self.model.id == id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching {self.model.__name__} with ID {id}: {str(e)}")
            raise DatabaseOperationException(
                detail=f"Error fetching {self.model.__name__}",
                original_error=e
            )

    async def get_for_update(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """
        Same as ``get`` but takes a row lock (``SELECT ... FOR UPDATE``)
        where the backend supports it, serializing concurrent writers.
        """
        try:
            query = self._base_query().where(self.model.id == id).with_for_update()
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking {self.model.__name__} with ID {id}: {str(e)}")
            raise DatabaseOperationException(
                detail=f"Error fetching {self.model.__name__}",
                original_error=e
            )

    async def get_many(self, db: AsyncSession, ids: Iterable[Any]) -> List[ModelType]:
        """
        Batch lookup with a single ``WHERE id IN (...)`` query.

        Args:
            db: Async database session
            ids: Identifiers to look up; duplicates are ignored

        Returns:
            Entities found, ordered by ID. Missing or soft-deleted IDs are
            simply absent from the result.
        """
        unique_ids = sorted(set(ids))
        if not unique_ids:
            return []
        try:
            query = self._base_query().where(self.model.id.in_(unique_ids)).order_by(self.model.id)
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching {self.model.__name__} batch {unique_ids}: {str(e)}")
            raise DatabaseOperationException(
                detail=f"Error fetching {self.model.__name__} batch",
                original_error=e
            )

    async def get_by_field(self, db: AsyncSession, field_name: str, value: Any) -> Optional[ModelType]:
        try:
            query = self._base_query().where(getattr(self.model, field_name) == value)
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching {self.model.__name__} with {field_name}={value}: {str(e)}")
            raise DatabaseOperationException(
                detail=f"Error fetching {self.model.__name__} by {field_name}",
                original_error=e
            )

    def list_query(self, **filters):
        """Select statement for listings, used with fastapi-pagination."""
        return self._apply_filters(self._base_query(), filters).order_by(self.model.id)

    async def get_multi(
            self, db: AsyncSession, *, skip: int = 0, limit: int = 100, **filters
    ) -> List[ModelType]:
        """
        Get multiple entities with pagination and optional filters.

        Args:
            db: Async database session
            skip: Number of records to skip (for pagination)
            limit: Maximum number of records to return
            **filters: Additional filters in the format field=value

        Raises:
            DatabaseOperationException: If an error occurs in the query
        """
        try:
            query = self.list_query(**filters).offset(skip).limit(limit)
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing {self.model.__name__}s: {str(e)}")
            raise DatabaseOperationException(
                detail=f"Error listing {self.model.__name__}s",
                original_error=e
            )

    async def count(self, db: AsyncSession, **filters) -> int:
        try:
            query = self._apply_filters(self._base_query(), filters)
            result = await db.execute(select(func.count()).select_from(query.subquery()))
            return result.scalar_one()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting {self.model.__name__}s: {str(e)}")
            raise DatabaseOperationException(
                detail=f"Error counting {self.model.__name__}s",
                original_error=e
            )

    async def create(self, db: AsyncSession, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        """
        Create a new entity.

        Raises:
            ResourceAlreadyExistsException: If the entity already exists
            DatabaseOperationException: If another database error occurs
        """
        try:
            obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
            db_obj = self.model(**obj_in_data)

            db.add(db_obj)
            await db.commit()
            await db.refresh(db_obj)

            self.logger.info(f"{self.model.__name__} created with ID: {db_obj.id}")
            return db_obj

        except IntegrityError as e:
            await db.rollback()
            self.logger.warning(f"Attempt to create duplicate {self.model.__name__}: {str(e)}")
            raise ResourceAlreadyExistsException(
                detail=f"{self.model.__name__} with these data already exists"
            )

        except SQLAlchemyError as e:
            await db.rollback()
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            raise DatabaseOperationException(
                detail=f"Error creating {self.model.__name__}",
                original_error=e
            )

    async def update(
            self, db: AsyncSession, *, db_obj: ModelType, obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        """
        Update an existing entity with the fields present in ``obj_in``.

        Raises:
            ResourceAlreadyExistsException: If the update violates a uniqueness constraint
            DatabaseOperationException: If another database error occurs
        """
        try:
            if isinstance(obj_in, dict):
                update_data = obj_in
            else:
                update_data = obj_in.model_dump(exclude_unset=True)

            for field, value in update_data.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)

            db.add(db_obj)
            await db.commit()
            await db.refresh(db_obj)

            self.logger.info(f"{self.model.__name__} with ID {db_obj.id} updated")
            return db_obj

        except IntegrityError as e:
            await db.rollback()
            self.logger.warning(f"Uniqueness violation updating {self.model.__name__}: {str(e)}")
            raise ResourceAlreadyExistsException(
                detail=f"Could not update {self.model.__name__}: value already exists"
            )

        except SQLAlchemyError as e:
            await db.rollback()
            self.logger.error(f"Error updating {self.model.__name__}: {str(e)}")
            raise DatabaseOperationException(
                detail=f"Error updating {self.model.__name__}",
                original_error=e
            )

    async def soft_delete(self, db: AsyncSession, *, id: Any) -> ModelType:
        """
        Mark an entity as deleted.

        Subclasses extend ``_before_soft_delete`` to drop association rows
        in the same transaction.

        Raises:
            ResourceNotFoundException: If the entity doesn't exist
            DatabaseOperationException: If an error occurs during removal
        """
        obj = await self.get(db, id)
        if not obj:
            raise ResourceNotFoundException(
                detail=f"{self.model.__name__} not found",
                resource_id=id
            )

        try:
            await self._before_soft_delete(db, obj)
            obj.deleted_at = utcnow()
            db.add(obj)
            await db.commit()

            self.logger.info(f"{self.model.__name__} with ID {id} removed")
            return obj

        except SQLAlchemyError as e:
            await db.rollback()
            self.logger.error(f"Error removing {self.model.__name__}: {str(e)}")
            raise DatabaseOperationException(
                detail=f"Error removing {self.model.__name__}",
                original_error=e
            )

    async def _before_soft_delete(self, db: AsyncSession, obj: ModelType) -> None:
        return None


def missing_ids(requested: Sequence[Any], found: Iterable[Base]) -> List[Any]:
    """IDs from ``requested`` that have no counterpart in ``found``."""
    found_ids = {obj.id for obj in found}
    return sorted({i for i in requested if i not in found_ids})
