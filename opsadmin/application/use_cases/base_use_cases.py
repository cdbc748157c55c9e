# opsadmin/application/use_cases/base_use_cases.py

"""
Base class for every application service.

Services own one session for the duration of a request, build their
repositories with their own logger and commit their own units of work.
"""

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.outbound.persistence.repositories.base_repository import AsyncCRUDBase
from opsadmin.domain.exceptions import ResourceNotFoundException


class BaseService:
    """
    Shared session handling and lookups for services.
    """

    service_name = "base"

    def __init__(self, db_session: AsyncSession, logger: Optional[logging.Logger] = None):
        """
        Args:
            db_session: Active AsyncSession
            logger: Application logger; a ``services.<name>`` child is used
        """
        self.db = db_session
        parent = logger or logging.getLogger("opsadmin")
        self.logger = parent.getChild(f"services.{self.service_name}")

    async def _get_or_404(self, repository: AsyncCRUDBase, entity_id: Any, label: str):
        """
        Fetch a live entity or raise.

        Raises:
            ResourceNotFoundException: If the entity does not exist or was deleted
        """
        entity = await repository.get(self.db, entity_id)
        if entity is None:
            self.logger.warning(f"{label} not found: ID {entity_id}")
            raise ResourceNotFoundException(detail=f"{label} not found", resource_id=entity_id)
        return entity
