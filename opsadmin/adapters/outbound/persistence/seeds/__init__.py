# opsadmin/adapters/outbound/persistence/seeds/__init__.py

"""
Seeds that populate the database with the data the system needs to
be usable: the permission grid, the admin role and the admin user.

Run directly with ``python -m opsadmin.adapters.outbound.persistence.seeds``.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.configuration.config import Settings
from opsadmin.adapters.outbound.persistence.seeds.permissions import run_permissions_seed


async def run_all_seeds(db: AsyncSession, settings: Settings, logger: Optional[logging.Logger] = None) -> None:
    """
    Run every seed in dependency order.
    """
    logger = logger or logging.getLogger("opsadmin")
    logger.info("Running all seeds")

    await run_permissions_seed(db, settings, logger)

    logger.info("All seeds finished")

