# opsadmin/adapters/outbound/persistence/seeds/__main__.py

import asyncio

from opsadmin.adapters.configuration.config import get_settings
from opsadmin.adapters.configuration.logging_config import configure_logging
from opsadmin.adapters.outbound.persistence.database import (
    create_engine_from_settings,
    create_session_factory,
    get_db_context,
)
from opsadmin.adapters.outbound.persistence.models import Base
from opsadmin.adapters.outbound.persistence.seeds import run_all_seeds


async def main() -> None:
    settings = get_settings()
    logger = configure_logging(settings)
    engine = create_engine_from_settings(settings, logger)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with get_db_context(create_session_factory(engine)) as db:
            await run_all_seeds(db, settings, logger)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
