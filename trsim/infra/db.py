"""Async SQLAlchemy engine for the sheet database.

One SQLite file holds the roster, the play table and the session log.
Request handlers get a session through ``get_db``; it commits when the
handler returns and rolls back if it raises.
"""

import logging
from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from trsim.infra.config import settings

logger = logging.getLogger("trsim.db")

engine = create_async_engine(settings.database_url, echo=settings.app_debug)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.debug("Rolling back sheet session")
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the sheet tables on first start."""
    from trsim.models.db_models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Sheet database ready at %s", engine.url.render_as_string(hide_password=True))


async def close_db() -> None:
    await engine.dispose()
