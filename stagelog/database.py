import logging
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from stagelog.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    echo=False,
    connect_args={"timeout": 30},  # wait up to 30s for SQLite write lock before failing
)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def init_db():
    # Models must be imported so their tables are registered on Base.metadata
    import stagelog.models  # noqa: F401

    if engine.url.get_backend_name() == "sqlite" and engine.url.database not in (None, "", ":memory:"):
        Path(engine.url.database).parent.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Lookup indexes for the duplicate check
    async with engine.begin() as conn:
        await conn.execute(text(
            "CREATE INDEX IF NOT EXISTS idx_showing_venue_date "
            "ON showings (venue_id, date)"
        ))
        await conn.execute(text(
            "CREATE INDEX IF NOT EXISTS idx_performance_title "
            "ON performances (title)"
        ))
    logger.info("Database ready: %s", engine.url.render_as_string(hide_password=True))
