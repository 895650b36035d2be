"""Schema bootstrap run once at startup."""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.schema import CreateTable

from src.infrastructure.database.models import UserRecord


async def ensure_schema(engine: AsyncEngine) -> None:
    """Create the users table if it does not exist yet.

    Issues a single ``CREATE TABLE IF NOT EXISTS`` statement, so it is safe
    to run on every start. Errors propagate to the caller.

    Args:
        engine: Engine connected to the target database.
    """
    async with engine.begin() as conn:
        await conn.execute(CreateTable(UserRecord.__table__, if_not_exists=True))
    logger.info("Schema ready - table: {}", UserRecord.__tablename__)
