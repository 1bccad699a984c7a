import asyncio
import sys

from sqlalchemy.exc import SQLAlchemyError

import shared_db.models  # noqa: F401  # registers every table on Base.metadata
from common.core.request_context import RequestContext
from common.logging import setup_logging
from common.utils.utils import get_logger
from shared_db.db import Base, engine

logger = get_logger()


async def init_db() -> bool:
    """Create any missing tables. Existing tables are left untouched."""
    try:
        logger.info("Creating database tables", operation="create_tables", dialect=engine.dialect.name)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready", operation="create_tables", status="success", tables=sorted(Base.metadata.tables))
        return True
    except SQLAlchemyError:
        logger.exception("Failed to create database tables", operation="create_tables", status="error")
        return False


@RequestContext.wrap_with_context
async def main() -> int:
    return 0 if await init_db() else 1


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(main()))
