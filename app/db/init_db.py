import asyncio
import logging
from app.core.database import async_session_maker, engine
from app.db.base import Base
from app.db.seeds.init_roles_data import seed_roles
import app.models  # noqa: F401  registers every table on Base.metadata

logger = logging.getLogger(__name__)

async def create_tables(bind=None):
    """Create all database tables"""
    try:
        async with (bind or engine).begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database tables created successfully")

    except Exception as e:
        logger.error(f"Error creating tables: {str(e)}")
        raise

async def init_db():
    """Create tables and seed the reviewer roles"""
    try:
        await create_tables()

        async with async_session_maker() as session:
            created = await seed_roles(session)
        logger.info(f"Database initialized successfully (new roles: {', '.join(created) or 'none'})")

    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise

if __name__ == "__main__":
    from app.core.logging_config import setup_logging

    setup_logging()
    asyncio.run(init_db())
