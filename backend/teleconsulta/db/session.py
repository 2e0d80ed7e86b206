from sqlalchemy.ext.asyncio import AsyncSession
from typing import AsyncGenerator
from fastapi import Request
import logging

logger = logging.getLogger(__name__)

# Session dependency for FastAPI routes
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Create and yield a database session using the session factory stored on
    the application state at startup. One session is one unit of work.
    """
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        logger.error("Session factory requested before application startup completed.")
        raise RuntimeError("Database session factory not initialized.")

    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
