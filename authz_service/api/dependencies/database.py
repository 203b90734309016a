"""
Database dependencies.
"""

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authz_service.models.database import async_session_factory


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for components that open their own sessions (the decision engine)."""
    return async_session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session. Commits on success, rolls back on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
