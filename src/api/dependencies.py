"""FastAPI dependency injection helpers."""

from fastapi import Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.infrastructure.database import async_session_factory
from src.infrastructure.redis_client import get_redis
from src.infrastructure.viewers import ViewerRegistry

MAX_PAGE_SIZE = 100


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_viewer_registry() -> ViewerRegistry:
    return ViewerRegistry(
        await get_redis(), timeout_seconds=settings.viewer_timeout_seconds
    )


class Page:
    """``limit`` / ``offset`` query parameters; oversized limits are clamped."""

    def __init__(
        self,
        limit: int = Query(10, ge=1, description=f"Clamped to {MAX_PAGE_SIZE}."),
        offset: int = Query(0, ge=0),
    ):
        self.limit = min(limit, MAX_PAGE_SIZE)
        self.offset = offset
