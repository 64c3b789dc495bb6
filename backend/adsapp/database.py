# backend/adsapp/database.py
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

# Engine and session factory live in the async context so that Celery workers
# and the API process never share a connection pool across event loops.
from adsapp.core.async_context import get_async_context

# --- DEPENDENCIES ---

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency to get an async database session from our async context.
    Services own their transaction boundaries (commit / rollback).
    """
    async_context = get_async_context()
    session_factory = async_context.session_factory

    async with session_factory() as session:
        yield session
