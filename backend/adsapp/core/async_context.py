# backend/adsapp/core/async_context.py
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from supabase import AsyncClient, AsyncClientOptions, acreate_client
from adsapp.core.config import settings

# One context per process. Celery tasks close it after each run because the
# engine is bound to the event loop that created it.
_async_context: "AsyncContext | None" = None

class AsyncContext:
    """A container for lazily initialized async resources."""
    def __init__(self):
        self._engine = None
        self._session_factory = None
        self._supabase_client = None

    @property
    def engine(self):
        if self._engine is None:
            self._engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True)
        return self._engine

    @property
    def session_factory(self):
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)
        return self._session_factory

    async def supabase_client(self) -> AsyncClient:
        # acreate_client is a coroutine, so this cannot be a property
        if self._supabase_client is None:
            self._supabase_client = await acreate_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_ANON_KEY,
                options=AsyncClientOptions(auto_refresh_token=False, persist_session=False),
            )
        return self._supabase_client

    async def close(self):
        """Gracefully close all open connections."""
        if self._engine:
            await self._engine.dispose()
        # Reset all
        self._engine = None; self._session_factory = None
        self._supabase_client = None

def get_async_context() -> AsyncContext:
    global _async_context
    if _async_context is None:
        _async_context = AsyncContext()
    return _async_context

async def close_async_context():
    global _async_context
    if _async_context is not None:
        await _async_context.close()
        _async_context = None
