import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, nullcontext

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


class ConnectionGuard:
    """Serialises sessions that share one DBAPI connection.

    A rollback on a shared connection discards every pending write on it,
    so only one session may be open at a time. Re-entrant for the task that
    holds it.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task | None = None

    @asynccontextmanager
    async def hold(self) -> AsyncGenerator[None, None]:
        task = asyncio.current_task()
        if task is not None and self._owner is task:
            yield
            return

        async with self._lock:
            self._owner = task
            try:
                yield
            finally:
                self._owner = None


class Database:
    """Owns the engine and session factory backing every registry.

    One instance is built per application (or per test) and passed around
    explicitly; nothing in the package reaches for a module-level engine.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        engine_kwargs: dict = {"echo": echo, "future": True}
        self.guard: ConnectionGuard | None = None
        if _is_memory_sqlite(url):
            # A single shared connection keeps the in-memory database alive
            # across sessions.
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            self.guard = ConnectionGuard()
        elif url.startswith("postgresql"):
            engine_kwargs["pool_pre_ping"] = True
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False: registries return ORM objects after commit
        # and the routers serialise them outside the transaction.
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def _exclusive(self):
        return self.guard.hold() if self.guard is not None else nullcontext()

    async def create_schema(self) -> None:
        async with self._exclusive(), self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_schema_ready url=%s", self.engine.url.render_as_string(hide_password=True))

    async def drop_schema(self) -> None:
        async with self._exclusive(), self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def ping(self) -> None:
        async with self._exclusive(), self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Open a session; on a shared connection this waits for the previous one to close."""
        async with self._exclusive(), self.session_factory() as session:
            yield session

    async def dispose(self) -> None:
        await self.engine.dispose()


@asynccontextmanager
async def committing(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Commit on success, roll back and re-raise on any error."""
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
