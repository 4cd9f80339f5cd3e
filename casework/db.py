"""Async engine, session factory and transactional unit of work."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

import packages.db.models  # noqa: F401  registers tables on SQLModel.metadata

from .errors import Conflict

logger = logging.getLogger(__name__)

# SQLSTATE codes PostgreSQL uses for lock timeouts, serialization failures and deadlocks.
_CONTENTION_SQLSTATES = frozenset({"55P03", "40001", "40P01"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps read back from stores without zone support."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_utc(value: datetime) -> datetime:
    return as_utc(value).astimezone(timezone.utc)


def to_asyncpg_dsn(dsn: str) -> str:
    """Ensure the SQLAlchemy DSN uses the asyncpg driver."""

    if dsn.startswith("postgresql+asyncpg://"):
        return dsn
    if dsn.startswith("postgresql://"):
        return "postgresql+asyncpg://" + dsn[len("postgresql://") :]
    return dsn


def is_lock_contention(exc: DBAPIError) -> bool:
    """Return True when a driver error means another transaction holds the lock."""

    original = exc.orig
    for attribute in ("sqlstate", "pgcode"):
        code = getattr(original, attribute, None)
        if code in _CONTENTION_SQLSTATES:
            return True
    cause = getattr(original, "__cause__", None)
    if getattr(cause, "sqlstate", None) in _CONTENTION_SQLSTATES:
        return True
    message = str(original).lower()
    return "database is locked" in message or "lock timeout" in message


class Database:
    """Owns the engine and hands out sessions and bounded-lock transactions."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        engine: AsyncEngine | None = None,
        lock_timeout_ms: int = 3000,
    ) -> None:
        self._session_factory = session_factory
        self._engine: AsyncEngine | None = engine
        self._lock_timeout_ms = lock_timeout_ms

    @classmethod
    def from_dsn(cls, dsn: str, *, lock_timeout_ms: int = 3000) -> "Database":
        url = to_asyncpg_dsn(dsn)
        connect_args: dict[str, object] = {}
        if url.startswith("sqlite"):
            connect_args["timeout"] = max(lock_timeout_ms / 1000.0, 0.001)
        engine = create_async_engine(url, future=True, connect_args=connect_args)
        session_factory = async_sessionmaker(engine, expire_on_commit=False)
        return cls(session_factory, engine=engine, lock_timeout_ms=lock_timeout_ms)

    async def ensure_schema(self) -> None:
        if self._engine is None:
            raise RuntimeError("Session factory is not bound to an async engine")
        async with self._engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.create_all)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Session for read-only work against committed data."""

        async with self._session_factory() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Session whose work commits as one unit or not at all.

        Lock waits are bounded; contention surfaces as :class:`Conflict` and
        is never retried here.
        """

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await self._apply_lock_timeout(session)
                    yield session
        except DBAPIError as exc:
            if is_lock_contention(exc):
                logger.info("Lock contention, transaction rolled back: %s", exc.orig)
                raise Conflict("The record is being modified by another request; retry later") from exc
            raise

    async def _apply_lock_timeout(self, session: AsyncSession) -> None:
        bind = session.bind
        if bind is None or bind.dialect.name != "postgresql":
            return
        # SET LOCAL does not accept bind parameters.
        await session.execute(text(f"SET LOCAL lock_timeout = '{int(self._lock_timeout_ms)}ms'"))
