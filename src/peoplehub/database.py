"""Database connection, session and transaction management."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from peoplehub.config import Settings, get_settings
from peoplehub.exceptions import SerializationConflict, TransactionTimeout
from peoplehub.repositories.unit_of_work import SqlAlchemyUnitOfWork
from peoplehub.security.encryption import EncryptionService

logger = logging.getLogger(__name__)

R = TypeVar("R")

# PostgreSQL SQLSTATE codes
SERIALIZATION_FAILURE = "40001"
DEADLOCK_DETECTED = "40P01"
QUERY_CANCELED = "57014"  # raised when statement_timeout fires

_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def create_engine(settings: Settings | None = None) -> AsyncEngine:
    """Create an async engine for the configured PostgreSQL database."""
    settings = settings or get_settings()
    return create_async_engine(
        settings.async_database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        # Validate connections before checkout to detect stale connections
        pool_pre_ping=True,
        pool_recycle=3600,
        # Never echo SQL, statements may contain sensitive data
        echo=False,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get or create the process-wide session maker."""
    global _engine, _session_maker
    if _session_maker is None:
        _engine = create_engine()
        _session_maker = create_session_maker(_engine)
    return _session_maker


async def dispose_engine() -> None:
    """Close pooled connections. Call on application shutdown."""
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None


def _sqlstate(error: DBAPIError) -> str | None:
    orig = error.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def _is_serialization_failure(error: DBAPIError) -> bool:
    return _sqlstate(error) in (SERIALIZATION_FAILURE, DEADLOCK_DETECTED)


def _is_timeout(error: DBAPIError) -> bool:
    return _sqlstate(error) == QUERY_CANCELED


class SqlAlchemyTransactionManager:
    """Transaction manager backed by an async SQLAlchemy session maker.

    Each call opens a fresh session, runs the unit of work and commits.
    Serializable runs translate database aborts into retryable signals:
    SQLSTATE 40001/40P01 become ``SerializationConflict``, statement
    timeouts and attempts exceeding ``timeout_seconds`` become
    ``TransactionTimeout``.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        timeout_seconds: float | None = None,
        encryption: EncryptionService | None = None,
    ) -> None:
        self.session_maker = session_maker
        self.timeout_seconds = timeout_seconds
        self.encryption = encryption

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SqlAlchemyTransactionManager":
        settings = settings or get_settings()
        return cls(
            get_session_maker(),
            timeout_seconds=settings.booking_transaction_timeout_seconds,
        )

    async def run(self, fn: Callable[[SqlAlchemyUnitOfWork], Awaitable[R]]) -> R:
        return await self._execute(fn, isolation_level=None)

    async def run_serializable(self, fn: Callable[[SqlAlchemyUnitOfWork], Awaitable[R]]) -> R:
        return await self._execute(fn, isolation_level="SERIALIZABLE")

    async def _execute(
        self,
        fn: Callable[[SqlAlchemyUnitOfWork], Awaitable[R]],
        isolation_level: str | None,
    ) -> R:
        try:
            if self.timeout_seconds is None:
                return await self._attempt(fn, isolation_level)
            return await asyncio.wait_for(
                self._attempt(fn, isolation_level), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Transaction exceeded {self.timeout_seconds}s")
            raise TransactionTimeout(f"Transaction exceeded {self.timeout_seconds}s") from e
        except DBAPIError as e:
            if _is_serialization_failure(e):
                logger.info(f"Serialization failure (SQLSTATE {_sqlstate(e)})")
                raise SerializationConflict(str(_sqlstate(e))) from e
            if _is_timeout(e):
                logger.warning("Statement timeout in transaction")
                raise TransactionTimeout("Statement timeout") from e
            raise

    async def _attempt(
        self,
        fn: Callable[[SqlAlchemyUnitOfWork], Awaitable[R]],
        isolation_level: str | None,
    ) -> R:
        async with self.session_maker() as session:
            try:
                if isolation_level is not None:
                    connection = await session.connection(
                        execution_options={"isolation_level": isolation_level}
                    )
                    if connection.dialect.name == "postgresql" and self.timeout_seconds:
                        timeout_ms = int(self.timeout_seconds * 1000)
                        await session.execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))

                result = await fn(SqlAlchemyUnitOfWork(session, self.encryption))
                await session.commit()
                return result
            except Exception:
                await session.rollback()
                raise
