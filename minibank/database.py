"""
Record store adapter: engine lifecycle, sessions, and the declarative base.

Key components:

  - RecordStore: owns the async engine and session factory. It is built by
    the composition root (create_app) and kept on app.state, never as
    module-level state, so tests and the server each control its lifetime.
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request
  - translate_store_errors(): turns driver-level failures into
    StoreUnavailableError so handlers never see SQLAlchemy exceptions

Session lifecycle:
  Each request gets its own session via get_db(). The session commits on
  success and on domain errors (those are raised before anything is written
  or after a zero-row conditional update), and rolls back on anything else.
"""

from contextlib import contextmanager
from pathlib import Path

from fastapi import Request
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from minibank.exceptions import BankAPIError, StoreUnavailableError
from minibank.logging_config import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


class RecordStore:
    """
    Handle on the record store: one engine, one session factory.

    Usage:
        store = RecordStore("sqlite+aiosqlite:///./data/minibank.db")
        await store.create_schema()
        async with store.session() as session:
            ...
        await store.close()
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        # echo=True logs all SQL statements; only enabled in debug mode
        self.engine = create_async_engine(url, echo=echo)
        # expire_on_commit=False keeps attributes readable after commit
        # without a lazy reload, which would fail in async context
        self.sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def session(self) -> AsyncSession:
        return self.sessionmaker()

    async def create_schema(self) -> None:
        """Create all tables that don't exist yet."""
        # Importing the models registers them on Base.metadata
        import minibank.models  # noqa: F401

        # SQLite creates the file but not its directory
        database = self.engine.url.database
        if self.engine.url.get_backend_name() == "sqlite" and database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Record store schema ready", extra={"resource": self.engine.url.database})

    async def drop_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def close(self) -> None:
        """Dispose of the engine, closing pooled connections."""
        await self.engine.dispose()
        logger.info("Record store connections closed")


@contextmanager
def translate_store_errors(operation: str):
    """
    Re-raise connection and query failures as StoreUnavailableError.

    Works around awaited calls too:
        with translate_store_errors("deposit"):
            await db.execute(...)
    """
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.error(
            "Record store failure during %s",
            operation,
            exc_info=exc,
            extra={"action": operation, "error_type": "store_unavailable"},
        )
        raise StoreUnavailableError(operation) from exc


async def get_db(request: Request):
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    store: RecordStore = request.app.state.store
    async with store.session() as session:
        try:
            yield session
            await session.commit()
        except StoreUnavailableError:
            await session.rollback()
            raise
        except BankAPIError:
            # Domain errors leave nothing half-written in the session
            await session.commit()
            raise
        except Exception:
            await session.rollback()
            raise
