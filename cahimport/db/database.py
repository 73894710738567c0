"""
Database engine creation and health checks.

Provides the async SQLAlchemy engine for the configured destination store.
"""

import logging
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from cahimport.config import DbType, Settings, database_url, validate_destination
from cahimport.models.errors import DestinationConnectionError

logger = logging.getLogger(__name__)


def _install_sqlite_hooks(engine: AsyncEngine) -> None:
    """
    Make SQLite transactions honor SAVEPOINT and foreign keys.

    The driver's implicit BEGIN handling is disabled and SQLAlchemy emits its
    own, so a failed insert can be rolled back to a savepoint without losing
    the enclosing transaction.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured store.

    Raises:
        ConfigurationError: If the store parameters are incomplete
    """
    db_type = validate_destination(settings)
    engine = create_async_engine(
        database_url(settings),
        echo=settings.debug,
        pool_pre_ping=True,
    )
    if db_type is DbType.SQLITE:
        _install_sqlite_hooks(engine)

    logger.info("Database connection configured (%s).", db_type.value)
    return engine


async def check_connection(engine: AsyncEngine) -> None:
    """
    Run a trivial query against the destination.

    Raises:
        DestinationConnectionError: If the store cannot be reached
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        raise DestinationConnectionError(f"Database health check failed: {e}") from e

    logger.info("Database connection successful.")
