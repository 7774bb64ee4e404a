"""
Database Connection Module for the Liveness Monitor

Builds the SQLAlchemy async engine for the monitored database and
exposes the three operations the probe needs: connect, ping, close.
Connection-level timeouts come from configuration and are independent
of the per-step budgets the probe enforces on top of them.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from config.constants import Defaults
from config.settings import DatabaseSettings
from exceptions import InitializationError
from utils.logger import get_logger


logger = get_logger("Database")


class TargetConnection:
    """
    One open connection to the monitored database.

    Wraps an ``AsyncConnection`` checked out from the engine pool.
    """

    def __init__(self, connection: AsyncConnection) -> None:
        self._connection = connection
        self._closed = False

    async def ping_admin(self) -> None:
        """Issue the liveness statement; raises whatever the driver raises."""
        await self._connection.execute(text(Defaults.PING_STATEMENT))

    async def close(self) -> None:
        """Return the connection to the pool. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        await self._connection.close()


class DatabaseTarget:
    """
    Database Target

    Owns the async engine for the monitored database. The engine is
    created once; every probe checks a connection out and gives it back.

    Attributes:
        engine: SQLAlchemy async engine
    """

    def __init__(self, db_settings: DatabaseSettings) -> None:
        self._settings = db_settings
        self.engine: Optional[AsyncEngine] = None

    def initialize(self) -> None:
        """
        Create the engine. No connection is opened here.

        Raises:
            InitializationError: If the URI or driver is unusable
        """
        if self.engine is not None:
            logger.warning("Database target already initialized")
            return

        try:
            self.engine = create_async_engine(
                self._settings.uri,
                **self._get_engine_kwargs()
            )
        except (ArgumentError, ImportError) as e:
            raise InitializationError(
                message=f"Unable to create engine for the monitored database: {e}",
                component="database",
                cause=e
            ) from e

        self._setup_event_listeners()
        logger.info(f"Database target ready — {self.engine.url.render_as_string(hide_password=True)}")

    def _get_engine_kwargs(self) -> Dict[str, Any]:
        """
        Get engine configuration kwargs based on settings.

        Returns:
            Dictionary of engine configuration options
        """
        kwargs: Dict[str, Any] = {
            "connect_args": self._get_connect_args(),
        }

        # Use NullPool for SQLite, the default async queue pool for others
        if self._settings.is_sqlite:
            kwargs["poolclass"] = NullPool
        else:
            kwargs["pool_timeout"] = self._settings.wait_queue_timeout / 1000
            kwargs["pool_recycle"] = max(1, int(self._settings.max_idle_time / 1000))
            kwargs["pool_pre_ping"] = True

        return kwargs

    def _get_connect_args(self) -> Dict[str, Any]:
        """Translate connect and socket timeouts into driver arguments."""
        connect_s = self._settings.connect_timeout / 1000
        socket_s = self._settings.socket_timeout / 1000
        uri = self._settings.uri

        if "asyncpg" in uri:
            return {"timeout": connect_s, "command_timeout": socket_s}
        if "psycopg" in uri:
            return {"connect_timeout": max(1, int(connect_s))}
        if "aiomysql" in uri or "asyncmy" in uri:
            return {"connect_timeout": connect_s}
        if self._settings.is_sqlite:
            return {"timeout": socket_s}
        return {}

    def _setup_event_listeners(self) -> None:
        """Set up SQLAlchemy event listeners for debugging the pool."""

        @event.listens_for(self.engine.sync_engine, "connect")
        def on_connect(dbapi_connection, connection_record):
            logger.debug("New database connection established")

        @event.listens_for(self.engine.sync_engine, "checkin")
        def on_checkin(dbapi_connection, connection_record):
            logger.debug("Connection returned to pool")

    async def connect(self) -> TargetConnection:
        """
        Check out a connection to the monitored database.

        Raises:
            InitializationError: If ``initialize`` was never called
            sqlalchemy.exc.SQLAlchemyError: If the database is unreachable
        """
        if self.engine is None:
            raise InitializationError("Database target not initialized", component="database")
        connection = await self.engine.connect()
        return TargetConnection(connection)

    async def dispose(self) -> None:
        """Close every pooled connection and drop the engine."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            logger.info("Database target disposed")
