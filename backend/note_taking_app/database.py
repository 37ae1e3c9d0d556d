"""
Note Taking App — Database Connection
=======================================

What:  The connection descriptor and a single, non-pooled async connection
       with a callback-style query API.
How:   Wraps a SQLAlchemy AsyncEngine created with NullPool. connect(),
       query() and end() never block: each schedules an asyncio task and
       returns it, so the caller decides whether (and when) to await.
Who:   The lifespan handler in main.py (startup query) and the health route
       (per-request ping).
When:  Constructed once per startup, or once per health check.

Ordering:
    query() waits for the connect attempt, then sends its statement.
    end() waits only for the connect attempt, never for queries issued
    before it. A query still in flight when end() runs therefore races the
    close, and its callback receives an error instead of rows.

    Closing under a running statement also makes SQLAlchemy log
    "Error closing cursor" on sqlalchemy.pool. setup_logging() raises that
    logger to CRITICAL because the callback already reports the outcome.

Why NullPool:
    The connection lives for one statement. A pool would keep it open
    after end() and hide whether the close actually happened.
"""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from note_taking_app.exceptions import (
    ConnectionClosedError,
    DatabaseConnectionError,
    DatabaseError,
    QueryError,
)

logger = logging.getLogger(__name__)

Rows = List[Dict[str, Any]]

# callback(error, rows): exactly one of the two is None
QueryCallback = Callable[[Optional[DatabaseError], Optional[Rows]], None]


class ConnectionDescriptor(BaseModel):
    """
    Host/user/password/database record used to open one connection.

    The password is excluded from repr() so descriptors can be logged.
    """

    model_config = ConfigDict(frozen=True)

    host: str
    user: str
    password: str = Field(repr=False)
    database: str
    port: int = 3306
    driver: str = "mysql+aiomysql"

    @property
    def url(self) -> URL:
        return URL.create(
            self.driver,
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )


class DatabaseConnection:
    """
    One database session owned by whoever constructs it.

    Lifecycle:
        connect() → query(sql, callback) ... → end() → drain()

    Error Handling:
        Errors never propagate out of query(); they are delivered to the
        callback as DatabaseError subclasses. A failed connect is logged
        once and delivered to every query waiting on it.

    Args:
        descriptor: Connection parameters
        engine:     Pre-built engine (tests pass an aiosqlite engine);
                    defaults to a NullPool engine for descriptor.url
    """

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        engine: Optional[AsyncEngine] = None,
    ):
        self.descriptor = descriptor
        self._engine = engine if engine is not None else create_async_engine(
            descriptor.url,
            poolclass=NullPool,
        )
        self._connection: Optional[AsyncConnection] = None
        self._connecting: Optional[asyncio.Task] = None
        self._end_requested = False
        self._closed = False
        self._tasks: Set[asyncio.Task] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        return task

    # ── Connect ───────────────────────────────────────────────────────────
    def connect(self) -> asyncio.Task:
        """Schedule the connect attempt. Calling it again returns the same task."""
        if self._connecting is None:
            self._connecting = self._spawn(self._open())
        return self._connecting

    async def _open(self) -> None:
        d = self.descriptor
        try:
            self._connection = await self._engine.connect()
        except Exception as e:
            logger.error(
                "Database connection failed (%s@%s:%d/%s): %s",
                d.user, d.host, d.port, d.database, str(e),
            )
            raise DatabaseConnectionError(
                host=d.host,
                context={"database": d.database, "reason": str(e)},
            ) from e
        logger.debug("Connected to %s:%d/%s", d.host, d.port, d.database)

    # ── Query ─────────────────────────────────────────────────────────────
    def query(self, sql: str, callback: QueryCallback) -> asyncio.Task:
        """
        Schedule `sql` and return the task that will invoke `callback`.

        The statement is sent verbatim (no parameter binding). Connects
        implicitly when connect() has not been called yet.
        """
        after_end = self._end_requested
        self.connect()
        return self._spawn(self._execute(sql, callback, after_end))

    async def _execute(self, sql: str, callback: QueryCallback, after_end: bool) -> None:
        error: Optional[DatabaseError] = None
        rows: Optional[Rows] = None
        try:
            await self._connecting
            connection = self._connection
            if after_end or connection is None:
                raise ConnectionClosedError(context={"sql": sql})
            result = await connection.exec_driver_sql(sql)
            rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
        except DatabaseError as e:
            error = e
        except SQLAlchemyError as e:
            reason = str(getattr(e, "orig", None) or e)
            logger.debug("Query failed: %s | %s", sql, reason)
            error = QueryError(sql=sql, reason=reason)
        except Exception as e:
            # driver errors the adapter did not wrap still reach the callback
            logger.debug("Query failed with %s: %s", type(e).__name__, str(e))
            error = QueryError(sql=sql, reason=f"{type(e).__name__}: {e}")
        callback(error, rows)

    # ── Close ─────────────────────────────────────────────────────────────
    def end(self) -> asyncio.Task:
        """
        Request termination and return the close task.

        Does not wait for queries issued earlier. Queries issued after this
        call receive ConnectionClosedError.
        """
        self._end_requested = True
        return self._spawn(self._close())

    async def _close(self) -> None:
        if self._connecting is not None:
            await asyncio.wait({self._connecting})
        connection, self._connection = self._connection, None
        try:
            if connection is not None:
                await connection.close()
        finally:
            await self._engine.dispose()
            self._closed = True
        logger.debug("Connection to %s closed", self.descriptor.host)

    async def drain(self) -> None:
        """Await every task this connection spawned. Never raises."""
        results = await asyncio.gather(*list(self._tasks), return_exceptions=True)
        for result in results:
            # connect failures were logged when they happened
            if isinstance(result, Exception) and not isinstance(result, DatabaseConnectionError):
                logger.error("Database task failed: %s", str(result), exc_info=result)

    # ── Health ────────────────────────────────────────────────────────────
    async def ping(self) -> None:
        """
        Open a short-lived connection and run SELECT 1.

        Raises:
            DatabaseConnectionError: the server is unreachable or rejected us
        """
        try:
            async with self._engine.connect() as connection:
                await connection.exec_driver_sql("SELECT 1")
        except Exception as e:
            raise DatabaseConnectionError(
                host=self.descriptor.host,
                context={"database": self.descriptor.database, "reason": str(e)},
            ) from e
        finally:
            await self._engine.dispose()
