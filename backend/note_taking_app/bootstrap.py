"""
Note Taking App — Startup Query
=================================

What:  Opens the startup connection, sends one statement and requests
       termination straight away.
How:   connect(), query(), end() are issued back to back. None of them is
       awaited, so end() is always requested before the completion
       callback runs. The callback only logs.
Who:   Called by the lifespan handler in main.py.

Why:   Startup must not block on the database. The port is bound whatever
       happens to the statement, and the callback is the only place the
       outcome is reported.
"""

import asyncio
import logging
from typing import Optional, Protocol

from note_taking_app.database import QueryCallback, Rows
from note_taking_app.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class StartupConnection(Protocol):
    def connect(self) -> asyncio.Task: ...

    def query(self, sql: str, callback: QueryCallback) -> asyncio.Task: ...

    def end(self) -> asyncio.Task: ...


def log_query_result(error: Optional[DatabaseError], result: Optional[Rows]) -> None:
    """Completion callback for the startup statement: log whatever arrived."""
    if error is not None:
        logger.warning("query failed: %s | Context: %s", error.message, error.context)
    logger.info("query results: %s", result)


def run_startup_query(
    connection: StartupConnection,
    sql: str,
    callback: QueryCallback = log_query_result,
) -> asyncio.Task:
    """
    Issue connect → query → end without waiting on any of them.

    Returns:
        The pending query task (its callback has not run yet)
    """
    connection.connect()
    pending = connection.query(sql, callback)
    connection.end()
    logger.debug("Startup query submitted and connection end requested: %s", sql)
    return pending
