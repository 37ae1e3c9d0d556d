"""
Note Taking App — Startup Query Tests
=======================================

What:  Ordering of connect → query → end and the logging callback.
How:   FakeConnection (conftest.py) records calls and holds the callback
       until the test fires it.
"""

import logging

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from note_taking_app.bootstrap import log_query_result, run_startup_query
from note_taking_app.database import DatabaseConnection
from note_taking_app.exceptions import DatabaseConnectionError, DatabaseError, QueryError


class TestRunStartupQuery:

    def test_end_requested_before_callback(self, fake_connection):
        run_startup_query(fake_connection, "SELCT * FROM notes")

        assert fake_connection.events == ["connect", "query", "end"]

        fake_connection.fire(error=QueryError(sql="SELCT * FROM notes"))
        assert fake_connection.events == ["connect", "query", "end", "callback"]

    def test_statement_sent_verbatim(self, fake_connection):
        run_startup_query(fake_connection, "SELCT * FROM notes")
        assert fake_connection.sql == "SELCT * FROM notes"

    def test_returns_pending_query(self, fake_connection):
        assert run_startup_query(fake_connection, "SELECT 1") == "pending-query"

    def test_default_callback_is_logger(self, fake_connection):
        run_startup_query(fake_connection, "SELECT 1")
        assert fake_connection.callback is log_query_result

    def test_custom_callback(self, fake_connection):
        received = []
        run_startup_query(fake_connection, "SELECT 1", lambda e, r: received.append((e, r)))
        fake_connection.fire(result=[{"1": 1}])
        assert received == [(None, [{"1": 1}])]

    @pytest.mark.asyncio
    async def test_unreachable_database_delivers_connection_error(self, sqlite_descriptor):
        engine = create_async_engine(
            "sqlite+aiosqlite:////nonexistent-dir/for-tests/notes.db", poolclass=NullPool,
        )
        connection = DatabaseConnection(sqlite_descriptor, engine=engine)
        received = []

        pending = run_startup_query(
            connection, "SELCT * FROM notes", lambda e, r: received.append((e, r)),
        )
        await pending
        await connection.drain()

        error, rows = received[0]
        assert isinstance(error, DatabaseConnectionError)
        assert rows is None

    @pytest.mark.asyncio
    async def test_close_races_malformed_statement(self, sqlite_connection):
        received = []

        pending = run_startup_query(
            sqlite_connection, "SELCT * FROM notes", lambda e, r: received.append((e, r)),
        )
        await pending
        await sqlite_connection.drain()

        assert len(received) == 1
        error, rows = received[0]
        assert isinstance(error, DatabaseError)
        assert rows is None
        assert sqlite_connection.closed


class TestLogQueryResult:

    def test_logs_error_and_undefined_result(self, caplog):
        error = QueryError(sql="SELCT * FROM notes", reason='near "SELCT": syntax error')
        with caplog.at_level(logging.INFO, logger="note_taking_app.bootstrap"):
            log_query_result(error, None)

        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("query failed: The database rejected the query") for m in messages)
        assert "query results: None" in messages
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1

    def test_logs_rows(self, caplog):
        with caplog.at_level(logging.INFO, logger="note_taking_app.bootstrap"):
            log_query_result(None, [{"id": 1}])

        messages = [r.getMessage() for r in caplog.records]
        assert messages == ["query results: [{'id': 1}]"]
