"""
Note Taking App — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the test suite.
How:   pytest auto-discovers this file; fixtures are function-scoped.

Fixtures:
    ├── test_settings:      Settings with the fixed bootstrap values, quiet logging
    ├── fake_connection:    Records connect/query/end calls without a database
    ├── sqlite_connection:  DatabaseConnection backed by in-memory aiosqlite
    ├── test_app:           create_app(test_settings)
    └── test_client:        HTTPX AsyncClient against test_app
"""

from typing import Any, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from note_taking_app.config import Settings
from note_taking_app.database import ConnectionDescriptor, DatabaseConnection


class FakeConnection:
    """
    Connection double that records the order of calls.

    query() keeps the callback instead of running it, so a test decides
    when (or whether) the completion fires.
    """

    def __init__(self):
        self.events: List[str] = []
        self.sql: Optional[str] = None
        self.callback: Any = None
        self.drained = False

    def connect(self):
        self.events.append("connect")

    def query(self, sql, callback):
        self.events.append("query")
        self.sql = sql
        self.callback = callback
        return "pending-query"

    def end(self):
        self.events.append("end")

    def fire(self, error=None, result=None):
        self.events.append("callback")
        self.callback(error, result)

    async def drain(self):
        self.drained = True


@pytest.fixture
def test_settings():
    """Fixed bootstrap values; .env files in the working directory are ignored."""
    return Settings(
        _env_file=None,
        db_host="localhost",
        db_user="root",
        db_password="password",
        db_name="note_taking_app",
        backend_host="0.0.0.0",
        backend_port=3000,
        log_level="WARNING",
    )


@pytest.fixture
def fake_connection():
    return FakeConnection()


@pytest.fixture
def sqlite_descriptor():
    return ConnectionDescriptor(
        host="localhost",
        user="root",
        password="password",
        database=":memory:",
        driver="sqlite+aiosqlite",
    )


@pytest_asyncio.fixture
async def sqlite_connection(sqlite_descriptor):
    """DatabaseConnection on a private in-memory SQLite database."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=NullPool)
    connection = DatabaseConnection(sqlite_descriptor, engine=engine)
    yield connection
    connection.end()
    await connection.drain()


@pytest.fixture
def test_app(test_settings):
    from note_taking_app.main import create_app
    return create_app(test_settings)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient routed straight to the app through ASGITransport.

    The lifespan does not run, so no startup query is sent.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
