"""
Note Taking App — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for database and request failures.
How:   Each exception carries a human-readable message and an optional
       context dict. The context is logged server-side and never returned
       to HTTP clients.
Who:   Raised by DatabaseConnection; delivered to query callbacks at
       startup and translated to JSON responses by the handlers in main.py.

Exception Hierarchy:
    NoteAppError (base)
    └── DatabaseError                → 500 Internal Server Error
        ├── DatabaseConnectionError  (connect or ping failed)
        ├── ConnectionClosedError    (query issued after the connection closed)
        └── QueryError               (server rejected the statement)
"""

from typing import Any, Dict, Optional


class NoteAppError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Description safe to show to an API consumer
        context:  Debug details (logged, not returned to clients)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class DatabaseError(NoteAppError):
    """
    Raised when a database operation fails.

    HTTP:    500 Internal Server Error, always with a generic message.
             Statement text and driver messages stay in `context`.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseConnectionError(DatabaseError):
    """Raised when a connection to the database server cannot be established."""

    def __init__(
        self,
        message: str = "Could not connect to the database",
        host: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if host:
            ctx["host"] = host
        super().__init__(message=message, context=ctx)
        self.host = host


class ConnectionClosedError(DatabaseError):
    """Raised when a statement reaches a connection that has already been closed."""

    def __init__(
        self,
        message: str = "Cannot run a query after the connection was closed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class QueryError(DatabaseError):
    """
    Raised when the database server rejects a statement.

    When:    Syntax errors, unknown tables, lost connection mid-query.
    Context: `sql` holds the statement, `reason` the driver's message.
    """

    def __init__(
        self,
        message: str = "The database rejected the query",
        sql: Optional[str] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if sql is not None:
            ctx["sql"] = sql
        if reason is not None:
            ctx["reason"] = reason
        super().__init__(message=message, context=ctx)
        self.sql = sql
        self.reason = reason
