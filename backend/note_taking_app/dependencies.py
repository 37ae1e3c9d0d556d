"""
Note Taking App — FastAPI Dependencies
========================================

What:  Providers for objects owned by the application instance.
How:   create_app() stores settings and templates on app.state; these
       functions hand them to route handlers through Depends(), so
       handlers never reach for module globals.
"""

from fastapi import Request
from fastapi.templating import Jinja2Templates

from note_taking_app.config import Settings
from note_taking_app.database import DatabaseConnection


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_templates(request: Request) -> Jinja2Templates:
    """The templates registered as the application's view engine."""
    return request.app.state.templates


def get_database_connection(request: Request) -> DatabaseConnection:
    """A fresh, unconnected DatabaseConnection for the current request."""
    return DatabaseConnection(get_settings(request).connection_descriptor)
