"""
Note Taking App — Package Initializer
=======================================

Layers:

    ┌─────────────────────────────────────┐
    │   main / server (bootstrap, HTTP)   │  ← app factory, lifespan, uvicorn
    ├─────────────────────────────────────┤
    │      routes / middleware            │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      bootstrap (startup query)      │
    ├─────────────────────────────────────┤
    │      database (one connection)      │  ← SQLAlchemy asyncio, NullPool
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
