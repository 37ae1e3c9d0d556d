"""
Note Taking App — Middleware Package
======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler

    The request ID is set before the logging middleware reads it.
"""
