"""
Note Taking App — Server Runner
=================================

What:  Serves the application with uvicorn and announces the bound port.
How:   NoteServer extends uvicorn.Server; once startup has bound the
       sockets it logs "listening on port <port>". A bind failure makes
       uvicorn exit the process, and nothing here catches it.
"""

import logging
import socket
from typing import List, Optional

import uvicorn

from note_taking_app.config import Settings, settings as default_settings
from note_taking_app.main import create_app, setup_logging

logger = logging.getLogger(__name__)


class NoteServer(uvicorn.Server):
    async def startup(self, sockets: Optional[List[socket.socket]] = None) -> None:
        await super().startup(sockets=sockets)
        if self.started:
            logger.info("listening on port %d", self.config.port)


def run(settings: Optional[Settings] = None) -> None:
    """Configure logging, build the app and serve until terminated."""
    settings = settings or default_settings
    setup_logging(settings)

    config = uvicorn.Config(
        create_app(settings),
        host=settings.backend_host,
        port=settings.backend_port,
        log_config=None,
        access_log=False,
    )
    NoteServer(config).run()
