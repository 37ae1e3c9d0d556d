"""
Note Taking App — Application Configuration
=============================================

What:  Centralized configuration using Pydantic Settings.
How:   Every value has a default matching the fixed bootstrap configuration
       (localhost / root / password / note_taking_app, port 3000). The
       environment or a .env file may override any of them.
Who:   Read by create_app(), the lifespan handler and the server runner.
When:  `settings` is loaded once at import; tests build their own Settings.

Why:   The bootstrap values are fixed, but a real deployment never runs
       MySQL as root/password on localhost. Defaults keep the fixed
       behaviour; the environment changes it without code edits.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from note_taking_app.database import ConnectionDescriptor

DEFAULT_TEMPLATES_DIR = str(Path(__file__).resolve().parent / "templates")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern.
    """

    # ── Database ──────────────────────────────────────────────────────────
    db_host: str = Field(default="localhost")
    db_user: str = Field(default="root")
    db_password: str = Field(default="password")
    db_name: str = Field(default="note_taking_app")
    db_port: int = Field(default=3306, ge=1, le=65535)

    # SQLAlchemy dialect+driver used to build the connection URL
    db_driver: str = Field(default="mysql+aiomysql")

    # The single statement sent on startup. Kept verbatim, typo included.
    startup_query: str = Field(default="SELCT * FROM notes")

    # ── Views ─────────────────────────────────────────────────────────────
    view_engine: str = Field(default="jinja2")
    templates_dir: str = Field(default=DEFAULT_TEMPLATES_DIR)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def connection_descriptor(self) -> ConnectionDescriptor:
        """The host/user/password/database record used to open the startup connection."""
        return ConnectionDescriptor(
            host=self.db_host,
            user=self.db_user,
            password=self.db_password,
            database=self.db_name,
            port=self.db_port,
            driver=self.db_driver,
        )


settings = Settings()
