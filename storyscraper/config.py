"""Centralised settings for storyscraper.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("STORYSCRAPER_WORKSPACE", Path.home() / ".storyscraper")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        return self.workspace_dir / "stories.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Renderer
    # ------------------------------------------------------------------
    renderer: str = field(
        default_factory=lambda: os.environ.get("RENDERER", "browser")
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )

    # ------------------------------------------------------------------
    # Crawl pipeline
    # ------------------------------------------------------------------
    crawl_delay: float = field(
        default_factory=lambda: float(os.environ.get("CRAWL_DELAY", "3.0"))
    )
    min_content_length: int = field(
        default_factory=lambda: int(os.environ.get("MIN_CONTENT_LENGTH", "500"))
    )
    max_links: int = field(
        default_factory=lambda: int(os.environ.get("MAX_LINKS", "50"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )


def configure_logging(level: str | None = None) -> None:
    """Install the root handler used by the CLI and the API.

    Calling it again is harmless: ``basicConfig`` is a no-op once the root
    logger has handlers.
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# Module-level singleton; import this everywhere:
#   from storyscraper.config import settings
settings = Settings()
