"""Root logger setup for the CLI and API server."""

import logging
from typing import Optional

from rich.logging import RichHandler

from .config import settings


def configure_logging(level: Optional[str] = None) -> None:
    """Install a single rich handler on the root logger."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
