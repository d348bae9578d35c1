"""Logging setup for command-line use.

The library only creates module loggers; handlers are installed here, by
the CLI, and never on import.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | int = "WARNING", rich: bool = True) -> None:
    """Install a root handler at the given level.

    Args:
    ----
        level: Level name or number.
        rich: Render records with rich on stderr instead of plain text.

    """
    if isinstance(level, str):
        level = level.upper()
    if rich:
        logging.basicConfig(
            level=level,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
            force=True,
        )
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
