"""Logging setup shared by the library and the CLI."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "reciperank"


def init_logging(level: int | str = logging.INFO, console: Optional[Console] = None) -> None:
    """Attach a RichHandler to the package logger once.

    Library modules only call get_logger(); the CLI decides the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
