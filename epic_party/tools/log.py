"""
Logging setup for applications using this package.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["create_logger"]


def create_logger(
    name: str = "epic-party",
    level: int = logging.INFO,
    *,
    console: Console | None = None,
) -> logging.Logger:
    """
    Create a logger rendering through `rich`, suitable for passing to
    {obj}`Client`. Calling it again with the same name doesn't add another
    handler.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        rich_handler = RichHandler(
            console=console or Console(stderr=True),
            rich_tracebacks=True,
            show_level=True,
            show_time=True,
            show_path=False,
            markup=True,
        )
        rich_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(rich_handler)

    return logger
