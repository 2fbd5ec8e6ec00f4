"""Rich-based logging setup."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "WARNING") -> None:
    """Route sshnode log records to stderr through rich."""
    log_level = getattr(logging, level.upper(), logging.WARNING)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(log_level)

    logger = logging.getLogger("sshnode")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(log_level)
    logger.propagate = False


def verbosity_to_level(verbose: int) -> str:
    if verbose >= 2:
        return "DEBUG"
    elif verbose == 1:
        return "INFO"
    else:
        return "WARNING"
