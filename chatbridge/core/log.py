"""Logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> None:
    """
    Route log records to stderr through rich.

    stdout stays free for reply text in batch mode.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ...).
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )
