"""Logging setup rendered through rich."""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from .config import load_settings

console = Console(stderr=True)


def setup_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Attach a RichHandler to the daykit logger

    The library itself never configures handlers; applications call this once.

    Args:
        level: Log level name or number. Defaults to DAYKIT_LOG_LEVEL.

    Returns:
        The configured ``daykit`` logger
    """
    if level is None:
        level = load_settings().log_level

    logger = logging.getLogger("daykit")
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=console, show_path=False))

    return logger
