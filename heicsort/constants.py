"""
File extension constants and shared console/logger for heicsort.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PROGRAM = "heicsort"

# File extension constants
JPG_EXTENSIONS = (".jpg", ".jpeg")
HEIC_EXTENSIONS = (".heic",)
SUPPORTED_EXTENSIONS = HEIC_EXTENSIONS + JPG_EXTENSIONS

# Destination filename layout, e.g. 2023-05-01_10.00.00.jpg
TIME_FORMAT = "%Y-%m-%d_%H.%M.%S"

# Command-line defaults
DEFAULT_SOURCE = "./"
DEFAULT_DESTINATION = "./output"
DEFAULT_PORT = "80"

_console: Optional[Console] = None


def get_console() -> Console:
    """Get the shared rich console."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def get_logger(name: str = PROGRAM) -> logging.Logger:
    """Get a program logger (children of the program logger share its handler)."""
    return logging.getLogger(name)


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a rich handler to the program logger and set its level."""
    logger = get_logger()
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=get_console(), rich_tracebacks=True,
                              show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
