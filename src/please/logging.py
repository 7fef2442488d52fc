"""Centralized logging configuration for please.

The CLI calls configure_logging() once at startup. User-facing output
goes through print(); logging carries diagnostics only.

Logging Levels:
- DEBUG: History parsing details, marker positions, state file paths
- INFO: Session lifecycle (build opened, ask recorded, build closed)
- WARNING: Recoverable issues (failed ask expression, non-zsh SHELL)
- ERROR: Failures that end the invocation
"""

import logging
import os
from typing import Optional

LEVEL_ENV_VAR = "PLEASE_LOG_LEVEL"
DEFAULT_LEVEL = "WARNING"
_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging for please.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses PLEASE_LOG_LEVEL env var or WARNING.
    """
    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR, DEFAULT_LEVEL).upper()
    if level not in _LEVELS:
        level = DEFAULT_LEVEL

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.basicConfig(
        level=getattr(logging, level),
        handlers=[handler],
        force=True,
    )
