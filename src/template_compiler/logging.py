"""
Handler setup for the `template_compiler` logger.

What the package logs:
- DEBUG: tag and block dispatch while parsing, extension modules and entry
  points that loaded, the size of a registry read from config, and the
  exception behind a failed filter call before it is re-raised.
- WARNING: extension modules or entry points that failed to load.

Errors themselves are raised, never only logged.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass
class LogConfig:
    log_file: Path | str | None = None
    log_level: int = logging.WARNING
    console_level: int = logging.WARNING
    file_level: int = logging.DEBUG
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config: LogConfig | None = None) -> logging.Logger:
    """
    Attach handlers to the `template_compiler` logger.

    The library itself never calls this; modules only log through
    `logging.getLogger(__name__)`. Hosts that want the records on stderr (and
    optionally in a file) call it once at startup.
    """
    if config is None:
        config = LogConfig()

    logger = logging.getLogger("template_compiler")
    logger.setLevel(config.log_level)

    # Clear any existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(config.format)

    if config.log_file is not None:
        fh = logging.FileHandler(config.log_file)
        fh.setLevel(config.file_level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(config.console_level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    return logger
