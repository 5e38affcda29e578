"""Logging setup for diffscribe.

All modules obtain their logger through get_logger() so that a single
level switch (the DIFFSCRIBE_LOG_LEVEL environment variable or the
``debug`` setting) reconfigures every diffscribe logger at once.
"""

from __future__ import annotations

import logging
import os
from typing import Final

_REGISTERED_LOGGERS: set[logging.Logger] = set()

LOG_LEVEL_ENV_VAR: Final[str] = "DIFFSCRIBE_LOG_LEVEL"
_DEFAULT_FORMAT: Final[str] = "[%(levelname)s %(asctime)s] %(message)s"
_DATE_FORMAT: Final[str] = "%H:%M:%S"
_PROMPT_PREFIX: Final[str] = "Prompt:"


def _parse_level_from_env() -> int | None:
    """Return the log level defined in the environment, if any."""

    level_name = os.getenv(LOG_LEVEL_ENV_VAR)
    if not level_name:
        return None

    level = getattr(logging, level_name.upper(), None)
    return level if isinstance(level, int) else None


def get_logger(name: str) -> logging.Logger:
    """Return a diffscribe logger writing to stderr."""

    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    env_level = _parse_level_from_env()
    logger.setLevel(env_level if env_level is not None else logging.WARNING)
    _REGISTERED_LOGGERS.add(logger)

    return logger


def set_log_level(level: int) -> None:
    """Set the level of every registered diffscribe logger.

    An explicit DIFFSCRIBE_LOG_LEVEL always wins.
    """

    env_level = _parse_level_from_env()
    for logger in _REGISTERED_LOGGERS:
        logger.setLevel(env_level if env_level is not None else level)


def configure_from_settings(debug: bool) -> None:
    """Apply the ``debug`` setting: DEBUG when on, INFO otherwise."""

    set_log_level(logging.DEBUG if debug else logging.INFO)


def log_prompt(logger: logging.Logger, prompt: str, debug: bool, log_prompt_enabled: bool) -> None:
    """Log the full prompt only when both debug and prompt logging are on."""

    if not debug:
        return
    if not log_prompt_enabled:
        logger.debug("Prompt logging disabled (set debug_log_prompt: true to enable).")
        return
    logger.debug("%s\n%s", _PROMPT_PREFIX, prompt)
