"""
Logging setup for the SDK

Components never print; each one takes an optional ``logger`` argument and
falls back to a module-level ``logging.getLogger(__name__)``. Applications
that want console output call ``configure_logging`` once.
"""

import logging
import os
from typing import Optional, Union

from .colors import Colors

LOG_LEVEL_ENV_VAR = 'F5_SDK_LOG_LEVEL'
_DEFAULT_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'
_DEFAULT_DATEFMT = '%H:%M:%S'


class ColorFormatter(logging.Formatter):
    """Formatter that colors the level name for terminal output"""

    def __init__(self, fmt=_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT, use_color=True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record):
        if not self.use_color:
            return super().format(record)
        original = record.levelname
        record.levelname = Colors.for_level(record.levelno, original)
        try:
            return super().format(record)
        finally:
            record.levelname = original


def _coerce_level(value: Optional[Union[str, int]], fallback: int) -> int:
    if value is None:
        return fallback
    if isinstance(value, int):
        return value
    text = value.strip().upper()
    if not text:
        return fallback
    if text.isdigit():
        return int(text)
    candidate = getattr(logging, text, None)
    if isinstance(candidate, int):
        return candidate
    return fallback


def resolve_level(level=None, verbose=False) -> int:
    """Resolve the effective level: verbose, explicit level, env var, then INFO"""
    if verbose:
        return logging.DEBUG
    if level is not None:
        return _coerce_level(level, logging.INFO)
    return _coerce_level(os.getenv(LOG_LEVEL_ENV_VAR), logging.INFO)


def configure_logging(level=None, verbose=False, stream=None, use_color=True) -> logging.Logger:
    """Attach a console handler to the ``f5sdk`` logger and return it"""
    logger = logging.getLogger('f5sdk')
    effective = resolve_level(level, verbose)

    if not any(getattr(h, '_f5sdk_handler', False) for h in logger.handlers):
        handler = logging.StreamHandler(stream)
        handler.setFormatter(ColorFormatter(use_color=use_color))
        handler._f5sdk_handler = True
        logger.addHandler(handler)

    logger.setLevel(effective)
    return logger
