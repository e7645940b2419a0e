"""Logging setup shared by every module of the package.

Modules obtain their logger with::

    from chebyshev_staged.logging_config import get_logger
    logger = get_logger(__name__)

The package logger carries a :class:`logging.NullHandler`, so nothing is
printed unless the application configures logging itself or calls
:func:`enable_console_logging`.  The console level defaults to the value
of the ``CHEBYSHEV_STAGED_LOG_LEVEL`` environment variable (``INFO`` if
unset or unrecognised).

Log levels
----------
- DEBUG: one line per adaptive fitting iteration
- INFO: start and end of each staged build
- WARNING: quadrature that did not reach its requested tolerance
"""

from __future__ import annotations

import logging
import os
import sys

PACKAGE_LOGGER = "chebyshev_staged"
LOG_LEVEL_ENV = "CHEBYSHEV_STAGED_LOG_LEVEL"

_DEFAULT_FORMAT = "%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s"
_DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_DEFAULT_LEVEL = logging.INFO

_loggers: dict[str, logging.Logger] = {}
_console_handler: logging.Handler | None = None

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def _level_from_env() -> int:
    env_level = os.environ.get(LOG_LEVEL_ENV, "").upper()
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(env_level, _DEFAULT_LEVEL)


def get_logger(name: str) -> logging.Logger:
    """Return the (cached) logger for module *name*."""
    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)
    return _loggers[name]


def enable_console_logging(level: int | None = None) -> logging.Handler:
    """Attach a formatted stream handler to the package logger.

    Calling this more than once replaces the previous handler rather than
    adding a second one.

    Parameters
    ----------
    level : int, optional
        Logging level.  Defaults to the level named by
        ``CHEBYSHEV_STAGED_LOG_LEVEL``.

    Returns
    -------
    handler : logging.Handler
        The installed handler.
    """
    global _console_handler

    if level is None:
        level = _level_from_env()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _console_handler is not None:
        package_logger.removeHandler(_console_handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(_DEFAULT_FORMAT, datefmt=_DEFAULT_DATE_FORMAT)
    )
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    _console_handler = handler
    return handler


def disable_console_logging() -> None:
    """Remove the handler installed by :func:`enable_console_logging`."""
    global _console_handler

    if _console_handler is not None:
        logging.getLogger(PACKAGE_LOGGER).removeHandler(_console_handler)
        _console_handler.close()
        _console_handler = None


def set_log_level(level: int) -> None:
    """Set the level of the package logger and its console handler."""
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    if _console_handler is not None:
        _console_handler.setLevel(level)
