"""
Logging for the search API and CLI.

The API runs under uvicorn and only needs configure_basic_logging() so that
dispatcher warnings (failed counts, timed-out indexes) reach the server log.
The CLI owns its process and uses setup_logging() to send the "unisearch"
loggers, and optionally the SQL SQLAlchemy issues, to stderr or a file.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

Level = Union[int, str]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# SQLAlchemy logs every statement and its parameters at INFO on this logger
SQL_LOGGER = "sqlalchemy.engine"


def setup_logging(
    name: str = None,
    level: Level = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True,
    format_string: str = DEFAULT_FORMAT,
    log_sql: bool = False,
) -> logging.Logger:
    """
    Attach console and/or file handlers to a logger.

    Args:
        name: Logger name, usually "unisearch" (root logger if None)
        level: Logging level, as a number or a name such as "DEBUG"
        log_file: Also write to this file; parent directories are created
        console: Write to stderr, keeping stdout free for search results
        format_string: Log message format
        log_sql: Send the count/fetch statements SQLAlchemy runs to the
            same handlers

    Returns:
        The configured logger

    Example:
        >>> logger = setup_logging("unisearch", level="DEBUG", log_sql=True)
        >>> logger.debug("Fetched 10 of 35 matches")
    """
    formatter = logging.Formatter(format_string)
    handlers: list[logging.Handler] = []

    if console:
        handlers.append(logging.StreamHandler(sys.stderr))

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    # Levels are set on the loggers; SQL lines log at INFO whatever ``level`` is
    for handler in handlers:
        handler.setFormatter(formatter)

    logger = _attach(logging.getLogger(name), level, handlers)
    if log_sql:
        _attach(logging.getLogger(SQL_LOGGER), logging.INFO, handlers)
    return logger


def _attach(logger: logging.Logger, level: Level, handlers: list[logging.Handler]):
    logger.setLevel(level)
    # Replace rather than add, so repeated setup does not duplicate lines
    logger.handlers.clear()
    for handler in handlers:
        logger.addHandler(handler)
    return logger


def configure_basic_logging(
    level: Level = logging.INFO,
    format_string: str = DEFAULT_FORMAT,
) -> None:
    """
    Configure basic logging to stdout for the API.

    Does nothing if the root logger already has handlers (e.g. uvicorn's).
    """
    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
