"""Logger lookup and one-shot handler setup for the ``shapepose`` package."""
from __future__ import annotations

import logging
from typing import IO, Optional, Union


ROOT_LOGGER = "shapepose"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``shapepose.<name>``, or the package logger when ``name`` is empty.

    Modules only emit records through these loggers; attaching handlers is
    left to :func:`configure_logging` or the host application.
    """

    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def resolve_level(level: Union[int, str]) -> int:
    """Accept either a numeric level or a name such as ``"debug"``."""

    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"unknown logging level: {level!r}")
    return value


def configure_logging(
    level: Union[int, str] = logging.INFO,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Parameters
    ----------
    level:
        Numeric level or level name applied to every ``shapepose`` logger.
    stream:
        Destination for records; ``sys.stderr`` when omitted.

    Repeated calls only change the level, so at most one handler is ever
    installed.
    """

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(resolve_level(level))
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return logger
