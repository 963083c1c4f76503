"""
Log output for the simplicial_markov package.

Library modules log through ``logging.getLogger(__name__)``, so every
record lands under the ``simplicial_markov`` namespace. The package only
attaches a NullHandler on import; scripts and notebooks call
setup_logging() to actually see the builders' progress.
"""

import logging
import sys
from typing import Optional, TextIO, Union

PACKAGE_LOGGER = 'simplicial_markov'
LOG_FORMAT = '%(asctime)s %(levelname)-7s %(name)s: %(message)s'
DATE_FORMAT = '%H:%M:%S'


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level {level!r}")
    return resolved


def _attach(logger: logging.Logger, handler: logging.Handler, level: int):
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def setup_logging(level: Union[int, str] = logging.INFO,
                  log_file: Optional[str] = None,
                  stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Route package log records to the console and optionally a file.

    Handlers left on the package logger by earlier calls (or the import-time
    NullHandler) are closed and replaced, so calling this twice does not
    print every record twice.

    Args:
        level: Level number or name, e.g. 'DEBUG' for per-image progress
            of the exact builder.
        log_file: Also append records to this file.
        stream: Console stream; sys.stderr if None.

    Returns:
        The package logger.
    """
    level = _resolve_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    _attach(logger, logging.StreamHandler(stream if stream is not None else sys.stderr), level)
    if log_file:
        _attach(logger, logging.FileHandler(log_file, mode='a', encoding='utf-8'), level)

    logger.debug("Logging to %s", log_file or 'console')
    return logger
