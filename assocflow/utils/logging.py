"""
Logging for AssocFlow

Handlers are attached to the ``assocflow`` package logger, so embedding the
engine in another application leaves that application's root handlers alone.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

import colorlog

PACKAGE_LOGGER = "assocflow"

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
CONSOLE_DATE_FORMAT = "%H:%M:%S"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

# Set on handlers installed by setup_logging so a second call replaces them
_OWNED = "_assocflow_owned"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def _console_handler(use_colors: bool) -> logging.Handler:
    if use_colors:
        handler = colorlog.StreamHandler(sys.stderr)
        handler.setFormatter(
            colorlog.ColoredFormatter(
                "%(log_color)s" + LOG_FORMAT,
                datefmt=CONSOLE_DATE_FORMAT,
                log_colors=LEVEL_COLORS,
            )
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=CONSOLE_DATE_FORMAT))
    return handler


def _file_handler(log_file: Union[str, Path]) -> logging.Handler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=FILE_DATE_FORMAT))
    return handler


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Configure console (and optionally file) output for AssocFlow loggers

    Args:
        level: Level name (DEBUG, INFO, ...) or logging constant
        log_file: Also append records to this file
        use_colors: Colour console records by level via colorlog

    Returns:
        The ``assocflow`` package logger
    """
    level = _resolve_level(level)
    package_logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in list(package_logger.handlers):
        if getattr(handler, _OWNED, False):
            package_logger.removeHandler(handler)
            handler.close()

    handlers = [_console_handler(use_colors)]
    if log_file:
        handlers.append(_file_handler(log_file))

    for handler in handlers:
        setattr(handler, _OWNED, True)
        package_logger.addHandler(handler)

    package_logger.setLevel(level)
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module"""
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


class Stopwatch:
    """Wall time of a ``timed`` block; ``elapsed`` is set when it ends"""

    def __init__(self):
        self.start = time.perf_counter()
        self.elapsed: Optional[float] = None

    def stop(self) -> float:
        self.elapsed = time.perf_counter() - self.start
        return self.elapsed


@contextmanager
def timed(label: str, logger: Optional[logging.Logger] = None) -> Iterator[Stopwatch]:
    """
    Log how long a block took

    Example:
        with timed("Comparison demo", logger) as watch:
            run()
        seconds = watch.elapsed
    """
    logger = logger or logging.getLogger(PACKAGE_LOGGER)
    watch = Stopwatch()
    try:
        yield watch
    except Exception as e:
        logger.error(f"{label} failed after {watch.stop():.2f} seconds: {e}")
        raise
    logger.info(f"{label} completed in {watch.stop():.2f} seconds")
