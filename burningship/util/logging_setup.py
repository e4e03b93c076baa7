"""
Logging for the parent process and its render workers.

The parent owns the real handlers (console plus a rotating file). Worker
processes only get a QueueHandler, and a QueueListener in the parent
drains the queue into those handlers so records from every process end up
interleaved in one place.
"""
import logging
import logging.handlers
import multiprocessing as mp
import time
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

_LOGGER_NAME = "burningship"


LOG_FORMAT = "%(asctime)s.%(msecs)03dZ %(processName)s %(levelname)s %(name)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"


class UTCFormatter(logging.Formatter):
    converter = time.gmtime


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)


def _install(level: int, handlers: Sequence[logging.Handler]) -> logging.Logger:
    """Replace the burningship logger's handlers with the given ones, all at one level."""
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger


def configure_root_logging(
    *,
    level: int = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = "render.log",
    rotate_bytes: int = 5 * 1024 * 1024,
    rotate_count: int = 3,
) -> logging.Logger:
    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=rotate_bytes, backupCount=rotate_count, encoding="utf-8"
        ))
    formatter = UTCFormatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    for handler in handlers:
        handler.setFormatter(formatter)
    return _install(level, handlers)


@contextmanager
def logging_session(*, level: int = logging.INFO, log_file: Optional[str] = "render.log") -> Iterator[mp.Queue]:
    """Configure parent logging and yield the queue workers should log into."""
    parent = configure_root_logging(level=level, console=True, log_file=log_file)
    queue: mp.Queue = mp.Queue(-1)
    listener = logging.handlers.QueueListener(queue, *parent.handlers, respect_handler_level=True)
    listener.start()
    try:
        yield queue
    finally:
        listener.stop()
        queue.close()


def logging_initialiser(queue: Optional[mp.Queue], level: int) -> None:
    """ProcessPoolExecutor initializer; a None queue leaves worker logging untouched."""
    if queue is not None:
        _install(level, [logging.handlers.QueueHandler(queue)])
