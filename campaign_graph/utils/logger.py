"""
Structured Logging with Rich.

Every engine module logs through ``get_logger(__name__)``. Nothing is
configured on import; applications call ``setup_logging`` once.
"""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "campaign_graph"


def setup_logging(level: str | None = None) -> None:
    """
    Attach a Rich handler to the engine's root logger.

    Args:
        level: Logging level name. Defaults to ``Settings.log_level``.
    """
    if level is None:
        from campaign_graph.config import get_settings

        level = get_settings().log_level

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_time=True,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s | %(message)s", datefmt="[%X]"))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # networkx dispatch chatter
    logging.getLogger("networkx").setLevel(logging.WARNING)


@lru_cache(maxsize=128)
def get_logger(name: str) -> logging.Logger:
    """Get a (cached) logger for the given module name."""
    return logging.getLogger(name)


class LogContext:
    """
    Context manager that stamps extra fields onto every log record.

    Usage:
        with LogContext(logger, entity_count=42):
            logger.info("Building graph")
    """

    def __init__(self, logger: logging.Logger, **context: str | int | float) -> None:
        self.logger = logger
        self.context = context
        self._old_factory = None

    def __enter__(self) -> "LogContext":
        self._old_factory = logging.getLogRecordFactory()
        old_factory = self._old_factory
        context = self.context

        def factory(*args, **kwargs) -> logging.LogRecord:  # type: ignore[no-untyped-def]
            record = old_factory(*args, **kwargs)
            for key, value in context.items():
                setattr(record, key, value)
            return record

        logging.setLogRecordFactory(factory)
        return self

    def __exit__(self, *args: object) -> None:
        if self._old_factory:
            logging.setLogRecordFactory(self._old_factory)


@contextmanager
def log_timing(logger: logging.Logger, label: str) -> Iterator[None]:
    """Log how long the wrapped block took, at DEBUG level."""
    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"{label} took {elapsed_ms:.1f}ms")
