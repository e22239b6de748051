"""Logging setup for Deck Press on top of loguru.

The console sink follows ``DP_LOG_LEVEL`` (or WARNING under ``--quiet``, so
the progress line is the only chatter). When file logging is enabled every
record down to DEBUG also goes to a rotating, gzip-compressed file under
``DP_LOGS_DIR``.
"""

import sys
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from loguru import logger

from deckpress.config import settings as settings_module
from deckpress.errors import OperationCancelledError

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[module]}:{line} - {message}"


def setup_logging(quiet: bool = False) -> None:
    """Replace loguru's default sink with the configured ones.

    Safe to call more than once; each call starts from a clean slate.
    """
    settings = settings_module.settings
    console_level = "WARNING" if quiet else settings.log_level

    logger.remove()
    logger.configure(extra={"module": "deckpress"})
    logger.add(sys.stderr, level=console_level, format=CONSOLE_FORMAT, colorize=True)

    if settings.log_to_file:
        settings.logs_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.logs_dir / "deckpress.log",
            level="DEBUG",
            format=FILE_FORMAT,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression="gz",
            enqueue=True,
        )

    logger.debug("Logging ready (console={}, file={})", console_level, settings.log_to_file)


def get_logger(name: str):
    """Logger bound to a module name, shown in place of loguru's own ``name``.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Exporting deck: {}", deck_name)
    """
    return logger.bind(module=name)


def _describe(context: Dict[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in context.items())


@contextmanager
def log_operation(operation: str, **context: Any) -> Iterator[Dict[str, Any]]:
    """Log the start, outcome and duration of a pipeline run.

    Yields a dict the caller can fill with outcome details (skipped units,
    pages written); they are appended to the completion line. Cancellation
    is logged as a warning, any other exception as an error, and every
    exception is re-raised.

    Example:
        >>> with log_operation("Export archive", deck="Mono Red") as outcome:
        ...     outcome["skipped"] = 0
        # Export archive [deck=Mono Red] done in 0.42s (skipped=0)
    """
    log = logger.bind(module="deckpress.operation")
    outcome: Dict[str, Any] = {}
    started = time.perf_counter()
    log.info("{} [{}] starting", operation, _describe(context))
    try:
        yield outcome
    except OperationCancelledError as error:
        log.warning(
            "{} [{}] cancelled after {:.2f}s: {}",
            operation,
            _describe(context),
            time.perf_counter() - started,
            error,
        )
        raise
    except Exception as error:
        log.error(
            "{} [{}] failed after {:.2f}s: {}",
            operation,
            _describe(context),
            time.perf_counter() - started,
            error,
        )
        raise

    details = f" ({_describe(outcome)})" if outcome else ""
    log.info(
        "{} [{}] done in {:.2f}s{}",
        operation,
        _describe(context),
        time.perf_counter() - started,
        details,
    )
