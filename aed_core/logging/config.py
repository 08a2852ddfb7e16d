# =============================================================================
# aed_core/logging/config.py
# Logging Configuration for the AED inventory core
# =============================================================================

import logging
import sys
import time
from datetime import date
from pathlib import Path
from typing import Optional, Union


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_DIR = Path("logs")

# Loggers that are chatty at INFO and say nothing about inventory state
QUIET_LOGGERS = ("asyncio", "streamlit", "watchdog")


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_to_file: bool = True,
    log_filename: Optional[str] = None,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure process-wide logging: stdout plus an optional daily file.

    Args:
        level: Logging level or level name, e.g. ``"DEBUG"``
        log_to_file: Also write to ``<log_dir>/aed_YYYY-MM-DD.log``
        log_filename: Override the daily file name
        log_dir: Directory for the file (default: ``LOG_DIR``)
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_to_file:
        directory = Path(log_dir) if log_dir is not None else LOG_DIR
        directory.mkdir(parents=True, exist_ok=True)
        filename = log_filename or f"aed_{date.today():%Y-%m-%d}.log"
        handlers.append(logging.FileHandler(directory / filename))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("aed_core").info("Logging initialized")


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a module, usually ``get_logger(__name__)``.

    Usage:
        from aed_core.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Sync started")
    """
    return logging.getLogger(name)


class LogContext:
    """
    Times a block and logs its start, completion or failure.

    Exceptions are logged and re-raised. ``elapsed`` holds the duration in
    seconds once the block exits.

    Usage:
        with LogContext(logger, "Replaying pending operations") as ctx:
            ...
        # "Replaying pending operations... started"
        # "Replaying pending operations... completed (0.02s)"
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.elapsed: Optional[float] = None
        self._started: Optional[float] = None

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.log(self.level, f"{self.operation}... started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self._started

        if exc_type is None:
            self.logger.log(self.level, f"{self.operation}... completed ({self.elapsed:.2f}s)")
        else:
            self.logger.error(
                f"{self.operation}... failed ({self.elapsed:.2f}s): {exc_val}",
                exc_info=True,
            )
        return False
