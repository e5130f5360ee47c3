"""
Centralized logging configuration for the gap analysis package.

Human-readable console output plus an optional rotating JSON Lines file
(enabled by the GAPANALYSIS_LOG_DIR environment variable). All modules
should use get_pipeline_logger() instead of calling logging.basicConfig()
directly.

Usage:
    from gapanalysis.logging_config import get_pipeline_logger
    log = get_pipeline_logger(__name__)
"""

import json
import logging
import os
import time
import uuid
from logging.handlers import RotatingFileHandler

from gapanalysis import config

PACKAGE_LOGGER = "gapanalysis"

# Module-level run_id bound to every log entry via RunIdFilter.
_run_id = None


def get_run_id():
    """Return the current run_id, generating one if needed."""
    global _run_id
    if _run_id is None:
        _run_id = str(uuid.uuid4())[:8]
    return _run_id


def set_run_id(run_id=None):
    """Set (or regenerate) the run_id."""
    global _run_id
    _run_id = run_id or str(uuid.uuid4())[:8]
    return _run_id


class RunIdFilter(logging.Filter):
    """Inject run_id into every log record."""

    def filter(self, record):
        record.run_id = get_run_id()
        return True


class JsonFormatter(logging.Formatter):
    """Format log records as JSON Lines for machine parsing."""

    EXTRA_KEYS = ("species", "code", "step_name", "input_summary",
                  "output_summary", "timing_seconds", "warnings")

    def format(self, record):
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S.") +
                         f"{int(record.msecs):03d}",
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "run_id": getattr(record, "run_id", None),
            "message": record.getMessage(),
        }
        for key in self.EXTRA_KEYS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console format."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


# Track whether the package logger has been configured to avoid duplicates.
_configured = False


def setup_logging(log_dir=None, console_level=None, file_level=logging.DEBUG):
    """Configure the package logger with console and optional file handlers.

    Subsequent calls are no-ops until reset_logging() is called.

    Parameters
    ----------
    log_dir : str, optional
        Directory for ``gapanalysis.jsonl`` (rotating, JSON Lines).
        Default: config.LOG_DIR. No file handler when neither is set.
    console_level : int, optional
        Console handler log level. Default: from LOG_LEVEL env var or INFO.
    file_level : int
        File handler log level. Default: DEBUG.
    """
    global _configured

    if _configured:
        return

    if console_level is None:
        console_level = getattr(logging, config.LOG_LEVEL, logging.INFO)
    if log_dir is None:
        log_dir = config.LOG_DIR

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG)
    # Handler-level so records propagated from module loggers are tagged too.
    run_filter = RunIdFilter()

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(ConsoleFormatter())
    console.addFilter(run_filter)
    logger.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        rotating = RotatingFileHandler(
            os.path.join(log_dir, "gapanalysis.jsonl"),
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=3,
        )
        rotating.setLevel(file_level)
        rotating.setFormatter(JsonFormatter())
        rotating.addFilter(run_filter)
        logger.addHandler(rotating)

    _configured = True


def reset_logging():
    """Reset all logging state, primarily for test isolation."""
    global _configured, _run_id

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    _configured = False
    _run_id = None


def get_pipeline_logger(name):
    """Get a logger for a package module, initialising defaults if needed.

    Parameters
    ----------
    name : str
        Logger name (typically ``__name__``).

    Returns
    -------
    logging.Logger
    """
    if not _configured:
        setup_logging()
    return logging.getLogger(name)


def log_step_summary(
    logger,
    step_name,
    status="success",
    input_summary=None,
    output_summary=None,
    timing_seconds=None,
    warnings_list=None,
):
    """Log a structured step summary at INFO level.

    Parameters
    ----------
    logger : logging.Logger
    step_name : str
    status : str
        "success" or "error".
    input_summary : dict, optional
    output_summary : dict, optional
    timing_seconds : float, optional
    warnings_list : list[str], optional
    """
    parts = [f"[{step_name}] {status}"]
    if timing_seconds is not None:
        parts.append(f"({timing_seconds:.1f}s)")
    if output_summary:
        parts.append(f"output={output_summary}")

    extra = {"step_name": step_name}
    if input_summary:
        extra["input_summary"] = input_summary
    if output_summary:
        extra["output_summary"] = output_summary
    if timing_seconds is not None:
        extra["timing_seconds"] = timing_seconds
    if warnings_list:
        extra["warnings"] = warnings_list

    logger.info(" ".join(parts), extra=extra)


class StepTimer:
    """Context manager for timing a batch step.

    Usage:
        with StepTimer() as t:
            do_work()
        print(t.elapsed)
    """

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed = time.perf_counter() - self.start
