"""Logging utilities with structured output and run context propagation.

This module provides enhanced logging capabilities:
    - JSON structured logging for log aggregation systems
    - Run ID and pipeline phase injected into every log record
    - Console plus rotating file output, console-only when the log dir is unusable

The run ID and phase live in context variables, so each asyncio task that
carries a pipeline run (including autopilot-spawned runs) logs its own
values.

Usage:
    >>> from observability.logging import setup_logging, set_run_context
    >>> setup_logging(config)
    >>> set_run_context(run_id="abc123", phase="discovering")
    >>> logger.info("Discovery started")  # Includes run_id and phase automatically
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Any

LOG_FILE_NAME = "trendgenius.log"

# Context variables for run correlation
run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")
phase_var: contextvars.ContextVar[str] = contextvars.ContextVar("phase", default="-")

# LogRecord attributes that are not "extra" fields
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "run_id", "phase", "message",
})


def set_run_context(run_id: str, phase: str | None = None) -> None:
    """Set the current run ID (and optionally phase) for log correlation.

    Args:
        run_id: Short identifier for the current pipeline run
        phase: Current pipeline phase, if known
    """
    run_id_var.set(run_id)
    if phase is not None:
        phase_var.set(phase)


def set_phase(phase: str) -> None:
    """Update the pipeline phase shown in log lines."""
    phase_var.set(phase)


def clear_context() -> None:
    """Clear all logging context variables."""
    run_id_var.set("-")
    phase_var.set("-")


class ContextFilter(logging.Filter):
    """Filter that injects run_id and phase into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id_var.get()
        record.phase = phase_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Output format:
        {"timestamp": "...", "level": "INFO", "logger": "...", "message": "...",
         "run_id": "...", "phase": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": getattr(record, "run_id", "-"),
            "phase": getattr(record, "phase", "-"),
        }

        # Add source location for warnings and errors
        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add any extra fields
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Text formatter with run context.

    Format: TIMESTAMP [LEVEL] [run_id:phase] logger: message
    """

    def __init__(self, include_date: bool = False):
        datefmt = "%Y-%m-%d %H:%M:%S" if include_date else "%H:%M:%S"
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] [%(run_id)s:%(phase)s] %(name)s: %(message)s",
            datefmt=datefmt,
        )


def setup_logging(config: Any, verbose: bool = False) -> bool:
    """Configure logging with console and file handlers.

    Args:
        config: Application configuration with logging settings
        verbose: If True, override config and use DEBUG level for console

    Returns:
        True if file logging is enabled, False if console-only (fallback)
    """
    console_level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO)
    context_filter = ContextFilter()

    if config.log_format == "json":
        console_fmt: logging.Formatter = JsonFormatter()
        file_fmt: logging.Formatter = JsonFormatter()
    else:
        console_fmt = TextFormatter(include_date=False)
        file_fmt = TextFormatter(include_date=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(console_fmt)
    console.addFilter(context_filter)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.addHandler(console)

    file_logging_enabled = False
    try:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        test_file = config.log_dir / ".write_test"
        test_file.touch()
        test_file.unlink()

        log_file = config.log_dir / LOG_FILE_NAME
        if config.log_max_bytes > 0:
            file_handler: logging.Handler = RotatingFileHandler(
                log_file,
                maxBytes=config.log_max_bytes,
                backupCount=config.log_backup_count,
                encoding="utf-8",
            )
        else:
            file_handler = TimedRotatingFileHandler(
                log_file,
                when="midnight",
                interval=1,
                backupCount=config.log_backup_count,
                encoding="utf-8",
            )

        file_handler.setLevel(logging.DEBUG)  # File always captures everything
        file_handler.setFormatter(file_fmt)
        file_handler.addFilter(context_filter)
        root.addHandler(file_handler)
        file_logging_enabled = True

    except OSError as e:
        print(
            f"Warning: Cannot write to log directory '{config.log_dir}': {e}. "
            "Falling back to console-only logging.",
            file=sys.stderr,
        )

    # Reduce noise from third-party libraries
    for lib in ("httpx", "httpcore", "openai", "google_genai", "asyncio"):
        logging.getLogger(lib).setLevel(logging.WARNING)

    return file_logging_enabled
