"""Tracing using Logfire/OpenTelemetry.

Optional spans around pipeline runs, plus automatic instrumentation of
every PydanticAI agent call (prompts, token usage, latency).

Requirements:
    pip install logfire

Enable via configuration:
    ENABLE_LOGFIRE=true
    LOGFIRE_TOKEN=your-token  # Optional for cloud dashboard

Usage:
    >>> from observability.tracing import setup_tracing, trace_operation
    >>> setup_tracing(enabled=True, service_name="trendgenius")
    >>> with trace_operation("discovery", {"category": "Technology"}) as attrs:
    ...     attrs["trends"] = 5
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator

from observability.logging import phase_var, run_id_var

logger = logging.getLogger(__name__)


@dataclass
class TracingContext:
    """Process-wide tracing state."""
    enabled: bool = False
    service_name: str = "trendgenius"
    token: str = ""
    _logfire_configured: bool = field(default=False, init=False)


_context = TracingContext()


def setup_tracing(
    enabled: bool = False,
    service_name: str = "trendgenius",
    token: str = "",
) -> TracingContext:
    """Set up tracing with Logfire.

    Tracing silently stays off when logfire is not installed or fails to
    configure; the pipeline never depends on it.

    Args:
        enabled: Whether to enable tracing
        service_name: Name of the service for tracing
        token: Logfire authentication token

    Returns:
        TracingContext for the session
    """
    _context.enabled = enabled
    _context.service_name = service_name
    _context.token = token

    if not enabled:
        logger.debug("Tracing disabled")
        return _context

    try:
        import logfire

        logfire.configure(
            service_name=service_name,
            token=token if token else None,
        )
        logfire.instrument_pydantic_ai()

        _context._logfire_configured = True
        logger.info("Logfire tracing enabled | service=%s", service_name)

    except ImportError:
        logger.warning("Logfire not installed. Tracing disabled.")
        _context.enabled = False
    except Exception as e:
        logger.error("Failed to configure Logfire: %s", e)
        _context.enabled = False

    return _context


@contextmanager
def trace_operation(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[dict[str, Any], None, None]:
    """Context manager for tracing an operation.

    Args:
        name: Name of the operation
        attributes: Optional attributes to attach to the span

    Yields:
        Dictionary for adding result attributes during the operation
    """
    # Spans carry the same run correlation as log lines
    span_attrs = {"run_id": run_id_var.get(), "phase": phase_var.get(), **(attributes or {})}
    start = time.monotonic()

    try:
        if _context.enabled and _context._logfire_configured:
            import logfire

            with logfire.span(name, **span_attrs) as span:
                result_attrs: dict[str, Any] = {}
                yield result_attrs
                for key, value in result_attrs.items():
                    span.set_attribute(key, value)
        else:
            yield {}
    finally:
        logger.debug("Operation complete | name=%s duration=%.2fs", name, time.monotonic() - start)
