"""Observability infrastructure: logging and optional tracing.

setup_logging:
    Console + rotating file logging, text or JSON, with run_id/phase context.

set_run_context / set_phase / clear_context:
    Correlate log lines with the pipeline run that produced them.

setup_tracing / trace_operation:
    Optional Logfire spans with PydanticAI instrumentation.

Enable tracing via configuration:
    ENABLE_LOGFIRE=true
    LOGFIRE_TOKEN=your-token  # Optional
"""

from observability.logging import clear_context, set_phase, set_run_context, setup_logging
from observability.tracing import TracingContext, setup_tracing, trace_operation

__all__ = [
    "setup_logging",
    "set_run_context",
    "set_phase",
    "clear_context",
    "setup_tracing",
    "trace_operation",
    "TracingContext",
]
