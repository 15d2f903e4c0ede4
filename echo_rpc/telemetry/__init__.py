"""
OpenTelemetry Integration Module

Provides distributed tracing and metrics collection capabilities:
- tracer: Trace context propagation over gRPC metadata
- metrics: Metrics collection

Both client and server use it so a call can be followed across the wire.
"""

from .tracer import (
    setup_tracer,
    inject_trace_metadata,
    extract_trace_context,
    create_span
)
from .metrics import (
    setup_metrics,
    increment_counter,
    record_latency
)

__all__ = [
    "setup_tracer",
    "inject_trace_metadata",
    "extract_trace_context",
    "create_span",
    "setup_metrics",
    "increment_counter",
    "record_latency"
]
