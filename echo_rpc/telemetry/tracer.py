"""
OpenTelemetry Trace Context Management

Provides trace context injection into and extraction from gRPC call metadata
(W3C ``traceparent``), so server spans join the caller's trace.
"""

import logging
from typing import Dict, Any, Iterable, List, Optional, Tuple

from opentelemetry import propagate, trace
from opentelemetry.context import Context
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
    OTLPSpanExporter,
)

logger = logging.getLogger(__name__)

def setup_tracer(service_name: str, otlp_endpoint: Optional[str] = None):
    """Configure OpenTelemetry tracer

    Args:
        service_name: Service name
        otlp_endpoint: OTLP receiver address (optional, spans are only exported when set)

    Returns:
        Tracer: Tracer for the service
    """
    provider = TracerProvider(
        sampler=ALWAYS_ON,
        resource=Resource.create({"service.name": service_name})
    )

    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )

    trace.set_tracer_provider(provider)

    logger.info(f"OpenTelemetry trace configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")

    return trace.get_tracer(service_name)

def inject_trace_metadata() -> List[Tuple[str, str]]:
    """Serialize the current trace context as gRPC metadata

    Returns:
        List of (key, value) pairs, empty when no span is active
    """
    carrier: Dict[str, str] = {}
    propagate.inject(carrier)
    return list(carrier.items())

def extract_trace_context(metadata: Optional[Iterable[Tuple[str, Any]]]) -> Context:
    """Rebuild the caller's trace context from gRPC invocation metadata

    Args:
        metadata: Invocation metadata as (key, value) pairs

    Returns:
        Context: OpenTelemetry context, empty if the caller sent none
    """
    # binary (-bin) entries carry bytes and are not trace headers
    carrier = {
        key: value
        for key, value in (metadata or ())
        if isinstance(value, str)
    }
    return propagate.extract(carrier)

def create_span(name: str,
                attributes: Dict[str, Any] = None,
                kind: trace.SpanKind = trace.SpanKind.INTERNAL,
                context: Optional[Context] = None):
    """Create new span

    Args:
        name: Span name
        attributes: Span attributes
        kind: Span kind
        context: Parent context (defaults to the current one)

    Returns:
        Context manager yielding the span
    """
    tracer = trace.get_tracer(__name__)
    return tracer.start_as_current_span(
        name,
        context=context,
        kind=kind,
        attributes=attributes or {},
    )
