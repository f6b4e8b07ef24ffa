"""
OpenTelemetry Tracing Setup
===========================
Spans for cite runs: the driver records its scan, render and apply phases.

Export is off unless CARGO_CITE_TRACING is set. Until then the global
provider is OpenTelemetry's default, so spans are created but never
recorded.
"""

import atexit
from typing import Any, Mapping, Optional

from loguru import logger
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME

from cargo_cite.config import TRACING, TracingConfig

_provider: Optional[TracerProvider] = None
_initialized = False


def _shutdown_provider() -> None:
    """Flush pending spans at interpreter exit."""
    if _provider is None:
        return
    try:
        _provider.shutdown()
    except Exception as e:
        logger.debug(f"Tracer provider shutdown failed: {e}")


def setup_tracing(config: TracingConfig = TRACING) -> TracerProvider:
    """
    Install a global tracer provider that exports spans over OTLP/HTTP.

    Args:
        config: service name and collector endpoint

    Returns:
        The installed provider
    """
    global _provider

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: config.SERVICE_NAME}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=config.OTLP_ENDPOINT)))
    trace.set_tracer_provider(provider)
    atexit.register(_shutdown_provider)

    _provider = provider
    logger.debug(f"Exporting traces for {config.SERVICE_NAME} to {config.OTLP_ENDPOINT}")
    return provider


def init_tracing(config: TracingConfig = TRACING) -> bool:
    """Configure export once per process. Returns whether spans are exported."""
    global _initialized
    if not _initialized:
        _initialized = True
        if config.ENABLED:
            setup_tracing(config)
    return _provider is not None


def get_tracer(name: str) -> trace.Tracer:
    """Tracer for one component, configuring export on first use."""
    init_tracing()
    return trace.get_tracer(name)


def safe_set_current_span_attributes(attributes: Mapping[str, Any]) -> None:
    """Set attributes on the active span, ignoring values OTel cannot store."""
    span = trace.get_current_span()
    for name, value in attributes.items():
        if isinstance(value, (str, bool, int, float)):
            span.set_attribute(name, value)
        elif isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            span.set_attribute(name, list(value))
