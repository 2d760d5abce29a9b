"""
OpenTelemetry tracing initialization and tracer helper.

Until `init_tracing` runs, the OTel API hands out no-op tracers, so spans
opened by the pipeline cost nothing in tests and local runs.
"""

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Tracer

from libs.observability.otlp_exporter import build_resource, build_trace_exporter, service_name


def init_tracing() -> None:
    """
    Initialize the global TracerProvider and configure the OTLP span exporter.
    """
    provider = TracerProvider(resource=build_resource())
    provider.add_span_processor(BatchSpanProcessor(build_trace_exporter()))
    trace.set_tracer_provider(provider)


def get_tracer(name: str | None = None) -> Tracer:
    """
    Get a Tracer instance for the given instrumentation scope.

    Args:
        name: Logical scope name for the tracer. If None, the service name is used.
    """
    return trace.get_tracer(name or service_name())
