"""
Metrics initialization and meter provider for OpenTelemetry.

This module initializes a process-wide MeterProvider and exposes
a helper to retrieve the default Meter for the current service.
"""

from opentelemetry import metrics
from opentelemetry.metrics import Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader

from libs.observability.otlp_exporter import build_metric_exporter, build_resource, service_name

_initialized: bool = False


def init_metrics() -> None:
    """
    Initialize the OTel MeterProvider and register an OTLP metric exporter.

    This function is idempotent.
    """
    global _initialized

    if _initialized:
        return

    reader = PeriodicExportingMetricReader(build_metric_exporter())
    provider = MeterProvider(resource=build_resource(), metric_readers=[reader])

    metrics.set_meter_provider(provider)
    _initialized = True


def get_meter() -> Meter:
    """
    Retrieve the default Meter for the current service.

    Instruments created before `init_metrics` are proxies that start
    recording once a provider is installed.
    """
    return metrics.get_meter(service_name())
