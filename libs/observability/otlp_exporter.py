"""
Factory functions for OTLP exporters (gRPC logging, metrics, trace).

The endpoint comes from OTEL_EXPORTER_OTLP_ENDPOINT, falling back to the
endpoint configured in AppConfig.otel.
"""

import os
from typing import Dict, Optional

from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.semconv.attributes.service_attributes import SERVICE_NAME

from libs.config import AppConfig


def _parse_pairs(raw: Optional[str]) -> Dict[str, str]:
    """Parse a 'k1=v1,k2=v2' string, ignoring malformed entries."""
    if not raw:
        return {}
    return {
        kv.split("=", 1)[0].strip(): kv.split("=", 1)[1].strip()
        for kv in raw.split(",")
        if "=" in kv
    }


def service_name() -> str:
    return os.getenv("OTEL_SERVICE_NAME") or AppConfig.load().otel.service_name


def build_resource() -> Resource:
    """
    Build the OTel Resource shared by every signal of this process.
    """
    attrs = _parse_pairs(
        os.getenv("OTEL_RESOURCE_ATTRIBUTES") or AppConfig.load().otel.resource_attributes
    )
    return Resource.create({SERVICE_NAME: service_name(), **attrs})


def _common_kwargs() -> Dict[str, object]:
    """
    Build common keyword arguments for all OTLP exporters.

    Returns:
        A dictionary containing endpoint, headers and insecure flag.
    """
    headers = _parse_pairs(os.getenv("OTEL_EXPORTER_OTLP_HEADERS")) or None
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or AppConfig.load().otel.otlp_endpoint

    return {
        "endpoint": endpoint,
        "headers": headers,
        "insecure": True,
    }


def build_trace_exporter() -> OTLPSpanExporter:
    return OTLPSpanExporter(**_common_kwargs())


def build_metric_exporter() -> OTLPMetricExporter:
    return OTLPMetricExporter(**_common_kwargs())


def build_log_exporter() -> OTLPLogExporter:
    return OTLPLogExporter(**_common_kwargs())
