"""
Structured JSON logging with optional OpenTelemetry Log Exporter.

This module configures:
- stdout JSON logs
- trace/span correlation in every log line
- the OpenTelemetry log pipeline (LoggerProvider + LogExporter) when
  OTLP export is enabled
"""

import json
import logging
import sys
from typing import Any, Dict

from opentelemetry import trace
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor

from libs.observability.otlp_exporter import build_log_exporter, build_resource, service_name

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "taskName"}


class JsonTraceFormatter(logging.Formatter):
    """
    JSON formatter including trace_id and span_id.

    The formatter emits a single-line JSON object with:
        - level
        - logger
        - message
        - time
        - trace_id (hex) if available
        - span_id (hex) if available
        - service
        - the `extra` fields passed to the logging call.
    """

    def format(self, record: logging.LogRecord) -> str:
        span = trace.get_current_span()
        span_ctx = span.get_span_context() if span else None

        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "trace_id": (
                f"{span_ctx.trace_id:032x}" if span_ctx and span_ctx.is_valid else None
            ),
            "span_id": (
                f"{span_ctx.span_id:016x}" if span_ctx and span_ctx.is_valid else None
            ),
            "service": service_name(),
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key.startswith("_") or key in payload or key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps({key: value})
            except (TypeError, ValueError):
                value = repr(value)
            payload[key] = value

        return json.dumps(payload, separators=(",", ":"))


def init_logging(level: int = logging.INFO, otlp: bool = False) -> None:
    """
    Configure the root logger for the current process.

    Args:
        level: Minimum log level for the root logger.
        otlp: Also ship log records through the OTLP log exporter.
    """
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(JsonTraceFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(stdout_handler)
    root.setLevel(level)

    if not otlp:
        return

    logger_provider = LoggerProvider(resource=build_resource())
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(build_log_exporter())
    )
    root.addHandler(LoggingHandler(level=level, logger_provider=logger_provider))


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a module- or service-level logger.

    Args:
        name: Optional logger name. If None, the root logger is returned.
    """
    return logging.getLogger(name)
