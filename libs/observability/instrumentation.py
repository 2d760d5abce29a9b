"""
Observability bootstrap for logging, tracing, and metrics.
"""

import logging

from libs.config import AppConfig
from libs.observability.logging import init_logging
from libs.observability.metrics import init_metrics
from libs.observability.tracing import init_tracing


def resolve_log_level(name: str) -> int:
    """Convert a config log level string to a numeric logging constant."""
    return getattr(logging, name.upper(), logging.INFO)


def init_observability(level: int | None = None) -> None:
    """
    Initialize logging, and tracing plus metrics when OTLP export is enabled.

    This should be called once during process startup.

    Args:
        level: Logging verbosity level for the root logger. Defaults to
            AppConfig.service.log_level.
    """
    cfg = AppConfig.load()
    if level is None:
        level = resolve_log_level(cfg.service.log_level)

    init_logging(level=level, otlp=cfg.otel.enabled)
    if cfg.otel.enabled:
        init_tracing()
        init_metrics()
