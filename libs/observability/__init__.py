"""
Public observability interface for the schema publisher.

This module exposes stable entrypoints for:
- logging
- tracing
- metrics

Services should import from here instead of the underlying modules
to keep the internal implementation swappable.
"""

from .instrumentation import init_observability, resolve_log_level
from .logging import get_logger, init_logging
from .metrics import get_meter, init_metrics
from .tracing import get_tracer, init_tracing

__all__ = [
    "init_observability",
    "resolve_log_level",
    "init_logging",
    "init_tracing",
    "init_metrics",
    "get_logger",
    "get_tracer",
    "get_meter",
]
