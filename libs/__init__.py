"""
schema-publisher shared library package.

This package contains:
- shared Pydantic models (schema types, registry references)
- the error taxonomy shared by every pipeline stage
- observability utilities (logging, tracing, metrics)
- global configuration
"""

from libs.models.schema import DependencyResolutionMode, Reference, SchemaType

__all__ = [
    "DependencyResolutionMode",
    "Reference",
    "SchemaType",
]
