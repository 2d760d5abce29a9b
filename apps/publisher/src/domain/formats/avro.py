"""
Avro schema format.

Avro has no import statement: a schema depends on another one by naming
its type. Dependencies are therefore every named type referenced through
`type`, `items` or `values` that the file does not declare itself.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional, Set, Tuple

from libs.errors import FormatError
from libs.models.schema import SchemaType

from apps.publisher.src.domain.formats.base import (
    NamespaceBuilder,
    TransformParameters,
    default_namespace_builder,
)

PRIMITIVE_TYPES = frozenset(
    {"null", "boolean", "int", "long", "float", "double", "bytes", "string"}
)
COMPLEX_TYPES = frozenset({"record", "error", "enum", "array", "map", "fixed"})
NAMED_TYPES = frozenset({"record", "error", "enum", "fixed"})
TYPE_KEYS = ("type", "items", "values")


def _short_name(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def _load(content: str, origin: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise FormatError(f"Invalid Avro schema {origin}: {exc}") from exc


def _declared_names(node: Any, names: Set[str]) -> Set[str]:
    if isinstance(node, list):
        for item in node:
            _declared_names(item, names)
    elif isinstance(node, dict):
        if node.get("type") in NAMED_TYPES and isinstance(node.get("name"), str):
            names.add(_short_name(node["name"]).lower())
        for value in node.values():
            _declared_names(value, names)
    return names


def _referenced_names(node: Any, names: List[str]) -> List[str]:
    if isinstance(node, list):
        for item in node:
            _referenced_names(item, names)
    elif isinstance(node, dict):
        for key, value in node.items():
            if key in TYPE_KEYS and isinstance(value, str):
                _add_type_name(value, names)
            elif key in TYPE_KEYS and isinstance(value, list):
                for item in value:
                    if isinstance(item, str):
                        _add_type_name(item, names)
                    else:
                        _referenced_names(item, names)
            else:
                _referenced_names(value, names)
    return names


def _add_type_name(type_name: str, names: List[str]) -> None:
    name = _short_name(type_name).lower()
    if name in PRIMITIVE_TYPES or name in COMPLEX_TYPES or name in names:
        return
    names.append(name)


class AvroFormat:
    schema_type: SchemaType = SchemaType.AVRO
    allowed_extensions: Tuple[str, ...] = (".avsc", ".avro")

    def __init__(self, namespace_builder: Optional[NamespaceBuilder] = None) -> None:
        self._namespace_builder = namespace_builder or default_namespace_builder

    def extract_dependencies(self, path: Path) -> List[str]:
        schema = _load(Path(path).read_text(encoding="utf-8"), str(path))
        if isinstance(schema, str):
            schema = {"type": schema}

        declared = _declared_names(schema, set())
        return [name for name in _referenced_names(schema, []) if name not in declared]

    def extract_name(self, path: Path, base_directory: Optional[Path] = None) -> str:
        schema = _load(Path(path).read_text(encoding="utf-8"), str(path))
        if not isinstance(schema, dict) or not schema.get("namespace"):
            raise FormatError(f"Namespace declaration not found in {path}")
        if not schema.get("name"):
            raise FormatError(f"Name declaration not found in {path}")
        return f"{schema['namespace']}.{schema['name']}"

    def transform(self, content: str, params: TransformParameters) -> str:
        schema = _load(content, f"{params.file_path}/{params.file_name}")
        if not isinstance(schema, dict):
            raise FormatError(
                f"Avro schema {params.file_path}/{params.file_name} must be a JSON object"
            )

        schema["namespace"] = self._namespace_builder(params.file_path)
        for key, value in schema.items():
            schema[key] = self._strip(key, value)
        return json.dumps(schema, indent=2) + "\n"

    def _strip(self, key: str, value: Any) -> Any:
        """Drop namespace prefixes from type references, recursively."""
        if key in TYPE_KEYS and isinstance(value, str):
            return _short_name(value)
        if key in TYPE_KEYS and isinstance(value, list):
            return [
                _short_name(item) if isinstance(item, str) else self._strip("", item)
                for item in value
            ]
        if isinstance(value, list):
            return [self._strip("", item) for item in value]
        if isinstance(value, dict):
            # nested named types live in the enclosing file's namespace
            return {
                k: self._strip(k, v) for k, v in value.items() if k != "namespace"
            }
        return value
