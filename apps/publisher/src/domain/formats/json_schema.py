"""
JSON-Schema format.

Dependencies are expressed through `$ref`. A `$ref` may be a bare file
name (`other.json`), a relative path, a URL, or a namespace-qualified name
written by a previous build (`topic1.v1.other`); in every case the
referenced schema is identified by the last segment of its path, without
`.json`. Pure local fragments (`#/definitions/X`) are not dependencies.
"""

from __future__ import annotations

import json
import posixpath
from pathlib import Path
from typing import Any, List, Optional, Tuple
from urllib.parse import urlsplit

from libs.errors import FormatError
from libs.models.schema import SchemaType

from apps.publisher.src.domain.formats.base import (
    NamespaceBuilder,
    TransformParameters,
    default_namespace_builder,
)

REF_KEY = "$ref"
ID_KEY = "$id"


def _split_ref(ref: str) -> Tuple[str, Optional[str]]:
    """`other.json#/definitions/X` -> (`other.json`, `/definitions/X`)."""
    if "#" in ref:
        location, fragment = ref.split("#", 1)
        return location, fragment
    return ref, None


def _location_base_name(location: str) -> str:
    path = urlsplit(location).path if "://" in location else location
    return posixpath.basename(path.replace("\\", "/"))


def _ref_stem(ref: str) -> str:
    """Schema a `$ref` points at, or "" for a local fragment."""
    location, _ = _split_ref(ref)
    base_name = _location_base_name(location)
    if base_name.lower().endswith(".json"):
        base_name = base_name[: -len(".json")]
    return base_name.rsplit(".", 1)[-1]


def _load(content: str, origin: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise FormatError(f"Invalid JSON schema {origin}: {exc}") from exc


def _collect_refs(node: Any, refs: List[str]) -> List[str]:
    if isinstance(node, list):
        for item in node:
            _collect_refs(item, refs)
    elif isinstance(node, dict):
        for key, value in node.items():
            if key == REF_KEY and isinstance(value, str):
                refs.append(value)
            else:
                _collect_refs(value, refs)
    return refs


class JsonSchemaFormat:
    schema_type: SchemaType = SchemaType.JSON
    allowed_extensions: Tuple[str, ...] = (".json",)

    def __init__(self, namespace_builder: Optional[NamespaceBuilder] = None) -> None:
        self._namespace_builder = namespace_builder or default_namespace_builder

    def extract_dependencies(self, path: Path) -> List[str]:
        schema = _load(Path(path).read_text(encoding="utf-8"), str(path))
        names: List[str] = []
        for ref in _collect_refs(schema, []):
            stem = _ref_stem(ref)
            if not stem:
                continue
            name = f"{stem.lower()}.json"
            if name not in names:
                names.append(name)
        return names

    def extract_name(self, path: Path, base_directory: Optional[Path] = None) -> str:
        """
        `$id` (its path base name, or its fragment), else `title`, else the
        file name.
        """
        schema = _load(Path(path).read_text(encoding="utf-8"), str(path))
        if isinstance(schema, dict):
            schema_id = schema.get(ID_KEY)
            if isinstance(schema_id, str) and schema_id:
                location, fragment = _split_ref(schema_id)
                name = _location_base_name(location) or (fragment or "").strip("/")
                if name:
                    return name
            title = schema.get("title")
            if isinstance(title, str) and title:
                return title
        return Path(path).name

    def transform(self, content: str, params: TransformParameters) -> str:
        schema = _load(content, f"{params.file_path}/{params.file_name}")
        if not isinstance(schema, dict):
            raise FormatError(
                f"JSON schema {params.file_path}/{params.file_name} must be a JSON object"
            )

        schema = self._rewrite_refs(schema, params)
        new_id = self._namespace_builder(f"{params.file_path}/{params.file_name}")
        if ID_KEY in schema:
            schema[ID_KEY] = new_id
        else:
            schema = {ID_KEY: new_id, **schema}
        return json.dumps(schema, indent=2) + "\n"

    def _rewrite_refs(self, node: Any, params: TransformParameters) -> Any:
        if isinstance(node, list):
            return [self._rewrite_refs(item, params) for item in node]
        if not isinstance(node, dict):
            return node

        rewritten = {}
        for key, value in node.items():
            if key == REF_KEY and isinstance(value, str):
                rewritten[key] = self._qualify(value, params)
            else:
                rewritten[key] = self._rewrite_refs(value, params)
        return rewritten

    def _qualify(self, ref: str, params: TransformParameters) -> str:
        stem = _ref_stem(ref)
        if not stem or not params.knows(stem):
            return ref

        _, fragment = _split_ref(ref)
        target = params.renamed(stem)
        qualified = self._namespace_builder(f"{params.file_path}/{target}")
        return qualified if fragment is None else f"{qualified}#{fragment}"
