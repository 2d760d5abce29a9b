"""
Capability interface shared by every schema format variant.

A format knows three things about its files:
- which logical names a file depends on (`extract_dependencies`)
- the unique name registry references use for it (`extract_name`)
- how to rewrite its content for a location in the build tree (`transform`)

Variants are plain classes selected by SchemaType (see formats/__init__.py);
nothing subclasses anything at runtime.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Protocol, Tuple

from libs.models.schema import SchemaType

NamespaceBuilder = Callable[[str], str]

# Case-insensitive: keys are lowercase extensions.
EXTENSION_TO_SCHEMA_TYPE: Dict[str, SchemaType] = {
    ".avsc": SchemaType.AVRO,
    ".avro": SchemaType.AVRO,
    ".proto": SchemaType.PROTOBUF,
    ".json": SchemaType.JSON,
    ".xml": SchemaType.XML,
    ".thrift": SchemaType.THRIFT,
    ".msgpack": SchemaType.MESSAGEPACK,
    ".mpk": SchemaType.MESSAGEPACK,
    ".fbs": SchemaType.FLATBUFFERS,
    ".yaml": SchemaType.YAML,
    ".yml": SchemaType.YAML,
    ".cbor": SchemaType.CBOR,
}


def get_schema_type(path: str | Path) -> SchemaType:
    """Map a file extension to its schema type, UNKNOWN when unrecognised."""
    return EXTENSION_TO_SCHEMA_TYPE.get(Path(path).suffix.lower(), SchemaType.UNKNOWN)


def logical_stem(name: str) -> str:
    """
    Case- and extension-insensitive form of a logical key or dependency name.

    >>> logical_stem("Entity.proto")
    'entity'
    >>> logical_stem("entity")
    'entity'
    """
    base = posixpath.basename(name.replace("\\", "/")).lower()
    root, ext = posixpath.splitext(base)
    if ext in EXTENSION_TO_SCHEMA_TYPE:
        return root
    return base


def default_namespace_builder(file_path: str) -> str:
    """`topic1/v1` -> `topic1.v1`."""
    return file_path.replace("\\", "/").replace("/", ".").strip(".")


@dataclass(frozen=True)
class TransformParameters:
    """
    Where a file lands in the build tree, and which siblings it may reference.

    - file_path: output directory of the file, relative to the build root
    - file_name: output file name without extension
    - dependency_keys: lowercase stems of every sibling in the same version
    - renames: lowercase name -> exact output stem, for every sibling's key
      stem and source file stem
    """

    file_path: str
    file_name: str
    dependency_keys: FrozenSet[str] = frozenset()
    renames: Dict[str, str] = field(default_factory=dict)

    def knows(self, name: str) -> bool:
        return logical_stem(name) in self.dependency_keys

    def renamed(self, base_name: str) -> str:
        """Swap a referenced file's stem for its output stem, keeping the extension."""
        root, ext = posixpath.splitext(base_name)
        target = self.renames.get(logical_stem(base_name))
        if target is None:
            return base_name
        return f"{target}{ext}" if ext.lower() in EXTENSION_TO_SCHEMA_TYPE else target


class SchemaFormat(Protocol):
    schema_type: SchemaType
    allowed_extensions: Tuple[str, ...]

    def extract_dependencies(self, path: Path) -> List[str]:
        """
        Logical names the file depends on: lowercase, no directory part.
        """
        ...

    def extract_name(self, path: Path, base_directory: Optional[Path] = None) -> str:
        """
        Unique name registry references use for this file.
        """
        ...

    def transform(self, content: str, params: TransformParameters) -> str:
        """
        Rewrite content so references and namespaces match `params.file_path`.
        """
        ...
