"""
Domain-level data structures shared by the pipeline stages.

No I/O happens here. Paths are always posix strings relative to the
directory the structure was built from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from libs.models.schema import DependencyResolutionMode, Reference, SchemaType

# full version path -> (logical key -> file path relative to the base directory)
VersionMap = Dict[str, Dict[str, str]]


@dataclass(frozen=True)
class FileVersion:
    """One version a physical file participates in."""

    version: str
    full: str


# file path -> every version it participates in
FileVersionIndex = Dict[str, List[FileVersion]]


@dataclass(frozen=True)
class VersionData:
    """
    Result of one manifest resolution pass.

    Example, for manifests declaring versions `a` and `b` under `test/`:

        version_map = {
            "test/a": {"file.proto": "A/file.proto", "dependency.proto": "B/dependency.proto"},
            "test/b": {"file.proto": "A/file.proto", "dependency.proto": "C/dependency.proto"},
        }
        file_map = {
            "A/file.proto": [FileVersion("a", "test/a"), FileVersion("b", "test/b")],
            "B/dependency.proto": [FileVersion("a", "test/a")],
            "C/dependency.proto": [FileVersion("b", "test/b")],
        }
    """

    version_map: VersionMap
    file_map: FileVersionIndex

    def versions_of(self, path: str) -> List[FileVersion]:
        return self.file_map.get(path, [])


@dataclass
class FilesDependencies:
    """
    Dependency graph of one walked tree.

    - dependencies_map: file -> resolved dependency files, union over versions
    - namespace_map: file -> unique registry reference name
    - partitioned_map: file -> full version path -> resolved dependency files
    """

    dependencies_map: Dict[str, List[str]] = field(default_factory=dict)
    namespace_map: Dict[str, str] = field(default_factory=dict)
    partitioned_map: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)


__all__ = [
    "DependencyResolutionMode",
    "FileVersion",
    "FileVersionIndex",
    "FilesDependencies",
    "Reference",
    "SchemaType",
    "VersionData",
    "VersionMap",
]
