"""
Version manifest resolution.

A version manifest (`versions.json` by default) is a JSON object whose keys
are version identifiers and whose values map a logical key to a file path
relative to the manifest's own directory:

    {
        "v1": {"model.proto": "model.proto", "entity.proto": "../common/v1/entity.proto"},
        "v2": {"model.proto": "model.proto", "entity.proto": "../common/v2/entity.proto"}
    }

Every manifest found under the base directory is merged into one
VersionData, with every path made relative to the base directory.
"""

from __future__ import annotations

import json
import logging
import os
import posixpath
from pathlib import Path
from typing import Any, Dict, List, Tuple

from libs.errors import ExplicitResolutionError, ManifestError
from libs.models.schema import DependencyResolutionMode

from apps.publisher.src.domain.formats.base import logical_stem
from apps.publisher.src.domain.models import FileVersion, FileVersionIndex, VersionData, VersionMap

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_FILENAME: str = "versions.json"


def to_posix(path: str) -> str:
    """Normalise a relative path to posix separators."""
    return posixpath.normpath(path.replace(os.sep, "/").replace("\\", "/"))


def build_file_index(version_map: VersionMap) -> FileVersionIndex:
    """
    Invert a VersionMap into file -> [(version id, full version path)].
    """
    file_map: FileVersionIndex = {}
    for full_version, files in version_map.items():
        version = posixpath.basename(full_version)
        for relative_path in files.values():
            file_map.setdefault(relative_path, []).append(
                FileVersion(version=version, full=full_version)
            )
    return file_map


def validate_version_id(version: str, manifest: Path) -> None:
    """
    A version id names exactly one directory level under its manifest's directory.

    Raises:
        ManifestError: the id is empty, `.`/`..`, or contains a path separator.
    """
    if version in ("", ".", "..") or "/" in version or "\\" in version:
        raise ManifestError(
            f"Invalid version id {version!r} in {manifest}: it must be a single "
            "non-empty path segment"
        )


def find_duplicates(version_map: VersionMap) -> Dict[str, List[str]]:
    """Every physical path referenced more than once, with its referencing versions."""
    seen: Dict[str, List[str]] = {}
    for full_version, files in version_map.items():
        for relative_path in files.values():
            seen.setdefault(relative_path, []).append(full_version)
    return {path: versions for path, versions in seen.items() if len(versions) > 1}


class _DuplicateKeyError(ValueError):
    pass


def _unique_keys(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    """json object hook: a repeated key would silently drop the earlier entry."""
    result: Dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise _DuplicateKeyError(f"duplicate key {key!r}")
        result[key] = value
    return result


class VersionsExtractor:
    """
    Scans a directory tree for version manifests and builds VersionData.
    """

    def __init__(
        self,
        manifest_filename: str = DEFAULT_MANIFEST_FILENAME,
        mode: DependencyResolutionMode = DependencyResolutionMode.IMPLICIT,
    ) -> None:
        self._manifest_filename = manifest_filename
        self._mode = DependencyResolutionMode(mode)

    @property
    def manifest_filename(self) -> str:
        return self._manifest_filename

    def extract(self, base_directory: str | Path) -> VersionData:
        """
        Resolve every manifest under `base_directory`.

        Raises:
            ManifestError: a manifest is malformed or points outside the base directory.
            ExplicitResolutionError: EXPLICIT mode and a file is referenced twice.
        """
        base = Path(base_directory)
        if not base.is_dir():
            raise ManifestError(f"Schema directory does not exist: {base}")

        version_map: VersionMap = {}
        origins: Dict[str, Path] = {}
        for manifest in self._find_manifests(base):
            self._process_manifest(base, manifest, version_map, origins)

        if self._mode is DependencyResolutionMode.EXPLICIT:
            duplicates = find_duplicates(version_map)
            if duplicates:
                raise ExplicitResolutionError(duplicates)

        logger.info(
            "Version manifests resolved.",
            extra={
                "base_directory": str(base),
                "versions": len(version_map),
                "mode": self._mode.value,
            },
        )
        return VersionData(version_map=version_map, file_map=build_file_index(version_map))

    def _find_manifests(self, base: Path) -> List[Path]:
        manifests: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames.sort()
            if self._manifest_filename in filenames:
                manifests.append(Path(dirpath) / self._manifest_filename)
        return manifests

    def _process_manifest(
        self,
        base: Path,
        manifest: Path,
        version_map: VersionMap,
        origins: Dict[str, Path],
    ) -> None:
        try:
            data = json.loads(manifest.read_text(encoding="utf-8"), object_pairs_hook=_unique_keys)
        except (json.JSONDecodeError, _DuplicateKeyError) as exc:
            raise ManifestError(f"Invalid JSON in version manifest {manifest}: {exc}") from exc

        if not isinstance(data, dict):
            raise ManifestError(f"Version manifest {manifest} must be a JSON object")

        manifest_dir = to_posix(os.path.relpath(manifest.parent, base))
        for version, files in data.items():
            if not isinstance(files, dict):
                raise ManifestError(
                    f"Version {version} in {manifest} must map logical keys to paths"
                )
            validate_version_id(version, manifest)
            full_version = to_posix(posixpath.join(manifest_dir, version))
            if full_version in origins:
                raise ManifestError(
                    f"Version {full_version} is declared by both {origins[full_version]} "
                    f"and {manifest}"
                )
            origins[full_version] = manifest
            version_map[full_version] = self._resolve_files(
                base, manifest, manifest_dir, full_version, files
            )

    def _resolve_files(
        self,
        base: Path,
        manifest: Path,
        manifest_dir: str,
        full_version: str,
        files: Dict[str, object],
    ) -> Dict[str, str]:
        resolved: Dict[str, str] = {}
        stems: Dict[str, str] = {}
        for key, relative_path in files.items():
            if not isinstance(relative_path, str):
                raise ManifestError(
                    f"Path for key {key} in version {full_version} of {manifest} must be a string"
                )
            stem = logical_stem(key)
            if stem in stems:
                raise ManifestError(
                    f"Keys {stems[stem]} and {key} collide in version {full_version} of {manifest}"
                )
            stems[stem] = key

            path = to_posix(posixpath.join(manifest_dir, relative_path))
            if path == ".." or path.startswith("../") or posixpath.isabs(path):
                raise ManifestError(
                    f"Path {relative_path} in {manifest} escapes the schema directory {base}"
                )
            resolved[key] = path
        return resolved
