"""
Version-aware dependency parsing.

Which files exist and which version they belong to comes from the version
manifests; what a file needs comes from its format. A dependency name is
always resolved inside one version, so the same name may resolve to a
different file in each version a file belongs to.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Set

from libs.errors import DependencyNotFoundError, InvalidDependencyError, ResolutionError
from libs.models.schema import SchemaType

from apps.publisher.src.domain.formats.base import SchemaFormat, get_schema_type, logical_stem
from apps.publisher.src.domain.models import FilesDependencies, VersionData
from apps.publisher.src.domain.versions import DEFAULT_MANIFEST_FILENAME

logger = logging.getLogger(__name__)


class _VersionIndex:
    """Lookup of one version's key map by key stem and by file stem."""

    def __init__(self, files: Dict[str, str]) -> None:
        self.by_key: Dict[str, str] = {logical_stem(key): path for key, path in files.items()}
        self.by_file: Dict[str, Set[str]] = {}
        for path in files.values():
            self.by_file.setdefault(logical_stem(path), set()).add(path)

    def resolve(self, name: str) -> Optional[str]:
        stem = logical_stem(name)
        if stem in self.by_key:
            return self.by_key[stem]
        candidates = self.by_file.get(stem, set())
        if len(candidates) > 1:
            raise ResolutionError(
                f"Dependency {name} is ambiguous, it matches {', '.join(sorted(candidates))}"
            )
        return next(iter(candidates), None)


class DependencyParser:
    """
    Builds the per-version dependency graph of every schema file of one format.
    """

    def __init__(
        self,
        schema_format: SchemaFormat,
        manifest_filename: str = DEFAULT_MANIFEST_FILENAME,
    ) -> None:
        self._format = schema_format
        self._manifest_filename = manifest_filename

    @property
    def schema_format(self) -> SchemaFormat:
        return self._format

    @staticmethod
    def get_schema_type(path: str | Path) -> SchemaType:
        return get_schema_type(path)

    def get_files(self, base_directory: str | Path) -> List[Path]:
        """Every file under `base_directory` this format claims, sorted."""
        files: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(base_directory):
            dirnames.sort()
            for filename in sorted(filenames):
                if filename == self._manifest_filename:
                    continue
                if Path(filename).suffix.lower() in self._format.allowed_extensions:
                    files.append(Path(dirpath) / filename)
        return files

    def parse(self, version_data: VersionData, base_directory: str | Path) -> FilesDependencies:
        """
        Extract and resolve the dependencies of every file under `base_directory`.

        Raises:
            DependencyNotFoundError: a name has no entry in one of the file's versions.
            InvalidDependencyError: a name resolves to a file that was not found.
            FormatError: a file cannot be read by its format.
        """
        base = Path(base_directory)
        files = self.get_files(base)
        relative_paths = [Path(os.path.relpath(f, base)).as_posix() for f in files]
        file_set = set(relative_paths)
        indexes: Dict[str, _VersionIndex] = {}
        result = FilesDependencies()

        for file, relative_path in zip(files, relative_paths):
            names = self._format.extract_dependencies(file)
            result.namespace_map[relative_path] = self._format.extract_name(file, base)

            resolved: List[str] = []
            partition: Dict[str, List[str]] = {}
            for file_version in version_data.versions_of(relative_path):
                full = file_version.full
                if full not in indexes:
                    indexes[full] = _VersionIndex(version_data.version_map.get(full, {}))

                version_deps: List[str] = []
                for name in names:
                    dependency = indexes[full].resolve(name)
                    if dependency is None:
                        raise DependencyNotFoundError(name, file_version.version)
                    if dependency not in file_set:
                        raise InvalidDependencyError(dependency, full)
                    if dependency == relative_path:
                        # self references (e.g. recursive JSON schemas) are not edges
                        continue
                    if dependency not in version_deps:
                        version_deps.append(dependency)
                    if dependency not in resolved:
                        resolved.append(dependency)
                partition[full] = version_deps

            result.partitioned_map[relative_path] = partition
            result.dependencies_map[relative_path] = resolved
            logger.debug(
                "Parsed schema dependencies.",
                extra={"file": relative_path, "dependencies": resolved},
            )

        logger.info(
            "Dependency graph built.",
            extra={"base_directory": str(base), "files": len(files)},
        )
        return result
