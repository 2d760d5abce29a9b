"""
Build step: materialise one self-contained directory per version.

For a manifest entry `"entity.proto": "../common/v1/entity.proto"` of
version `topic1/v1`, the source file is rewritten and written to
`<build dir>/topic1/v1/entity.proto`. After the build every version
directory only references files inside itself.
"""

from __future__ import annotations

import logging
import posixpath
import shutil
from pathlib import Path
from typing import Dict, FrozenSet, Set, Tuple

from libs.errors import BuildError

from apps.publisher.src.domain.formats.base import SchemaFormat, TransformParameters, logical_stem
from apps.publisher.src.domain.models import VersionData, VersionMap
from apps.publisher.src.domain.versions import build_file_index

logger = logging.getLogger(__name__)


def output_file_name(key: str, source_path: str) -> str:
    """The key, with the source extension appended unless it already has it."""
    extension = posixpath.splitext(source_path)[1]
    if extension and key.lower().endswith(extension.lower()):
        return key
    return f"{key}{extension}"


def sibling_keys(files: Dict[str, str]) -> Tuple[FrozenSet[str], Dict[str, str]]:
    """
    Names a file of this version may reference, and the output stem each maps to.

    A sibling is known both by its manifest key and by its source file name.
    A source file name shared by several different files of the version is
    ambiguous and left out, so a reference through it fails to resolve
    instead of binding to an arbitrary sibling.
    """
    renames: Dict[str, str] = {}
    sources: Dict[str, Set[str]] = {}
    aliases: Dict[str, str] = {}
    for key, source_path in files.items():
        output_stem = posixpath.splitext(output_file_name(key, source_path))[0]
        renames[logical_stem(key)] = output_stem
        source_stem = logical_stem(source_path)
        sources.setdefault(source_stem, set()).add(source_path)
        aliases.setdefault(source_stem, output_stem)

    for source_stem, output_stem in aliases.items():
        if source_stem in renames or len(sources[source_stem]) > 1:
            continue
        renames[source_stem] = output_stem
    return frozenset(renames), renames


class Builder:
    def __init__(self, schema_format: SchemaFormat) -> None:
        self._format = schema_format

    def build(
        self,
        source_directory: str | Path,
        version_map: VersionMap,
        output_directory: str | Path,
    ) -> VersionData:
        """
        Wipe `output_directory` and write every (version, key) pair into it.

        Returns:
            VersionData describing the output tree: one version per version
            key, each file mapped under its output name.

        Raises:
            BuildError: the output directory is or contains the source
                directory, or a manifest entry points at a missing source file.
            FormatError: a source file cannot be transformed.
        """
        source = Path(source_directory)
        output = Path(output_directory)

        resolved_source, resolved_output = source.resolve(), output.resolve()
        if resolved_source == resolved_output or resolved_output in resolved_source.parents:
            raise BuildError(
                f"Output directory {output} contains the source directory {source}; "
                "refusing to wipe it"
            )

        if output.exists():
            shutil.rmtree(output)
        output.mkdir(parents=True)

        output_map: VersionMap = {}
        written = 0
        for version_key, files in version_map.items():
            version_dir = output / version_key
            version_dir.mkdir(parents=True, exist_ok=True)
            relative_dir = version_dir.relative_to(output).as_posix()
            dependency_keys, renames = sibling_keys(files)

            output_files: Dict[str, str] = {}
            for key, source_path in files.items():
                file_name = output_file_name(key, source_path)
                source_file = source / source_path
                if not source_file.is_file():
                    raise BuildError(
                        f"Source file {source_path} for key {key} of version {version_key} not found"
                    )

                params = TransformParameters(
                    file_path=relative_dir,
                    file_name=posixpath.splitext(file_name)[0],
                    dependency_keys=dependency_keys,
                    renames=renames,
                )
                content = self._format.transform(source_file.read_text(encoding="utf-8"), params)
                with open(version_dir / file_name, "w", encoding="utf-8", newline="\n") as f:
                    f.write(content)

                output_files[file_name] = f"{relative_dir}/{file_name}"
                written += 1

            output_map[relative_dir] = output_files

        logger.info(
            "Build completed.",
            extra={
                "source_directory": str(source),
                "output_directory": str(output),
                "versions": len(output_map),
                "files": written,
            },
        )
        return VersionData(version_map=output_map, file_map=build_file_index(output_map))
