"""
Protobuf schema format.

Only the statements needed for dependency tracking are understood:
`syntax`, `package`, `import` and qualified field types.
"""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path
from typing import List, Optional, Tuple

from libs.errors import FormatError
from libs.models.schema import SchemaType

from apps.publisher.src.domain.formats.base import (
    NamespaceBuilder,
    TransformParameters,
    default_namespace_builder,
)

IMPORT_RE = re.compile(
    r'^(?P<indent>[ \t]*)import\s+(?:(?P<modifier>public|weak)\s+)?"(?P<path>[^"]+)"\s*;',
    re.MULTILINE,
)
SYNTAX_RE = re.compile(r"""^[ \t]*syntax\s*=\s*["'][^"']+["']\s*;""", re.MULTILINE)
PACKAGE_RE = re.compile(r"^[ \t]*package\s+[\w.]+\s*;[ \t]*(?:\r?\n)?", re.MULTILINE)
FIELD_RE = re.compile(
    r"^(?P<prefix>[ \t]*(?:(?:repeated|optional|required)\s+)?)"
    r"(?P<type>\.?[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)+)"
    r"(?P<rest>\s+[A-Za-z_]\w*\s*=\s*\d+)",
    re.MULTILINE,
)

# Shipped with every registry; never resolved through a manifest.
WELL_KNOWN_PREFIX: str = "google/protobuf/"


def _is_well_known(import_path: str) -> bool:
    return import_path.startswith(WELL_KNOWN_PREFIX)


class ProtobufFormat:
    schema_type: SchemaType = SchemaType.PROTOBUF
    allowed_extensions: Tuple[str, ...] = (".proto",)

    def __init__(self, namespace_builder: Optional[NamespaceBuilder] = None) -> None:
        self._namespace_builder = namespace_builder or default_namespace_builder

    def extract_dependencies(self, path: Path) -> List[str]:
        content = Path(path).read_text(encoding="utf-8")
        names: List[str] = []
        for match in IMPORT_RE.finditer(content):
            import_path = match.group("path")
            if _is_well_known(import_path):
                continue
            name = posixpath.basename(import_path).lower()
            if name not in names:
                names.append(name)
        return names

    def extract_name(self, path: Path, base_directory: Optional[Path] = None) -> str:
        """
        The import string siblings use for this file.

        Without a base directory that is the bare file name; with one it is
        the posix path relative to it, which is what Build writes into
        rewritten imports.
        """
        if base_directory is None:
            return Path(path).name
        return Path(os.path.relpath(path, base_directory)).as_posix()

    def transform(self, content: str, params: TransformParameters) -> str:
        syntax = SYNTAX_RE.search(content)
        if syntax is None:
            raise FormatError(
                f"Syntax declaration not found in {params.file_path}/{params.file_name}"
            )

        content = IMPORT_RE.sub(lambda m: self._rewrite_import(m, params), content)
        content = self._replace_package(content, params.file_path)
        return FIELD_RE.sub(lambda m: self._strip_type_prefix(m, params), content)

    @staticmethod
    def _rewrite_import(match: re.Match, params: TransformParameters) -> str:
        import_path = match.group("path")
        base_name = posixpath.basename(import_path)
        if _is_well_known(import_path) or not params.knows(base_name):
            return match.group(0)

        new_path = posixpath.join(params.file_path, params.renamed(base_name))
        modifier = f"{match.group('modifier')} " if match.group("modifier") else ""
        return f'{match.group("indent")}import {modifier}"{new_path}";'

    def _replace_package(self, content: str, file_path: str) -> str:
        namespace = self._namespace_builder(file_path)
        content = PACKAGE_RE.sub("", content)
        if not namespace:
            return content

        syntax = SYNTAX_RE.search(content)
        head, rest = content[: syntax.end()], content[syntax.end():].lstrip("\r\n")
        tail = f"\n{rest}" if rest else ""
        return f"{head}\n\npackage {namespace};\n{tail}"

    @staticmethod
    def _strip_type_prefix(match: re.Match, params: TransformParameters) -> str:
        bare = match.group("type").rsplit(".", 1)[-1]
        if not params.knows(bare):
            return match.group(0)
        return f"{match.group('prefix')}{bare}{match.group('rest')}"
