"""
Schema publisher service.

Responsibilities:
- Resolve version manifests and build the per-version output tree
- Re-parse the output tree and order it by dependencies
- Register every schema, dependencies first, with registry references
- Persist the registered subjects for downstream tooling
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from libs.errors import GraphError, PublisherError, UnregisteredSubjectError
from libs.models.schema import Reference, SchemaType
from libs.observability.tracing import get_tracer

from apps.publisher.src.core.config import PublisherSettings
from apps.publisher.src.domain.builder import Builder
from apps.publisher.src.domain.formats.base import SchemaFormat
from apps.publisher.src.domain.models import VersionData
from apps.publisher.src.domain.parser import DependencyParser
from apps.publisher.src.domain.subjects import SubjectBuilder, make_subject_builder
from apps.publisher.src.domain.topology import topological_sort
from apps.publisher.src.domain.versions import VersionsExtractor
from apps.publisher.src.infra.metrics import get_publisher_instruments
from apps.publisher.src.infra.schema_registry import RegistryClient


def build_references(
    dependencies: Sequence[str],
    namespace_map: Mapping[str, str],
    subjects: Mapping[str, str],
) -> List[Reference]:
    """
    Pair every dependency's reference name with its already assigned subject.

    Raises:
        GraphError: a dependency has no reference name.
        UnregisteredSubjectError: a dependency was not registered yet.
    """
    references: List[Reference] = []
    for dependency in dependencies:
        name = namespace_map.get(dependency)
        if name is None:
            raise GraphError(f"No reference name known for {dependency}")
        subject = subjects.get(dependency)
        if subject is None:
            raise UnregisteredSubjectError(dependency)
        references.append(Reference(name=name, subject=subject))
    return references


class PublisherService:
    """
    Orchestrates one build-and-register run.

    A run owns its output tree and its subject assignments; two runs must
    not share a build directory.
    """

    def __init__(
        self,
        registry_client: RegistryClient,
        schema_format: SchemaFormat,
        settings: PublisherSettings,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Args:
            registry_client: Client the schemas are registered with.
            schema_format: Format variant of the schema tree.
            settings: Publisher settings (directories, mode, naming).
            logger: Logger instance.
        """
        self._registry = registry_client
        self._format = schema_format
        self._cfg = settings
        self._log = logger or logging.getLogger(__name__)

        self._extractor = VersionsExtractor(
            manifest_filename=settings.manifest_filename,
            mode=settings.resolution_mode,
        )
        self._parser = DependencyParser(schema_format, settings.manifest_filename)
        self._builder = Builder(schema_format)

        self._tracer = get_tracer("schema_publisher.service")
        self._instruments = get_publisher_instruments()
        self._output: Optional[VersionData] = None

    @property
    def build_dir(self) -> Path:
        return Path(self._cfg.build_dir)

    def build(self, source_directory: Optional[str] = None) -> VersionData:
        """
        Resolve manifests under `source_directory` and rebuild the output tree.
        """
        source = Path(source_directory or self._cfg.schema_dir)
        with self._tracer.start_as_current_span("publisher.build"):
            version_data = self._extractor.extract(source)
            self._output = self._builder.build(source, version_data.version_map, self.build_dir)

        self._instruments.built.add(len(self._output.file_map))
        return self._output

    def register(self, subject_builder: Optional[SubjectBuilder] = None) -> List[str]:
        """
        Register every file of the output tree in dependency order.

        Returns:
            Subjects in registration order.

        Raises:
            PublisherError: `build` has not run.
            UnregisteredSubjectError: ordering was violated (always a defect).
            RegistryError: the registry rejected a schema; already registered
                subjects stay registered and no subjects file is written.
        """
        if self._output is None:
            raise PublisherError("Nothing to register, run build first")

        subject_builder = subject_builder or make_subject_builder(
            self._cfg.subject_prefix, self._cfg.subject_suffix
        )
        schema_type = self._format.schema_type
        # a stale list from an earlier run must not survive a failed one
        Path(self._cfg.subjects_file).unlink(missing_ok=True)

        with self._tracer.start_as_current_span("publisher.register"):
            graph = self._parser.parse(self._output, self.build_dir)
            order = topological_sort(graph.dependencies_map)
            subjects: Dict[str, str] = {}

            for relative_path in order:
                references = build_references(
                    graph.dependencies_map[relative_path], graph.namespace_map, subjects
                )
                subject = subject_builder(relative_path)
                subjects[relative_path] = subject
                content = (self.build_dir / relative_path).read_text(encoding="utf-8")
                self._register_one(subject, content, references, schema_type)

        ordered = list(subjects.values())
        self._write_subjects(ordered)
        return ordered

    def publish(
        self,
        source_directory: Optional[str] = None,
        subject_builder: Optional[SubjectBuilder] = None,
    ) -> List[str]:
        """Build then register."""
        self.build(source_directory)
        return self.register(subject_builder)

    def _register_one(
        self,
        subject: str,
        content: str,
        references: List[Reference],
        schema_type: SchemaType,
    ) -> None:
        if self._cfg.dry_run:
            self._log.info(
                "Dry run; skipping schema registration.",
                extra={"subject": subject, "references": [r.subject for r in references]},
            )
            return

        with self._tracer.start_as_current_span("publisher.register_schema") as span:
            span.set_attribute("schema.subject", subject)
            started = time.perf_counter()
            try:
                self._registry.register_schema(subject, content, references, schema_type)
            except Exception:
                self._instruments.failures.add(1)
                self._log.exception(
                    "Schema registration failed; aborting run.",
                    extra={"subject": subject},
                )
                raise

        self._instruments.registered.add(1)
        self._instruments.latency.record((time.perf_counter() - started) * 1000.0)
        self._log.info(
            "Registered schema.",
            extra={"subject": subject, "references": [r.subject for r in references]},
        )

    def _write_subjects(self, subjects: List[str]) -> None:
        path = Path(self._cfg.subjects_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.writelines(f"{subject}\n" for subject in subjects)
        self._log.info(
            "Subjects file written.",
            extra={"path": str(path), "subjects": len(subjects)},
        )
