"""
Error taxonomy for the schema publisher.

Every error below aborts the current run. None of them is retried
internally; callers decide whether to rerun the pipeline.
"""

from __future__ import annotations

from typing import Dict, Iterable, List


class SchemaPublisherError(Exception):
    """Base exception for schema publisher errors."""


class ManifestError(SchemaPublisherError):
    """A version manifest is malformed or inconsistent."""


class ExplicitResolutionError(ManifestError):
    """
    Raised in EXPLICIT resolution mode when a physical file is referenced
    more than once across all version manifests.
    """

    def __init__(self, duplicates: Dict[str, List[str]]) -> None:
        self.duplicates = duplicates
        details = ", ".join(
            f"{path} (in {', '.join(versions)})" for path, versions in duplicates.items()
        )
        super().__init__(
            "Dependency resolution mode is set to EXPLICIT, but there are "
            f"duplicate values found: [{details}]. Ensure the version manifests "
            "do not reference the same file multiple times."
        )


class ResolutionError(SchemaPublisherError):
    """A dependency name could not be resolved within a version."""


class DependencyNotFoundError(ResolutionError):
    def __init__(self, name: str, version: str) -> None:
        self.name = name
        self.version = version
        super().__init__(f"Dependency {name} not found in version {version}")


class InvalidDependencyError(ResolutionError):
    def __init__(self, path: str, version: str) -> None:
        self.path = path
        self.version = version
        super().__init__(f"Dependency {path} is not a valid file in version {version}")


class FormatError(SchemaPublisherError):
    """A schema file is missing a required declaration or cannot be parsed."""


class GraphError(SchemaPublisherError):
    """The dependency graph is inconsistent."""


class CycleError(GraphError):
    def __init__(self, nodes: Iterable[str]) -> None:
        self.nodes = sorted(nodes)
        super().__init__(
            "The graph contains a cycle, topological sorting is impossible. "
            f"Unsorted nodes: {', '.join(self.nodes)}"
        )


class UnregisteredSubjectError(SchemaPublisherError):
    """A reference was built for a dependency that has no subject yet."""

    def __init__(self, dependency: str) -> None:
        self.dependency = dependency
        super().__init__(f"Subject {dependency} is not registered")


class RegistryError(SchemaPublisherError):
    """The schema registry rejected a registration."""


class BuildError(SchemaPublisherError):
    """The build output tree could not be produced."""


class PublisherError(SchemaPublisherError):
    """The publisher was driven in an invalid order."""


class UnsupportedSchemaTypeError(SchemaPublisherError):
    def __init__(self, schema_type: str) -> None:
        self.schema_type = schema_type
        super().__init__(f"Unsupported schema type: {schema_type}")
