"""
Service-specific configuration for the schema publisher.

This module ONLY handles:
- where the source schema tree lives and where the build output goes
- which schema format and resolution mode to use
- how subjects are named

It reads from the ROOT .env using namespaced keys:

    PUBLISHER__SCHEMA_DIR=./schemas
    PUBLISHER__BUILD_DIR=./build
    PUBLISHER__SCHEMA_TYPE=PROTOBUF
    PUBLISHER__RESOLUTION_MODE=IMPLICIT
    PUBLISHER__SUBJECT_SUFFIX=-value

Registry connection settings live in libs.config (REGISTRY__URL, ...).
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from libs.models.schema import DependencyResolutionMode, SchemaType


class PublisherSettings(BaseSettings):
    """
    Settings controlling the build and publish pipeline.

    Values come from environment variables prefixed with `PUBLISHER__`.
    """

    schema_dir: str = Field(
        default="schemas",
        description="Root of the source schema tree containing version manifests.",
    )
    build_dir: str = Field(
        default="build",
        description="Output directory; wiped and recreated on every build.",
    )
    subjects_file: str = Field(
        default="build/subjects.txt",
        description="Registered subjects, one per line, in registration order.",
    )

    schema_type: SchemaType = Field(default=SchemaType.PROTOBUF)
    resolution_mode: DependencyResolutionMode = Field(
        default=DependencyResolutionMode.IMPLICIT
    )
    manifest_filename: str = Field(default="versions.json")

    subject_prefix: str = Field(default="")
    subject_suffix: str = Field(default="")

    dry_run: bool = Field(
        default=False,
        description="Build and order everything but skip the registry calls.",
    )

    model_config = SettingsConfigDict(
        env_prefix="PUBLISHER__",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_publisher_settings() -> PublisherSettings:
    """
    Cached accessor for PublisherSettings.
    """
    return PublisherSettings()
