"""
Global configuration system for the schema publisher.

Provides globally shared configuration:
- Schema Registry connection settings
- OTEL settings
- Generic service-level runtime settings

Publisher-specific settings (source tree, build output, subject naming)
live in apps.publisher.src.core.config and must NOT be added here.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
DEFAULT_ENV_PATH: Path = PROJECT_ROOT / ".env"


class RegistryConfig(BaseSettings):
    """Schema Registry connection settings."""

    url: str = Field(default="http://schema-registry:8081")
    basic_auth_user_info: Optional[str] = Field(
        default=None,
        description="'<user>:<password>' credentials for the registry, if any.",
    )
    timeout_sec: int = Field(default=30, ge=1)
    normalize_schemas: bool = Field(default=False)

    ssl_ca_location: Optional[str] = Field(default=None)
    ssl_certificate_location: Optional[str] = Field(default=None)
    ssl_key_location: Optional[str] = Field(default=None)
    client_options: Dict[str, Any] = Field(
        default_factory=dict,
        description=(
            "Extra SchemaRegistryClient settings passed through as-is, "
            "e.g. REGISTRY__CLIENT_OPTIONS='{\"cache.capacity\": 500}'."
        ),
    )

    model_config = SettingsConfigDict(extra="ignore")


class OTELConfig(BaseSettings):
    """OpenTelemetry configuration."""

    enabled: bool = Field(default=False)
    service_name: str = Field(default="schema-publisher")
    otlp_endpoint: str = Field(default="http://otel-collector:4317")
    resource_attributes: str = Field(default="deployment.environment=local")

    model_config = SettingsConfigDict(extra="ignore")


class ServiceConfig(BaseSettings):
    """Generic service-level config."""

    log_level: str = Field(default="INFO")
    debug: bool = Field(default=False)
    environment: str = Field(default="local")

    model_config = SettingsConfigDict(extra="ignore")


class AppConfig(BaseSettings):
    """Root global configuration object."""

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    otel: OTELConfig = Field(default_factory=OTELConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    @lru_cache(maxsize=1)
    def load(cls) -> "AppConfig":
        try:
            env_file = str(DEFAULT_ENV_PATH) if DEFAULT_ENV_PATH.exists() else None
            return cls(_env_file=env_file)
        except ValidationError as exc:
            raise RuntimeError("Invalid configuration values.") from exc
