"""
Schema Registry client used by the publisher.

The publisher only depends on the `RegistryClient` protocol; the concrete
implementation below talks to a Confluent-compatible Schema Registry
through confluent_kafka's SchemaRegistryClient.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol, Sequence

from confluent_kafka.schema_registry import Schema, SchemaReference, SchemaRegistryClient
from confluent_kafka.schema_registry.error import SchemaRegistryError

from libs.config import RegistryConfig
from libs.errors import RegistryError
from libs.models.schema import Reference, SchemaType

logger = logging.getLogger(__name__)


class RegistryClient(Protocol):
    def register_schema(
        self,
        subject: str,
        content: str,
        references: Sequence[Reference],
        schema_type: SchemaType,
    ) -> int:
        """Register `content` under `subject` and return the registry schema id."""
        ...


def build_client_config(cfg: RegistryConfig) -> Dict[str, Any]:
    """
    Translate RegistryConfig into SchemaRegistryClient configuration.
    """
    conf: Dict[str, Any] = {"url": cfg.url, "timeout": cfg.timeout_sec}
    if cfg.basic_auth_user_info:
        conf["basic.auth.credentials.source"] = "USER_INFO"
        conf["basic.auth.user.info"] = cfg.basic_auth_user_info

    ssl = {
        "ssl.ca.location": cfg.ssl_ca_location,
        "ssl.certificate.location": cfg.ssl_certificate_location,
        "ssl.key.location": cfg.ssl_key_location,
    }
    conf.update({key: value for key, value in ssl.items() if value})

    # explicit passthrough options win over the derived ones
    conf.update(cfg.client_options)
    return conf


class ConfluentRegistryClient:
    """
    Thin wrapper around confluent_kafka's SchemaRegistryClient.
    """

    def __init__(
        self,
        cfg: RegistryConfig,
        client: Optional[SchemaRegistryClient] = None,
    ) -> None:
        """
        Args:
            cfg: Schema Registry connection settings.
            client: Pre-built SDK client; built from `cfg` when omitted.
        """
        self._cfg = cfg
        self._client = client or SchemaRegistryClient(build_client_config(cfg))

    def register_schema(
        self,
        subject: str,
        content: str,
        references: Sequence[Reference],
        schema_type: SchemaType,
    ) -> int:
        """
        Register one schema version.

        Raises:
            RegistryError: the registry rejected the schema.
        """
        schema = Schema(
            content,
            SchemaType(schema_type).value,
            references=[
                SchemaReference(ref.name, ref.subject, ref.version) for ref in references
            ],
        )

        try:
            schema_id = self._client.register_schema(
                subject,
                schema,
                normalize_schemas=self._cfg.normalize_schemas,
            )
        except SchemaRegistryError as exc:
            logger.error(
                "Schema registration rejected.",
                extra={
                    "subject": subject,
                    "status_code": exc.http_status_code,
                    "error_code": exc.error_code,
                    "error": exc.error_message,
                },
            )
            raise RegistryError(
                f"Failed to register schema for subject {subject}: {exc.error_message}"
            ) from exc

        logger.info(
            "Schema registered successfully.",
            extra={"subject": subject, "schema_id": schema_id, "references": len(references)},
        )
        return schema_id
