"""
Bootstrap wiring for the schema publisher.

Responsible for:
- Initializing configuration objects
- Constructing the PublisherService with its registry client and format
"""

from typing import Final, Optional

from libs.config import AppConfig
from libs.observability import get_logger

from apps.publisher.src.core.config import PublisherSettings, get_publisher_settings
from apps.publisher.src.domain.formats import NamespaceBuilder, get_format
from apps.publisher.src.infra.schema_registry import ConfluentRegistryClient, RegistryClient
from apps.publisher.src.service.publisher_service import PublisherService


def build_publisher(
    settings: Optional[PublisherSettings] = None,
    registry_client: Optional[RegistryClient] = None,
    namespace_builder: Optional[NamespaceBuilder] = None,
) -> PublisherService:
    """
    Build a fully wired PublisherService instance.

    Args:
        settings: Publisher settings; read from the environment when omitted.
        registry_client: Registry client; a Confluent client built from
            AppConfig.registry when omitted.
        namespace_builder: Overrides the default `a/b -> a.b` namespace builder.
    """
    publisher_cfg: Final[PublisherSettings] = settings or get_publisher_settings()

    if registry_client is None:
        registry_client = ConfluentRegistryClient(AppConfig.load().registry)

    return PublisherService(
        registry_client=registry_client,
        schema_format=get_format(publisher_cfg.schema_type, namespace_builder),
        settings=publisher_cfg,
        logger=get_logger("PublisherService"),
    )
