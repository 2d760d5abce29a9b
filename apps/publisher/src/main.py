"""
Entrypoint for the schema publisher.

Builds the versioned schema tree configured through PUBLISHER__* settings
and registers it with the Schema Registry configured through REGISTRY__*.
"""

import sys

from libs.errors import SchemaPublisherError
from libs.observability import get_logger, init_observability

from apps.publisher.src.core.bootstrap import build_publisher


def main() -> int:
    """
    Initialize observability and run one build-and-register pass.

    Returns:
        Process exit code.
    """
    init_observability()
    log = get_logger("schema-publisher")

    try:
        subjects = build_publisher().publish()
    except SchemaPublisherError as exc:
        log.error("Schema publishing failed.", extra={"error": str(exc)})
        return 1

    log.info("Schema publishing completed.", extra={"subjects": len(subjects)})
    return 0


if __name__ == "__main__":
    sys.exit(main())
