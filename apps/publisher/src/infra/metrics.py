"""
OpenTelemetry metric instruments for the schema publisher.

We track:
- Files written by the build step
- Registered schemas and failed registrations
- Registration latency
"""

from typing import NamedTuple

from opentelemetry.metrics import Counter, Histogram

from libs.observability.metrics import get_meter


class PublisherInstruments(NamedTuple):
    built: Counter
    registered: Counter
    failures: Counter
    latency: Histogram


def get_publisher_instruments() -> PublisherInstruments:
    """
    Create OpenTelemetry instruments for the publisher service.
    """
    meter = get_meter()

    built: Counter = meter.create_counter(
        name="schemas_built",
        description="Count of schema files written by the build step",
        unit="1",
    )

    registered: Counter = meter.create_counter(
        name="schemas_registered",
        description="Count of schemas successfully registered",
        unit="1",
    )

    failures: Counter = meter.create_counter(
        name="schema_registration_failures",
        description="Count of failed schema registrations",
        unit="1",
    )

    latency: Histogram = meter.create_histogram(
        name="schema_registration_latency_ms",
        description="Schema registration latency in milliseconds",
        unit="ms",
    )

    return PublisherInstruments(built, registered, failures, latency)
