"""
Schema type enums and the registry reference model.

These models are shared between the publisher core and the registry
client. They define the typed contract of one registry reference.
"""

from enum import Enum
from typing import ClassVar, Dict

from pydantic import BaseModel


class SchemaType(str, Enum):
    PROTOBUF = "PROTOBUF"
    AVRO = "AVRO"
    JSON = "JSON"
    XML = "XML"
    THRIFT = "THRIFT"
    MESSAGEPACK = "MESSAGEPACK"
    FLATBUFFERS = "FLATBUFFERS"
    YAML = "YAML"
    CBOR = "CBOR"
    UNKNOWN = "UNKNOWN"


class DependencyResolutionMode(str, Enum):
    IMPLICIT = "IMPLICIT"
    EXPLICIT = "EXPLICIT"


LATEST_VERSION: int = -1


class Reference(BaseModel):
    """
    A registry-level reference from one registered schema to another.

    `version` is always -1 ("latest") in this project's usage.
    """

    name: str
    subject: str
    version: int = LATEST_VERSION

    model_config: ClassVar[Dict[str, object]] = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "name": "topic1/v1/entity.proto",
                "subject": "topic1.v1.entity",
                "version": -1,
            }
        },
    }
