"""
Closed set of supported schema formats, selected by SchemaType.
"""

from typing import Dict, Optional, Type, Union

from libs.errors import UnsupportedSchemaTypeError
from libs.models.schema import SchemaType

from .avro import AvroFormat
from .base import (
    NamespaceBuilder,
    SchemaFormat,
    TransformParameters,
    default_namespace_builder,
    get_schema_type,
    logical_stem,
)
from .json_schema import JsonSchemaFormat
from .protobuf import ProtobufFormat

FORMATS: Dict[SchemaType, Type[SchemaFormat]] = {
    SchemaType.PROTOBUF: ProtobufFormat,
    SchemaType.AVRO: AvroFormat,
    SchemaType.JSON: JsonSchemaFormat,
}


def get_format(
    schema_type: Union[SchemaType, str],
    namespace_builder: Optional[NamespaceBuilder] = None,
) -> SchemaFormat:
    """
    Build the format variant for `schema_type`.

    Raises:
        UnsupportedSchemaTypeError: no variant exists for the type.
    """
    try:
        if not isinstance(schema_type, SchemaType):
            schema_type = SchemaType(schema_type.upper())
        fmt = FORMATS[schema_type]
    except (KeyError, ValueError) as exc:
        raise UnsupportedSchemaTypeError(str(getattr(schema_type, "value", schema_type))) from exc
    return fmt(namespace_builder=namespace_builder)


__all__ = [
    "AvroFormat",
    "FORMATS",
    "JsonSchemaFormat",
    "NamespaceBuilder",
    "ProtobufFormat",
    "SchemaFormat",
    "TransformParameters",
    "default_namespace_builder",
    "get_format",
    "get_schema_type",
    "logical_stem",
]
