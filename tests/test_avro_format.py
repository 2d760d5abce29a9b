import json

import pytest

from libs.errors import FormatError

from apps.publisher.src.domain.formats import AvroFormat, TransformParameters
from tests.conftest import write_tree

ORDER = {
    "type": "record",
    "name": "Order",
    "namespace": "com.acme",
    "fields": [
        {"name": "customer", "type": "com.acme.Customer"},
        {"name": "items", "type": {"type": "array", "items": "Item"}},
        {"name": "tags", "type": {"type": "map", "values": "string"}},
        {
            "name": "inner",
            "type": {
                "type": "record",
                "name": "Inner",
                "namespace": "x.y",
                "fields": [{"name": "id", "type": "long"}],
            },
        },
        {"name": "parent", "type": ["null", "Order"]},
        {"name": "other_inner", "type": "Inner"},
    ],
}


@pytest.fixture
def order_file(tmp_path):
    return write_tree(tmp_path, {"order.avsc": ORDER}) / "order.avsc"


def params():
    return TransformParameters(
        file_path="orders/v1",
        file_name="order",
        dependency_keys=frozenset({"order", "customer", "item"}),
    )


def test_dependencies_are_named_types_declared_elsewhere(order_file):
    assert AvroFormat().extract_dependencies(order_file) == ["customer", "item"]


def test_primitive_only_schema_has_no_dependencies(tmp_path):
    path = write_tree(tmp_path, {"id.avsc": '"long"'}) / "id.avsc"

    assert AvroFormat().extract_dependencies(path) == []


def test_extract_name_is_qualified(order_file):
    assert AvroFormat().extract_name(order_file) == "com.acme.Order"


def test_extract_name_requires_namespace(tmp_path):
    path = write_tree(tmp_path, {"a.avsc": {"type": "record", "name": "A", "fields": []}}) / "a.avsc"

    with pytest.raises(FormatError, match="Namespace"):
        AvroFormat().extract_name(path)


def test_transform_sets_namespace_and_strips_type_prefixes():
    result = json.loads(AvroFormat().transform(json.dumps(ORDER), params()))

    assert result["namespace"] == "orders.v1"
    fields = {field["name"]: field["type"] for field in result["fields"]}
    assert fields["customer"] == "Customer"
    assert fields["items"] == {"type": "array", "items": "Item"}
    assert fields["parent"] == ["null", "Order"]
    assert "namespace" not in fields["inner"]
    assert fields["inner"]["name"] == "Inner"


def test_transform_output_is_indented_json_with_trailing_newline():
    result = AvroFormat().transform(json.dumps(ORDER), params())

    assert result.endswith("}\n")
    assert result.startswith('{\n  "type": "record",')


def test_transformed_name_follows_output_location(tmp_path):
    transformed = AvroFormat().transform(json.dumps(ORDER), params())
    path = write_tree(tmp_path, {"order.avsc": transformed}) / "order.avsc"

    assert AvroFormat().extract_name(path) == "orders.v1.Order"


def test_invalid_json_is_a_format_error():
    with pytest.raises(FormatError, match="Invalid Avro schema"):
        AvroFormat().transform("{", params())
