import pytest

from libs.errors import (
    GraphError,
    ManifestError,
    PublisherError,
    ResolutionError,
    UnregisteredSubjectError,
)
from libs.models.schema import Reference, SchemaType

from apps.publisher.src.core.bootstrap import build_publisher
from apps.publisher.src.core.config import PublisherSettings
from apps.publisher.src.domain.formats import ProtobufFormat
from apps.publisher.src.domain.subjects import default_subject_builder, make_subject_builder
from apps.publisher.src.service.publisher_service import PublisherService, build_references
from tests.conftest import FakeRegistry, write_tree


@pytest.fixture
def simple_tree(tmp_path):
    return write_tree(
        tmp_path / "schemas",
        {
            "A/file.proto": 'syntax = "proto3";\n\nimport "dep.proto";\n\nmessage File {\n  Dep dep = 1;\n}\n',
            "B/dep.proto": 'syntax = "proto3";\n\nmessage Dep {\n  string id = 1;\n}\n',
            "versions.json": {"v1": {"a.proto": "A/file.proto", "b.proto": "B/dep.proto"}},
        },
    )


def make_settings(tmp_path, source, **overrides):
    values = dict(
        schema_dir=str(source),
        build_dir=str(tmp_path / "build"),
        subjects_file=str(tmp_path / "subjects.txt"),
    )
    values.update(overrides)
    return PublisherSettings(**values)


def make_service(tmp_path, source, registry, **overrides):
    return PublisherService(
        registry_client=registry,
        schema_format=ProtobufFormat(),
        settings=make_settings(tmp_path, source, **overrides),
    )


def test_dependencies_are_registered_first(tmp_path, simple_tree, fake_registry):
    subjects = make_service(tmp_path, simple_tree, fake_registry).publish()

    assert subjects == ["v1.b", "v1.a"]
    assert fake_registry.subjects == ["v1.b", "v1.a"]


def test_references_use_import_names_and_assigned_subjects(tmp_path, simple_tree, fake_registry):
    make_service(tmp_path, simple_tree, fake_registry).publish()

    assert fake_registry.references_of("v1.b") == []
    assert fake_registry.references_of("v1.a") == [
        Reference(name="v1/b.proto", subject="v1.b", version=-1)
    ]


def test_registered_content_is_the_built_file(tmp_path, simple_tree, fake_registry):
    make_service(tmp_path, simple_tree, fake_registry).publish()

    subject, content, _, schema_type = fake_registry.calls[1]
    assert subject == "v1.a"
    assert content == (tmp_path / "build/v1/a.proto").read_text(encoding="utf-8")
    assert 'import "v1/b.proto";' in content
    assert schema_type is SchemaType.PROTOBUF


def test_subjects_file_lists_subjects_in_order(tmp_path, simple_tree, fake_registry):
    make_service(tmp_path, simple_tree, fake_registry).publish()

    assert (tmp_path / "subjects.txt").read_text(encoding="utf-8") == "v1.b\nv1.a\n"


def test_versions_register_in_deterministic_order(tmp_path, proto_tree, fake_registry):
    subjects = make_service(tmp_path, proto_tree, fake_registry).publish()

    assert subjects == [
        "topic1.v1.data",
        "topic1.v1.entity",
        "topic1.v1.model",
        "topic1.v2.data",
        "topic1.v2.entity",
        "topic1.v2.model",
    ]
    assert fake_registry.references_of("topic1.v2.model") == [
        Reference(name="topic1/v2/entity.proto", subject="topic1.v2.entity"),
        Reference(name="topic1/v2/data.proto", subject="topic1.v2.data"),
    ]


def test_failed_registration_aborts_without_subjects_file(tmp_path, simple_tree):
    registry = FakeRegistry(fail_on="v1.a")
    (tmp_path / "subjects.txt").write_text("stale\n", encoding="utf-8")

    with pytest.raises(RuntimeError, match="v1.a"):
        make_service(tmp_path, simple_tree, registry).publish()

    assert registry.subjects == ["v1.b"]
    assert not (tmp_path / "subjects.txt").exists()


def test_dry_run_skips_registry(tmp_path, simple_tree, fake_registry):
    subjects = make_service(tmp_path, simple_tree, fake_registry, dry_run=True).publish()

    assert subjects == ["v1.b", "v1.a"]
    assert fake_registry.calls == []
    assert (tmp_path / "subjects.txt").read_text(encoding="utf-8") == "v1.b\nv1.a\n"


def test_register_before_build(tmp_path, simple_tree, fake_registry):
    service = make_service(tmp_path, simple_tree, fake_registry)

    with pytest.raises(PublisherError, match="run build first"):
        service.register()


def test_subject_prefix_and_suffix_from_settings(tmp_path, simple_tree, fake_registry):
    service = make_service(
        tmp_path, simple_tree, fake_registry, subject_prefix="acme.", subject_suffix="-value"
    )

    assert service.publish() == ["acme.v1.b-value", "acme.v1.a-value"]
    assert fake_registry.references_of("acme.v1.a-value")[0].subject == "acme.v1.b-value"


def test_custom_subject_builder(tmp_path, simple_tree, fake_registry):
    service = make_service(tmp_path, simple_tree, fake_registry)

    subjects = service.publish(subject_builder=lambda path: path.upper())

    assert subjects == ["V1/B.PROTO", "V1/A.PROTO"]


def test_build_only_writes_output_tree(tmp_path, simple_tree, fake_registry):
    service = make_service(tmp_path, simple_tree, fake_registry)

    result = service.build()

    assert result.version_map == {"v1": {"a.proto": "v1/a.proto", "b.proto": "v1/b.proto"}}
    assert fake_registry.calls == []
    assert not (tmp_path / "subjects.txt").exists()


def test_build_publisher_wires_settings(tmp_path, simple_tree, fake_registry):
    settings = make_settings(tmp_path, simple_tree, schema_type=SchemaType.PROTOBUF)

    service = build_publisher(settings=settings, registry_client=fake_registry)

    assert service.publish() == ["v1.b", "v1.a"]


def test_build_references_requires_registered_dependencies():
    with pytest.raises(UnregisteredSubjectError, match="Subject v1/b.proto is not registered"):
        build_references(["v1/b.proto"], {"v1/b.proto": "v1/b.proto"}, {})

    with pytest.raises(GraphError):
        build_references(["v1/b.proto"], {}, {"v1/b.proto": "v1.b"})


@pytest.mark.parametrize(
    "path, expected",
    [
        ("topic1/v1/model.proto", "topic1.v1.model"),
        ("v1/a.avsc", "v1.a"),
        ("a.json", "a"),
    ],
)
def test_default_subject_builder(path, expected):
    assert default_subject_builder(path) == expected


def test_make_subject_builder():
    assert make_subject_builder("p.", "-value")("topic1/v1/model.proto") == "p.topic1.v1.model-value"


def test_ambiguous_source_name_fails_before_any_registration(tmp_path, fake_registry):
    source = write_tree(
        tmp_path / "schemas",
        {
            "A/f.proto": 'syntax = "proto3";\n\nimport "dep.proto";\n',
            "B/dep.proto": 'syntax = "proto3";\n',
            "C/dep.proto": 'syntax = "proto3";\n',
            "versions.json": {
                "v1": {"f.proto": "A/f.proto", "x.proto": "B/dep.proto", "y.proto": "C/dep.proto"}
            },
        },
    )

    with pytest.raises(ResolutionError, match="dep.proto"):
        make_service(tmp_path, source, fake_registry).publish()

    assert fake_registry.calls == []
    assert not (tmp_path / "subjects.txt").exists()


def test_empty_version_id_is_rejected_before_build(tmp_path, fake_registry):
    source = write_tree(
        tmp_path / "schemas",
        {
            "f.proto": 'syntax = "proto3";\n\nimport "dep.proto";\n',
            "dep.proto": 'syntax = "proto3";\n',
            "versions.json": {"": {"f.proto": "f.proto", "dep.proto": "dep.proto"}},
        },
    )

    with pytest.raises(ManifestError, match="Invalid version id"):
        make_service(tmp_path, source, fake_registry).publish()

    assert fake_registry.calls == []
    assert not (tmp_path / "build").exists()
