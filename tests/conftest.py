"""
Shared fixtures: small schema trees written into tmp_path, and a fake
registry client that records every registration.
"""

import json
import textwrap
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from libs.models.schema import Reference, SchemaType


def write_tree(root: Path, files: Dict[str, object]) -> Path:
    """Write `files` (relative path -> str content, or a JSON-able object) under root."""
    for relative_path, content in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if not isinstance(content, str):
            content = json.dumps(content, indent=2)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
    return root


def snapshot(root: Path) -> Dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


class FakeRegistry:
    def __init__(self, fail_on: Optional[str] = None) -> None:
        self.calls: List[Tuple[str, str, List[Reference], SchemaType]] = []
        self._fail_on = fail_on

    def register_schema(
        self,
        subject: str,
        content: str,
        references: Sequence[Reference],
        schema_type: SchemaType,
    ) -> int:
        if subject == self._fail_on:
            raise RuntimeError(f"registry rejected {subject}")
        self.calls.append((subject, content, list(references), schema_type))
        return len(self.calls)

    @property
    def subjects(self) -> List[str]:
        return [call[0] for call in self.calls]

    def references_of(self, subject: str) -> List[Reference]:
        for call in self.calls:
            if call[0] == subject:
                return call[2]
        raise KeyError(subject)


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


ENTITY_PROTO = """\
syntax = "proto3";

package common;

message Entity {
  string id = 1;
}
"""

DATA_V1_PROTO = """\
syntax = "proto3";

message Data {
  string payload = 1;
}
"""

DATA_V2_PROTO = """\
syntax = "proto3";

message Data {
  string payload = 1;
  int64 size = 2;
}
"""

MODEL_PROTO = """\
syntax = "proto3";

package topic1;

import "entity.proto";
import "data.proto";

message Model {
  common.Entity entity = 1;
  repeated topic1.Data data = 2;
}
"""


@pytest.fixture
def proto_tree(tmp_path: Path) -> Path:
    """
    Two versions of topic1 sharing model.proto and common/v1/entity.proto,
    but resolving data.proto to different physical files.
    """
    root = tmp_path / "schemas"
    return write_tree(
        root,
        {
            "common/v1/entity.proto": ENTITY_PROTO,
            "topic1/model.proto": MODEL_PROTO,
            "topic1/v1/data.proto": DATA_V1_PROTO,
            "topic1/v2/data.proto": DATA_V2_PROTO,
            "topic1/versions.json": {
                "v1": {
                    "model.proto": "model.proto",
                    "data.proto": "v1/data.proto",
                    "entity.proto": "../common/v1/entity.proto",
                },
                "v2": {
                    "model.proto": "model.proto",
                    "data.proto": "v2/data.proto",
                    "entity.proto": "../common/v1/entity.proto",
                },
            },
        },
    )
