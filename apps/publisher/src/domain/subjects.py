"""
Subject builders: build-output relative path -> registry subject.

A subject builder must be a pure function; the publisher calls it once per
file, in registration order.
"""

from __future__ import annotations

import posixpath
from typing import Callable

SubjectBuilder = Callable[[str], str]


def default_subject_builder(relative_path: str) -> str:
    """
    `topic1/v1/model.proto` -> `topic1.v1.model`.
    """
    stem = posixpath.splitext(relative_path.replace("\\", "/"))[0]
    return stem.strip("/").replace("/", ".")


def make_subject_builder(prefix: str = "", suffix: str = "") -> SubjectBuilder:
    """
    Wrap the default builder with a fixed prefix and suffix, e.g. a
    `-value` suffix for TopicNameStrategy-style subjects.
    """

    def build(relative_path: str) -> str:
        return f"{prefix}{default_subject_builder(relative_path)}{suffix}"

    return build
