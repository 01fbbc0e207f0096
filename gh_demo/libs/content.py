"""Load demo content from the JSON files in the config root."""

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import TypeVar

from pydantic import TypeAdapter, ValidationError

from gh_demo.libs.exceptions import file_error, project_error
from gh_demo.libs.models import Discussion, Issue, Label, ProjectConfiguration, PullRequest
from gh_demo.utils.constants import DEFAULT_LABEL_COLOR, DEFAULT_LABEL_DESCRIPTION

T = TypeVar("T")


def _load_list(path: str, kind: str, adapter: TypeAdapter[list[T]]) -> list[T]:
    try:
        with open(path, encoding="utf-8") as fd:
            data = fd.read()
    except OSError as ex:
        raise file_error(f"read_{kind}", f"failed to read {kind} file", ex).with_context("path", path) from ex

    try:
        return adapter.validate_json(data)
    except ValidationError as ex:
        raise file_error(f"parse_{kind}", f"failed to parse {kind} JSON", ex).with_context("path", path) from ex


_ISSUES = TypeAdapter(list[Issue])
_DISCUSSIONS = TypeAdapter(list[Discussion])
_PULL_REQUESTS = TypeAdapter(list[PullRequest])
_LABELS = TypeAdapter(list[Label])


def load_issues(path: str) -> list[Issue]:
    return _load_list(path, "issues", _ISSUES)


def load_discussions(path: str) -> list[Discussion]:
    return _load_list(path, "discussions", _DISCUSSIONS)


def load_pull_requests(path: str) -> list[PullRequest]:
    return _load_list(path, "pull_requests", _PULL_REQUESTS)


def read_labels_json(path: str) -> list[Label]:
    """Explicit label definitions; labels.json is optional."""
    if not os.path.exists(path):
        return []
    return _load_list(path, "labels", _LABELS)


def collect_labels(
    issues: Iterable[Issue],
    discussions: Iterable[Discussion],
    pull_requests: Iterable[PullRequest],
) -> list[str]:
    """Every label name referenced by the content, deduplicated in first-seen order."""
    seen: dict[str, None] = {}
    for item in [*issues, *discussions, *pull_requests]:
        for label in item.labels:
            if label:
                seen.setdefault(label)
    return list(seen)


def prepare_labels_to_ensure(
    explicit: Iterable[Label],
    referenced: Iterable[str],
    default_color: str = DEFAULT_LABEL_COLOR,
) -> list[Label]:
    """Explicit definitions first, then a default-styled label for each other referenced name."""
    labels: dict[str, Label] = {}
    for label in explicit:
        labels.setdefault(label.name, label)

    for name in referenced:
        if name not in labels:
            labels[name] = Label(name=name, color=default_color, description=DEFAULT_LABEL_DESCRIPTION)

    return list(labels.values())


def load_project_config(path: str) -> ProjectConfiguration:
    """Project board configuration; any failure is a project-layer error."""
    try:
        with open(path, encoding="utf-8") as fd:
            data = fd.read()
    except OSError as ex:
        raise project_error("load_project_config", "failed to read project configuration", ex).with_context(
            "path", path
        ) from ex

    try:
        project_config = ProjectConfiguration.model_validate_json(data)
    except ValidationError as ex:
        raise project_error("load_project_config", "failed to parse project configuration", ex).with_context(
            "path", path
        ) from ex

    if not project_config.title.strip():
        raise project_error("load_project_config", "project title cannot be empty").with_context("path", path)
    return project_config
