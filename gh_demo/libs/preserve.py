"""Preserve rules: decide which existing items survive a cleanup pass.

preserve.json shape::

    {
        "issues": {"preserve_by_title": [], "preserve_by_label": [], "preserve_by_id": []},
        "discussions": {"preserve_by_title": [], "preserve_by_category": [], "preserve_by_id": []},
        "pull_requests": {"preserve_by_title": [], "preserve_by_label": [], "preserve_by_id": []},
        "labels": {"preserve_by_name": []}
    }

An item is preserved when any configured value matches (OR across and
within dimensions). A title rule starting with "^" is a regular expression
searched in the title; every other title rule is an exact, case-sensitive
match. Missing sections preserve nothing.
"""

from __future__ import annotations

import os
import re
from functools import lru_cache

from pydantic import BaseModel, Field, ValidationError

from gh_demo.libs.exceptions import config_error, file_error
from gh_demo.libs.models import Discussion, Issue, Label, PullRequest


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error:
        return None


def title_matches(title: str, pattern: str) -> bool:
    """Exact match, or a regex search when ``pattern`` starts with '^'. Invalid patterns never match."""
    if title == pattern:
        return True

    if pattern.startswith("^"):
        compiled = _compile(pattern)
        return compiled is not None and compiled.search(title) is not None

    return False


class _Rules(BaseModel):
    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in type(self).model_fields)


class IssuePreserveRules(_Rules):
    preserve_by_title: list[str] = Field(default_factory=list, description="Exact titles or '^' regex patterns")
    preserve_by_label: list[str] = Field(default_factory=list, description="Keep items carrying any of these labels")
    preserve_by_id: list[str] = Field(default_factory=list, description="Node IDs")

    def matches(self, item: Issue | PullRequest) -> bool:
        if item.node_id and item.node_id in self.preserve_by_id:
            return True
        if any(title_matches(item.title, pattern) for pattern in self.preserve_by_title):
            return True
        return any(label in self.preserve_by_label for label in item.labels)


class PullRequestPreserveRules(IssuePreserveRules):
    pass


class DiscussionPreserveRules(_Rules):
    preserve_by_title: list[str] = Field(default_factory=list, description="Exact titles or '^' regex patterns")
    preserve_by_category: list[str] = Field(default_factory=list, description="Category names")
    preserve_by_id: list[str] = Field(default_factory=list, description="Node IDs")

    def matches(self, item: Discussion) -> bool:
        if item.node_id and item.node_id in self.preserve_by_id:
            return True
        if any(title_matches(item.title, pattern) for pattern in self.preserve_by_title):
            return True
        return bool(item.category) and item.category in self.preserve_by_category


class LabelPreserveRules(_Rules):
    preserve_by_name: list[str] = Field(default_factory=list, description="Label names")

    def matches(self, item: Label) -> bool:
        return item.name in self.preserve_by_name


class PreserveConfig(BaseModel):
    issues: IssuePreserveRules = Field(default_factory=IssuePreserveRules)
    discussions: DiscussionPreserveRules = Field(default_factory=DiscussionPreserveRules)
    pull_requests: PullRequestPreserveRules = Field(default_factory=PullRequestPreserveRules)
    labels: LabelPreserveRules = Field(default_factory=LabelPreserveRules)

    def is_empty(self) -> bool:
        return all(rules.is_empty() for rules in (self.issues, self.discussions, self.pull_requests, self.labels))

    def should_preserve_issue(self, issue: Issue) -> bool:
        return self.issues.matches(issue)

    def should_preserve_discussion(self, discussion: Discussion) -> bool:
        return self.discussions.matches(discussion)

    def should_preserve_pull_request(self, pull_request: PullRequest) -> bool:
        return self.pull_requests.matches(pull_request)

    def should_preserve_label(self, label: Label | str) -> bool:
        if isinstance(label, str):
            label = Label(name=label)
        return self.labels.matches(label)


def should_preserve(item: Issue | Discussion | PullRequest | Label, rules: PreserveConfig | None) -> bool:
    """Keep-or-delete decision for one listed item; no rules means nothing is kept."""
    if rules is None:
        return False

    if isinstance(item, Issue):
        return rules.should_preserve_issue(item)
    if isinstance(item, Discussion):
        return rules.should_preserve_discussion(item)
    if isinstance(item, PullRequest):
        return rules.should_preserve_pull_request(item)
    if isinstance(item, Label):
        return rules.should_preserve_label(item)

    raise TypeError(f"Unsupported item type: {type(item).__name__}")


def load_preserve_config(path: str) -> PreserveConfig:
    """
    Load preserve rules from ``path``.

    A missing file gives an empty config. An unreadable file is a file-layer
    error; malformed JSON or an unexpected shape is a config-layer error.
    """
    if not os.path.exists(path):
        return PreserveConfig()

    try:
        with open(path, encoding="utf-8") as fd:
            data = fd.read()
    except OSError as ex:
        raise file_error("read_preserve_config", "failed to read preserve configuration file", ex).with_context(
            "path", path
        ) from ex

    if not data.strip():
        return PreserveConfig()

    try:
        return PreserveConfig.model_validate_json(data)
    except ValidationError as ex:
        raise config_error("parse_preserve_config", "failed to parse preserve configuration JSON", ex).with_context(
            "path", path
        ) from ex


def save_preserve_config(config: PreserveConfig, path: str) -> None:
    try:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        with open(path, "w", encoding="utf-8") as fd:
            fd.write(config.model_dump_json(indent=2))
            fd.write("\n")
    except OSError as ex:
        raise file_error("write_preserve_config", "failed to write preserve configuration file", ex).with_context(
            "path", path
        ) from ex
