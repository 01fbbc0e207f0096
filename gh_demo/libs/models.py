"""Pydantic models for demo content and creation receipts.

Request records are loaded from the JSON content files and passed by value
into the API client, which never mutates them. Creation returns a new
``CreatedItemInfo`` receipt. Labels and assignees are names and logins,
resolved to node IDs only when a mutation needs them.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ItemType(str, Enum):  # noqa: UP042
    """Kind of GitHub content managed by gh-demo."""

    ISSUE = "issue"
    DISCUSSION = "discussion"
    PULL_REQUEST = "pull_request"
    LABEL = "label"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("labels", "assignees", mode="before", check_fields=False)
    @classmethod
    def null_list_as_empty(cls, v: Any) -> Any:
        """Treat an explicit JSON null the same as a missing list."""
        return [] if v is None else v


class Issue(_Record):
    node_id: str = Field(default="", description="GitHub node ID, empty before creation")
    number: int = Field(default=0, description="Issue number assigned by GitHub")
    title: str
    body: str = ""
    labels: list[str] = Field(default_factory=list, description="Label names")
    assignees: list[str] = Field(default_factory=list, description="User logins")


class Discussion(_Record):
    node_id: str = Field(default="", description="GitHub node ID, empty before creation")
    number: int = Field(default=0, description="Discussion number assigned by GitHub")
    title: str
    body: str = ""
    category: str = Field(default="", description="Discussion category name, matched case-sensitively")
    labels: list[str] = Field(default_factory=list, description="Label names")


class PullRequest(_Record):
    node_id: str = Field(default="", description="GitHub node ID, empty before creation")
    number: int = Field(default=0, description="Pull request number assigned by GitHub")
    title: str
    body: str = ""
    head: str = Field(default="", description="Branch holding the changes")
    base: str = Field(default="", description="Branch the changes are merged into")
    draft: bool = False
    labels: list[str] = Field(default_factory=list, description="Label names")
    assignees: list[str] = Field(default_factory=list, description="User logins")


class Label(_Record):
    node_id: str = Field(default="", description="GitHub node ID, only set on listed labels")
    name: str
    color: str = Field(default="", description="Hex color without the leading '#'")
    description: str = ""


class DiscussionCategory(_Record):
    id: str
    name: str


class CreatedItemInfo(_Record):
    """Receipt for an item created in GitHub."""

    node_id: str = Field(description="GitHub node ID, or the label name for labels")
    title: str
    type: ItemType
    number: int = 0
    url: str = ""


class ProjectFieldOption(_Record):
    name: str
    description: str = Field(default="", description="Falls back to the option name when empty")
    color: str = Field(default="", description="GRAY, BLUE, GREEN, YELLOW, ORANGE, RED, PINK or PURPLE")


class ProjectField(_Record):
    name: str
    type: str = Field(description="text, number, date or single_select")
    options: list[ProjectFieldOption] = Field(default_factory=list, description="Choices of a single_select field")

    @field_validator("options", mode="before")
    @classmethod
    def null_options_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class ProjectConfiguration(_Record):
    """Project board described by project.json."""

    title: str
    description: str = ""
    visibility: str = Field(default="private", description="private or public")
    fields: list[ProjectField] = Field(default_factory=list, description="Custom fields added after creation")

    @field_validator("fields", mode="before")
    @classmethod
    def null_fields_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class Project(_Record):
    """A GitHub project (ProjectV2) board."""

    node_id: str
    number: int = 0
    title: str = ""
    description: str = ""
    url: str = ""
    visibility: str = ""
