import itertools
import json
import os
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from gh_demo.libs.graphql.unified_api import UnifiedGitHubAPI
from gh_demo.libs.models import Discussion, Issue, Label, ProjectConfiguration, PullRequest
from gh_demo.utils.context import OperationContext

# Test token constant to silence S106 security warnings
TEST_GITHUB_TOKEN = "ghs_" + "test1234567890abcdefghijklmnopqrstuvwxyz"  # pragma: allowlist secret

OWNER = "octo"
REPO = "demo"

Response = dict[str, Any] | BaseException | Callable[[dict[str, Any]], Any]


class FakeGraphQL:
    """GraphQL transport double answering by operation name and recording every call."""

    def __init__(self, responses: dict[str, Response] | None = None) -> None:
        self.responses: dict[str, Response] = responses or {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def execute(
        self,
        ctx: OperationContext,
        query: str,
        variables: dict[str, Any] | None = None,
        operation: str = "graphql_query",
    ) -> dict[str, Any]:
        ctx.raise_if_done(operation)
        self.calls.append((operation, variables or {}))
        response = self.responses.get(operation, {})
        if callable(response) and not isinstance(response, BaseException):
            response = response(variables or {})
        if isinstance(response, BaseException):
            raise response
        return response

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    def variables_for(self, operation: str) -> list[dict[str, Any]]:
        return [variables for name, variables in self.calls if name == operation]


class FakeRest:
    """REST transport double answering by operation name and recording every call."""

    def __init__(self, responses: dict[str, Response] | None = None) -> None:
        self.responses: dict[str, Response] = responses or {}
        self.calls: list[tuple[str, str, str, dict[str, Any] | None]] = []

    async def request(
        self,
        ctx: OperationContext,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        operation: str = "rest_request",
    ) -> Any:
        ctx.raise_if_done(operation)
        self.calls.append((operation, method, path, body))
        response = self.responses.get(operation, {})
        if callable(response) and not isinstance(response, BaseException):
            response = response(body or {})
        if isinstance(response, BaseException):
            raise response
        return response


def make_issue(title: str = "Demo", **kwargs: Any) -> Issue:
    return Issue(title=title, **kwargs)


def make_discussion(title: str = "Welcome", category: str = "General", **kwargs: Any) -> Discussion:
    return Discussion(title=title, category=category, **kwargs)


def make_pull_request(
    title: str = "Add feature", head: str = "feature", base: str = "main", **kwargs: Any
) -> PullRequest:
    return PullRequest(title=title, head=head, base=base, **kwargs)


def make_label(name: str = "bug", color: str = "d73a4a", **kwargs: Any) -> Label:
    return Label(name=name, color=color, **kwargs)


def make_project_config(title: str = "Demo board", **kwargs: Any) -> ProjectConfiguration:
    return ProjectConfiguration(title=title, **kwargs)


def page(connection: str, nodes: list[dict[str, Any]], end_cursor: str | None = None) -> dict[str, Any]:
    """One page of a repository connection as GitHub returns it."""
    return {
        "repository": {
            connection: {
                "pageInfo": {"hasNextPage": end_cursor is not None, "endCursor": end_cursor},
                "nodes": nodes,
            }
        }
    }


def make_graphql_responses(
    labels: dict[str, str] | None = None,
    users: dict[str, str] | None = None,
    categories: dict[str, str] | None = None,
) -> dict[str, Response]:
    """Responses of a repository where the given labels, users and categories exist."""
    labels = {"bug": "LA_bug", "enhancement": "LA_enhancement"} if labels is None else labels
    users = {"octocat": "U_octocat"} if users is None else users
    categories = {"General": "DC_general", "Ideas": "DC_ideas"} if categories is None else categories
    numbers = itertools.count(1)

    def created(key: str, kind: str, path: str) -> Callable[[dict[str, Any]], dict[str, Any]]:
        def _respond(variables: dict[str, Any]) -> dict[str, Any]:
            number = next(numbers)
            title = variables.get("title") or variables.get("input", {}).get("title")
            return {
                key: {
                    kind: {
                        "id": f"{kind[0].upper()}_{number}",
                        "number": number,
                        "title": title,
                        "url": f"https://github.com/{OWNER}/{REPO}/{path}/{number}",
                    }
                }
            }

        return _respond

    return {
        "get_repository_id": {"repository": {"id": "R_1"}},
        "get_label_id": lambda v: {"repository": {"label": {"id": labels[v["labelName"]]}}}
        if v["labelName"] in labels
        else {"repository": {"label": None}},
        "get_user_id": lambda v: {"user": {"id": users[v["login"]]}} if v["login"] in users else {"user": None},
        "get_discussion_categories": {
            "repository": {
                "discussionCategories": {"nodes": [{"id": _id, "name": name} for name, _id in categories.items()]}
            }
        },
        "create_issue": created("createIssue", "issue", "issues"),
        "create_discussion": created("createDiscussion", "discussion", "discussions"),
        "create_pull_request": created("createPullRequest", "pullRequest", "pull"),
        "add_labels": {"addLabelsToLabelable": {"labelable": {"id": "X"}}},
        "list_labels": page("labels", [{"id": _id, "name": name, "color": "ededed"} for name, _id in labels.items()]),
        "list_issues": page("issues", []),
        "list_pull_requests": page("pullRequests", []),
        "list_discussions": page("discussions", []),
        "delete_issue": {"closeIssue": {"issue": {"id": "I_1", "state": "CLOSED"}}},
        "delete_pull_request": {"closePullRequest": {"pullRequest": {"id": "P_1", "state": "CLOSED"}}},
        "delete_discussion": {"deleteDiscussion": {"discussion": {"id": "D_1"}}},
        "delete_label": {"deleteLabel": {"clientMutationId": None}},
        "get_repository_owner_id": {"repositoryOwner": {"id": "O_octo"}},
        "create_project": lambda v: {
            "createProjectV2": {
                "projectV2": {
                    "id": "PVT_1",
                    "number": 1,
                    "title": v["title"],
                    "url": f"https://github.com/orgs/{OWNER}/projects/1",
                }
            }
        },
        "update_project_description": {"updateProjectV2": {"projectV2": {"id": "PVT_1"}}},
        "create_project_field": {"createProjectV2Field": {"projectV2Field": {"id": "PVTF_1"}}},
        "create_single_select_field": {"createProjectV2Field": {"projectV2Field": {"id": "PVTSSF_1"}}},
        "add_item_to_project": lambda v: {"addProjectV2ItemById": {"item": {"id": f"PVTI_{v['contentId']}"}}},
        "get_project": {
            "node": {
                "id": "PVT_1",
                "number": 1,
                "title": "Demo board",
                "shortDescription": "Demo work",
                "url": f"https://github.com/orgs/{OWNER}/projects/1",
                "public": False,
            }
        },
    }


def make_rest_responses() -> dict[str, Response]:
    return {
        "create_label": lambda body: {
            "name": body["name"],
            "url": f"https://api.github.com/repos/{OWNER}/{REPO}/labels/{body['name']}",
        },
        "create_pull_request": lambda body: {
            "node_id": "PR_rest",
            "number": 42,
            "title": body["title"],
            "html_url": f"https://github.com/{OWNER}/{REPO}/pull/42",
        },
        "attach_pull_request_metadata": {"number": 42},
    }


def write_json(directory: str, name: str, data: Any) -> str:
    path = os.path.join(directory, name)
    with open(path, "w") as fd:
        json.dump(data, fd)
    return path


@pytest.fixture
def mock_logger():
    """Create a mock logger."""
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    return logger


@pytest.fixture
def ctx():
    return OperationContext(timeout=30)


@pytest.fixture
def fake_graphql():
    return FakeGraphQL(make_graphql_responses())


@pytest.fixture
def fake_rest():
    return FakeRest(make_rest_responses())


@pytest.fixture
def api(fake_graphql, fake_rest, mock_logger):
    return UnifiedGitHubAPI(
        owner=OWNER,
        repo=REPO,
        graphql=fake_graphql,
        rest=fake_rest,
        logger=mock_logger,
        api_timeout=5,
    )
