"""Unified GitHub API interface for demo content, supporting both GraphQL and REST operations.

Strategy:
- GraphQL: identifier lookups, issue/discussion/PR creation, listing, close and delete, project boards
- REST: label creation and attaching labels/assignees to pull requests

Operations use either GraphQL OR REST, except pull request creation, which
creates through one transport and attaches labels/assignees over REST.

Every call runs in a child of the caller's OperationContext bounded by
``api_timeout``. Transport failures surface as ``api``-layer LayeredError;
cancellation and deadline expiry surface as ``context``-layer LayeredError.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from gh_demo.libs.exceptions import (
    ErrorCollector,
    LayeredError,
    NotFoundError,
    api_error,
    is_context_error,
    project_error,
    project_permission_error,
    validation_error,
)
from gh_demo.libs.graphql.graphql_builders import MutationBuilder, QueryBuilder
from gh_demo.libs.graphql.graphql_client import GraphQLClient
from gh_demo.libs.graphql.rest_client import RestClient
from gh_demo.libs.graphql.transport import GraphQLTransport, RestTransport
from gh_demo.libs.models import (
    CreatedItemInfo,
    Discussion,
    DiscussionCategory,
    Issue,
    ItemType,
    Label,
    Project,
    ProjectConfiguration,
    ProjectField,
    PullRequest,
)
from gh_demo.utils.constants import DEFAULT_API_TIMEOUT, DEFAULT_PROJECT_FIELD_COLOR, PROJECT_FIELD_COLORS
from gh_demo.utils.context import OperationContext
from gh_demo.utils.helpers import get_current_repository

RepositoryContextProvider = Callable[[], Awaitable[tuple[str, str]]]

# Substrings of GitHub errors raised when the token cannot manage projects
_PERMISSION_HINTS = ("permission", "forbidden", "unauthorized")


class APIType(Enum):
    """API type for operations."""

    GRAPHQL = "graphql"
    REST = "rest"


@dataclass
class AttachmentReport:
    """Outcome of the best-effort label/assignee step that follows a successful creation."""

    attached_labels: list[str] = field(default_factory=list)
    skipped_labels: list[str] = field(default_factory=list)
    attached_assignees: list[str] = field(default_factory=list)
    skipped_assignees: list[str] = field(default_factory=list)
    error: BaseException | None = None

    @property
    def complete(self) -> bool:
        return self.error is None and not self.skipped_labels and not self.skipped_assignees


def _null_logger() -> logging.Logger:
    logger = logging.getLogger("gh_demo.null")
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


class UnifiedGitHubAPI:
    """
    GitHub content client for one repository.

    Example:
        >>> api = UnifiedGitHubAPI.from_token(token="ghp_...", owner="octo", repo="demo", logger=logger)
        >>> info = await api.create_issue(ctx, Issue(title="Demo", labels=["bug"]))
        >>> print(info.url)
        >>> await api.close()

    When ``owner`` or ``repo`` is empty, every operation asks ``repository_context``
    for the current repository. The answer is not cached.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        graphql: GraphQLTransport,
        rest: RestTransport,
        logger: logging.Logger | None = None,
        repository_context: RepositoryContextProvider | None = None,
        api_timeout: float = DEFAULT_API_TIMEOUT,
        pull_request_api: APIType = APIType.GRAPHQL,
    ) -> None:
        """
        Initialize unified API client.

        Args:
            owner: Repository owner, empty to use the current repository
            repo: Repository name, empty to use the current repository
            graphql: GraphQL transport
            rest: REST transport
            logger: Logger instance; a silent logger is used when omitted
            repository_context: Coroutine returning (owner, repo) of the current repository
            api_timeout: Timeout in seconds for each API call
            pull_request_api: Transport used to create pull requests (GRAPHQL or REST)
        """
        if pull_request_api not in (APIType.GRAPHQL, APIType.REST):
            raise ValueError(f"pull_request_api must be GRAPHQL or REST, got {pull_request_api}")

        self.owner = owner
        self.repo = repo
        self.graphql = graphql
        self.rest = rest
        self.logger = logger or _null_logger()
        self.repository_context = repository_context or get_current_repository
        self.api_timeout = api_timeout
        self.pull_request_api = pull_request_api

    @classmethod
    def from_token(
        cls,
        token: str,
        owner: str,
        repo: str,
        logger: logging.Logger | None = None,
        **kwargs: Any,
    ) -> UnifiedGitHubAPI:
        """Build a client backed by the real GraphQL (gql) and REST (PyGithub) clients."""
        transport_logger = logger or _null_logger()
        return cls(
            owner=owner,
            repo=repo,
            graphql=GraphQLClient(token=token, logger=transport_logger),
            rest=RestClient(token=token, logger=transport_logger),
            logger=logger,
            **kwargs,
        )

    def set_logger(self, logger: logging.Logger | None) -> None:
        self.logger = logger or _null_logger()

    async def close(self) -> None:
        """Close the underlying transports when they hold connections."""
        if isinstance(self.graphql, GraphQLClient):
            await self.graphql.close()

        if isinstance(self.rest, RestClient):
            self.rest.close()

    async def __aenter__(self) -> UnifiedGitHubAPI:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def get_api_type_for_operation(self, operation: str) -> APIType:
        """
        Determine which API an operation uses.

        Args:
            operation: Operation name

        Returns:
            API type to use
        """
        rest_only = {
            "create_label",
            "attach_pull_request_metadata",
        }

        if operation in rest_only:
            return APIType.REST
        if operation == "create_pull_request":
            return self.pull_request_api
        return APIType.GRAPHQL

    # ===== Transport helpers =====

    async def _resolve_owner_repo(self, ctx: OperationContext, owner: str = "", repo: str = "") -> tuple[str, str]:
        owner = owner or self.owner
        repo = repo or self.repo
        if owner and repo:
            return owner, repo

        ctx.raise_if_done("get_current_repository")
        try:
            current_owner, current_repo = await ctx.run("get_current_repository", self.repository_context())
        except LayeredError:
            raise
        except Exception as ex:
            raise api_error("get_current_repository", "failed to determine current repository", ex) from ex

        self.logger.debug(f"Using current repository {current_owner}/{current_repo}")
        return owner or current_owner, repo or current_repo

    async def _graphql(
        self,
        ctx: OperationContext,
        operation: str,
        query: str,
        variables: dict[str, Any] | None,
        message: str,
        **context: Any,
    ) -> dict[str, Any]:
        try:
            return await self.graphql.execute(ctx.child(self.api_timeout), query, variables, operation=operation)
        except LayeredError:
            raise
        except Exception as ex:
            err = api_error(operation, message, ex)
            for key, value in context.items():
                err.with_context(key, value)
            raise err from ex

    async def _rest(
        self,
        ctx: OperationContext,
        operation: str,
        method: str,
        path: str,
        body: dict[str, Any] | None,
        message: str,
        **context: Any,
    ) -> Any:
        try:
            return await self.rest.request(ctx.child(self.api_timeout), method, path, body, operation=operation)
        except LayeredError:
            raise
        except Exception as ex:
            err = api_error(operation, message, ex)
            for key, value in context.items():
                err.with_context(key, value)
            raise err from ex

    # ===== Identifier Resolution (GraphQL) =====

    async def resolve_repository_id(self, ctx: OperationContext, owner: str = "", repo: str = "") -> str:
        """
        Get the repository node ID.

        Uses: GraphQL

        Raises:
            NotFoundError: If the query succeeds but returns no repository
            LayeredError: api layer on transport failure, context layer on cancel/timeout
        """
        owner, repo = await self._resolve_owner_repo(ctx, owner, repo)
        query, variables = QueryBuilder.get_repository_id(owner, repo)
        result = await self._graphql(
            ctx, "get_repository_id", query, variables, "failed to fetch repository ID", repository=f"{owner}/{repo}"
        )
        repository = result.get("repository") or {}
        if not repository.get("id"):
            raise NotFoundError("get_repository_id", "repository", f"{owner}/{repo}")
        return repository["id"]

    async def resolve_label_id(self, ctx: OperationContext, label_name: str, owner: str = "", repo: str = "") -> str:
        """
        Get a label node ID from its name.

        Uses: GraphQL

        Raises:
            NotFoundError: If the repository has no label with that name
        """
        owner, repo = await self._resolve_owner_repo(ctx, owner, repo)
        query, variables = QueryBuilder.get_label_id(owner, repo, label_name)
        result = await self._graphql(
            ctx, "get_label_id", query, variables, "failed to fetch label ID", label=label_name
        )
        label = (result.get("repository") or {}).get("label") or {}
        if not label.get("id"):
            raise NotFoundError("get_label_id", "label", label_name)
        return label["id"]

    async def resolve_user_id(self, ctx: OperationContext, login: str) -> str:
        """
        Get a user node ID from a login.

        Uses: GraphQL

        Raises:
            NotFoundError: If no user has that login
        """
        query, variables = QueryBuilder.get_user_id(login)
        result = await self._graphql(ctx, "get_user_id", query, variables, "failed to fetch user ID", login=login)
        user = result.get("user") or {}
        if not user.get("id"):
            raise NotFoundError("get_user_id", "user", login)
        return user["id"]

    async def list_discussion_categories(
        self, ctx: OperationContext, owner: str = "", repo: str = ""
    ) -> list[DiscussionCategory]:
        owner, repo = await self._resolve_owner_repo(ctx, owner, repo)
        query, variables = QueryBuilder.get_discussion_categories(owner, repo)
        result = await self._graphql(
            ctx,
            "get_discussion_categories",
            query,
            variables,
            "failed to fetch discussion categories",
            repository=f"{owner}/{repo}",
        )
        connection = (result.get("repository") or {}).get("discussionCategories") or {}
        return [DiscussionCategory(id=node["id"], name=node["name"]) for node in connection.get("nodes") or []]

    async def resolve_category_id(
        self, ctx: OperationContext, category_name: str, owner: str = "", repo: str = ""
    ) -> str:
        """
        Get a discussion category node ID from its name (exact, case-sensitive match).

        Uses: GraphQL

        Raises:
            NotFoundError: If no category matches, with the available names in its context
        """
        categories = await self.list_discussion_categories(ctx, owner, repo)
        for category in categories:
            if category.name == category_name:
                return category.id

        raise NotFoundError(
            "get_discussion_category",
            "discussion category",
            category_name,
            context={
                "requested_category": category_name,
                "available_categories": ", ".join(category.name for category in categories),
            },
        )

    async def _resolve_label_ids(self, ctx: OperationContext, owner: str, repo: str, names: list[str]) -> list[str]:
        """Resolve label names, skipping any that cannot be resolved. Context errors propagate."""
        label_ids: list[str] = []
        for label_name in names:
            try:
                label_ids.append(await self.resolve_label_id(ctx, label_name, owner, repo))
            except LayeredError as ex:
                if is_context_error(ex):
                    raise
                self.logger.debug(f"Skipping label '{label_name}': {ex}")
        return label_ids

    async def _resolve_user_ids(self, ctx: OperationContext, logins: list[str]) -> list[str]:
        """Resolve user logins, skipping any that cannot be resolved. Context errors propagate."""
        user_ids: list[str] = []
        for login in logins:
            try:
                user_ids.append(await self.resolve_user_id(ctx, login))
            except LayeredError as ex:
                if is_context_error(ex):
                    raise
                self.logger.debug(f"Skipping assignee '{login}': {ex}")
        return user_ids

    # ===== Entity Creation =====

    async def create_issue(self, ctx: OperationContext, issue: Issue) -> CreatedItemInfo:
        """
        Create an issue with its labels and assignees in one mutation.

        Uses: GraphQL

        Labels and assignees that cannot be resolved are left out of the mutation.
        """
        if not issue.title.strip():
            raise validation_error("validate_issue", "issue title cannot be empty")

        owner, repo = await self._resolve_owner_repo(ctx)
        self.logger.debug(f"Creating issue '{issue.title}' in repository {owner}/{repo}")

        repository_id = await self.resolve_repository_id(ctx, owner, repo)
        label_ids = await self._resolve_label_ids(ctx, owner, repo, issue.labels)
        assignee_ids = await self._resolve_user_ids(ctx, issue.assignees)

        mutation, variables = MutationBuilder.create_issue(
            repository_id=repository_id,
            title=issue.title,
            body=issue.body,
            assignee_ids=assignee_ids,
            label_ids=label_ids,
        )
        result = await self._graphql(
            ctx, "create_issue", mutation, variables, "failed to create GitHub issue", title=issue.title
        )

        created = (result.get("createIssue") or {}).get("issue") or {}
        if not created.get("id"):
            raise api_error(
                "create_issue", "issue creation failed - no Issue ID returned from GitHub API"
            ).with_context("title", issue.title)

        self.logger.debug(f"Created issue '{issue.title}' (#{created.get('number')}, {created.get('url')})")
        return CreatedItemInfo(
            node_id=created["id"],
            title=created.get("title") or issue.title,
            type=ItemType.ISSUE,
            number=created.get("number") or 0,
            url=created.get("url") or "",
        )

    async def create_discussion(self, ctx: OperationContext, discussion: Discussion) -> CreatedItemInfo:
        """
        Create a discussion, then add its labels.

        Uses: GraphQL

        An unknown category fails before anything is created. Label attachment
        after creation is best effort and never fails the call.
        """
        if not discussion.title.strip():
            raise validation_error("validate_discussion", "discussion title cannot be empty")

        owner, repo = await self._resolve_owner_repo(ctx)
        self.logger.debug(f"Creating discussion '{discussion.title}' in repository {owner}/{repo}")

        repository_id = await self.resolve_repository_id(ctx, owner, repo)
        try:
            category_id = await self.resolve_category_id(ctx, discussion.category, owner, repo)
        except NotFoundError as ex:
            raise ex.with_context("title", discussion.title)

        mutation, variables = MutationBuilder.create_discussion(
            repository_id=repository_id,
            category_id=category_id,
            title=discussion.title,
            body=discussion.body,
        )
        result = await self._graphql(
            ctx,
            "create_discussion",
            mutation,
            variables,
            "failed to create GitHub discussion",
            title=discussion.title,
            category=discussion.category,
        )

        created = (result.get("createDiscussion") or {}).get("discussion") or {}
        if not created.get("id"):
            raise api_error(
                "create_discussion", "discussion creation failed - no Discussion ID returned from GitHub API"
            ).with_context("title", discussion.title)

        if discussion.labels:
            report = await self._attach_discussion_labels(ctx, owner, repo, created["id"], discussion.labels)
            self._log_attachment(f"discussion '{discussion.title}'", report)

        self.logger.debug(f"Created discussion '{discussion.title}' (#{created.get('number')}, {created.get('url')})")
        return CreatedItemInfo(
            node_id=created["id"],
            title=created.get("title") or discussion.title,
            type=ItemType.DISCUSSION,
            number=created.get("number") or 0,
            url=created.get("url") or "",
        )

    async def create_pull_request(self, ctx: OperationContext, pull_request: PullRequest) -> CreatedItemInfo:
        """
        Create a pull request, then attach its labels and assignees.

        Uses: GraphQL (default) or REST, depending on ``pull_request_api``; REST for attachment

        Head and base are validated before any network call. Attachment after
        creation is best effort and never fails the call.
        """
        if not pull_request.head:
            raise validation_error("validate_pull_request", "head branch cannot be empty")
        if not pull_request.base:
            raise validation_error("validate_pull_request", "base branch cannot be empty")
        if pull_request.head == pull_request.base:
            raise validation_error(
                "validate_pull_request", f"head and base branches cannot be the same ({pull_request.head})"
            )

        owner, repo = await self._resolve_owner_repo(ctx)
        api_type = self.get_api_type_for_operation("create_pull_request")
        self.logger.debug(
            f"Creating pull request '{pull_request.title}' ({pull_request.head} -> {pull_request.base}) "
            f"in repository {owner}/{repo} using {api_type.value}"
        )

        if api_type == APIType.REST:
            created = await self._create_pull_request_rest(ctx, owner, repo, pull_request)
        else:
            created = await self._create_pull_request_graphql(ctx, owner, repo, pull_request)

        if pull_request.labels or pull_request.assignees:
            report = await self._attach_pull_request_metadata(
                ctx, owner, repo, created.number, pull_request.labels, pull_request.assignees
            )
            self._log_attachment(f"pull request '{pull_request.title}'", report)

        self.logger.debug(f"Created pull request '{pull_request.title}' (#{created.number}, {created.url})")
        return created

    async def _create_pull_request_graphql(
        self, ctx: OperationContext, owner: str, repo: str, pull_request: PullRequest
    ) -> CreatedItemInfo:
        repository_id = await self.resolve_repository_id(ctx, owner, repo)
        mutation, variables = MutationBuilder.create_pull_request(
            repository_id=repository_id,
            title=pull_request.title,
            head=pull_request.head,
            base=pull_request.base,
            body=pull_request.body,
            draft=pull_request.draft,
        )
        result = await self._graphql(
            ctx,
            "create_pull_request",
            mutation,
            variables,
            "failed to create GitHub pull request",
            title=pull_request.title,
            head=pull_request.head,
            base=pull_request.base,
        )

        created = (result.get("createPullRequest") or {}).get("pullRequest") or {}
        if not created.get("id"):
            raise api_error(
                "create_pull_request", "pull request creation failed - no PullRequest ID returned from GitHub API"
            ).with_context("title", pull_request.title)

        return CreatedItemInfo(
            node_id=created["id"],
            title=created.get("title") or pull_request.title,
            type=ItemType.PULL_REQUEST,
            number=created.get("number") or 0,
            url=created.get("url") or "",
        )

    async def _create_pull_request_rest(
        self, ctx: OperationContext, owner: str, repo: str, pull_request: PullRequest
    ) -> CreatedItemInfo:
        body = {
            "title": pull_request.title,
            "body": pull_request.body,
            "head": pull_request.head,
            "base": pull_request.base,
            "draft": pull_request.draft,
        }
        data = await self._rest(
            ctx,
            "create_pull_request",
            "POST",
            f"/repos/{owner}/{repo}/pulls",
            body,
            "failed to create GitHub pull request",
            title=pull_request.title,
            head=pull_request.head,
            base=pull_request.base,
        )

        data = data or {}
        if not data.get("number"):
            raise api_error(
                "create_pull_request", "pull request creation failed - no number returned from GitHub API"
            ).with_context("title", pull_request.title)

        return CreatedItemInfo(
            node_id=data.get("node_id") or "",
            title=data.get("title") or pull_request.title,
            type=ItemType.PULL_REQUEST,
            number=data["number"],
            url=data.get("html_url") or "",
        )

    async def create_label(self, ctx: OperationContext, label: Label) -> CreatedItemInfo:
        """
        Create a label.

        Uses: REST

        The label name is the returned identifier. Existing names are not
        checked first; GitHub's rejection is raised as is.
        """
        if not label.name.strip():
            raise validation_error("validate_label", "label name cannot be empty")

        owner, repo = await self._resolve_owner_repo(ctx)
        self.logger.debug(f"Creating label '{label.name}' (color: {label.color}) in repository {owner}/{repo}")

        body: dict[str, Any] = {"name": label.name, "color": label.color.lstrip("#")}
        if label.description:
            body["description"] = label.description

        data = await self._rest(
            ctx,
            "create_label",
            "POST",
            f"/repos/{owner}/{repo}/labels",
            body,
            "failed to create GitHub label",
            name=label.name,
            color=label.color,
        )

        data = data or {}
        return CreatedItemInfo(
            node_id=label.name,
            title=label.name,
            type=ItemType.LABEL,
            url=data.get("url") or "",
        )

    # ===== Best-effort attachment =====

    async def _attach_discussion_labels(
        self, ctx: OperationContext, owner: str, repo: str, discussion_id: str, labels: list[str]
    ) -> AttachmentReport:
        """Add labels one at a time; a label that cannot be resolved or added is skipped."""
        report = AttachmentReport()
        for label_name in labels:
            try:
                label_id = await self.resolve_label_id(ctx, label_name, owner, repo)
                mutation, variables = MutationBuilder.add_labels(discussion_id, [label_id])
                await self._graphql(
                    ctx, "add_labels", mutation, variables, "failed to add label to discussion", label=label_name
                )
            except LayeredError as ex:
                report.skipped_labels.append(label_name)
                self.logger.debug(f"Skipping label '{label_name}' for discussion: {ex}")
                if is_context_error(ex):
                    report.error = ex
                    break
            else:
                report.attached_labels.append(label_name)
        return report

    async def _attach_pull_request_metadata(
        self,
        ctx: OperationContext,
        owner: str,
        repo: str,
        number: int,
        labels: list[str],
        assignees: list[str],
    ) -> AttachmentReport:
        """
        Attach labels and assignees to a pull request over REST.

        Uses: REST (PATCH /repos/{owner}/{repo}/issues/{number})

        Only names that resolve are sent. Any failure is recorded in the
        report, never raised.
        """
        report = AttachmentReport()
        try:
            for label_name in labels:
                if await self._resolve_label_ids(ctx, owner, repo, [label_name]):
                    report.attached_labels.append(label_name)
                else:
                    report.skipped_labels.append(label_name)

            for login in assignees:
                if await self._resolve_user_ids(ctx, [login]):
                    report.attached_assignees.append(login)
                else:
                    report.skipped_assignees.append(login)

            body: dict[str, Any] = {}
            if report.attached_labels:
                body["labels"] = report.attached_labels
            if report.attached_assignees:
                body["assignees"] = report.attached_assignees

            if body:
                await self._rest(
                    ctx,
                    "attach_pull_request_metadata",
                    "PATCH",
                    f"/repos/{owner}/{repo}/issues/{number}",
                    body,
                    "failed to attach labels and assignees",
                    number=number,
                )
        except LayeredError as ex:
            report.error = ex
            report.skipped_labels.extend(report.attached_labels)
            report.skipped_assignees.extend(report.attached_assignees)
            report.attached_labels = []
            report.attached_assignees = []

        return report

    def _log_attachment(self, target: str, report: AttachmentReport) -> None:
        if report.complete:
            return

        message = f"Some labels or assignees were not attached to {target}"
        if report.skipped_labels:
            message += f", labels skipped: {', '.join(report.skipped_labels)}"
        if report.skipped_assignees:
            message += f", assignees skipped: {', '.join(report.skipped_assignees)}"
        if report.error is not None:
            message += f" ({report.error})"
        self.logger.info(message)

    # ===== Listing =====

    async def _paginate(
        self,
        ctx: OperationContext,
        operation: str,
        connection: str,
        build: Callable[[str | None], tuple[str, dict[str, Any]]],
        message: str,
    ) -> list[dict[str, Any]]:
        """Follow ``pageInfo.endCursor`` until ``hasNextPage`` is false and return all nodes."""
        nodes: list[dict[str, Any]] = []
        after: str | None = None
        while True:
            query, variables = build(after)
            result = await self._graphql(ctx, operation, query, variables, message)
            page = (result.get("repository") or {}).get(connection) or {}
            nodes.extend(node for node in page.get("nodes") or [] if node)

            page_info = page.get("pageInfo") or {}
            after = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not after:
                return nodes

    @staticmethod
    def _names(node: dict[str, Any], connection: str, key: str) -> list[str]:
        return [item[key] for item in (node.get(connection) or {}).get("nodes") or [] if item]

    async def list_issues(self, ctx: OperationContext) -> list[Issue]:
        """List open issues. Uses: GraphQL"""
        owner, repo = await self._resolve_owner_repo(ctx)
        nodes = await self._paginate(
            ctx,
            "list_issues",
            "issues",
            lambda after: QueryBuilder.get_issues(owner, repo, states=["OPEN"], after=after),
            "failed to list issues",
        )
        return [
            Issue(
                node_id=node["id"],
                number=node.get("number") or 0,
                title=node.get("title") or "",
                body=node.get("body") or "",
                labels=self._names(node, "labels", "name"),
                assignees=self._names(node, "assignees", "login"),
            )
            for node in nodes
        ]

    async def list_pull_requests(self, ctx: OperationContext) -> list[PullRequest]:
        """List open pull requests. Uses: GraphQL"""
        owner, repo = await self._resolve_owner_repo(ctx)
        nodes = await self._paginate(
            ctx,
            "list_pull_requests",
            "pullRequests",
            lambda after: QueryBuilder.get_pull_requests(owner, repo, states=["OPEN"], after=after),
            "failed to list pull requests",
        )
        return [
            PullRequest(
                node_id=node["id"],
                number=node.get("number") or 0,
                title=node.get("title") or "",
                body=node.get("body") or "",
                head=node.get("headRefName") or "",
                base=node.get("baseRefName") or "",
                draft=bool(node.get("isDraft")),
                labels=self._names(node, "labels", "name"),
                assignees=self._names(node, "assignees", "login"),
            )
            for node in nodes
        ]

    async def list_discussions(self, ctx: OperationContext) -> list[Discussion]:
        """List all discussions. Uses: GraphQL"""
        owner, repo = await self._resolve_owner_repo(ctx)
        nodes = await self._paginate(
            ctx,
            "list_discussions",
            "discussions",
            lambda after: QueryBuilder.get_discussions(owner, repo, after=after),
            "failed to list discussions",
        )
        return [
            Discussion(
                node_id=node["id"],
                number=node.get("number") or 0,
                title=node.get("title") or "",
                body=node.get("body") or "",
                category=(node.get("category") or {}).get("name") or "",
                labels=self._names(node, "labels", "name"),
            )
            for node in nodes
        ]

    async def list_labels(self, ctx: OperationContext) -> list[Label]:
        """List all labels. Uses: GraphQL"""
        owner, repo = await self._resolve_owner_repo(ctx)
        nodes = await self._paginate(
            ctx,
            "list_labels",
            "labels",
            lambda after: QueryBuilder.get_labels(owner, repo, after=after),
            "failed to list labels",
        )
        return [
            Label(
                node_id=node.get("id") or "",
                name=node["name"],
                color=node.get("color") or "",
                description=node.get("description") or "",
            )
            for node in nodes
        ]

    # ===== Deletion =====

    @staticmethod
    def _verify_closed(operation: str, kind: str, node_id: str, state: str | None) -> None:
        if state != "CLOSED":
            raise api_error(operation, f"{kind} was not closed (state: {state})").with_context("node_id", node_id)

    async def delete_issue(self, ctx: OperationContext, node_id: str) -> None:
        """
        Remove an issue from the demo by closing it.

        Uses: GraphQL (closeIssue); deleting issues needs admin rights
        """
        if not node_id:
            raise validation_error("validate_issue_id", "issue node ID cannot be empty")

        mutation, variables = MutationBuilder.close_issue(node_id)
        result = await self._graphql(ctx, "delete_issue", mutation, variables, "failed to close issue", node_id=node_id)
        issue = (result.get("closeIssue") or {}).get("issue") or {}
        self._verify_closed("delete_issue", "issue", node_id, issue.get("state"))
        self.logger.debug(f"Closed issue {node_id}")

    async def delete_pull_request(self, ctx: OperationContext, node_id: str) -> None:
        """
        Remove a pull request from the demo by closing it.

        Uses: GraphQL (closePullRequest); GitHub cannot delete pull requests
        """
        if not node_id:
            raise validation_error("validate_pull_request_id", "pull request node ID cannot be empty")

        mutation, variables = MutationBuilder.close_pull_request(node_id)
        result = await self._graphql(
            ctx, "delete_pull_request", mutation, variables, "failed to close pull request", node_id=node_id
        )
        pull_request = (result.get("closePullRequest") or {}).get("pullRequest") or {}
        self._verify_closed("delete_pull_request", "pull request", node_id, pull_request.get("state"))
        self.logger.debug(f"Closed pull request {node_id}")

    async def delete_discussion(self, ctx: OperationContext, node_id: str) -> None:
        """Delete a discussion. Uses: GraphQL"""
        if not node_id:
            raise validation_error("validate_discussion_id", "discussion node ID cannot be empty")

        mutation, variables = MutationBuilder.delete_discussion(node_id)
        await self._graphql(
            ctx, "delete_discussion", mutation, variables, "failed to delete discussion", node_id=node_id
        )
        self.logger.debug(f"Deleted discussion {node_id}")

    async def delete_label(self, ctx: OperationContext, name: str) -> None:
        """
        Delete a label by name.

        Uses: GraphQL (label lookup, then deleteLabel)

        Raises:
            NotFoundError: If the repository has no label with that name
        """
        if not name:
            raise validation_error("validate_label_name", "label name cannot be empty")

        owner, repo = await self._resolve_owner_repo(ctx)
        label_id = await self.resolve_label_id(ctx, name, owner, repo)
        mutation, variables = MutationBuilder.delete_label(label_id)
        await self._graphql(ctx, "delete_label", mutation, variables, "failed to delete label", name=name)
        self.logger.debug(f"Deleted label '{name}'")

    # ===== Projects =====

    async def resolve_owner_id(self, ctx: OperationContext, owner: str = "") -> str:
        """
        Get the node ID of the user or organization owning the repository.

        Uses: GraphQL

        Raises:
            NotFoundError: If no account has that login
        """
        owner = owner or self.owner
        if not owner:
            owner, _ = await self._resolve_owner_repo(ctx)

        query, variables = QueryBuilder.get_repository_owner_id(owner)
        result = await self._graphql(
            ctx, "get_repository_owner_id", query, variables, "failed to fetch repository owner ID", owner=owner
        )
        repository_owner = result.get("repositoryOwner") or {}
        if not repository_owner.get("id"):
            raise NotFoundError("get_repository_owner_id", "repository owner", owner)
        return repository_owner["id"]

    async def create_project(self, ctx: OperationContext, project_config: ProjectConfiguration) -> Project:
        """
        Create a project board owned by the repository owner.

        Uses: GraphQL

        Only the title is set here; ``update_project_description`` and
        ``configure_project_fields`` apply the rest of the configuration.

        Raises:
            LayeredError: validation layer for an empty title, project layer when the owner
                cannot be resolved or the mutation fails (tagged ``type=permission`` when
                the token lacks project scopes), context layer on cancel/timeout
        """
        if not project_config.title.strip():
            raise validation_error("create_project", "project title cannot be empty")

        try:
            owner_id = await self.resolve_owner_id(ctx)
        except LayeredError as ex:
            if is_context_error(ex):
                raise
            raise project_error("get_owner_id", "failed to get repository owner ID", ex) from ex

        self.logger.debug(f"Creating project '{project_config.title}'")
        mutation, variables = MutationBuilder.create_project(owner_id, project_config.title)
        try:
            result = await self._graphql(ctx, "create_project", mutation, variables, "failed to create project")
        except LayeredError as ex:
            if is_context_error(ex):
                raise
            if any(hint in str(ex).lower() for hint in _PERMISSION_HINTS):
                raise project_permission_error(
                    "create_project",
                    "insufficient permissions to create projects - ensure token has write:org or write:user scope",
                    ex,
                ).with_context("title", project_config.title) from ex
            raise project_error("create_project", "failed to create project", ex).with_context(
                "title", project_config.title
            ) from ex

        created = (result.get("createProjectV2") or {}).get("projectV2") or {}
        if not created.get("id"):
            raise project_error(
                "create_project", "project creation failed - no ProjectV2 ID returned from GitHub API"
            ).with_context("title", project_config.title)

        project = Project(
            node_id=created["id"],
            number=created.get("number") or 0,
            title=created.get("title") or project_config.title,
            description=project_config.description,
            url=created.get("url") or "",
            visibility=project_config.visibility,
        )
        self.logger.debug(f"Created project '{project.title}' (#{project.number}, {project.url})")
        return project

    async def update_project_description(self, ctx: OperationContext, project_id: str, description: str) -> None:
        """Set a project's short description; a blank description is a no-op. Uses: GraphQL"""
        if not description.strip():
            self.logger.debug("No description to update for project")
            return

        mutation, variables = MutationBuilder.update_project_description(project_id, description)
        await self._graphql(
            ctx,
            "update_project_description",
            mutation,
            variables,
            "failed to update project description",
            project_id=project_id,
        )
        self.logger.debug(f"Updated description of project {project_id}")

    async def configure_project_fields(
        self, ctx: OperationContext, project_id: str, fields: list[ProjectField]
    ) -> None:
        """
        Add custom fields to a project, one mutation per field.

        Uses: GraphQL

        Every field is attempted. One failure is raised as is, several as
        PartialFailureError. Context errors stop at once.
        """
        if not fields:
            self.logger.debug("No custom fields to create for project")
            return

        collector = ErrorCollector("configure_project_fields")
        for project_field in fields:
            try:
                await self._create_project_field(ctx, project_id, project_field)
            except LayeredError as ex:
                if is_context_error(ex):
                    raise
                collector.add(
                    project_error("create_project_field", "failed to create project field", ex)
                    .with_context("field_name", project_field.name)
                    .with_context("field_type", project_field.type)
                )
                self.logger.debug(f"Failed to create field '{project_field.name}': {ex}")
            else:
                self.logger.debug(f"Created field '{project_field.name}' (type: {project_field.type})")

        if (error := collector.result()) is not None:
            raise error

    async def _create_project_field(self, ctx: OperationContext, project_id: str, project_field: ProjectField) -> None:
        field_type = project_field.type.strip().lower()
        if field_type == "single_select":
            await self._create_project_single_select_field(ctx, project_id, project_field)
            return

        if field_type not in ("text", "number", "date"):
            raise validation_error(
                "create_project_field",
                f"unsupported field type: {project_field.type}. Supported types: text, number, date, single_select",
            )

        mutation, variables = MutationBuilder.create_project_field(project_id, project_field.name, field_type.upper())
        await self._graphql(
            ctx,
            "create_project_field",
            mutation,
            variables,
            f"failed to create project field '{project_field.name}'",
            field_name=project_field.name,
        )

    async def _create_project_single_select_field(
        self, ctx: OperationContext, project_id: str, project_field: ProjectField
    ) -> None:
        options: list[dict[str, str]] = []
        for option in project_field.options:
            color = option.color.strip().upper() or DEFAULT_PROJECT_FIELD_COLOR
            if color not in PROJECT_FIELD_COLORS:
                self.logger.debug(
                    f"Invalid color '{option.color}' for option '{option.name}', using {DEFAULT_PROJECT_FIELD_COLOR}"
                )
                color = DEFAULT_PROJECT_FIELD_COLOR
            # GitHub requires a description on every option
            options.append({"name": option.name, "description": option.description or option.name, "color": color})

        if not options:
            raise validation_error("create_single_select_field", "single_select fields must have at least one option")

        mutation, variables = MutationBuilder.create_project_single_select_field(
            project_id, project_field.name, options
        )
        await self._graphql(
            ctx,
            "create_single_select_field",
            mutation,
            variables,
            f"failed to create single select field '{project_field.name}'",
            field_name=project_field.name,
        )

    async def add_item_to_project(self, ctx: OperationContext, project_id: str, item_node_id: str) -> str:
        """
        Add an issue, pull request or discussion to a project.

        Uses: GraphQL

        Returns:
            Node ID of the new project item
        """
        if not project_id.strip():
            raise validation_error("add_item_to_project", "project ID cannot be empty")
        if not item_node_id.strip():
            raise validation_error("add_item_to_project", "item node ID cannot be empty")

        mutation, variables = MutationBuilder.add_project_item(project_id, item_node_id)
        result = await self._graphql(
            ctx,
            "add_item_to_project",
            mutation,
            variables,
            "failed to add item to project",
            project_id=project_id,
            item_node_id=item_node_id,
        )

        item = (result.get("addProjectV2ItemById") or {}).get("item") or {}
        if not item.get("id"):
            raise api_error(
                "add_item_to_project", "item addition failed - no item ID returned from GitHub API"
            ).with_context("item_node_id", item_node_id)

        self.logger.debug(f"Added item {item_node_id} to project {project_id}")
        return item["id"]

    async def get_project(self, ctx: OperationContext, project_id: str) -> Project:
        """
        Get a project board by node ID.

        Uses: GraphQL

        Raises:
            NotFoundError: If the ID does not name a project
        """
        if not project_id.strip():
            raise validation_error("get_project", "project ID cannot be empty")

        query, variables = QueryBuilder.get_project(project_id)
        result = await self._graphql(
            ctx, "get_project", query, variables, "failed to retrieve project", project_id=project_id
        )
        node = result.get("node") or {}
        if not node.get("id"):
            raise NotFoundError("get_project", "project", project_id)

        return Project(
            node_id=node["id"],
            number=node.get("number") or 0,
            title=node.get("title") or "",
            description=node.get("shortDescription") or "",
            url=node.get("url") or "",
            visibility="public" if node.get("public") else "private",
        )
