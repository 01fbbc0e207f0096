"""Transport contracts the GitHub API client depends on.

``UnifiedGitHubAPI`` talks to GitHub only through these two protocols, so any
object with a matching ``execute``/``request`` coroutine can stand in for the
real clients (``GraphQLClient``, ``RestClient``), including test doubles.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from gh_demo.utils.context import OperationContext


class GraphQLTransport(Protocol):
    """Executes GraphQL queries and mutations."""

    async def execute(
        self,
        ctx: OperationContext,
        query: str,
        variables: dict[str, Any] | None = None,
        operation: str = ...,
    ) -> dict[str, Any]:
        """Run a query or mutation and return the ``data`` mapping."""
        ...


class RestTransport(Protocol):
    """Sends REST requests."""

    async def request(
        self,
        ctx: OperationContext,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        operation: str = ...,
    ) -> Any:
        """Send ``method`` to ``path`` and return the decoded JSON response."""
        ...
