"""REST client wrapper for the GitHub endpoints GraphQL does not cover here."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from github import Auth, Github, GithubException

from gh_demo.utils.context import OperationContext


class RestError(Exception):
    """Raised when a GitHub REST call fails."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RestClient:
    """
    Thin async wrapper around PyGithub's requester.

    PyGithub is synchronous, so each request runs in a worker thread bounded
    by the caller's OperationContext.

    Example:
        >>> rest = RestClient(token="ghp_...", logger=logger)
        >>> label = await rest.request(ctx, "POST", "/repos/octo/demo/labels", {"name": "bug", "color": "d73a4a"})
    """

    def __init__(self, token: str, logger: logging.Logger, github_api: Github | None = None) -> None:
        self.logger = logger
        self.github_api = github_api or Github(auth=Auth.Token(token))

    def close(self) -> None:
        self.github_api.close()

    async def request(
        self,
        ctx: OperationContext,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        operation: str = "rest_request",
    ) -> Any:
        """
        Send a REST request.

        Args:
            ctx: Operation context; checked before any network I/O
            method: HTTP method
            path: API path, e.g. "/repos/{owner}/{repo}/labels"
            body: JSON body (optional)
            operation: Operation name used in context errors

        Returns:
            Decoded JSON response

        Raises:
            LayeredError: context layer, when ctx is cancelled or its deadline passes
            RestError: When GitHub rejects the request
        """
        ctx.raise_if_done(operation)
        self.logger.debug(f"REST {method} {path}")
        return await ctx.run(operation, self._request(method, path, body))

    async def _request(self, method: str, path: str, body: dict[str, Any] | None) -> Any:
        try:
            _, data = await asyncio.to_thread(self.github_api.requester.requestJsonAndCheck, method, path, input=body)
        except GithubException as ex:
            message = ex.data.get("message") if isinstance(ex.data, dict) else None
            raise RestError(f"{method} {path} failed ({ex.status}): {message or ex}", status=ex.status) from ex

        return data
