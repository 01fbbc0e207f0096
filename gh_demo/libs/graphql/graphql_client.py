"""GraphQL client wrapper for GitHub API with authentication and error handling."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any

import aiohttp
from gql import Client, gql
from gql.transport.aiohttp import AIOHTTPTransport
from gql.transport.exceptions import (
    TransportError,
    TransportQueryError,
    TransportServerError,
)
from graphql import DocumentNode

from gh_demo.utils.constants import GITHUB_GRAPHQL_URL
from gh_demo.utils.context import OperationContext


class GraphQLError(Exception):
    """Base exception for GraphQL client errors."""

    pass


class GraphQLAuthenticationError(GraphQLError):
    """Raised when authentication fails."""

    pass


class GraphQLRateLimitError(GraphQLError):
    """Raised when rate limit is exceeded."""

    pass


class GraphQLClient:
    """
    Async GraphQL client wrapper for GitHub API.

    Provides:
    - Token-based authentication
    - Cancellation and deadline handling through OperationContext
    - Error mapping for common GitHub API errors

    A failed call is raised immediately; there is no retry.

    Example:
        >>> async with GraphQLClient(token="ghp_...", logger=logger) as client:
        ...     result = await client.execute(ctx, "query { viewer { login } }")
        >>> print(result["viewer"]["login"])
    """

    def __init__(
        self,
        token: str,
        logger: logging.Logger,
        timeout: int = 90,
        connection_timeout: int = 10,
        sock_read_timeout: int = 30,
    ) -> None:
        """
        Initialize GraphQL client.

        Args:
            token: GitHub personal access token
            logger: Logger instance for operation logging
            timeout: Total HTTP request timeout in seconds (default: 90)
            connection_timeout: DNS resolution + TCP handshake timeout in seconds (default: 10)
            sock_read_timeout: Socket read timeout in seconds (default: 30)
        """
        self.token = token
        self.logger = logger
        self.timeout = timeout
        self.connection_timeout = connection_timeout
        self.sock_read_timeout = sock_read_timeout
        self._client: Client | None = None
        self._session: Any = None
        self._transport: AIOHTTPTransport | None = None
        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> GraphQLClient:
        """Async context manager entry."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_client(self) -> None:
        """Ensure the GraphQL client is initialized and connected. Reuses existing client for connection pooling."""
        async with self._client_lock:
            if self._client is not None:
                return

            timeout_config = aiohttp.ClientTimeout(
                total=self.timeout,
                connect=self.connection_timeout,
                sock_read=self.sock_read_timeout,
            )

            self._transport = AIOHTTPTransport(
                url=GITHUB_GRAPHQL_URL,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/vnd.github.v4+json",
                    "User-Agent": "gh-demo/graphql-client",
                },
                ssl=True,
                client_session_args={"timeout": timeout_config},
            )

            self._client = Client(
                transport=self._transport,
                fetch_schema_from_transport=False,
            )

            self._session = await self._client.connect_async()

            self.logger.debug("GraphQL client initialized")

    async def close(self) -> None:
        """Close the GraphQL client and cleanup resources."""
        if self._client:
            try:
                await self._client.close_async()
            except Exception as ex:
                self.logger.debug(f"Ignoring error during client close: {ex}")
            self._client = None
            self._session = None
            self._transport = None
            self.logger.debug("GraphQL client closed")

    async def execute(
        self,
        ctx: OperationContext,
        query: str | DocumentNode,
        variables: dict[str, Any] | None = None,
        operation: str = "graphql_query",
    ) -> dict[str, Any]:
        """
        Execute a GraphQL query or mutation.

        Args:
            ctx: Operation context; checked before any network I/O
            query: GraphQL query string or DocumentNode
            variables: Variables for the query (optional)
            operation: Operation name used in context errors

        Returns:
            Query result as a dictionary

        Raises:
            LayeredError: context layer, when ctx is cancelled or its deadline passes
            GraphQLAuthenticationError: If authentication fails
            GraphQLRateLimitError: If rate limit is exceeded
            GraphQLError: For other GraphQL errors
        """
        ctx.raise_if_done(operation)
        if isinstance(query, str):
            query = gql(query)

        return await ctx.run(operation, self._execute(query, variables))

    async def _execute(self, query: DocumentNode, variables: dict[str, Any] | None) -> dict[str, Any]:
        try:
            await self._ensure_client()
            self.logger.debug("Executing GraphQL query")
            result = await self._session.execute(query, variable_values=variables)
            self.logger.debug("GraphQL query executed successfully")
            return dict(result) if result else {}

        except TransportQueryError as error:
            error_msg = error.errors[0] if error.errors else str(error)
            error_str = str(error_msg)

            if "401" in error_str or "Unauthorized" in error_str or "Bad credentials" in error_str:
                self.logger.error(f"AUTH FAILED: GraphQL authentication failed: {error_msg}")
                raise GraphQLAuthenticationError(f"Authentication failed: {error_msg}") from error

            if "rate limit" in error_str.lower() or "RATE_LIMITED" in error_str:
                self.logger.error(f"RATE LIMIT: GraphQL rate limit exceeded: {error_msg}")
                raise GraphQLRateLimitError(f"Rate limit exceeded: {error_msg}") from error

            self.logger.debug(f"GraphQL query error: {error_msg}")
            raise GraphQLError(f"GraphQL query failed: {error_msg}") from error

        except TransportServerError as error:
            error_msg = str(error)
            status_code = getattr(error, "code", None)
            if status_code is None:
                # Format: "401, message='Unauthorized', url='...'"
                match = re.search(r"(\d{3}),", error_msg)
                if match:
                    status_code = int(match.group(1))

            if status_code == 401:
                self.logger.error(f"AUTH FAILED: GraphQL authentication failed: {error_msg}")
                raise GraphQLAuthenticationError(f"Authentication failed: {error_msg}") from error

            if status_code in (403, 429) and "rate limit" in error_msg.lower():
                self.logger.error(f"RATE LIMIT: GraphQL rate limit exceeded: {error_msg}")
                raise GraphQLRateLimitError(f"Rate limit exceeded: {error_msg}") from error

            self.logger.debug(f"SERVER ERROR: GraphQL server error ({status_code}): {error_msg}")
            raise GraphQLError(f"GraphQL server error: {error_msg}") from error

        except TransportError as error:
            # Connection is unusable, recreate it on the next call
            await self.close()
            raise GraphQLError(f"GraphQL connection failed: {error}") from error

        except TimeoutError as error:
            await self.close()
            raise GraphQLError(
                f"GraphQL query timeout (configured: total={self.timeout}s, "
                f"connect={self.connection_timeout}s, sock_read={self.sock_read_timeout}s)"
            ) from error

        except asyncio.CancelledError:
            self.logger.debug("GraphQL query cancelled")
            raise

        except aiohttp.ClientError as error:
            raise GraphQLError(f"GraphQL request failed [{type(error).__name__}]: {error}") from error
