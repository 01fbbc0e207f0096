"""Tests for the PyGithub-backed REST client."""

from unittest.mock import MagicMock, patch

import pytest
from github import GithubException

from gh_demo.libs.exceptions import ErrorLayer, LayeredError
from gh_demo.libs.graphql.rest_client import RestClient, RestError
from gh_demo.tests.conftest import TEST_GITHUB_TOKEN
from gh_demo.utils.context import OperationContext


@pytest.fixture
def github_api():
    return MagicMock()


@pytest.fixture
def rest_client(mock_logger, github_api):
    return RestClient(token=TEST_GITHUB_TOKEN, logger=mock_logger, github_api=github_api)


def test_builds_github_client_from_token(mock_logger):
    with patch("gh_demo.libs.graphql.rest_client.Github") as mock_github:
        client = RestClient(token=TEST_GITHUB_TOKEN, logger=mock_logger)

    assert client.github_api is mock_github.return_value
    assert mock_github.call_args.kwargs["auth"].token == TEST_GITHUB_TOKEN


@pytest.mark.asyncio
async def test_request_success(rest_client, github_api):
    github_api.requester.requestJsonAndCheck.return_value = ({}, {"name": "bug", "url": "https://x/labels/bug"})

    data = await rest_client.request(
        OperationContext(timeout=5), "POST", "/repos/octo/demo/labels", {"name": "bug", "color": "d73a4a"}
    )

    assert data["name"] == "bug"
    github_api.requester.requestJsonAndCheck.assert_called_once_with(
        "POST", "/repos/octo/demo/labels", input={"name": "bug", "color": "d73a4a"}
    )


@pytest.mark.asyncio
async def test_request_maps_github_exception(rest_client, github_api):
    github_api.requester.requestJsonAndCheck.side_effect = GithubException(
        422, {"message": "Validation Failed"}, None
    )

    with pytest.raises(RestError) as exc_info:
        await rest_client.request(OperationContext(timeout=5), "POST", "/repos/octo/demo/labels", {"name": "bug"})

    assert exc_info.value.status == 422
    assert "Validation Failed" in str(exc_info.value)


@pytest.mark.asyncio
async def test_request_checks_context_first(rest_client, github_api):
    ctx = OperationContext()
    ctx.cancel()

    with pytest.raises(LayeredError) as exc_info:
        await rest_client.request(
            ctx, "PATCH", "/repos/octo/demo/issues/1", {}, operation="attach_pull_request_metadata"
        )

    assert exc_info.value.layer == ErrorLayer.CONTEXT
    assert exc_info.value.operation == "attach_pull_request_metadata"
    github_api.requester.requestJsonAndCheck.assert_not_called()


def test_close(rest_client, github_api):
    rest_client.close()
    github_api.close.assert_called_once()
