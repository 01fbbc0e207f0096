"""Tests for GraphQL query and mutation builders."""

import pytest
from graphql import parse

from gh_demo.libs.graphql.graphql_builders import MutationBuilder, QueryBuilder
from gh_demo.utils.constants import PAGE_SIZE


@pytest.mark.parametrize(
    "built",
    [
        QueryBuilder.get_repository_id("octo", "demo"),
        QueryBuilder.get_label_id("octo", "demo", "bug"),
        QueryBuilder.get_user_id("octocat"),
        QueryBuilder.get_discussion_categories("octo", "demo"),
        QueryBuilder.get_labels("octo", "demo"),
        QueryBuilder.get_issues("octo", "demo", states=["OPEN"]),
        QueryBuilder.get_pull_requests("octo", "demo", states=["OPEN"]),
        QueryBuilder.get_discussions("octo", "demo"),
        MutationBuilder.create_issue("R_1", "Demo"),
        MutationBuilder.create_discussion("R_1", "DC_1", "Hello", "Body"),
        MutationBuilder.create_pull_request("R_1", "Feature", "feature", "main"),
        MutationBuilder.add_labels("I_1", ["LA_1"]),
        MutationBuilder.close_issue("I_1"),
        MutationBuilder.close_pull_request("PR_1"),
        MutationBuilder.delete_discussion("D_1"),
        MutationBuilder.delete_label("LA_1"),
        QueryBuilder.get_repository_owner_id("octo"),
        QueryBuilder.get_project("PVT_1"),
        MutationBuilder.create_project("O_1", "Demo board"),
        MutationBuilder.create_project_field("PVT_1", "Estimate", "NUMBER"),
        MutationBuilder.create_project_single_select_field(
            "PVT_1", "Status", [{"name": "Todo", "description": "Todo", "color": "GRAY"}]
        ),
        MutationBuilder.update_project_description("PVT_1", "Demo work"),
        MutationBuilder.add_project_item("PVT_1", "I_1"),
    ],
)
def test_documents_parse(built):
    query, variables = built
    parse(query)
    assert isinstance(variables, dict)


def test_get_repository_id():
    query, variables = QueryBuilder.get_repository_id("octo", "demo")
    assert "repository(owner: $owner, name: $name)" in query
    assert variables == {"owner": "octo", "name": "demo"}


def test_get_label_id():
    query, variables = QueryBuilder.get_label_id("octo", "demo", "good first issue")
    assert "label(name: $labelName)" in query
    assert variables["labelName"] == "good first issue"


def test_list_queries_paginate():
    query, variables = QueryBuilder.get_labels("octo", "demo")
    assert "pageInfo" in query
    assert variables == {"owner": "octo", "name": "demo", "first": PAGE_SIZE}

    _, variables = QueryBuilder.get_labels("octo", "demo", after="CURSOR")
    assert variables["after"] == "CURSOR"


def test_get_issues_states():
    query, variables = QueryBuilder.get_issues("octo", "demo", states=["OPEN"], first=10, after="C1")
    assert "states: $states" in query
    assert variables["states"] == ["OPEN"]
    assert variables["first"] == 10
    assert variables["after"] == "C1"


def test_create_issue_variables():
    _, variables = MutationBuilder.create_issue(
        repository_id="R_1", title="Demo", body="Body", assignee_ids=["U_1"], label_ids=["LA_1"]
    )
    assert variables == {
        "repositoryId": "R_1",
        "title": "Demo",
        "body": "Body",
        "assigneeIds": ["U_1"],
        "labelIds": ["LA_1"],
    }


def test_create_discussion_uses_input_object():
    query, variables = MutationBuilder.create_discussion("R_1", "DC_1", "Hello", "Body")
    assert "$input: CreateDiscussionInput!" in query
    assert variables == {"input": {"repositoryId": "R_1", "categoryId": "DC_1", "title": "Hello", "body": "Body"}}


def test_create_pull_request_variables():
    query, variables = MutationBuilder.create_pull_request("R_1", "Feature", "feature", "main", draft=True)
    assert "createPullRequest" in query
    assert variables["headRefName"] == "feature"
    assert variables["baseRefName"] == "main"
    assert variables["draft"] is True


def test_close_and_delete_mutations():
    assert MutationBuilder.close_issue("I_1")[1] == {"issueId": "I_1"}
    assert MutationBuilder.close_pull_request("PR_1")[1] == {"pullRequestId": "PR_1"}
    assert MutationBuilder.delete_discussion("D_1")[1] == {"id": "D_1"}
    assert MutationBuilder.delete_label("LA_1")[1] == {"id": "LA_1"}


def test_project_mutations():
    query, variables = MutationBuilder.create_project("O_1", "Demo board")
    assert "createProjectV2" in query
    assert variables == {"ownerId": "O_1", "title": "Demo board"}

    query, variables = MutationBuilder.create_project_single_select_field(
        "PVT_1", "Status", [{"name": "Todo", "description": "Todo", "color": "GRAY"}]
    )
    assert "dataType: SINGLE_SELECT" in query
    assert variables["options"] == [{"name": "Todo", "description": "Todo", "color": "GRAY"}]

    query, variables = MutationBuilder.add_project_item("PVT_1", "I_1")
    assert "addProjectV2ItemById" in query
    assert variables == {"projectId": "PVT_1", "contentId": "I_1"}
