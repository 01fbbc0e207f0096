"""GraphQL query and mutation builders for GitHub API."""

from __future__ import annotations

from typing import Any

from gh_demo.utils.constants import PAGE_SIZE

PAGE_INFO_FRAGMENT = """
fragment PageInfoFields on PageInfo {
    hasNextPage
    endCursor
}
"""


class QueryBuilder:
    """Builder for GraphQL queries."""

    @staticmethod
    def get_repository_id(owner: str, name: str) -> tuple[str, dict[str, Any]]:
        """
        Get the repository node ID.

        Args:
            owner: Repository owner
            name: Repository name

        Returns:
            Tuple of (GraphQL query string, variables dict)
        """
        query = """
            query GetRepositoryId($owner: String!, $name: String!) {
                repository(owner: $owner, name: $name) {
                    id
                }
            }
        """
        variables = {"owner": owner, "name": name}
        return query, variables

    @staticmethod
    def get_label_id(owner: str, name: str, label_name: str) -> tuple[str, dict[str, Any]]:
        """
        Get a label node ID by label name.

        Args:
            owner: Repository owner
            name: Repository name
            label_name: Label name

        Returns:
            Tuple of (GraphQL query string, variables dict)
        """
        query = """
            query GetLabelId($owner: String!, $name: String!, $labelName: String!) {
                repository(owner: $owner, name: $name) {
                    label(name: $labelName) {
                        id
                    }
                }
            }
        """
        variables = {"owner": owner, "name": name, "labelName": label_name}
        return query, variables

    @staticmethod
    def get_user_id(login: str) -> tuple[str, dict[str, Any]]:
        """Get a user node ID by login."""
        query = """
            query GetUserId($login: String!) {
                user(login: $login) {
                    id
                }
            }
        """
        return query, {"login": login}

    @staticmethod
    def get_discussion_categories(owner: str, name: str, first: int = PAGE_SIZE) -> tuple[str, dict[str, Any]]:
        """
        Get the discussion categories configured for a repository.

        Args:
            owner: Repository owner
            name: Repository name
            first: Number of categories to fetch

        Returns:
            Tuple of (GraphQL query string, variables dict)
        """
        query = """
            query GetDiscussionCategories($owner: String!, $name: String!, $first: Int!) {
                repository(owner: $owner, name: $name) {
                    discussionCategories(first: $first) {
                        nodes {
                            id
                            name
                        }
                    }
                }
            }
        """
        variables = {"owner": owner, "name": name, "first": first}
        return query, variables

    @staticmethod
    def get_labels(
        owner: str, name: str, first: int = PAGE_SIZE, after: str | None = None
    ) -> tuple[str, dict[str, Any]]:
        """
        Get repository labels with pagination.

        Args:
            owner: Repository owner
            name: Repository name
            first: Page size
            after: Cursor for pagination

        Returns:
            Tuple of (GraphQL query string, variables dict)
        """
        query = (
            PAGE_INFO_FRAGMENT
            + """
            query ListLabels($owner: String!, $name: String!, $first: Int!, $after: String) {
                repository(owner: $owner, name: $name) {
                    labels(first: $first, after: $after) {
                        pageInfo {
                            ...PageInfoFields
                        }
                        nodes {
                            id
                            name
                            color
                            description
                        }
                    }
                }
            }
        """
        )
        variables: dict[str, Any] = {"owner": owner, "name": name, "first": first}
        if after:
            variables["after"] = after
        return query, variables

    @staticmethod
    def get_issues(
        owner: str,
        name: str,
        states: list[str] | None = None,
        first: int = PAGE_SIZE,
        after: str | None = None,
    ) -> tuple[str, dict[str, Any]]:
        """
        Get issues with pagination.

        Args:
            owner: Repository owner
            name: Repository name
            states: Issue states to filter (OPEN, CLOSED)
            first: Page size
            after: Cursor for pagination

        Returns:
            Tuple of (GraphQL query string, variables dict)
        """
        query = (
            PAGE_INFO_FRAGMENT
            + """
            query ListIssues($owner: String!, $name: String!, $states: [IssueState!], $first: Int!, $after: String) {
                repository(owner: $owner, name: $name) {
                    issues(states: $states, first: $first, after: $after) {
                        pageInfo {
                            ...PageInfoFields
                        }
                        nodes {
                            id
                            number
                            title
                            body
                            labels(first: 100) {
                                nodes {
                                    name
                                }
                            }
                            assignees(first: 100) {
                                nodes {
                                    login
                                }
                            }
                        }
                    }
                }
            }
        """
        )
        variables: dict[str, Any] = {"owner": owner, "name": name, "first": first}
        if states:
            variables["states"] = states
        if after:
            variables["after"] = after
        return query, variables

    @staticmethod
    def get_pull_requests(
        owner: str,
        name: str,
        states: list[str] | None = None,
        first: int = PAGE_SIZE,
        after: str | None = None,
    ) -> tuple[str, dict[str, Any]]:
        """
        Get pull requests with pagination.

        Args:
            owner: Repository owner
            name: Repository name
            states: PR states to filter (OPEN, CLOSED, MERGED)
            first: Page size
            after: Cursor for pagination

        Returns:
            Tuple of (GraphQL query string, variables dict)
        """
        query = (
            PAGE_INFO_FRAGMENT
            + """
            query ListPullRequests(
                $owner: String!, $name: String!, $states: [PullRequestState!], $first: Int!, $after: String
            ) {
                repository(owner: $owner, name: $name) {
                    pullRequests(states: $states, first: $first, after: $after) {
                        pageInfo {
                            ...PageInfoFields
                        }
                        nodes {
                            id
                            number
                            title
                            body
                            headRefName
                            baseRefName
                            isDraft
                            labels(first: 100) {
                                nodes {
                                    name
                                }
                            }
                            assignees(first: 100) {
                                nodes {
                                    login
                                }
                            }
                        }
                    }
                }
            }
        """
        )
        variables: dict[str, Any] = {"owner": owner, "name": name, "first": first}
        if states:
            variables["states"] = states
        if after:
            variables["after"] = after
        return query, variables

    @staticmethod
    def get_discussions(
        owner: str, name: str, first: int = PAGE_SIZE, after: str | None = None
    ) -> tuple[str, dict[str, Any]]:
        """
        Get discussions with pagination.

        Args:
            owner: Repository owner
            name: Repository name
            first: Page size
            after: Cursor for pagination

        Returns:
            Tuple of (GraphQL query string, variables dict)
        """
        query = (
            PAGE_INFO_FRAGMENT
            + """
            query ListDiscussions($owner: String!, $name: String!, $first: Int!, $after: String) {
                repository(owner: $owner, name: $name) {
                    discussions(first: $first, after: $after) {
                        pageInfo {
                            ...PageInfoFields
                        }
                        nodes {
                            id
                            number
                            title
                            body
                            category {
                                name
                            }
                            labels(first: 100) {
                                nodes {
                                    name
                                }
                            }
                        }
                    }
                }
            }
        """
        )
        variables: dict[str, Any] = {"owner": owner, "name": name, "first": first}
        if after:
            variables["after"] = after
        return query, variables

    @staticmethod
    def get_repository_owner_id(owner: str) -> tuple[str, dict[str, Any]]:
        """Get the node ID of a user or organization; projects are created under it."""
        query = """
            query GetRepositoryOwnerId($owner: String!) {
                repositoryOwner(login: $owner) {
                    id
                }
            }
        """
        return query, {"owner": owner}

    @staticmethod
    def get_project(project_id: str) -> tuple[str, dict[str, Any]]:
        """
        Get a project board by node ID.

        Args:
            project_id: ProjectV2 node ID

        Returns:
            Tuple of (GraphQL query string, variables dict)
        """
        query = """
            query GetProject($projectId: ID!) {
                node(id: $projectId) {
                    ... on ProjectV2 {
                        id
                        number
                        title
                        shortDescription
                        url
                        public
                    }
                }
            }
        """
        return query, {"projectId": project_id}


class MutationBuilder:
    """Builder for GraphQL mutations."""

    @staticmethod
    def create_issue(
        repository_id: str,
        title: str,
        body: str | None = None,
        assignee_ids: list[str] | None = None,
        label_ids: list[str] | None = None,
    ) -> tuple[str, dict[str, Any]]:
        """
        Create a new issue.

        Args:
            repository_id: Repository node ID
            title: Issue title
            body: Issue body (optional)
            assignee_ids: List of assignee node IDs (optional)
            label_ids: List of label node IDs (optional)

        Returns:
            Tuple of (mutation string, variables dict)
        """
        mutation = """
            mutation CreateIssue(
                $repositoryId: ID!, $title: String!, $body: String, $assigneeIds: [ID!], $labelIds: [ID!]
            ) {
                createIssue(input: {
                    repositoryId: $repositoryId,
                    title: $title,
                    body: $body,
                    assigneeIds: $assigneeIds,
                    labelIds: $labelIds
                }) {
                    issue {
                        id
                        number
                        title
                        url
                    }
                }
            }
        """
        variables = {
            "repositoryId": repository_id,
            "title": title,
            "body": body,
            "assigneeIds": assignee_ids,
            "labelIds": label_ids,
        }
        return mutation, variables

    @staticmethod
    def create_discussion(repository_id: str, category_id: str, title: str, body: str) -> tuple[str, dict[str, Any]]:
        """
        Create a new discussion.

        Args:
            repository_id: Repository node ID
            category_id: Discussion category node ID
            title: Discussion title
            body: Discussion body

        Returns:
            Tuple of (mutation string, variables dict)
        """
        mutation = """
            mutation CreateDiscussion($input: CreateDiscussionInput!) {
                createDiscussion(input: $input) {
                    discussion {
                        id
                        number
                        title
                        url
                    }
                }
            }
        """
        variables = {
            "input": {
                "repositoryId": repository_id,
                "categoryId": category_id,
                "title": title,
                "body": body,
            }
        }
        return mutation, variables

    @staticmethod
    def create_pull_request(
        repository_id: str,
        title: str,
        head: str,
        base: str,
        body: str | None = None,
        draft: bool = False,
    ) -> tuple[str, dict[str, Any]]:
        """
        Create a new pull request.

        Args:
            repository_id: Repository node ID
            title: Pull request title
            head: Name of the branch holding the changes
            base: Name of the branch to merge into
            body: Pull request body (optional)
            draft: Open the pull request as a draft

        Returns:
            Tuple of (mutation string, variables dict)
        """
        mutation = """
            mutation CreatePullRequest(
                $repositoryId: ID!, $title: String!, $body: String,
                $headRefName: String!, $baseRefName: String!, $draft: Boolean
            ) {
                createPullRequest(input: {
                    repositoryId: $repositoryId,
                    title: $title,
                    body: $body,
                    headRefName: $headRefName,
                    baseRefName: $baseRefName,
                    draft: $draft
                }) {
                    pullRequest {
                        id
                        number
                        title
                        url
                    }
                }
            }
        """
        variables = {
            "repositoryId": repository_id,
            "title": title,
            "body": body,
            "headRefName": head,
            "baseRefName": base,
            "draft": draft,
        }
        return mutation, variables

    @staticmethod
    def add_labels(labelable_id: str, label_ids: list[str]) -> tuple[str, dict[str, Any]]:
        """
        Add labels to an issue, PR or discussion.

        Args:
            labelable_id: The node ID of the labelable item
            label_ids: List of label node IDs

        Returns:
            Tuple of (mutation string, variables dict)
        """
        mutation = """
            mutation AddLabels($labelableId: ID!, $labelIds: [ID!]!) {
                addLabelsToLabelable(input: {labelableId: $labelableId, labelIds: $labelIds}) {
                    clientMutationId
                }
            }
        """
        variables = {
            "labelableId": labelable_id,
            "labelIds": label_ids,
        }
        return mutation, variables

    @staticmethod
    def close_issue(issue_id: str) -> tuple[str, dict[str, Any]]:
        """Close an issue. Deleting issues needs admin rights, so cleanup closes them."""
        mutation = """
            mutation CloseIssue($issueId: ID!) {
                closeIssue(input: {issueId: $issueId}) {
                    issue {
                        id
                        state
                    }
                }
            }
        """
        return mutation, {"issueId": issue_id}

    @staticmethod
    def close_pull_request(pull_request_id: str) -> tuple[str, dict[str, Any]]:
        """Close a pull request. GitHub has no pull request deletion."""
        mutation = """
            mutation ClosePullRequest($pullRequestId: ID!) {
                closePullRequest(input: {pullRequestId: $pullRequestId}) {
                    pullRequest {
                        id
                        state
                    }
                }
            }
        """
        return mutation, {"pullRequestId": pull_request_id}

    @staticmethod
    def delete_discussion(discussion_id: str) -> tuple[str, dict[str, Any]]:
        mutation = """
            mutation DeleteDiscussion($id: ID!) {
                deleteDiscussion(input: {id: $id}) {
                    discussion {
                        id
                    }
                }
            }
        """
        return mutation, {"id": discussion_id}

    @staticmethod
    def delete_label(label_id: str) -> tuple[str, dict[str, Any]]:
        mutation = """
            mutation DeleteLabel($id: ID!) {
                deleteLabel(input: {id: $id}) {
                    clientMutationId
                }
            }
        """
        return mutation, {"id": label_id}

    @staticmethod
    def create_project(owner_id: str, title: str) -> tuple[str, dict[str, Any]]:
        """
        Create a project board owned by a user or organization.

        Args:
            owner_id: Node ID of the repository owner
            title: Project title

        Returns:
            Tuple of (mutation string, variables dict)
        """
        mutation = """
            mutation CreateProject($ownerId: ID!, $title: String!) {
                createProjectV2(input: {ownerId: $ownerId, title: $title}) {
                    projectV2 {
                        id
                        number
                        title
                        url
                    }
                }
            }
        """
        return mutation, {"ownerId": owner_id, "title": title}

    @staticmethod
    def create_project_field(project_id: str, name: str, data_type: str) -> tuple[str, dict[str, Any]]:
        """
        Add a text, number or date field to a project.

        Args:
            project_id: ProjectV2 node ID
            name: Field name
            data_type: TEXT, NUMBER or DATE

        Returns:
            Tuple of (mutation string, variables dict)
        """
        mutation = """
            mutation CreateProjectField($projectId: ID!, $dataType: ProjectV2CustomFieldType!, $name: String!) {
                createProjectV2Field(input: {projectId: $projectId, dataType: $dataType, name: $name}) {
                    projectV2Field {
                        ... on ProjectV2Field {
                            id
                            name
                            dataType
                        }
                    }
                }
            }
        """
        return mutation, {"projectId": project_id, "dataType": data_type, "name": name}

    @staticmethod
    def create_project_single_select_field(
        project_id: str, name: str, options: list[dict[str, str]]
    ) -> tuple[str, dict[str, Any]]:
        """
        Add a single select field to a project.

        Args:
            project_id: ProjectV2 node ID
            name: Field name
            options: Dicts with name, description and color (ProjectV2SingleSelectFieldOptionInput)

        Returns:
            Tuple of (mutation string, variables dict)
        """
        mutation = """
            mutation CreateProjectSingleSelectField(
                $projectId: ID!, $name: String!, $options: [ProjectV2SingleSelectFieldOptionInput!]!
            ) {
                createProjectV2Field(input: {
                    projectId: $projectId,
                    dataType: SINGLE_SELECT,
                    name: $name,
                    singleSelectOptions: $options
                }) {
                    projectV2Field {
                        ... on ProjectV2SingleSelectField {
                            id
                            name
                            dataType
                        }
                    }
                }
            }
        """
        return mutation, {"projectId": project_id, "name": name, "options": options}

    @staticmethod
    def update_project_description(project_id: str, description: str) -> tuple[str, dict[str, Any]]:
        mutation = """
            mutation UpdateProjectDescription($projectId: ID!, $description: String!) {
                updateProjectV2(input: {projectId: $projectId, shortDescription: $description}) {
                    projectV2 {
                        id
                        shortDescription
                    }
                }
            }
        """
        return mutation, {"projectId": project_id, "description": description}

    @staticmethod
    def add_project_item(project_id: str, content_id: str) -> tuple[str, dict[str, Any]]:
        """Add an issue, pull request or discussion to a project by its node ID."""
        mutation = """
            mutation AddProjectItem($projectId: ID!, $contentId: ID!) {
                addProjectV2ItemById(input: {projectId: $projectId, contentId: $contentId}) {
                    item {
                        id
                    }
                }
            }
        """
        return mutation, {"projectId": project_id, "contentId": content_id}
