"""
GitHub Projects (v2) support: project lookup, adding issues and setting their status.

Projects are only reachable through the GraphQL API. Queries go through
PyGithub's requester so they share authentication and rate limiting with the
REST calls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from github import UnknownObjectException

from .exceptions import MigrationError
from .models import ProjectInfo, StatusOption

if TYPE_CHECKING:
    from github.Requester import Requester

    from .models import RepoContext

logger: logging.Logger = logging.getLogger(__name__)

STATUS_FIELD_NAME: Final[str] = "Status"

_PROJECT_QUERY: Final[str] = """
query($login: String!, $number: Int!) {
    %(owner_type)s(login: $login) {
        projectV2(number: $number) {
            id
            title
            field(name: "%(status_field)s") {
                ... on ProjectV2SingleSelectField {
                    id
                    options {
                        id
                        name
                        color
                    }
                }
            }
        }
    }
}
"""

_ADD_ITEM_MUTATION: Final[str] = """
mutation($projectId: ID!, $contentId: ID!) {
    addProjectV2ItemById(input: {projectId: $projectId, contentId: $contentId}) {
        item {
            id
        }
    }
}
"""

_SET_STATUS_MUTATION: Final[str] = """
mutation($projectId: ID!, $itemId: ID!, $fieldId: ID!, $optionId: String!) {
    updateProjectV2ItemFieldValue(
        input: {projectId: $projectId, itemId: $itemId, fieldId: $fieldId, value: {singleSelectOptionId: $optionId}}
    ) {
        projectV2Item {
            id
        }
    }
}
"""


def _graphql(requester: Requester, query: str, variables: dict[str, Any]) -> dict[str, Any]:
    """Run a GraphQL query and return its ``data``. PyGithub raises on error responses."""
    _, response = requester.graphql_query(query, variables)
    return response.get("data") or {}


def fetch_project_info(requester: Requester, repo_context: RepoContext, project_number: int) -> ProjectInfo:
    """Look up a project owned by the repository owner, with its status field options.

    Raises:
        MigrationError: If the project or its single-select status field does not exist
    """
    owner_type = "organization" if repo_context.owner_is_organization else "user"
    query = _PROJECT_QUERY % {"owner_type": owner_type, "status_field": STATUS_FIELD_NAME}
    msg = f"Project #{project_number} not found for {owner_type} {repo_context.owner}"
    try:
        data = _graphql(requester, query, {"login": repo_context.owner, "number": project_number})
    except UnknownObjectException as e:
        raise MigrationError(msg) from e

    project = (data.get(owner_type) or {}).get("projectV2")
    if not project:
        raise MigrationError(msg)

    status_field = project.get("field") or {}
    if not status_field.get("id"):
        msg = f"Project '{project['title']}' has no single-select '{STATUS_FIELD_NAME}' field"
        raise MigrationError(msg)

    options = tuple(
        StatusOption(id=option["id"], name=option["name"], color=option.get("color") or "")
        for option in status_field.get("options", [])
    )
    logger.debug(f"Found project '{project['title']}' with {len(options)} status options")
    return ProjectInfo(
        project_id=project["id"],
        project_name=project["title"],
        status_field_id=status_field["id"],
        status_options=options,
    )


def add_project_item(requester: Requester, project_id: str, content_id: str) -> str:
    """Add an issue (by node id) to a project and return the project item id."""
    data = _graphql(requester, _ADD_ITEM_MUTATION, {"projectId": project_id, "contentId": content_id})
    return data["addProjectV2ItemById"]["item"]["id"]


def set_project_item_status(requester: Requester, project_id: str, item_id: str, field_id: str, option_id: str) -> None:
    """Set the single-select status field of a project item."""
    _ = _graphql(
        requester,
        _SET_STATUS_MUTATION,
        {"projectId": project_id, "itemId": item_id, "fieldId": field_id, "optionId": option_id},
    )
