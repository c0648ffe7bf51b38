"""Protocol defining the contract for the migration target.

The migrator only talks to GitHub through this protocol. ``GithubTarget``
(in ``github_utils``) implements it with PyGithub; tests use an in-memory
implementation.

Read-only methods are called once each during validation. The create methods
are only called after validation and confirmation have succeeded, in this
order for each card: create_issue, create_comment (per comment),
add_project_item, set_project_item_status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import CreatedIssue, GithubLabel, GithubMilestone, IssuePayload, ProjectInfo


class TargetSystem(Protocol):
    """Protocol for reading and creating data in the target repository."""

    def get_labels(self) -> list[GithubLabel]:
        """Return all labels currently in the repository."""
        ...

    def get_milestones(self) -> list[GithubMilestone]:
        """Return all milestones (open and closed) of the repository."""
        ...

    def get_project(self, project_number: int) -> ProjectInfo:
        """Look up a project owned by the repository owner.

        Raises:
            MigrationError: If the project or its status field does not exist
        """
        ...

    def lookup_user(self, username: str) -> str | None:
        """Return the login of a GitHub user, or None if no such user exists.

        Any failure other than "not found" is raised.
        """
        ...

    def create_label(self, name: str, color: str) -> None:
        """Create a label. ``color`` is a hex color without '#'."""
        ...

    def create_issue(self, payload: IssuePayload) -> CreatedIssue:
        """Create an issue and return its number and node id."""
        ...

    def create_comment(self, issue_number: int, body: str) -> None:
        """Add a comment to an issue created by this target."""
        ...

    def add_project_item(self, project_id: str, issue_node_id: str) -> str:
        """Add an issue to a project and return the project item id."""
        ...

    def set_project_item_status(self, project_id: str, item_id: str, field_id: str, option_id: str) -> None:
        """Set the single-select status field of a project item."""
        ...
