from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Final

from github import Auth, Github, UnknownObjectException

from . import projects, utils
from .exceptions import MigrationError
from .models import CreatedIssue, GithubLabel, GithubMilestone

if TYPE_CHECKING:
    from github.Issue import Issue
    from github.Milestone import Milestone
    from github.Repository import Repository

    from .models import IssuePayload, ProjectInfo, RepoContext

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

_TOKEN_ENV_VAR: Final[str] = "GITHUB_TOKEN"  # noqa: S105
_DEFAULT_TOKEN_PASS_PATH: Final[str] = "github/cli/token"  # noqa: S105


def get_token(pass_path: str | None = None) -> str | None:
    """Get GitHub token from pass path, env var GITHUB_TOKEN, or default pass location."""
    if pass_path:
        return utils.get_pass_value(pass_path)

    token: str | None = os.environ.get(_TOKEN_ENV_VAR)
    if token:
        return token

    try:
        return utils.get_pass_value(_DEFAULT_TOKEN_PASS_PATH)
    except utils.PassError:
        logger.warning("No GitHub token specified nor found")
        return None


def get_client(token: str | None = None) -> Github:
    """Get a GitHub client using the token. Falls back to anonymous access without one."""
    if token:
        return Github(auth=Auth.Token(token))
    return Github()


class GithubTarget:
    """Target system backed by the GitHub REST and GraphQL APIs."""

    def __init__(self, client: Github, repo_context: RepoContext) -> None:
        self.client: Github = client
        self.repo_context: RepoContext = repo_context
        self._repo: Repository | None = None
        self._milestones: dict[int, Milestone] = {}
        # Issues created during this run, by number
        self._issues: dict[int, Issue] = {}

    @property
    def repo(self) -> Repository:
        if self._repo is None:
            try:
                self._repo = self.client.get_repo(self.repo_context.full_name)
            except UnknownObjectException as e:
                msg = f"GitHub repository {self.repo_context.full_name} not found"
                raise MigrationError(msg) from e
        return self._repo

    def get_labels(self) -> list[GithubLabel]:
        return [GithubLabel(id=label.id, name=label.name, color=label.color) for label in self.repo.get_labels()]

    def get_milestones(self) -> list[GithubMilestone]:
        milestones: list[GithubMilestone] = []
        for milestone in self.repo.get_milestones(state="all"):
            self._milestones[milestone.number] = milestone
            milestones.append(GithubMilestone(id=milestone.id, number=milestone.number, title=milestone.title))
        return milestones

    def get_project(self, project_number: int) -> ProjectInfo:
        return projects.fetch_project_info(self.client.requester, self.repo_context, project_number)

    def lookup_user(self, username: str) -> str | None:
        try:
            user = self.client.get_user(username)
        except UnknownObjectException:
            return None
        return user.login

    def create_label(self, name: str, color: str) -> None:
        _ = self.repo.create_label(name=name, color=color)
        logger.debug(f"Created label: {name} (#{color})")

    def _get_milestone(self, number: int) -> Milestone:
        if number not in self._milestones:
            self._milestones[number] = self.repo.get_milestone(number)
        return self._milestones[number]

    def create_issue(self, payload: IssuePayload) -> CreatedIssue:
        # Only pass milestone if there is one
        if payload.milestone is not None:
            issue = self.repo.create_issue(
                title=payload.title,
                body=payload.body,
                labels=payload.labels,
                assignees=payload.assignees,
                milestone=self._get_milestone(payload.milestone),
            )
        else:
            issue = self.repo.create_issue(
                title=payload.title, body=payload.body, labels=payload.labels, assignees=payload.assignees
            )
        self._issues[issue.number] = issue
        return CreatedIssue(number=issue.number, node_id=issue.node_id)

    def create_comment(self, issue_number: int, body: str) -> None:
        issue = self._issues.get(issue_number) or self.repo.get_issue(issue_number)
        _ = issue.create_comment(body)

    def add_project_item(self, project_id: str, issue_node_id: str) -> str:
        return projects.add_project_item(self.client.requester, project_id, issue_node_id)

    def set_project_item_status(self, project_id: str, item_id: str, field_id: str, option_id: str) -> None:
        projects.set_project_item_status(self.client.requester, project_id, item_id, field_id, option_id)
