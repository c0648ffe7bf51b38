"""
Pytest configuration and fixtures.

- Integration tests (end-to-end migration scenarios) fail on any warning logged
  by the code under test.
- Unit tests allow warnings.
- ``FakeTarget`` is an in-memory target system recording every call made to it.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any

from typing_extensions import override

import pytest

from trello_to_github_migrator.exceptions import MigrationError
from trello_to_github_migrator.models import (
    CreatedIssue,
    GithubLabel,
    GithubMilestone,
    IssuePayload,
    ProjectInfo,
)

if TYPE_CHECKING:
    from collections.abc import Generator, Iterable

# Store warning records during test execution
_integration_test_warnings: dict[str, list[logging.LogRecord]] = {}


class IntegrationTestWarningHandler(logging.Handler):
    """Logging handler capturing warnings emitted during an integration test."""

    test_nodeid: str

    def __init__(self, test_nodeid: str) -> None:
        super().__init__()
        self.test_nodeid = test_nodeid
        self.setLevel(logging.WARNING)

    @override
    def emit(self, record: logging.LogRecord) -> None:
        _integration_test_warnings.setdefault(self.test_nodeid, []).append(record)


@pytest.fixture(autouse=True)
def fail_on_log_warnings_for_integration_tests(
    request: pytest.FixtureRequest,
) -> Generator[None]:
    """Capture WARNING and above logs during integration tests.

    A clean migration is expected to log nothing at warning level; the
    report hook below turns captured warnings into a test failure.
    """
    if request.node.get_closest_marker("integration") is None:
        yield
        return

    test_nodeid = request.node.nodeid
    _integration_test_warnings[test_nodeid] = []

    handler = IntegrationTestWarningHandler(test_nodeid)
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    try:
        yield
    finally:
        root_logger.removeHandler(handler)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None]:  # type: ignore[misc]
    """Mark a passed integration test as failed if warnings were logged during it."""
    outcome = yield
    report = outcome.get_result()

    if call.when == "call" and report.outcome == "passed":
        warning_records = _integration_test_warnings.get(item.nodeid, [])

        if warning_records:
            warning_messages = [
                f"{record.levelname}: {record.getMessage()} (in {record.name}:{record.lineno})"
                for record in warning_records
            ]
            report.outcome = "failed"
            report.longrepr = f"Integration test failed: {len(warning_records)} warning(s) detected:\n" + "\n".join(
                f"  - {msg}" for msg in warning_messages
            )

        _integration_test_warnings.pop(item.nodeid, None)


class FakeTarget:
    """In-memory target system.

    Mutating calls are recorded in ``calls`` in the order they were made.
    """

    def __init__(
        self,
        *,
        labels: Iterable[GithubLabel] = (),
        milestones: Iterable[GithubMilestone] = (),
        project: ProjectInfo | None = None,
        users: Iterable[str] = (),
    ) -> None:
        self.labels: list[GithubLabel] = list(labels)
        self.milestones: list[GithubMilestone] = list(milestones)
        self.project: ProjectInfo | None = project
        self.users: set[str] = set(users)
        self.calls: list[tuple[Any, ...]] = []
        self.issues: list[IssuePayload] = []

    def get_labels(self) -> list[GithubLabel]:
        return list(self.labels)

    def get_milestones(self) -> list[GithubMilestone]:
        return list(self.milestones)

    def get_project(self, project_number: int) -> ProjectInfo:
        if self.project is None:
            msg = f"Project #{project_number} not found"
            raise MigrationError(msg)
        return self.project

    def lookup_user(self, username: str) -> str | None:
        return username if username in self.users else None

    def create_label(self, name: str, color: str) -> None:
        self.calls.append(("create_label", name, color))

    def create_issue(self, payload: IssuePayload) -> CreatedIssue:
        self.issues.append(payload)
        number = len(self.issues)
        self.calls.append(("create_issue", payload.title))
        return CreatedIssue(number=number, node_id=f"I_{number}")

    def create_comment(self, issue_number: int, body: str) -> None:
        self.calls.append(("create_comment", issue_number, body))

    def add_project_item(self, project_id: str, issue_node_id: str) -> str:
        self.calls.append(("add_project_item", project_id, issue_node_id))
        return f"ITEM_{issue_node_id}"

    def set_project_item_status(self, project_id: str, item_id: str, field_id: str, option_id: str) -> None:
        self.calls.append(("set_project_item_status", project_id, item_id, field_id, option_id))

    @property
    def mutating_call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


_BOARD: dict[str, Any] = {
    "name": "Roadmap",
    "lists": [
        {"id": "list-todo", "name": "To Do", "closed": False},
        {"id": "list-doing", "name": "In Progress", "closed": False},
        {"id": "list-done", "name": "Done", "closed": False},
    ],
    "members": [
        {"id": "mem-alice", "fullName": "Alice Liddell", "username": "alice"},
        {"id": "mem-bob", "fullName": "Bob Builder", "username": "bobb"},
    ],
    "labels": [
        {"id": "lab-bug", "name": "Bug", "color": "red", "uses": 1},
        {"id": "lab-rfc", "name": "RFC", "color": "blue", "uses": 1},
    ],
    "cards": [
        {
            "id": "card-1",
            "name": "Fix login",
            "closed": False,
            "desc": "Login fails on Safari",
            "idList": "list-todo",
            "idMembers": ["mem-alice"],
            "labels": [{"id": "lab-bug", "name": "Bug", "color": "red"}],
            "idChecklists": [],
            "url": "https://trello.com/c/abc123/1-fix-login",
        },
    ],
    "checklists": [],
    "actions": [],
}


@pytest.fixture
def board_data() -> dict[str, Any]:
    """Raw board export with three lists, two members, two labels and one card."""
    return copy.deepcopy(_BOARD)


@pytest.fixture
def mapping_data() -> dict[str, Any]:
    """Raw mapping document targeting octo/sample."""
    return {"repo": {"owner": "octo", "repo": "sample"}}


@pytest.fixture
def make_target() -> type[FakeTarget]:
    """Factory for in-memory target systems."""
    return FakeTarget
