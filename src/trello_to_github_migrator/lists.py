"""
Resolution of the ``lists`` and ``skip.lists`` mapping entries against the board.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import GithubMilestone, ListMapping, ProjectInfo, StatusOption, TrelloList


@dataclass
class ListClassification:
    """Result of resolving list mappings.

    The ``invalid_list_refs``, ``missing_milestones``, ``missing_status_fields``
    and ``status_without_project`` collections are all fatal to the migration.
    """

    milestone_by_list_id: dict[str, int] = field(default_factory=dict)
    """Trello list id -> GitHub milestone number."""
    status_by_list_id: dict[str, StatusOption] = field(default_factory=dict)
    """Trello list id -> project status option."""
    skipped_list_ids: set[str] = field(default_factory=set)
    invalid_list_refs: list[str] = field(default_factory=list)
    missing_milestones: list[tuple[str, int | str]] = field(default_factory=list)
    """(list name, milestone lookup) pairs."""
    missing_status_fields: list[tuple[str, str]] = field(default_factory=list)
    """(list name, status lookup) pairs."""
    status_without_project: list[str] = field(default_factory=list)
    """Names of lists that set a status although no project is configured."""

    @property
    def problems(self) -> list[str]:
        problems = [f"Could not find Trello list {ref!r}" for ref in self.invalid_list_refs]
        problems.extend(
            f"Could not find GitHub milestone {lookup!r} for Trello list {name!r}"
            for name, lookup in self.missing_milestones
        )
        problems.extend(
            f"Could not find project status {lookup!r} for Trello list {name!r}"
            for name, lookup in self.missing_status_fields
        )
        problems.extend(
            f"Trello list {name!r} sets a status, but no project is configured"
            for name in self.status_without_project
        )
        return problems


def find_list(list_ref: str, trello_lists: Sequence[TrelloList]) -> TrelloList | None:
    """Find a list by id or name. The first list in board order wins."""
    return next((lst for lst in trello_lists if list_ref in (lst.id, lst.name)), None)


def find_milestone(lookup: int | str, milestones: Sequence[GithubMilestone]) -> GithubMilestone | None:
    """Find a milestone by id or number (integer lookups) or by title."""
    for milestone in milestones:
        if isinstance(lookup, int) and lookup in (milestone.id, milestone.number):
            return milestone
        if milestone.title == lookup:
            return milestone
    return None


def find_status_option(lookup: str, project: ProjectInfo) -> StatusOption | None:
    """Find a project status option by id or name."""
    return next((option for option in project.status_options if lookup in (option.id, option.name)), None)


def classify_lists(
    list_mappings: Sequence[ListMapping],
    skip_lists: Sequence[str],
    trello_lists: Sequence[TrelloList],
    github_milestones: Sequence[GithubMilestone],
    project: ProjectInfo | None,
) -> ListClassification:
    """Resolve list mappings to milestones and project statuses, and the skip list to list ids.

    No network calls are made; milestones and the project are fetched beforehand.
    """
    result = ListClassification()

    for mapping in list_mappings:
        trello_list = find_list(mapping.list_ref, trello_lists)
        if trello_list is None:
            result.invalid_list_refs.append(mapping.list_ref)
            continue

        if mapping.milestone is not None:
            milestone = find_milestone(mapping.milestone, github_milestones)
            if milestone is None:
                result.missing_milestones.append((trello_list.name, mapping.milestone))
            else:
                result.milestone_by_list_id[trello_list.id] = milestone.number

        if mapping.status is not None:
            if project is None:
                result.status_without_project.append(trello_list.name)
                continue
            option = find_status_option(mapping.status, project)
            if option is None:
                result.missing_status_fields.append((trello_list.name, mapping.status))
            else:
                result.status_by_list_id[trello_list.id] = option

    for list_ref in skip_lists:
        trello_list = find_list(list_ref, trello_lists)
        if trello_list is None:
            result.invalid_list_refs.append(list_ref)
        else:
            result.skipped_list_ids.add(trello_list.id)

    return result
