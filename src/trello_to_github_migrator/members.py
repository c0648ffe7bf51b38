"""
Resolution of Trello board members to GitHub users.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from .models import TrelloMember, UserMapping

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedMember:
    """A ``users`` mapping entry after looking up its GitHub side."""

    trello_name: str
    """Trello id, username or full name, as written in the mapping."""
    github_login: str | None
    """Login of the GitHub user, or None if the user does not exist."""
    github_name: str
    """GitHub user name as written in the mapping."""

    @property
    def is_valid(self) -> bool:
        return self.github_login is not None


def resolve_members(
    user_mappings: Sequence[UserMapping],
    lookup_user: Callable[[str], str | None],
) -> list[ResolvedMember]:
    """Look up the GitHub side of every user mapping.

    Args:
        user_mappings: The ``users`` entries of the mapping document
        lookup_user: Returns the login for a GitHub user name, or None when the
            user does not exist. Any other failure is raised and aborts the run.

    Returns:
        One resolved member per mapping entry, in mapping order
    """
    resolved: list[ResolvedMember] = []
    for mapping in user_mappings:
        login = lookup_user(mapping.github)
        if login is None:
            logger.debug(f"GitHub user @{mapping.github} not found")
        resolved.append(ResolvedMember(trello_name=mapping.trello, github_login=login, github_name=mapping.github))
    return resolved


class MemberDirectory:
    """Maps Trello member ids to GitHub logins."""

    def __init__(self, board_members: Sequence[TrelloMember], resolved_members: Sequence[ResolvedMember]) -> None:
        self._board_members: dict[str, TrelloMember] = {member.id: member for member in board_members}
        self.resolved_members: list[ResolvedMember] = list(resolved_members)

    @property
    def invalid_members(self) -> list[ResolvedMember]:
        return [member for member in self.resolved_members if not member.is_valid]

    def _find_resolved(self, trello_member_id: str) -> ResolvedMember | None:
        trello_member = self._board_members.get(trello_member_id)
        if trello_member is None:
            return None

        # A mapping may name a Trello member by id, username or full name, tried in that order
        for key in (trello_member.id, trello_member.username, trello_member.full_name):
            if not key:
                continue
            for resolved in self.resolved_members:
                if resolved.trello_name == key:
                    return resolved
        return None

    def map_member_id(self, trello_member_id: str) -> str | None:
        """GitHub login for a Trello member id, or None if it has no valid mapping."""
        resolved = self._find_resolved(trello_member_id)
        if resolved is None:
            return None
        return resolved.github_login

    def map_member_ids(self, trello_member_ids: Iterable[str]) -> list[str]:
        logins = (self.map_member_id(member_id) for member_id in trello_member_ids)
        return [login for login in logins if login is not None]

    def member_label(self, trello_member_id: str) -> str:
        """Human-readable name of a Trello member for reports."""
        trello_member = self._board_members.get(trello_member_id)
        if trello_member is None:
            return trello_member_id
        return trello_member.username or trello_member.full_name or trello_member.id
