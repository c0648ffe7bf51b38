"""
Tests for member resolution.
"""

from unittest.mock import Mock

import pytest

from trello_to_github_migrator.members import MemberDirectory, ResolvedMember, resolve_members
from trello_to_github_migrator.models import TrelloMember, UserMapping

ALICE = TrelloMember(id="mem-alice", username="alice", full_name="Alice Liddell")
BOB = TrelloMember(id="mem-bob", username="bobb", full_name="Bob Builder")
NAMELESS = TrelloMember(id="mem-anon")


@pytest.mark.unit
class TestResolveMembers:
    """Test lookup of the GitHub side of user mappings."""

    def test_valid_and_invalid_users(self) -> None:
        lookup = Mock(side_effect=lambda name: "alice-gh" if name == "alice-gh" else None)
        mappings = [UserMapping(trello="alice", github="alice-gh"), UserMapping(trello="bobb", github="ghost")]

        result = resolve_members(mappings, lookup)

        assert result == [
            ResolvedMember(trello_name="alice", github_login="alice-gh", github_name="alice-gh"),
            ResolvedMember(trello_name="bobb", github_login=None, github_name="ghost"),
        ]
        assert [member.is_valid for member in result] == [True, False]
        assert lookup.call_count == 2

    def test_lookup_errors_propagate(self) -> None:
        lookup = Mock(side_effect=RuntimeError("rate limited"))

        with pytest.raises(RuntimeError, match="rate limited"):
            _ = resolve_members([UserMapping(trello="alice", github="alice")], lookup)


@pytest.mark.unit
class TestMemberDirectory:
    """Test mapping Trello member ids to GitHub logins."""

    def test_map_by_username(self) -> None:
        directory = MemberDirectory([ALICE, BOB], [ResolvedMember("alice", "alice-gh", "alice-gh")])

        assert directory.map_member_id("mem-alice") == "alice-gh"
        assert directory.map_member_id("mem-bob") is None

    def test_map_by_id_and_full_name(self) -> None:
        directory = MemberDirectory(
            [ALICE, BOB],
            [ResolvedMember("mem-alice", "alice-gh", "alice-gh"), ResolvedMember("Bob Builder", "bob-gh", "bob-gh")],
        )

        assert directory.map_member_ids(["mem-bob", "mem-alice"]) == ["bob-gh", "alice-gh"]

    def test_id_takes_precedence_over_username(self) -> None:
        directory = MemberDirectory(
            [ALICE],
            [
                ResolvedMember("alice", "by-username", "by-username"),
                ResolvedMember("mem-alice", "by-id", "by-id"),
            ],
        )

        assert directory.map_member_id("mem-alice") == "by-id"

    def test_invalid_mapping_yields_no_login(self) -> None:
        directory = MemberDirectory([ALICE], [ResolvedMember("alice", None, "ghost")])

        assert directory.map_member_id("mem-alice") is None
        assert directory.map_member_ids(["mem-alice"]) == []
        assert directory.invalid_members == [ResolvedMember("alice", None, "ghost")]

    def test_unknown_member_id(self) -> None:
        directory = MemberDirectory([ALICE], [ResolvedMember("alice", "alice-gh", "alice-gh")])

        assert directory.map_member_id("mem-unknown") is None

    def test_member_label(self) -> None:
        directory = MemberDirectory([ALICE, NAMELESS], [])

        assert directory.member_label("mem-alice") == "alice"
        assert directory.member_label("mem-anon") == "mem-anon"
        assert directory.member_label("mem-unknown") == "mem-unknown"
