"""
Tests for label reconciliation.
"""

import pytest

from trello_to_github_migrator.labels import (
    DEFAULT_LABEL_COLOR,
    CardLabelResolver,
    ListMappedLabel,
    MappedLabel,
    MissingLabel,
    MissingListLabel,
    SkippedLabel,
    ToCreateLabel,
    describe_label,
    describe_problem,
    find_github_label,
    label_name_for_card,
    reconcile_labels,
    resolve_list_labels,
)
from trello_to_github_migrator.models import (
    ExistingLabelMapping,
    GithubLabel,
    ListMapping,
    NewLabelMapping,
    TrelloLabel,
    TrelloList,
)

BUG = TrelloLabel(id="lab-bug", name="Bug", color="red")
RFC = TrelloLabel(id="lab-rfc", name="RFC", color="blue")
PLAIN = TrelloLabel(id="lab-plain", name="Plain", color=None)

GH_BUG = GithubLabel(id=101, name="bug", color="d73a4a")
GH_WIP = GithubLabel(id=102, name="wip", color="fbca04")

TODO = TrelloList(id="list-todo", name="To Do")
DOING = TrelloList(id="list-doing", name="In Progress")


@pytest.mark.unit
class TestFindGithubLabel:
    """Test GitHub label lookup."""

    def test_by_name(self) -> None:
        assert find_github_label("bug", [GH_BUG, GH_WIP]) == GH_BUG

    def test_by_id(self) -> None:
        assert find_github_label(102, [GH_BUG, GH_WIP]) == GH_WIP

    def test_name_lookup_is_exact(self) -> None:
        assert find_github_label("Bug", [GH_BUG]) is None

    def test_unknown_id(self) -> None:
        assert find_github_label(999, [GH_BUG]) is None


@pytest.mark.unit
class TestReconcileLabels:
    """Test classification of Trello labels."""

    def test_unmapped_label_is_skipped(self) -> None:
        result = reconcile_labels([BUG], [], [GH_BUG])

        assert result == [SkippedLabel(trello=BUG)]

    def test_mapped_to_existing_label(self) -> None:
        result = reconcile_labels([BUG], [ExistingLabelMapping(trello="Bug", github="bug")], [GH_BUG])

        assert result == [MappedLabel(trello=BUG, github=GH_BUG)]

    def test_mapped_by_id(self) -> None:
        result = reconcile_labels([BUG], [ExistingLabelMapping(trello="Bug", github=101)], [GH_BUG])

        assert result == [MappedLabel(trello=BUG, github=GH_BUG)]

    def test_mapped_to_missing_label(self) -> None:
        result = reconcile_labels([BUG], [ExistingLabelMapping(trello="Bug", github="defect")], [GH_BUG])

        assert result == [MissingLabel(trello=BUG, github_lookup="defect")]

    def test_label_to_create(self) -> None:
        mapping = NewLabelMapping(trello="RFC", github="Request For Comments", create=True, color="#00FF00")

        result = reconcile_labels([RFC], [mapping], [])

        assert result == [ToCreateLabel(trello=RFC, github_name="Request For Comments", github_color="00ff00")]

    def test_order_follows_board(self) -> None:
        result = reconcile_labels([RFC, BUG, PLAIN], [ExistingLabelMapping(trello="Bug", github="bug")], [GH_BUG])

        assert [label.trello.name for label in result] == ["RFC", "Bug", "Plain"]

    def test_first_duplicate_mapping_wins(self) -> None:
        mappings = [
            ExistingLabelMapping(trello="Bug", github="bug"),
            NewLabelMapping(trello="Bug", github="defect", create=True),
        ]

        result = reconcile_labels([BUG], mappings, [GH_BUG])

        assert result == [MappedLabel(trello=BUG, github=GH_BUG)]


@pytest.mark.unit
class TestToCreateColor:
    """Test the color used for created labels."""

    def test_mapped_color(self) -> None:
        assert ToCreateLabel(trello=RFC, github_name="rfc", github_color="abcdef").create_color == "abcdef"

    def test_trello_palette_color(self) -> None:
        assert ToCreateLabel(trello=RFC, github_name="rfc").create_color == "579dff"

    def test_colorless_label_uses_default(self) -> None:
        assert ToCreateLabel(trello=PLAIN, github_name="plain").create_color == DEFAULT_LABEL_COLOR


@pytest.mark.unit
class TestResolveListLabels:
    """Test list label resolution."""

    def test_existing_label(self) -> None:
        result = resolve_list_labels([ListMapping(list="In Progress", label="wip")], [TODO, DOING], [GH_WIP])

        assert result == [ListMappedLabel(trello_list=DOING, github=GH_WIP)]

    def test_missing_label(self) -> None:
        result = resolve_list_labels([ListMapping(list="list-todo", label="todo")], [TODO, DOING], [GH_WIP])

        assert result == [MissingListLabel(trello_list=TODO, github_lookup="todo")]

    def test_entries_without_label_or_list_are_ignored(self) -> None:
        mappings = [ListMapping(list="To Do", milestone=1), ListMapping(list="Nowhere", label="wip")]

        assert resolve_list_labels(mappings, [TODO, DOING], [GH_WIP]) == []


@pytest.mark.unit
class TestDescriptions:
    """Test problem and summary descriptions."""

    def test_only_missing_labels_are_problems(self) -> None:
        assert describe_problem(SkippedLabel(trello=BUG)) is None
        assert describe_problem(MappedLabel(trello=BUG, github=GH_BUG)) is None
        assert describe_problem(ToCreateLabel(trello=RFC, github_name="rfc")) is None
        assert describe_problem(ListMappedLabel(trello_list=DOING, github=GH_WIP)) is None

        missing = describe_problem(MissingLabel(trello=BUG, github_lookup="defect"))
        assert missing is not None
        assert "'defect'" in missing
        assert "'Bug'" in missing

        missing_list = describe_problem(MissingListLabel(trello_list=TODO, github_lookup=7))
        assert missing_list is not None
        assert "'To Do'" in missing_list

    def test_describe_label(self) -> None:
        assert describe_label(SkippedLabel(trello=BUG)) == "'Bug' -> not transferred"
        assert describe_label(MappedLabel(trello=BUG, github=GH_BUG)) == "'Bug' -> 'bug'"
        assert describe_label(ToCreateLabel(trello=RFC, github_name="rfc")) == "'RFC' -> will create 'rfc' (#579dff)"

    def test_label_name_for_card(self) -> None:
        assert label_name_for_card(MappedLabel(trello=BUG, github=GH_BUG)) == "bug"
        assert label_name_for_card(ToCreateLabel(trello=RFC, github_name="rfc")) == "rfc"
        assert label_name_for_card(SkippedLabel(trello=BUG)) is None
        assert label_name_for_card(ListMappedLabel(trello_list=DOING, github=GH_WIP)) is None


@pytest.mark.unit
class TestCardLabelResolver:
    """Test per-card label resolution."""

    def test_card_labels_then_list_label(self) -> None:
        resolver = CardLabelResolver(
            [
                MappedLabel(trello=BUG, github=GH_BUG),
                ToCreateLabel(trello=RFC, github_name="rfc"),
                SkippedLabel(trello=PLAIN),
                ListMappedLabel(trello_list=DOING, github=GH_WIP),
            ]
        )

        assert resolver.resolve(["RFC", "Plain", "Bug"], "list-doing") == ["rfc", "bug", "wip"]
        assert resolver.resolve(["Bug"], "list-todo") == ["bug"]

    def test_unknown_card_label_is_ignored(self) -> None:
        resolver = CardLabelResolver([MappedLabel(trello=BUG, github=GH_BUG)])

        assert resolver.resolve(["Nope", "Bug"], "list-todo") == ["bug"]

    def test_duplicates_are_removed(self) -> None:
        resolver = CardLabelResolver(
            [
                MappedLabel(trello=BUG, github=GH_BUG),
                ListMappedLabel(trello_list=TODO, github=GH_BUG),
            ]
        )

        assert resolver.resolve(["Bug", "Bug"], "list-todo") == ["bug"]
