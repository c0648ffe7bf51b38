"""
Label reconciliation between a Trello board, the mapping document and GitHub.

Every Trello label and every list->label mapping entry is classified into
exactly one of the variants below. Consumers match on the variant classes
and end with ``assert_never`` so that adding a variant breaks every site
that does not handle it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, assert_never

from .lists import find_list
from .models import NewLabelMapping

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .models import GithubLabel, LabelMapping, ListMapping, TrelloLabel, TrelloList

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_LABEL_COLOR: Final[str] = "ededed"

# Hex values of the Trello label palette
TRELLO_COLORS: Final[dict[str, str]] = {
    "lime_light": "d3f1a7",
    "lime": "94c748",
    "lime_dark": "5b7f24",
    "red_light": "ffd5d2",
    "red": "f87168",
    "red_dark": "c9372c",
    "orange_light": "fedec8",
    "orange": "fea362",
    "orange_dark": "c25100",
    "yellow_light": "f8e6a0",
    "yellow": "f5cd47",
    "yellow_dark": "946f00",
    "green_light": "baf3db",
    "green": "4bce97",
    "green_dark": "1f845a",
    "sky_light": "c6edfb",
    "sky": "6cc3e0",
    "sky_dark": "227d9b",
    "blue_light": "cce0ff",
    "blue": "579dff",
    "blue_dark": "0c66e4",
    "purple_light": "dfd8fd",
    "purple": "9f8fef",
    "purple_dark": "6e5dc6",
    "pink_light": "fdd0ec",
    "pink": "e774bb",
    "pink_dark": "ae4787",
    "black_light": "dcdfe4",
    "black": "8590a2",
    "black_dark": "626f86",
}


@dataclass(frozen=True)
class SkippedLabel:
    """A Trello label absent from the mapping. It is not transferred."""

    trello: TrelloLabel


@dataclass(frozen=True)
class ToCreateLabel:
    """A Trello label mapped onto a GitHub label that will be created."""

    trello: TrelloLabel
    github_name: str
    github_color: str | None = None

    @property
    def create_color(self) -> str:
        """Color for the new label: the mapped color, else the Trello palette color."""
        if self.github_color:
            return self.github_color
        return TRELLO_COLORS.get(self.trello.color or "", DEFAULT_LABEL_COLOR)


@dataclass(frozen=True)
class MissingLabel:
    """A Trello label mapped onto a GitHub label that does not exist."""

    trello: TrelloLabel
    github_lookup: int | str


@dataclass(frozen=True)
class MappedLabel:
    """A Trello label mapped onto an existing GitHub label."""

    trello: TrelloLabel
    github: GithubLabel


@dataclass(frozen=True)
class ListMappedLabel:
    """An existing GitHub label applied to every card of a Trello list."""

    trello_list: TrelloList
    github: GithubLabel


@dataclass(frozen=True)
class MissingListLabel:
    """A list->label mapping whose GitHub label does not exist."""

    trello_list: TrelloList
    github_lookup: int | str


ClassifiedLabel = SkippedLabel | ToCreateLabel | MissingLabel | MappedLabel | ListMappedLabel | MissingListLabel


def find_github_label(lookup: int | str, github_labels: Sequence[GithubLabel]) -> GithubLabel | None:
    """Find a GitHub label by id (when ``lookup`` is an integer) or by name."""
    for label in github_labels:
        if isinstance(lookup, int) and label.id == lookup:
            return label
        if label.name == lookup:
            return label
    return None


def _find_mapping(trello_name: str, label_mappings: Sequence[LabelMapping]) -> LabelMapping | None:
    # Duplicate entries for the same Trello label: the first one wins
    return next((mapping for mapping in label_mappings if mapping.trello == trello_name), None)


def reconcile_labels(
    trello_labels: Sequence[TrelloLabel],
    label_mappings: Sequence[LabelMapping],
    github_labels: Sequence[GithubLabel],
) -> list[ClassifiedLabel]:
    """Classify each Trello label against the mapping and the existing GitHub labels.

    Args:
        trello_labels: Labels defined on the Trello board, in board order
        label_mappings: The ``labels`` entries of the mapping document
        github_labels: Labels currently present in the GitHub repository

    Returns:
        One classified label per Trello label, in the same order
    """
    classified: list[ClassifiedLabel] = []

    for trello_label in trello_labels:
        mapping = _find_mapping(trello_label.name, label_mappings)
        if mapping is None:
            classified.append(SkippedLabel(trello=trello_label))
            continue

        if isinstance(mapping, NewLabelMapping):
            classified.append(
                ToCreateLabel(trello=trello_label, github_name=mapping.github, github_color=mapping.hex_color)
            )
            continue

        github_label = find_github_label(mapping.github, github_labels)
        if github_label is None:
            classified.append(MissingLabel(trello=trello_label, github_lookup=mapping.github))
        else:
            classified.append(MappedLabel(trello=trello_label, github=github_label))

    return classified


def resolve_list_labels(
    list_mappings: Sequence[ListMapping],
    trello_lists: Sequence[TrelloList],
    github_labels: Sequence[GithubLabel],
) -> list[ClassifiedLabel]:
    """Classify the ``label`` of each list mapping against the existing GitHub labels.

    Entries without a label, or whose list cannot be found on the board, are
    ignored here; unknown lists are reported by the list classifier.
    """
    classified: list[ClassifiedLabel] = []

    for mapping in list_mappings:
        if mapping.label is None:
            continue
        trello_list = find_list(mapping.list_ref, trello_lists)
        if trello_list is None:
            continue

        github_label = find_github_label(mapping.label, github_labels)
        if github_label is None:
            classified.append(MissingListLabel(trello_list=trello_list, github_lookup=mapping.label))
        else:
            classified.append(ListMappedLabel(trello_list=trello_list, github=github_label))

    return classified


def label_name_for_card(label: ClassifiedLabel) -> str | None:
    """Name of the GitHub label a card carrying this Trello label receives, if any."""
    match label:
        case MappedLabel():
            return label.github.name
        case ToCreateLabel():
            return label.github_name
        case SkippedLabel() | MissingLabel() | ListMappedLabel() | MissingListLabel():
            return None
        case _:
            assert_never(label)


class CardLabelResolver:
    """Looks up the GitHub labels a card receives from its Trello labels and its list."""

    def __init__(self, labels: Sequence[ClassifiedLabel]) -> None:
        self._by_trello_name: dict[str, ClassifiedLabel] = {}
        self._by_list_id: dict[str, ClassifiedLabel] = {}
        for label in labels:
            match label:
                case SkippedLabel() | ToCreateLabel() | MissingLabel() | MappedLabel():
                    _ = self._by_trello_name.setdefault(label.trello.name, label)
                case ListMappedLabel() | MissingListLabel():
                    _ = self._by_list_id.setdefault(label.trello_list.id, label)
                case _:
                    assert_never(label)

    def _list_label_name(self, list_id: str) -> str | None:
        label = self._by_list_id.get(list_id)
        match label:
            case None:
                return None
            case ListMappedLabel():
                return label.github.name
            case SkippedLabel() | ToCreateLabel() | MissingLabel() | MappedLabel() | MissingListLabel():
                return None
            case _:
                assert_never(label)

    def resolve(self, card_label_names: Iterable[str], list_id: str) -> list[str]:
        """GitHub label names for a card, without duplicates, in card order then the list label."""
        names: list[str] = []
        for trello_name in card_label_names:
            label = self._by_trello_name.get(trello_name)
            name = label_name_for_card(label) if label is not None else None
            if name is not None and name not in names:
                names.append(name)

        list_label = self._list_label_name(list_id)
        if list_label is not None and list_label not in names:
            names.append(list_label)
        return names


def describe_problem(label: ClassifiedLabel) -> str | None:
    """Describe why a classified label blocks the migration, or None if it does not."""
    match label:
        case MissingLabel():
            return f"Could not find GitHub label {label.github_lookup!r} for Trello label {label.trello.name!r}"
        case MissingListLabel():
            return f"Could not find GitHub label {label.github_lookup!r} for Trello list {label.trello_list.name!r}"
        case SkippedLabel() | ToCreateLabel() | MappedLabel() | ListMappedLabel():
            return None
        case _:
            assert_never(label)


def describe_label(label: ClassifiedLabel) -> str:
    """One-line summary of what happens to a classified label."""
    match label:
        case SkippedLabel():
            return f"{label.trello.name!r} -> not transferred"
        case ToCreateLabel():
            return f"{label.trello.name!r} -> will create {label.github_name!r} (#{label.create_color})"
        case MissingLabel():
            return f"{label.trello.name!r} -> missing GitHub label {label.github_lookup!r}"
        case MappedLabel():
            return f"{label.trello.name!r} -> {label.github.name!r}"
        case ListMappedLabel():
            return f"list {label.trello_list.name!r} -> {label.github.name!r}"
        case MissingListLabel():
            return f"list {label.trello_list.name!r} -> missing GitHub label {label.github_lookup!r}"
        case _:
            assert_never(label)


def log_label_summary(labels: Sequence[ClassifiedLabel]) -> None:
    """Log the label mapping that is about to be applied."""
    logger.info("Mapping labels:")
    for label in labels:
        logger.info(f"  {describe_label(label)}")
