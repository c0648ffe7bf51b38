"""Data models for the Trello board export, the mapping document and GitHub state.

The board export and mapping document are validated with pydantic, since both
are user-supplied and errors need to be reported in full. The GitHub side is
represented by small dataclasses filled in by the target system, so the
reconciliation code never touches PyGithub objects directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Annotated, Any, Final, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator

COMMENT_ACTION_TYPE: Final[str] = "commentCard"

NonEmptyStr = Annotated[str, Field(min_length=1)]

# ---------------------------------------------------------------------------
# Trello board export
# ---------------------------------------------------------------------------


class _TrelloModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TrelloList(_TrelloModel):
    id: str
    name: str
    closed: bool = False


class TrelloMember(_TrelloModel):
    id: str
    full_name: str = Field(default="", alias="fullName")
    username: str = ""


class TrelloLabel(_TrelloModel):
    """A label defined on the board. Colorless labels have ``color`` set to None."""

    id: str
    name: str
    color: str | None = None
    usage_count: int = Field(default=0, alias="uses")


class CardLabel(_TrelloModel):
    """A label as referenced from a card. Matching against board labels is by name."""

    name: str
    color: str | None = None


class CardAttachment(_TrelloModel):
    name: str
    url: str


class Card(_TrelloModel):
    id: str
    name: str
    closed: bool = False
    description: str = Field(default="", alias="desc")
    list_id: str = Field(alias="idList")
    member_ids: list[str] = Field(default_factory=list, alias="idMembers")
    labels: list[CardLabel] = Field(default_factory=list)
    checklist_ids: list[str] = Field(default_factory=list, alias="idChecklists")
    url: str = ""
    attachments: list[CardAttachment] = Field(default_factory=list)


class CheckItem(_TrelloModel):
    name: str
    state: Literal["complete", "incomplete"]
    pos: float | None = None


class Checklist(_TrelloModel):
    id: str
    name: str
    card_id: str = Field(alias="idCard")
    items: list[CheckItem] = Field(default_factory=list, alias="checkItems")

    @property
    def ordered_items(self) -> list[CheckItem]:
        """Items in board order (by ``pos`` when every item has one)."""
        if self.items and all(item.pos is not None for item in self.items):
            return sorted(self.items, key=lambda item: item.pos or 0.0)
        return list(self.items)


class CardRef(_TrelloModel):
    id: str


class CommentData(_TrelloModel):
    text: str
    card: CardRef


class MemberRef(_TrelloModel):
    id: str | None = None
    username: str | None = None
    full_name: str | None = Field(default=None, alias="fullName")


class CommentAction(_TrelloModel):
    """A comment left on a card."""

    type: Literal["commentCard"]
    id: str
    author_member_id: str = Field(alias="idMemberCreator")
    data: CommentData
    timestamp: datetime = Field(alias="date")
    member_creator: MemberRef | None = Field(default=None, alias="memberCreator")

    @field_validator("timestamp")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        # Dates without an offset are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @property
    def card_id(self) -> str:
        return self.data.card.id

    @property
    def text(self) -> str:
        return self.data.text


class OtherAction(_TrelloModel):
    """Any board action that is not a comment. Only its type is kept."""

    type: str


def _action_kind(value: Any) -> str:
    action_type = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return "comment" if action_type == COMMENT_ACTION_TYPE else "other"


BoardAction = Annotated[
    Union[Annotated[CommentAction, Tag("comment")], Annotated[OtherAction, Tag("other")]],  # noqa: UP007
    Discriminator(_action_kind),
]


class Board(_TrelloModel):
    """A Trello board export, as downloaded from ``https://trello.com/b/<board-id>.json``."""

    name: str
    lists: list[TrelloList]
    members: list[TrelloMember] = Field(default_factory=list)
    labels: list[TrelloLabel]
    cards: list[Card]
    checklists: list[Checklist] = Field(default_factory=list)
    actions: list[BoardAction] = Field(default_factory=list)

    @property
    def comments(self) -> list[CommentAction]:
        return [action for action in self.actions if isinstance(action, CommentAction)]

    def get_member(self, member_id: str) -> TrelloMember | None:
        return next((member for member in self.members if member.id == member_id), None)


# ---------------------------------------------------------------------------
# Mapping document
# ---------------------------------------------------------------------------

_HEX_COLOR_PATTERN: Final[str] = r"^#?(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"


class _MappingModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class ExistingLabelMapping(_MappingModel):
    """Map a Trello label onto a GitHub label that already exists.

    ``github`` is a label name, or a label id when given as an integer.
    """

    trello: NonEmptyStr
    github: int | NonEmptyStr
    create: Literal[False] = False


class NewLabelMapping(_MappingModel):
    """Map a Trello label onto a GitHub label created during the migration."""

    trello: NonEmptyStr
    github: NonEmptyStr
    create: Literal[True]
    color: Annotated[str, Field(pattern=_HEX_COLOR_PATTERN)] | None = None

    @property
    def hex_color(self) -> str | None:
        """Color without the leading '#', as the GitHub API expects it."""
        if self.color is None:
            return None
        return self.color.strip().removeprefix("#").lower()


LabelMapping = Annotated[
    Union[NewLabelMapping, ExistingLabelMapping],  # noqa: UP007
    Field(union_mode="left_to_right"),
]


class UserMapping(_MappingModel):
    trello: NonEmptyStr
    github: NonEmptyStr

    @field_validator("trello", "github")
    @classmethod
    def _strip_at_sign(cls, value: str) -> str:
        stripped = value.removeprefix("@")
        if not stripped:
            msg = "user name must not be empty"
            raise ValueError(msg)
        return stripped


class ListMapping(_MappingModel):
    """Settings applied to every card of a Trello list (referenced by id or name)."""

    list_ref: NonEmptyStr = Field(alias="list")
    label: int | NonEmptyStr | None = None
    milestone: int | NonEmptyStr | None = None
    status: NonEmptyStr | None = None


class OrganizationOwner(_MappingModel):
    type: Literal["organization"]
    login: NonEmptyStr


class RepoSection(_MappingModel):
    owner: NonEmptyStr | OrganizationOwner
    repo: NonEmptyStr


class SkipSection(_MappingModel):
    lists: list[str] = Field(default_factory=list)


class MappingDocument(_MappingModel):
    """The user-authored TOML file describing how the board maps onto GitHub."""

    project: Annotated[int, Field(gt=0)] | None = None
    repo: RepoSection
    labels: list[LabelMapping] = Field(default_factory=list)
    users: list[UserMapping] = Field(default_factory=list)
    lists: list[ListMapping] = Field(default_factory=list)
    skip: SkipSection = Field(default_factory=SkipSection)

    def repo_context(self) -> RepoContext:
        owner = self.repo.owner
        if isinstance(owner, OrganizationOwner):
            return RepoContext(owner=owner.login, repo=self.repo.repo, owner_is_organization=True)
        return RepoContext(owner=owner, repo=self.repo.repo)


# ---------------------------------------------------------------------------
# GitHub state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RepoContext:
    """Target repository, passed to every GitHub call."""

    owner: str
    repo: str
    owner_is_organization: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class GithubLabel:
    id: int
    name: str
    color: str  # Hex color without '#' prefix


@dataclass(frozen=True)
class GithubMilestone:
    id: int
    number: int
    title: str


@dataclass(frozen=True)
class StatusOption:
    id: str
    name: str
    color: str = ""


@dataclass(frozen=True)
class ProjectInfo:
    """A GitHub Project (v2) and its single-select "Status" field."""

    project_id: str
    project_name: str
    status_field_id: str
    status_options: tuple[StatusOption, ...] = ()


@dataclass
class IssuePayload:
    """Everything needed to create one GitHub issue from a Trello card."""

    title: str
    body: str
    labels: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    milestone: int | None = None  # Milestone number


@dataclass(frozen=True)
class CreatedIssue:
    number: int
    node_id: str
