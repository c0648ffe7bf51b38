"""Build GitHub issue payloads and comment bodies from Trello cards."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .models import IssuePayload

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .labels import CardLabelResolver
    from .members import MemberDirectory
    from .models import Card, CardAttachment, Checklist, CommentAction


def format_timestamp(timestamp: dt.datetime) -> str:
    """Format a timestamp in UTC for display (e.g., "2024-01-15 10:30:45Z"). Naive timestamps are taken as UTC."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=dt.UTC)
    return timestamp.astimezone(dt.UTC).strftime("%Y-%m-%d %H:%M:%SZ")


def build_checklist_block(checklists: Sequence[Checklist]) -> str:
    """Render checklists as Markdown task lists under a "Checklists" heading."""
    lines = ["## Checklists"]
    for checklist in checklists:
        lines.append("")
        lines.append(f"### {checklist.name}")
        for item in checklist.ordered_items:
            mark = "x" if item.state == "complete" else " "
            lines.append(f"- [{mark}] {item.name}")
    return "\n".join(lines)


def build_migration_footer(card_url: str) -> str:
    return f"---\n> Migrated from [Trello Card]({card_url})"


def build_attachment_links(attachments: Sequence[CardAttachment]) -> str:
    return "\n".join(f"[{attachment.name}]({attachment.url})" for attachment in attachments)


def build_issue_body(card: Card, checklists: Sequence[Checklist]) -> str:
    """Build the issue body: description, checklists, migration footer and attachments.

    Args:
        card: Trello card
        checklists: Checklists belonging to the card, in display order

    Returns:
        Complete issue body for GitHub
    """
    sections: list[str] = []
    if card.description:
        sections.append(f"{card.description}\n\n---")
    if checklists:
        sections.append(build_checklist_block(checklists))
    sections.append(build_migration_footer(card.url))
    if card.attachments:
        sections.append(build_attachment_links(card.attachments))
    return "\n\n".join(sections)


def build_comment_body(author: str, timestamp: dt.datetime, text: str) -> str:
    return f"## @{author} • {format_timestamp(timestamp)}\n{text}"


@dataclass
class CardRenderer:
    """Renders Trello cards into issue payloads using the reconciled lookup tables."""

    label_resolver: CardLabelResolver
    members: MemberDirectory
    milestone_by_list_id: dict[str, int]
    checklists: Sequence[Checklist] = ()
    comments: Sequence[CommentAction] = ()
    _checklists_by_card: dict[str, list[Checklist]] = field(init=False, repr=False)
    _comments_by_card: dict[str, list[CommentAction]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._checklists_by_card = {}
        for checklist in self.checklists:
            self._checklists_by_card.setdefault(checklist.card_id, []).append(checklist)
        self._comments_by_card = {}
        for comment in self.comments:
            self._comments_by_card.setdefault(comment.card_id, []).append(comment)

    def card_checklists(self, card: Card) -> list[Checklist]:
        """Checklists of a card, in the card's own checklist order where known."""
        checklists = self._checklists_by_card.get(card.id, [])
        order = {checklist_id: index for index, checklist_id in enumerate(card.checklist_ids)}
        return sorted(checklists, key=lambda checklist: order.get(checklist.id, len(order)))

    def render(self, card: Card) -> IssuePayload:
        return IssuePayload(
            title=card.name,
            body=build_issue_body(card, self.card_checklists(card)),
            labels=self.label_resolver.resolve((label.name for label in card.labels), card.list_id),
            assignees=self.members.map_member_ids(card.member_ids),
            milestone=self.milestone_by_list_id.get(card.list_id),
        )

    def comment_author(self, comment: CommentAction) -> str:
        """GitHub login of the comment author, else their Trello username."""
        login = self.members.map_member_id(comment.author_member_id)
        if login is not None:
            return login
        if comment.member_creator is not None and comment.member_creator.username:
            return comment.member_creator.username
        return self.members.member_label(comment.author_member_id)

    def render_comments(self, card: Card) -> list[str]:
        """Comment bodies for a card, oldest first."""
        # sorted() is stable, so comments with equal timestamps keep export order
        comments = sorted(self._comments_by_card.get(card.id, []), key=lambda comment: comment.timestamp)
        return [
            build_comment_body(self.comment_author(comment), comment.timestamp, comment.text) for comment in comments
        ]
