"""
Main migration class for Trello to GitHub migration.

The migration runs through the following states:

    VALIDATING -> CONFIRMING -> EXECUTING -> DONE
         |             |
         +-------------+-----> ABORTED

VALIDATING reads the current repository state (labels, milestones, project,
users), classifies every label, list and user of the mapping and collects
every problem into a single ValidationFailedError. Nothing is created on
GitHub before this step has passed.

CONFIRMING asks the user to accept labels that will not be transferred and
labels to create whose name already exists. Declining raises
MigrationCancelledError.

EXECUTING creates the labels, then one issue per card in board order with
its comments and project placement. Calls are strictly sequential and
nothing is retried or rolled back: a failure leaves the issues created so
far in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from .exceptions import MigrationCancelledError, ValidationFailedError
from .issue_builder import CardRenderer
from .labels import (
    CardLabelResolver,
    ClassifiedLabel,
    SkippedLabel,
    ToCreateLabel,
    describe_problem,
    log_label_summary,
    reconcile_labels,
    resolve_list_labels,
)
from .lists import ListClassification, classify_lists
from .members import MemberDirectory, resolve_members

if TYPE_CHECKING:
    from collections.abc import Callable

    from .models import Board, Card, GithubLabel, MappingDocument, ProjectInfo
    from .protocols import TargetSystem

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)


class MigrationState(StrEnum):
    VALIDATING = "validating"
    CONFIRMING = "confirming"
    EXECUTING = "executing"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class MigrationStats:
    """Statistics collected during migration."""

    labels_created: int = 0
    issues_created: int = 0
    comments_created: int = 0
    project_items_added: int = 0
    statuses_set: int = 0
    cards_skipped: int = 0


@dataclass
class MigrationPlan:
    """Everything resolved during validation. Read-only once built."""

    labels: list[ClassifiedLabel]
    lists: ListClassification
    members: MemberDirectory
    existing_labels: list[GithubLabel]
    project: ProjectInfo | None = None
    problems: list[str] = field(default_factory=list)

    @property
    def skipped_labels(self) -> list[SkippedLabel]:
        return [label for label in self.labels if isinstance(label, SkippedLabel)]

    @property
    def labels_to_create(self) -> list[ToCreateLabel]:
        return [label for label in self.labels if isinstance(label, ToCreateLabel)]

    @property
    def colliding_labels(self) -> list[ToCreateLabel]:
        """Labels to create whose name already exists (GitHub label names are case-insensitive)."""
        existing = {label.name.lower() for label in self.existing_labels}
        return [label for label in self.labels_to_create if label.github_name.lower() in existing]

    @property
    def new_labels(self) -> list[ToCreateLabel]:
        """Labels to create that do not exist yet, once per name. Colliding ones are applied by name instead."""
        seen = {label.name.lower() for label in self.existing_labels}
        new_labels: list[ToCreateLabel] = []
        for label in self.labels_to_create:
            if label.github_name.lower() not in seen:
                seen.add(label.github_name.lower())
                new_labels.append(label)
        return new_labels


def _join_names(names: list[str]) -> str:
    return ", ".join(repr(name) for name in names)


class TrelloToGithubMigrator:
    """Main migration class."""

    def __init__(
        self,
        board: Board,
        mapping: MappingDocument,
        target: TargetSystem,
        *,
        confirm: Callable[[str], bool],
        dry_run: bool = False,
    ) -> None:
        self.board: Board = board
        self.mapping: MappingDocument = mapping
        self.target: TargetSystem = target
        self.dry_run: bool = dry_run
        self._confirm: Callable[[str], bool] = confirm
        self.state: MigrationState = MigrationState.VALIDATING

        logger.info(f"Initialized migrator for board '{board.name}' -> {mapping.repo_context().full_name}")

    def _migrated_cards(self, plan: MigrationPlan) -> list[Card]:
        return [card for card in self.board.cards if card.list_id not in plan.lists.skipped_list_ids]

    def build_plan(self) -> MigrationPlan:
        """Read the repository state and classify labels, lists and users."""
        github_labels = self.target.get_labels()
        github_milestones = self.target.get_milestones()
        project = self.target.get_project(self.mapping.project) if self.mapping.project is not None else None
        resolved_members = resolve_members(self.mapping.users, self.target.lookup_user)

        labels = reconcile_labels(self.board.labels, self.mapping.labels, github_labels)
        labels.extend(resolve_list_labels(self.mapping.lists, self.board.lists, github_labels))
        lists = classify_lists(
            self.mapping.lists, self.mapping.skip.lists, self.board.lists, github_milestones, project
        )
        members = MemberDirectory(self.board.members, resolved_members)

        problems = [problem for label in labels if (problem := describe_problem(label)) is not None]
        problems.extend(lists.problems)
        problems.extend(
            f"Trello user @{member.trello_name} maps to @{member.github_name}, which is not a GitHub user"
            for member in members.invalid_members
        )

        return MigrationPlan(
            labels=labels,
            lists=lists,
            members=members,
            existing_labels=github_labels,
            project=project,
            problems=problems,
        )

    def validate(self) -> MigrationPlan:
        """Build the migration plan, aborting if any mapping problem was found.

        Raises:
            ValidationFailedError: With every problem found, before anything is created
        """
        self.state = MigrationState.VALIDATING
        plan = self.build_plan()
        log_label_summary(plan.labels)

        if plan.problems:
            for problem in plan.problems:
                logger.error(problem)
            self.state = MigrationState.ABORTED
            raise ValidationFailedError(plan.problems)

        self._warn_unmapped_assignees(plan)
        logger.info("Validation passed")
        return plan

    def _warn_unmapped_assignees(self, plan: MigrationPlan) -> None:
        unmapped: list[str] = []
        for card in self._migrated_cards(plan):
            for member_id in card.member_ids:
                name = plan.members.member_label(member_id)
                if plan.members.map_member_id(member_id) is None and name not in unmapped:
                    unmapped.append(name)
        if unmapped:
            logger.warning(
                f"These Trello members have no GitHub user and will not be assigned: {_join_names(unmapped)}"
            )

    def confirm_plan(self, plan: MigrationPlan) -> None:
        """Ask for confirmation about skipped and already existing labels.

        Raises:
            MigrationCancelledError: If the user declines
        """
        self.state = MigrationState.CONFIRMING

        if plan.skipped_labels:
            names = [label.trello.name for label in plan.skipped_labels]
            logger.warning(f"These labels will not be transferred: {_join_names(names)}")
            if not self._confirm("Would you like to continue?"):
                self.state = MigrationState.ABORTED
                msg = "Operation cancelled."
                raise MigrationCancelledError(msg)

        if plan.colliding_labels:
            names = [label.github_name for label in plan.colliding_labels]
            logger.warning(f"These labels already exist in GitHub: {_join_names(names)}")
            if not self._confirm("Are you sure you would like to continue creating them?"):
                self.state = MigrationState.ABORTED
                msg = "Operation cancelled."
                raise MigrationCancelledError(msg)

    def create_labels(self, plan: MigrationPlan, stats: MigrationStats) -> None:
        for label in plan.colliding_labels:
            logger.info(
                f"Label {label.github_name!r} already exists, using it for Trello label {label.trello.name!r}"
            )

        labels_to_create = plan.new_labels
        if not labels_to_create:
            return

        logger.info("Creating labels...")
        for count, label in enumerate(labels_to_create, start=1):
            self.target.create_label(label.github_name, label.create_color)
            stats.labels_created += 1
            logger.info(f"Creating labels [{count}/{len(labels_to_create)}]")
        logger.info(f"Created {stats.labels_created} labels")

    def _make_renderer(self, plan: MigrationPlan) -> CardRenderer:
        return CardRenderer(
            label_resolver=CardLabelResolver(plan.labels),
            members=plan.members,
            milestone_by_list_id=plan.lists.milestone_by_list_id,
            checklists=self.board.checklists,
            comments=self.board.comments,
        )

    def migrate_card(self, card: Card, renderer: CardRenderer, plan: MigrationPlan, stats: MigrationStats) -> None:
        """Create the issue for one card, then its comments and project placement."""
        issue = self.target.create_issue(renderer.render(card))
        stats.issues_created += 1

        for body in renderer.render_comments(card):
            self.target.create_comment(issue.number, body)
            stats.comments_created += 1

        if plan.project is not None:
            item_id = self.target.add_project_item(plan.project.project_id, issue.node_id)
            stats.project_items_added += 1
            status = plan.lists.status_by_list_id.get(card.list_id)
            if status is not None:
                self.target.set_project_item_status(
                    plan.project.project_id, item_id, plan.project.status_field_id, status.id
                )
                stats.statuses_set += 1

        logger.debug(f"Created issue #{issue.number}: {card.name}")

    def execute(self, plan: MigrationPlan) -> MigrationStats:
        """Create labels, then issues in card order."""
        self.state = MigrationState.EXECUTING
        stats = MigrationStats()

        self.create_labels(plan, stats)

        renderer = self._make_renderer(plan)
        cards = self._migrated_cards(plan)
        stats.cards_skipped = len(self.board.cards) - len(cards)

        logger.info("Migrating cards...")
        for count, card in enumerate(cards, start=1):
            self.migrate_card(card, renderer, plan, stats)
            logger.info(f"Migrated card [{count}/{len(cards)}]: {card.name}")

        self.state = MigrationState.DONE
        logger.info(f"Migrated {stats.issues_created} cards")
        return stats

    def log_dry_run(self, plan: MigrationPlan) -> None:
        """Log what would be created, without calling GitHub."""
        for label in plan.new_labels:
            logger.info(f"[dry run] Would create label {label.github_name!r} (#{label.create_color})")

        renderer = self._make_renderer(plan)
        for card in self._migrated_cards(plan):
            payload = renderer.render(card)
            comments = renderer.render_comments(card)
            status = plan.lists.status_by_list_id.get(card.list_id)
            logger.info(
                f"[dry run] Would create issue {payload.title!r} with labels {payload.labels}, "
                f"assignees {payload.assignees}, milestone {payload.milestone}, {len(comments)} comments"
                + (f", status {status.name!r}" if status is not None else "")
            )
            logger.debug(payload.body)

    def migrate(self) -> MigrationStats:
        """Execute the complete migration process."""
        logger.info("Starting Trello to GitHub migration")

        plan = self.validate()
        self.confirm_plan(plan)

        if self.dry_run:
            self.log_dry_run(plan)
            self.state = MigrationState.DONE
            return MigrationStats(cards_skipped=len(self.board.cards) - len(self._migrated_cards(plan)))

        stats = self.execute(plan)
        logger.info("Migration completed successfully")
        return stats
