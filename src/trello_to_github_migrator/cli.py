"""
Command-line interface for the Trello to GitHub migration tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from . import github_utils as ghu
from .exceptions import MigrationCancelledError, SchemaError, ValidationFailedError
from .loaders import load_inputs
from .migrator import TrelloToGithubMigrator
from .utils import confirm, setup_logging

if TYPE_CHECKING:
    from .migrator import MigrationStats

logger: logging.Logger = logging.getLogger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Migrate a Trello board export to GitHub issues")

    _ = parser.add_argument(
        "export",
        help="Path or URL of the Trello board export (https://trello.com/b/<board-id>.json)",
    )
    _ = parser.add_argument("mapping", help="Path to the TOML file mapping Trello labels, users and lists to GitHub")

    _ = parser.add_argument(
        "--github-pass-token", help="Path for GitHub token in pass utility (default: github/cli/token)"
    )
    _ = parser.add_argument("--yes", "-y", action="store_true", help="Answer yes to all confirmation prompts")
    _ = parser.add_argument(
        "--dry-run", action="store_true", help="Validate and show what would be created without changing GitHub"
    )
    _ = parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def _print_migration_report(stats: MigrationStats, *, dry_run: bool = False) -> None:
    print("\n=== Migration Report ===" if not dry_run else "\n=== Dry Run Report ===")
    print(f"Labels created:      {stats.labels_created}")
    print(f"Issues created:      {stats.issues_created}")
    print(f"Comments created:    {stats.comments_created}")
    print(f"Project items added: {stats.project_items_added}")
    print(f"Statuses set:        {stats.statuses_set}")
    print(f"Cards skipped:       {stats.cards_skipped}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    verbose: bool = getattr(args, "verbose", False)
    setup_logging(verbose=verbose)

    try:
        board, mapping = load_inputs(args.export, args.mapping)

        client = ghu.get_client(ghu.get_token(args.github_pass_token))
        target = ghu.GithubTarget(client, mapping.repo_context())

        migrator = TrelloToGithubMigrator(
            board,
            mapping,
            target,
            confirm=(lambda _message: True) if args.yes else confirm,
            dry_run=args.dry_run,
        )
        stats = migrator.migrate()

    except SchemaError as e:
        logger.error(str(e))  # noqa: TRY400
        sys.exit(1)
    except ValidationFailedError as e:
        logger.error(f"Migration aborted: {len(e.problems)} problem(s) found")  # noqa: TRY400
        sys.exit(1)
    except MigrationCancelledError:
        logger.info("Operation cancelled.")
        sys.exit(0)
    except Exception:
        logger.exception("Migration failed")
        sys.exit(1)

    _print_migration_report(stats, dry_run=args.dry_run)
    sys.exit(0)
