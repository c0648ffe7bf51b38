"""
Trello to GitHub Migration Tool

Migrates a Trello board export to GitHub issues, preserving labels,
assignees, checklists, comments and list-based milestones and project
statuses.
"""

from __future__ import annotations

from .cli import main
from .exceptions import (
    ExportFetchError,
    MigrationCancelledError,
    MigrationError,
    SchemaError,
    ValidationFailedError,
)
from .github_utils import GithubTarget
from .migrator import MigrationStats, TrelloToGithubMigrator
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "ExportFetchError",
    "GithubTarget",
    "MigrationCancelledError",
    "MigrationError",
    "MigrationStats",
    "SchemaError",
    "TrelloToGithubMigrator",
    "ValidationFailedError",
    "main",
    "setup_logging",
]
