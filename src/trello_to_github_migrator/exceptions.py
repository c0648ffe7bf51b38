"""
Custom exception classes for the Trello to GitHub migration tool.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for migration errors."""


class SchemaError(MigrationError):
    """Raised when the board export or mapping document is malformed."""


class ExportFetchError(MigrationError):
    """Raised when the board export cannot be read or downloaded."""


class ValidationFailedError(MigrationError):
    """Raised when the inputs do not reconcile with the GitHub repository.

    All problems found are collected in ``problems`` so they can be reported at once.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems: list[str] = problems
        super().__init__(f"Validation failed with {len(problems)} problem(s)")


class MigrationCancelledError(MigrationError):
    """Raised when the user declines to continue at a confirmation prompt."""
