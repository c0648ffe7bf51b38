"""
Utility functions for the Trello to GitHub migration tool.
"""

from __future__ import annotations

import logging
import re
import subprocess
from subprocess import CompletedProcess
from typing import Final


class PassError(Exception):
    """Base class for pass-related errors."""


class InvalidPassPathError(PassError):
    """Raised when the pass path is not in the password store."""


LOG_FILE: Final[str] = "migration.log"


def setup_logging(*, verbose: bool = False, log_file: str = LOG_FILE) -> None:
    """Log to stderr and append to ``log_file``. DEBUG when verbose, INFO otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler(), logging.FileHandler(log_file, mode="a", encoding="utf-8")],
    )


def _validate_pass_path(pass_path: str) -> None:
    if not re.fullmatch(r"(?:[A-Za-z0-9_-]+)(?:/[A-Za-z0-9_-]+)*", pass_path):
        msg = f"Invalid pass path: {pass_path}"
        raise ValueError(msg)


def get_pass_value(pass_path: str) -> str:
    """Read a secret from the pass utility at the given path."""
    _validate_pass_path(pass_path)

    try:
        result: CompletedProcess[str] = subprocess.run(  # noqa: S603
            ["pass", pass_path], capture_output=True, text=True, check=True
        )
    except FileNotFoundError as e:
        msg = "The pass utility is not installed"
        raise PassError(msg) from e
    except subprocess.CalledProcessError as e:
        if "not in the password store" in e.stderr.lower():
            msg = f"Pass path '{pass_path}' not found in the password store."
            raise InvalidPassPathError(msg) from e
        msg = f"Failed to get value from pass at '{pass_path}' (return code {e.returncode}): {e.stderr.strip()}"
        raise PassError(msg) from e

    return result.stdout.strip()


def confirm(message: str) -> bool:
    """Ask a yes/no question on the terminal. Anything but an explicit yes declines."""
    try:
        answer = input(f"{message} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}
