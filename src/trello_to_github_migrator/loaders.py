"""
Reading and validating the Trello board export and the mapping document.
"""

from __future__ import annotations

import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Final
from urllib.parse import urlparse

import requests
from pydantic import ValidationError

from .exceptions import ExportFetchError, MigrationError, SchemaError
from .models import Board, MappingDocument

logger: logging.Logger = logging.getLogger(__name__)

_TRELLO_KEY_ENV_VAR: Final[str] = "TRELLO_API_KEY"
_TRELLO_TOKEN_ENV_VAR: Final[str] = "TRELLO_TOKEN"  # noqa: S105
_DOWNLOAD_TIMEOUT_SECONDS: Final[int] = 60


def _is_url(source: str) -> bool:
    return urlparse(source).scheme in {"http", "https"}


def _trello_auth_params() -> dict[str, str]:
    """Trello API credentials from the environment, needed for private boards."""
    key = os.environ.get(_TRELLO_KEY_ENV_VAR)
    token = os.environ.get(_TRELLO_TOKEN_ENV_VAR)
    if key and token:
        return {"key": key, "token": token}
    return {}


def fetch_board_export(source: str) -> Any:
    """Read a board export from a file path or an http(s) URL.

    Args:
        source: Path to the exported JSON file, or a URL such as
            ``https://trello.com/b/<board-id>.json``

    Returns:
        The decoded JSON document

    Raises:
        ExportFetchError: If the file cannot be read or the download fails
        SchemaError: If the content is not valid JSON
    """
    if _is_url(source):
        try:
            response = requests.get(source, params=_trello_auth_params(), timeout=_DOWNLOAD_TIMEOUT_SECONDS)
            response.raise_for_status()
            return response.json()
        except requests.JSONDecodeError as e:
            msg = f"Board export at {source} is not valid JSON: {e}"
            raise SchemaError(msg) from e
        except requests.RequestException as e:
            msg = f"Failed to download board export from {source}: {e}"
            raise ExportFetchError(msg) from e

    try:
        content = Path(source).read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Failed to read board export {source}: {e}"
        raise ExportFetchError(msg) from e

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        msg = f"Board export {source} is not valid JSON: {e}"
        raise SchemaError(msg) from e


def parse_mapping_document(path: str) -> dict[str, Any]:
    """Read the TOML mapping document.

    Raises:
        MigrationError: If the file cannot be read
        SchemaError: If the content is not valid TOML
    """
    try:
        with Path(path).open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Mapping file {path} is not valid TOML: {e}"
        raise SchemaError(msg) from e
    except OSError as e:
        msg = f"Failed to read mapping file {path}: {e}"
        raise MigrationError(msg) from e


def validate_board(raw: Any, source: str = "board export") -> Board:
    try:
        return Board.model_validate(raw)
    except ValidationError as e:
        msg = f"Failed to parse export file ({source}):\n{e}"
        raise SchemaError(msg) from e


def validate_mapping(raw: Any, source: str = "mapping file") -> MappingDocument:
    try:
        return MappingDocument.model_validate(raw)
    except ValidationError as e:
        msg = f"Failed to parse map file ({source}):\n{e}"
        raise SchemaError(msg) from e


def load_inputs(export_source: str, mapping_path: str) -> tuple[Board, MappingDocument]:
    """Load and validate both input documents.

    Schema problems in both documents are reported together in a single
    SchemaError. Transport failures are raised immediately.
    """
    problems: list[str] = []
    board: Board | None = None
    mapping: MappingDocument | None = None

    try:
        board = validate_board(fetch_board_export(export_source), export_source)
    except SchemaError as e:
        problems.append(str(e))

    try:
        mapping = validate_mapping(parse_mapping_document(mapping_path), mapping_path)
    except SchemaError as e:
        problems.append(str(e))

    if problems or board is None or mapping is None:
        msg = "\n\n".join(problems)
        raise SchemaError(msg)

    logger.info(
        f"Loaded board '{board.name}': {len(board.lists)} lists, {len(board.cards)} cards, "
        f"{len(board.labels)} labels, {len(board.comments)} comments"
    )
    return board, mapping
