"""
Static snapshots of contribution data.

A snapshot is a JSON envelope around the raw Contributions pages:

    {"schemaVersion": 2, "queryHash": "<sha256 hex>",
     "generatedAt": "<ISO-8601>", "contributions": [...]}

The query hash ties a snapshot to the query text that produced it, so a
snapshot generated by an older query is treated as stale rather than
trusted.
"""

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path

from contrib_calendar.github_client import CONTRIBUTIONS_QUERY_TEMPLATE

STATIC_DATA_SCHEMA_VERSION = 2


class StaticDataError(Exception):
    """Raised when a snapshot file can't be read or decoded."""

    pass


def get_query_hash(query: str = CONTRIBUTIONS_QUERY_TEMPLATE) -> str:
    """Return the hex SHA-256 of the query text."""
    return hashlib.sha256(query.encode()).hexdigest()


def build_static_data(
    contributions: list[dict], generated_at: datetime | None = None
) -> dict:
    """Wrap contributions pages in a snapshot envelope."""
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)
    return {
        "schemaVersion": STATIC_DATA_SCHEMA_VERSION,
        "queryHash": get_query_hash(),
        "generatedAt": generated_at.isoformat(),
        "contributions": list(contributions),
    }


def is_valid_static_data(data) -> bool:
    """
    Check that a decoded snapshot is well formed and current.

    Returns:
        False if a field is missing or has the wrong type, or if the schema
        version or query hash don't match the current ones
    """
    if not isinstance(data, dict):
        return False

    schema_version = data.get("schemaVersion")
    # bool is a subclass of int, but not a valid version.
    if not isinstance(schema_version, int) or isinstance(schema_version, bool):
        return False
    if not isinstance(data.get("queryHash"), str):
        return False
    if not isinstance(data.get("generatedAt"), str):
        return False
    if not isinstance(data.get("contributions"), list):
        return False

    return (
        schema_version == STATIC_DATA_SCHEMA_VERSION
        and data["queryHash"] == get_query_hash()
    )


def _read_json(path: str | Path):
    try:
        with open(path) as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise StaticDataError(f"Could not read {path}: {e}") from e


def load_static_data(path: str | Path) -> list[dict] | None:
    """
    Load contributions pages from a snapshot file.

    Returns:
        The contributions pages, or None if the snapshot is stale or
        malformed

    Raises:
        StaticDataError: If the file can't be read or isn't JSON
    """
    data = _read_json(path)
    if not is_valid_static_data(data):
        return None
    return data["contributions"]


def load_fixture(path: str | Path) -> list[dict]:
    """
    Load a bare JSON array of contributions pages.

    Raises:
        StaticDataError: If the file can't be read or isn't a JSON array
    """
    data = _read_json(path)
    if not isinstance(data, list):
        raise StaticDataError(f"Expected a JSON array in {path}")
    return data


def write_static_data(
    path: str | Path,
    contributions: list[dict],
    generated_at: datetime | None = None,
) -> None:
    """Write contributions pages to a snapshot file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(build_static_data(contributions, generated_at), f)
