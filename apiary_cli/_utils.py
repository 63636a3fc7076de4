"""
Shared pure-utility functions for apiary-cli.

These helpers have no business logic and no network side effects.
They are used across client.py, commands.py and formatters.
"""

import os
import sys
from datetime import datetime

from apiary_cli.api import _safe_json_parse
from apiary_cli.exceptions import InputError


def _get_path(d, dotted):
    """Get a nested value by dotted key ("attributes.slug"). A leading '#'
    returns the length of the list found at that key."""
    count = dotted.startswith("#")
    value = d
    for part in dotted.lstrip("#").split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    if count:
        return len(value) if isinstance(value, (list, tuple, dict)) else 0
    return value


def _parse_iso_timestamp(ts):
    """Parse an ISO timestamp from the API into a datetime."""
    if not ts or not isinstance(ts, str):
        return None
    try:
        # Handle both "2026-01-15T10:30:00Z" and "2026-01-15T10:30:00.000Z"
        return datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return None


def _short_date(ts):
    """Render an ISO timestamp as YYYY-MM-DD; pass other values through."""
    parsed = _parse_iso_timestamp(ts)
    return parsed.strftime("%Y-%m-%d") if parsed else ts


def load_json_data(data, context="--data"):
    """Load a JSON value from a file path, or parse *data* as inline JSON.

    Raises InputError before any network call on unreadable or malformed input.
    """
    if data is None or not str(data).strip():
        raise InputError(f"[ERROR] {context} is empty. Pass inline JSON or a path to a JSON file.")
    if data == "-":
        return _safe_json_parse(sys.stdin.read(), "stdin")
    if os.path.isfile(data):
        try:
            with open(data, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise InputError(f"[ERROR] Cannot read {context} file '{data}': {e.strerror}") from e
        return _safe_json_parse(text, f"file '{data}'")
    return _safe_json_parse(data, context)
