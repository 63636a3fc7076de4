"""Core output dispatchers."""

import json
import sys

from apiary_cli import config


def to_json(data, fmt="json"):
    """Serialize *data*: compact for json, indented for pretty."""
    if fmt == "json":
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(data, indent=2, ensure_ascii=False)


def output(data, formatter=None, fmt="pretty"):
    """Output data in requested format.

    ``table`` falls back to pretty JSON when no formatter applies.
    """
    if fmt == "table" and formatter:
        print(formatter(data))
    elif fmt == "json":
        print(to_json(data, "json"))
    else:
        print(to_json(data, "pretty"))


def mutation_response(action, resource, item_id=None, details=None, data=None, fmt="pretty"):
    """Print a mutation confirmation."""
    if fmt == "json":
        payload = {
            "ok": True,
            "mutation": {"action": action, "resource": resource, "id": item_id},
        }
        if details:
            payload["mutation"]["details"] = details
        if data not in (None, {}, []):
            payload["data"] = data
        print(to_json(payload, "json"))
        return

    parts = [action, resource]
    if item_id:
        parts.append(f"'{item_id}'")
    summary = " ".join(parts)
    if details:
        summary += f" ({details})"
    print(f"OK: {summary}")
    if fmt == "pretty" and data not in (None, {}, []):
        print(to_json(data, "pretty"))


def warn(message):
    """Print a warning to stderr unless --quiet."""
    if config.RUNTIME_QUIET:
        return
    print(message, file=sys.stderr)
