"""Formatters for resource lists driven by the registry column specs."""

from apiary_cli._utils import _get_path, _short_date
from apiary_cli.formatters._core import to_json
from apiary_cli.formatters._table import _table

_DATE_KEYS = ("created", "created_at", "updated_at", "last_written_at")


def _items(payload):
    """Unwrap v2 ``{"data": [...]}`` envelopes; v1 endpoints return lists."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return payload


def format_resource_table(rdef):
    """Return a table formatter bound to one resource definition."""

    def _format(payload):
        items = _items(payload)
        if not rdef.columns or not isinstance(items, list):
            return to_json(payload, "pretty")
        if not items:
            return f"No {rdef.name} found."
        cols = [(header, width) for header, _, width in rdef.columns]
        rows = []
        for item in items:
            row = []
            for _, key, _ in rdef.columns:
                value = _get_path(item, key) if isinstance(item, dict) else None
                if key.rsplit(".", 1)[-1] in _DATE_KEYS:
                    value = _short_date(value)
                row.append(value)
            rows.append(tuple(row))
        return _table(cols, rows, f"Total: {len(items)} {rdef.name}")

    return _format


def format_events_sent(rows):
    if not rows:
        return "No events sent."
    cols = [("Event", 8), ("Status", 0)]
    return _table(
        cols,
        [(str(r["index"]), r["status"]) for r in rows],
        f"Sent: {len(rows)} events",
    )
