"""Low-level table rendering helpers (stdlib only)."""

import re

_CONTROL_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]|[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _trunc(s, maxlen):
    """Truncate string with ellipsis indicator. maxlen <= 0 disables truncation."""
    if s is None or s == "":
        return ""
    s = str(s)
    if maxlen <= 0:
        return s
    return s[: maxlen - 1] + "…" if len(s) > maxlen else s


def _sanitize_str(s):
    """Strip ANSI escape sequences and control chars from table output.
    Preserves newlines (\\n) and tabs (\\t)."""
    if not s:
        return s
    return _CONTROL_RE.sub("", str(s))


def _cell(value):
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (dict, list)):
        return f"<{len(value)} items>"
    return _sanitize_str(str(value))


def _table(columns, rows, footer=None):
    """Build a formatted table string.
    columns: list of (name, width) tuples. Last column has no width (fills).
    rows: list of tuples matching columns.
    footer: optional footer line."""
    header_parts = []
    for i, (name, width) in enumerate(columns):
        if i == len(columns) - 1:
            header_parts.append(name)
        else:
            header_parts.append(f"{name:<{width}}")
    header = " ".join(header_parts)
    lines = [header, "-" * max(len(header), 80)]
    for row in rows:
        parts = []
        for i, val in enumerate(row):
            if i == len(columns) - 1:
                parts.append(_cell(val))
            else:
                width = columns[i][1]
                parts.append(f"{_trunc(_cell(val), width):<{width}}")
        lines.append(" ".join(parts))
    if footer:
        lines.append(f"\n{footer}")
    return "\n".join(lines)
