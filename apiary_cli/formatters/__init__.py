"""Output formatting package for apiary-cli.

Re-exports all public names so consumers can do:
    from apiary_cli.formatters import format_resource_table
"""

from apiary_cli.formatters._auth import (
    format_auth_info,
    format_auth_validation,
    format_key_validation_table,
)
from apiary_cli.formatters._core import (
    mutation_response,
    output,
    to_json,
    warn,
)
from apiary_cli.formatters._resources import (
    format_events_sent,
    format_resource_table,
)
from apiary_cli.formatters._table import (
    _CONTROL_RE,
    _sanitize_str,
    _table,
    _trunc,
)

__all__ = [
    "_CONTROL_RE",
    "_sanitize_str",
    "_table",
    "_trunc",
    "format_auth_info",
    "format_auth_validation",
    "format_events_sent",
    "format_key_validation_table",
    "format_resource_table",
    "mutation_response",
    "output",
    "to_json",
    "warn",
]
