"""MCP server exposing read-only ApiaryClient methods as tools.

Package structure:
  __init__.py       - FastMCP init, register() calls, re-exports
  __main__.py       - ``python -m apiary_cli.mcp_server`` entry point
  _core.py          - Client caching, _call dispatcher, response contract
  _tools_read.py    - 5 environment/resource/key tools

Run: python -m apiary_cli.mcp_server
Requires: pip install .[mcp]
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from apiary_cli.mcp_server import _tools_read

mcp = FastMCP(
    "apiary",
    instructions=(
        "Honeycomb observability API tools (read-only). "
        "Environment references accept a slug or a display name; slugs win. "
        "Dataset-scoped resources (triggers, slos, columns, ...) need a dataset. "
        "v2 endpoints need a management key and a team."
    ),
)

_tools_read.register(mcp)

# ---------------------------------------------------------------------------
# Re-exports (tests import via mcp_mod.xxx)
# ---------------------------------------------------------------------------

from apiary_cli.mcp_server._core import (  # noqa: E402, F401
    _ALLOWED_RESOURCES,
    _call,
    _client,
    _contract_error,
    _finalize_tool_result,
    _get_client,
)
from apiary_cli.mcp_server._tools_read import (  # noqa: E402, F401
    get_resource,
    list_environments,
    list_resources,
    validate_environment,
    validate_keys,
)


def main():
    """Run the MCP server (stdio transport)."""
    mcp.run()
