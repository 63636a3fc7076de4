"""Read tools: environments, registry resources and key checks (5 tools)."""

from __future__ import annotations

from apiary_cli import CliError, Environment
from apiary_cli.mcp_server._core import (
    _call,
    _check_resource,
    _contract_error,
    _finalize_tool_result,
)


def _is_error(result) -> bool:
    return isinstance(result, dict) and result.get("ok") is False


def list_environments(team: str | None = None) -> dict:
    """List environments for a team (v2, needs a management key).

    Args:
        team: Team slug. Defaults to HONEYCOMB_TEAM.

    Returns:
        Dict with environments (list of {slug, name, id}).
    """
    team = _call("resolve_team", team=team)
    if _is_error(team):
        return _finalize_tool_result(team)
    result = _call("fetch_environments", team=team)
    if _is_error(result):
        return _finalize_tool_result(result)
    return _finalize_tool_result({"environments": [env.to_dict() for env in result]})


def validate_environment(environment: str, team: str | None = None) -> dict:
    """Resolve an environment slug or name for a team.

    Slug matches win over name matches. On failure the error carries
    the available slugs.
    """
    result = _call("require_environment", environment=environment, team=team)
    if isinstance(result, Environment):
        return _finalize_tool_result({"environment": result.to_dict()})
    return _finalize_tool_result(result)


def list_resources(
    resource: str,
    dataset: str | None = None,
    environment: str | None = None,
    team: str | None = None,
) -> dict:
    """List items of a registry resource (triggers, slos, boards, ...).

    Args:
        resource: Registry name, e.g. 'triggers'.
        dataset: Required for dataset-scoped resources.
        environment: Validated against the team before the request.
    """
    try:
        _check_resource(resource)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _call(
            "list_resource",
            resource=resource,
            dataset=dataset,
            environment=environment,
            team=team,
        )
    )


def get_resource(
    resource: str,
    item_id: str | None = None,
    dataset: str | None = None,
    environment: str | None = None,
    team: str | None = None,
) -> dict:
    """Get one item of a registry resource."""
    try:
        _check_resource(resource)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _call(
            "get_resource",
            resource=resource,
            item_id=item_id,
            dataset=dataset,
            environment=environment,
            team=team,
        )
    )


def validate_keys() -> dict:
    """Validate configured management and configuration keys.

    Returns:
        Dict with keys (list of {key_type, source, key_id, status, details}).
    """
    result = _call("validate_keys")
    if _is_error(result):
        return _finalize_tool_result(result)
    return _finalize_tool_result({"keys": result})


def register(mcp):
    """Register all read tools with the FastMCP instance."""
    mcp.tool()(list_environments)
    mcp.tool()(validate_environment)
    mcp.tool()(list_resources)
    mcp.tool()(get_resource)
    mcp.tool()(validate_keys)
