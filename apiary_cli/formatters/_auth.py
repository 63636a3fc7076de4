"""Formatters for API key info and validation."""

from apiary_cli.formatters._core import to_json
from apiary_cli.formatters._table import _table


def format_key_validation_table(rows):
    cols = [("Key Type", 15), ("Source", 36), ("Key ID", 20), ("Status", 15), ("Details", 0)]
    return _table(
        cols,
        [
            (r["key_type"], r["source"], r["key_id"], r["status"], r["details"])
            for r in rows
        ],
    )


def format_auth_info(info):
    """Local key summary (no network)."""
    lines = ["API Key Information", "==================="]
    mgmt = info["management"]
    cfg = info["configuration"]
    if mgmt["configured"]:
        lines.append(f"Management Key:    {mgmt['key']} ({mgmt['source']})")
        lines.append("  Can access v2 APIs (Bearer authentication)")
    else:
        lines.append("Management Key:    not configured (v2 APIs unavailable)")
    if cfg["configured"]:
        lines.append(f"Configuration Key: {cfg['key']} ({cfg['source']})")
        lines.append("  Can access v1 APIs (X-Honeycomb-Team authentication)")
    else:
        lines.append("Configuration Key: not configured (v1 APIs unavailable)")
    lines.append("")
    lines.append(f"API URL: {info['api_url']}")
    lines.append(f"Team:    {info.get('team') or '-'}")
    lines.append("")
    lines.append("Set environment variables:")
    lines.append('  export HONEYCOMB_MANAGEMENT_API_KEY_ID="hcxmk_..."')
    lines.append('  export HONEYCOMB_MANAGEMENT_API_KEY="..."')
    lines.append('  export HONEYCOMB_CONFIGURATION_API_KEY="..."')
    return "\n".join(lines)


def format_auth_validation(response):
    """Render the /2/auth JSON:API response; unknown shapes fall back to JSON."""
    data = response.get("data") if isinstance(response, dict) else None
    attrs = data.get("attributes") if isinstance(data, dict) else None
    if not isinstance(attrs, dict):
        return to_json(response, "pretty")
    timestamps = attrs.get("timestamps") or {}
    lines = [
        "API Key Information:",
        "====================",
        f"Name:    {attrs.get('name', '-')}",
        f"Type:    {attrs.get('key_type', '-')}",
        f"ID:      {data.get('id', '-')}",
        f"Status:  {'Disabled' if attrs.get('disabled') else 'Active'}",
        f"Created: {timestamps.get('created', '-')}",
        f"Updated: {timestamps.get('updated', '-')}",
    ]
    included = response.get("included") or []
    team = included[0] if included and isinstance(included[0], dict) else None
    if team:
        team_attrs = team.get("attributes") or {}
        lines += [
            "",
            "Team Information:",
            "=================",
            f"Name: {team_attrs.get('name', '-')}",
            f"Slug: {team_attrs.get('slug', '-')}",
            f"ID:   {team.get('id', '-')}",
        ]
    scopes = attrs.get("scopes") or []
    if scopes:
        lines += ["", "Scopes:", "======="]
        lines += [f"  - {scope}" for scope in scopes]
    return "\n".join(lines)
