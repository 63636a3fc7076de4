"""
Command implementations for apiary-cli.
Each cmd_*() function receives an argparse.Namespace and an ApiaryClient
and handles one CLI command.

Business logic lives in client.py (ApiaryClient). These thin wrappers
handle argparse → keyword args, --data loading, format selection, and
formatter dispatch. User-supplied JSON is always parsed before the first
network call.
"""

from apiary_cli._utils import load_json_data
from apiary_cli.exceptions import CliError
from apiary_cli.formatters import (
    format_auth_info,
    format_auth_validation,
    format_events_sent,
    format_key_validation_table,
    format_resource_table,
    mutation_response,
    output,
    warn,
)
from apiary_cli.models import ObjectPayload
from apiary_cli.resources import get_resource


def _fmt(ns, default="pretty"):
    return getattr(ns, "format", None) or default


def _scope(ns):
    return {
        "dataset": getattr(ns, "dataset", None),
        "environment": getattr(ns, "environment", None),
        "team": getattr(ns, "team", None),
    }


# ---------------------------------------------------------------------------
# Generic resource commands
# ---------------------------------------------------------------------------


def cmd_list(ns, client):
    rdef = get_resource(ns.resource)
    scope = _scope(ns)
    if not scope["environment"]:
        scope["environment"] = client.settings.environment
    result = client.list_resource(rdef, **scope)
    output(result, format_resource_table(rdef), _fmt(ns, "table"))


def cmd_get(ns, client):
    rdef = get_resource(ns.resource)
    result = client.get_resource(rdef, getattr(ns, "id", None), **_scope(ns))
    output(result, fmt=_fmt(ns))


def cmd_create(ns, client):
    rdef = get_resource(ns.resource)
    data = ObjectPayload.from_value(load_json_data(ns.data), "--data").data
    result = client.create_resource(rdef, data, **_scope(ns))
    output(result, fmt=_fmt(ns))


def cmd_update(ns, client):
    rdef = get_resource(ns.resource)
    data = ObjectPayload.from_value(load_json_data(ns.data), "--data").data
    result = client.update_resource(rdef, getattr(ns, "id", None), data, **_scope(ns))
    output(result, fmt=_fmt(ns))


def cmd_delete(ns, client):
    rdef = get_resource(ns.resource)
    if not getattr(ns, "confirm", False):
        raise CliError(
            f"[ERROR] Deleting a {rdef.display_name.lower()} is permanent. "
            "Re-run with --confirm."
        )
    client.delete_resource(rdef, ns.id, **_scope(ns))
    where = f"in dataset '{ns.dataset}'" if getattr(ns, "dataset", None) else None
    mutation_response("Deleted", rdef.display_name.lower(), ns.id, where, fmt=_fmt(ns))


# ---------------------------------------------------------------------------
# Auth / keys
# ---------------------------------------------------------------------------


def cmd_auth_validate(ns, client):
    output(client.validate_auth(), format_auth_validation, _fmt(ns))


def cmd_auth_info(ns, client):
    output(client.auth_info(), format_auth_info, _fmt(ns, "table"))


def cmd_keys_validate(ns, client):
    rows = client.validate_keys()
    output(rows, format_key_validation_table, _fmt(ns, "table"))
    if any(r["status"] == "invalid" for r in rows):
        raise CliError("[ERROR] One or more API keys failed validation.")


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def cmd_query_create(ns, client):
    query = load_json_data(ns.data)
    output(client.create_query(ns.dataset, query), fmt=_fmt(ns))


def cmd_query_get(ns, client):
    output(client.get_query(ns.dataset, ns.id), fmt=_fmt(ns))


def cmd_query_run(ns, client):
    query = load_json_data(ns.data)
    result = client.run_query(ns.dataset, query, wait=not ns.no_wait, timeout=ns.timeout)
    output(result, fmt=_fmt(ns))
    if ns.no_wait:
        warn(
            f"Use 'apiary query-results get --dataset {ns.dataset} "
            f"--id {result['query_result_id']}' to check status"
        )


def cmd_query_result_create(ns, client):
    output(client.create_query_result(ns.dataset, ns.query_id), fmt=_fmt(ns))


def cmd_query_result_get(ns, client):
    output(client.get_query_result(ns.dataset, ns.id), fmt=_fmt(ns))


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def cmd_events_send(ns, client):
    events = load_json_data(ns.data)
    sent = client.send_events(ns.dataset, events)
    output(sent, format_events_sent, _fmt(ns, "table"))


def cmd_events_batch(ns, client):
    events = load_json_data(ns.data)
    output(client.send_batch(ns.dataset, events), fmt=_fmt(ns))
