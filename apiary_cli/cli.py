"""
apiary-cli - CLI tool for the Honeycomb observability API
"""

import argparse
import json
import sys

from apiary_cli import config
from apiary_cli.client import ApiaryClient
from apiary_cli.commands import (
    cmd_auth_info,
    cmd_auth_validate,
    cmd_create,
    cmd_delete,
    cmd_events_batch,
    cmd_events_send,
    cmd_get,
    cmd_keys_validate,
    cmd_list,
    cmd_query_create,
    cmd_query_get,
    cmd_query_result_create,
    cmd_query_result_get,
    cmd_query_run,
    cmd_update,
)
from apiary_cli.exceptions import CliError
from apiary_cli.models import ClientConfig
from apiary_cli.resources import CRUD, DATASET, RESOURCES

HELP_TEXT = """\
Usage: apiary <resource> <action> [flags...]

Global flags:
  --format <fmt>          json, pretty or table (default: table for list, pretty otherwise)
  --quiet, -q             Suppress warnings
  --verbose, -v           Enable HTTP request logging
  --version               Show version number
  --api-url <url>         API base URL (env: HONEYCOMB_API_URL)
  --api-endpoint <host>   API host without scheme (env: HONEYCOMB_API_ENDPOINT)
  --management-key-id <id>      Management key ID (env: HONEYCOMB_MANAGEMENT_API_KEY_ID)
  --management-key-secret <s>   Management key secret (env: HONEYCOMB_MANAGEMENT_API_KEY)
  --config-key <key>      Configuration key (env: HONEYCOMB_CONFIGURATION_API_KEY)
  --api-key <key>         Legacy key, classified by prefix (env: HONEYCOMB_API_KEY)

Resources (actions: list, get, create, update, delete):
{resources}

Resource flags:
  --team <slug>           Team slug for v2 endpoints (env: HONEYCOMB_TEAM)
  --environment <ref>     Environment slug or name; validated before the request
                          (env: HONEYCOMB_ENVIRONMENT, list only)
  --dataset <slug>        Dataset for dataset-scoped resources
  --id <id>               Item id (get, update, delete)
  --data <json|file|->    JSON payload (create, update)
  --confirm               Required for delete

Other commands:
  auth validate           Validate the management key via /2/auth
  auth info               Show configured keys (no network)
  api-keys validate       Validate every configured key
  queries create|get|run  --dataset <slug> [--id <id>] [--data <json>]
    run: --no-wait, --timeout <seconds>
  query-results create|get  --dataset <slug> [--query-id <id>] [--id <id>]
  events send|batch       --dataset <slug> --data <json>
"""


def _help_text():
    width = max(len(r.name) for r in RESOURCES) + 2
    lines = []
    for rdef in RESOURCES:
        actions = "" if rdef.actions == CRUD else (
            f" [{', '.join(rdef.actions)}]"
        )
        lines.append(f"  {rdef.name.ljust(width)}- {rdef.cli_help}{actions}")
    return HELP_TEXT.format(resources="\n".join(lines))


# ---------------------------------------------------------------------------
# Global flag extraction (before argparse, so flags work after the subcommand)
# ---------------------------------------------------------------------------

_CONNECTION_FLAGS = {
    "--api-url": "api_url",
    "--api-endpoint": "api_endpoint",
    "--management-key-id": "management_key_id",
    "--management-key-secret": "management_key_secret",
    "--config-key": "config_key",
    "--api-key": "api_key",
}


def _extract_global_flags(argv):
    """Extract global flags from argv regardless of position.

    Returns (format_str, quiet, verbose, connection, remaining_argv).
    ``format_str`` is None when no --format was given. Handles --version
    directly.
    """
    fmt = None
    quiet = False
    verbose = False
    connection = {}
    remaining = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--version":
            print(f"apiary-cli {config.VERSION}")
            sys.exit(0)
        elif arg in ("--quiet", "-q"):
            quiet = True
        elif arg in ("--verbose", "-v"):
            verbose = True
        elif arg == "--format":
            if i + 1 >= len(argv):
                raise CliError("[ERROR] --format requires a value.")
            fmt = argv[i + 1]
            if fmt not in config.VALID_FORMATS:
                raise CliError(
                    f"[ERROR] Invalid format '{fmt}'. Use: {', '.join(config.VALID_FORMATS)}"
                )
            i += 2
            continue
        elif arg in _CONNECTION_FLAGS:
            if i + 1 >= len(argv):
                raise CliError(f"[ERROR] {arg} requires a value.")
            connection[_CONNECTION_FLAGS[arg]] = argv[i + 1]
            i += 2
            continue
        else:
            remaining.append(arg)
        i += 1
    if quiet and verbose:
        raise CliError("[ERROR] --quiet and --verbose are mutually exclusive.")
    return fmt, quiet, verbose, connection, remaining


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


class _SubcommandParser(argparse.ArgumentParser):
    """Subparser that raises CliError instead of printing full help text."""

    def error(self, message):
        raise CliError(f"[ERROR] {message}")


def _positive_int(value):
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a positive integer") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return parsed


_HANDLERS = {
    "list": cmd_list,
    "get": cmd_get,
    "create": cmd_create,
    "update": cmd_update,
    "delete": cmd_delete,
}


def _add_resource_parser(sub, rdef):
    p = sub.add_parser(rdef.name, help=rdef.cli_help)
    actions = p.add_subparsers(dest="action", parser_class=_SubcommandParser)
    for action in rdef.actions:
        a = actions.add_parser(action)
        a.add_argument("--team")
        a.add_argument("--environment")
        if rdef.scope == DATASET:
            a.add_argument("--dataset", required=True)
        if action in ("get", "update", "delete"):
            id_required = action == "delete" or "list" in rdef.actions
            a.add_argument("--id", required=id_required)
        if action in ("create", "update"):
            a.add_argument("--data", required=True)
        if action == "delete":
            a.add_argument("--confirm", action="store_true")
        a.set_defaults(func=_HANDLERS[action], resource=rdef.name)
    return actions


def build_parser():
    parser = _SubcommandParser(
        prog="apiary",
        description="CLI tool for the Honeycomb observability API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("--help", "-h", action="store_true", dest="show_help")
    sub = parser.add_subparsers(dest="command", parser_class=_SubcommandParser)

    # --- registry resources ---
    for rdef in RESOURCES:
        actions = _add_resource_parser(sub, rdef)
        if rdef.name == "api-keys":
            actions.add_parser("validate").set_defaults(func=cmd_keys_validate)

    # --- auth ---
    p = sub.add_parser("auth")
    actions = p.add_subparsers(dest="action", parser_class=_SubcommandParser)
    actions.add_parser("validate").set_defaults(func=cmd_auth_validate)
    actions.add_parser("info").set_defaults(func=cmd_auth_info)

    # --- queries ---
    p = sub.add_parser("queries")
    actions = p.add_subparsers(dest="action", parser_class=_SubcommandParser)
    a = actions.add_parser("create")
    a.add_argument("--dataset", required=True)
    a.add_argument("--data", required=True)
    a.set_defaults(func=cmd_query_create)
    a = actions.add_parser("get")
    a.add_argument("--dataset", required=True)
    a.add_argument("--id", required=True)
    a.set_defaults(func=cmd_query_get)
    a = actions.add_parser("run")
    a.add_argument("--dataset", required=True)
    a.add_argument("--data", required=True)
    a.add_argument("--no-wait", action="store_true", dest="no_wait")
    a.add_argument(
        "--timeout", type=_positive_int, default=config.QUERY_DEFAULT_TIMEOUT_SECONDS
    )
    a.set_defaults(func=cmd_query_run)

    # --- query-results ---
    p = sub.add_parser("query-results")
    actions = p.add_subparsers(dest="action", parser_class=_SubcommandParser)
    a = actions.add_parser("create")
    a.add_argument("--dataset", required=True)
    a.add_argument("--query-id", required=True, dest="query_id")
    a.set_defaults(func=cmd_query_result_create)
    a = actions.add_parser("get")
    a.add_argument("--dataset", required=True)
    a.add_argument("--id", required=True)
    a.set_defaults(func=cmd_query_result_get)

    # --- events ---
    p = sub.add_parser("events")
    actions = p.add_subparsers(dest="action", parser_class=_SubcommandParser)
    for name, handler in (("send", cmd_events_send), ("batch", cmd_events_batch)):
        a = actions.add_parser(name)
        a.add_argument("--dataset", required=True)
        a.add_argument("--data", required=True)
        a.set_defaults(func=handler)

    # --- version (bare word) ---
    sub.add_parser("version").set_defaults(func=None)

    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------


def _error_type_from_message(message):
    if message.startswith("[SETUP_NEEDED]"):
        return "setup_needed"
    if message.startswith("[ERROR]"):
        return "error"
    return "cli_error"


def _emit_cli_error(err, fmt):
    msg = str(err)
    if fmt == "json":
        error = {
            "type": _error_type_from_message(msg),
            "message": msg,
            "exit_code": getattr(err, "exit_code", 1),
        }
        status = getattr(err, "status", None)
        if status is not None:
            error["status"] = status
        payload = {
            "ok": False,
            "schema_version": config.CONTRACT_SCHEMA_VERSION,
            "error": error,
        }
        print(json.dumps(payload, ensure_ascii=False), file=sys.stderr)
        return
    print(msg, file=sys.stderr)


def build_client(connection, team=None, environment=None):
    """Resolve flags over env values into a ready ApiaryClient."""
    settings = ClientConfig.from_env(team=team, environment=environment, **connection)
    return ApiaryClient(settings)


def main(argv=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(_help_text())
        sys.exit(0)

    fmt = None
    try:
        fmt, quiet, verbose, connection, remaining_argv = _extract_global_flags(argv)
        config.RUNTIME_QUIET = quiet
        if verbose:
            config.HTTP_LOG_ENABLED = True

        if not remaining_argv:
            print(_help_text())
            sys.exit(0)

        parser = build_parser()
        ns = parser.parse_args(remaining_argv)
        ns.format = fmt  # inject global format flag

        if ns.show_help or not ns.command:
            print(_help_text())
            sys.exit(0)

        if ns.command == "version":
            print(f"apiary-cli {config.VERSION}")
            sys.exit(0)

        handler = getattr(ns, "func", None)
        if not handler:
            raise CliError(
                f"[ERROR] Missing action for '{ns.command}'. Run 'apiary --help' for usage."
            )
        client = build_client(connection, team=getattr(ns, "team", None))
        handler(ns, client)

    except CliError as e:
        _emit_cli_error(e, fmt)
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
