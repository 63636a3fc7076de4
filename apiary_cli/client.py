"""
ApiaryClient - public Python API for the Honeycomb REST API.

Single entry point for programmatic use and the MCP server.
Methods return decoded JSON values (dicts/lists) or ApiResult where the
caller wants raw bytes. Raises CliError subclasses on failure.
"""

from __future__ import annotations

import time
import urllib.parse
from typing import Any

from apiary_cli import api, config
from apiary_cli.environments import require_valid_environment
from apiary_cli.exceptions import CliError, DispatchError, SetupError
from apiary_cli.models import ApiResult, ClientConfig, Environment, RequestSpec
from apiary_cli.resources import (
    DATASET,
    TEAM,
    ResourceDefinition,
    get_resource,
    quote_segment,
)


def _is_v2(path):
    return path.startswith("/2/")


def _team_from_path(path):
    """Extract <team> from /2/teams/<team>/... paths."""
    parts = path.split("/")
    if len(parts) > 3 and parts[1] == "2" and parts[2] == "teams":
        return urllib.parse.unquote(parts[3]) or None
    return None


def _resolve_resource(resource):
    if isinstance(resource, ResourceDefinition):
        return resource
    try:
        return get_resource(resource)
    except KeyError:
        raise CliError(f"[ERROR] Unknown resource '{resource}'.") from None


def _parse_environment_list(payload):
    """Accept the v2 ``{"data": [...]}`` envelope or a bare list."""
    items = payload.get("data") if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        raise CliError(
            "[ERROR] Unexpected environments response shape: expected a 'data' list."
        )
    return [Environment.from_api(item) for item in items]


class ApiaryClient:
    """Public API surface for Honeycomb resources.

    All credentials come from the ClientConfig passed in; nothing is read
    from module-level state.
    """

    def __init__(self, settings: ClientConfig | None = None, *, sender=None):
        """Initialize the client.

        Args:
            settings: Connection settings. Defaults to ClientConfig.from_env().
            sender: Dispatch function with the signature of api.send.
                Substitute one in tests to avoid the network.
        """
        self.settings = settings if settings is not None else ClientConfig.from_env()
        self._send = sender or api.send

    # -------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------

    def _credential_for(self, path):
        if _is_v2(path):
            if self.settings.management is None:
                raise SetupError(
                    config.MANAGEMENT_KEY_REQUIRED + f"\n  Endpoint: {path}"
                )
            return self.settings.management
        if self.settings.configuration is None:
            raise SetupError(config.CONFIG_KEY_REQUIRED + f"\n  Endpoint: {path}")
        return self.settings.configuration

    def resolve_team(self, team: str | None = None) -> str:
        effective = team or self.settings.team
        if not effective:
            raise SetupError(config.TEAM_REQUIRED)
        return effective

    def build_spec(self, method, path, *, query=None, data=None) -> RequestSpec:
        team = _team_from_path(path)
        return RequestSpec.json(
            method,
            path,
            data,
            query=query or {},
            team=team,
            team_scoped=team is not None,
        )

    # -------------------------------------------------------------------
    # Raw requests
    # -------------------------------------------------------------------

    def dispatch(self, spec: RequestSpec) -> ApiResult:
        """Send a prepared RequestSpec with the credential its path needs."""
        credential = self._credential_for(spec.path)
        return self._send(
            spec,
            credential,
            base_url=self.settings.base_url,
            timeout=self.settings.timeout,
        )

    def request(self, method, path, *, query=None, data=None) -> ApiResult:
        return self.dispatch(self.build_spec(method, path, query=query, data=data))

    def request_json(self, method, path, *, query=None, data=None) -> Any:
        return self.request(method, path, query=query, data=data).json()

    # -------------------------------------------------------------------
    # Environments
    # -------------------------------------------------------------------

    def fetch_environments(self, team: str) -> list[Environment]:
        """GET the team's environment list (one request, not cached)."""
        payload = self.request_json("GET", f"/2/teams/{quote_segment(team)}/environments")
        return _parse_environment_list(payload)

    def require_environment(self, environment: str, *, team: str | None = None) -> Environment:
        """Validate *environment* against the team before any scoped call."""
        return require_valid_environment(
            self.resolve_team(team), environment, self.fetch_environments
        )

    # -------------------------------------------------------------------
    # Generic resource CRUD
    # -------------------------------------------------------------------

    def _collection(self, rdef, dataset, team):
        if rdef.scope == DATASET and not dataset:
            raise CliError(f"[ERROR] --dataset is required for {rdef.name}.")
        if rdef.scope == TEAM:
            team = self.resolve_team(team)
        return rdef.collection_path(dataset=dataset, team=team)

    def _require_action(self, rdef, action):
        if not rdef.supports(action):
            raise CliError(
                f"[ERROR] '{rdef.name}' does not support '{action}'. "
                f"Supported: {', '.join(rdef.actions)}"
            )

    def _scope_environment(self, rdef, environment, team, required=False):
        """Validate the environment (if any) and return its resolved slug."""
        if not environment:
            if required:
                raise CliError(config.ENVIRONMENT_REQUIRED)
            return None
        return self.require_environment(environment, team=team).slug

    def list_resource(self, resource, *, dataset=None, environment=None, team=None):
        rdef = _resolve_resource(resource)
        self._require_action(rdef, "list")
        path = self._collection(rdef, dataset, team)
        slug = self._scope_environment(
            rdef, environment, team, required=rdef.requires_environment
        )
        query = {"environment": slug} if slug else None
        return self.request_json("GET", path, query=query)

    def get_resource(self, resource, item_id=None, *, dataset=None, environment=None, team=None):
        rdef = _resolve_resource(resource)
        self._require_action(rdef, "get")
        path = self._collection(rdef, dataset, team)
        self._scope_environment(rdef, environment, team)
        if "list" in rdef.actions or item_id:
            if not item_id:
                raise CliError(f"[ERROR] An id is required to get a {rdef.display_name.lower()}.")
            path = f"{path}/{quote_segment(item_id)}"
        return self.request_json("GET", path)

    def create_resource(self, resource, data, *, dataset=None, environment=None, team=None):
        rdef = _resolve_resource(resource)
        self._require_action(rdef, "create")
        path = self._collection(rdef, dataset, team)
        self._scope_environment(rdef, environment, team)
        return self.request_json("POST", path, data=data)

    def update_resource(
        self, resource, item_id, data, *, dataset=None, environment=None, team=None
    ):
        rdef = _resolve_resource(resource)
        self._require_action(rdef, "update")
        path = self._collection(rdef, dataset, team)
        self._scope_environment(rdef, environment, team)
        if item_id:
            path = f"{path}/{quote_segment(item_id)}"
        elif "list" in rdef.actions:
            raise CliError(f"[ERROR] An id is required to update a {rdef.display_name.lower()}.")
        return self.request_json(rdef.update_method, path, data=data)

    def delete_resource(self, resource, item_id, *, dataset=None, environment=None, team=None):
        rdef = _resolve_resource(resource)
        self._require_action(rdef, "delete")
        if not item_id:
            raise CliError(f"[ERROR] An id is required to delete a {rdef.display_name.lower()}.")
        path = self._collection(rdef, dataset, team)
        self._scope_environment(rdef, environment, team)
        result = self.request("DELETE", f"{path}/{quote_segment(item_id)}")
        return {"ok": True, "status": result.status, "id": item_id, "resource": rdef.name}

    # -------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------

    def auth_info(self) -> dict[str, Any]:
        """Describe configured keys without touching the network."""
        mgmt = self.settings.management
        cfg = self.settings.configuration
        return {
            "management": {
                "configured": mgmt is not None,
                "key": mgmt.masked() if mgmt else None,
                "source": mgmt.source if mgmt else None,
                "endpoints": "v2 (Bearer)",
            },
            "configuration": {
                "configured": cfg is not None,
                "key": cfg.masked() if cfg else None,
                "source": cfg.source if cfg else None,
                "endpoints": "v1 (X-Honeycomb-Team)",
            },
            "api_url": self.settings.base_url,
            "team": self.settings.team,
        }

    def validate_auth(self) -> Any:
        return self.request_json("GET", "/2/auth")

    def _key_row(self, key_type, credential, path):
        if credential is None:
            if key_type == "management" and self.settings.unpaired_management_id:
                return {
                    "key_type": key_type,
                    "source": "-",
                    "key_id": self.settings.unpaired_management_id,
                    "status": "invalid",
                    "details": "Missing management key secret",
                }
            return {
                "key_type": key_type,
                "source": "-",
                "key_id": "-",
                "status": "not configured",
                "details": "Set via env vars or flags to enable validation",
            }
        row = {"key_type": key_type, "source": credential.source, "key_id": credential.masked()}
        try:
            self.request("GET", path)
        except DispatchError as e:
            row.update(status="invalid", details=str(e))
        else:
            row.update(status="valid", details=f"Validated via {path}")
        return row

    def validate_keys(self) -> list[dict[str, Any]]:
        """Check each configured key against its auth endpoint."""
        return [
            self._key_row("management", self.settings.management, "/2/auth"),
            self._key_row("configuration", self.settings.configuration, "/1/auth"),
        ]

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------

    def create_query(self, dataset, query) -> Any:
        return self.request_json("POST", f"/1/queries/{quote_segment(dataset)}", data=query)

    def get_query(self, dataset, query_id) -> Any:
        path = f"/1/queries/{quote_segment(dataset)}/{quote_segment(query_id)}"
        return self.request_json("GET", path)

    def create_query_result(self, dataset, query_id) -> Any:
        return self.request_json(
            "POST", f"/1/query_results/{quote_segment(dataset)}", data={"query_id": query_id}
        )

    def get_query_result(self, dataset, result_id) -> Any:
        path = f"/1/query_results/{quote_segment(dataset)}/{quote_segment(result_id)}"
        return self.request_json("GET", path)

    def run_query(
        self,
        dataset,
        query,
        *,
        wait=True,
        timeout=config.QUERY_DEFAULT_TIMEOUT_SECONDS,
        poll_interval=config.QUERY_POLL_INTERVAL_SECONDS,
    ) -> dict[str, Any]:
        """Create a query, start a query result and poll until complete.

        Returns the final query result, or ``{"query_id", "query_result_id",
        "complete": False}`` when wait is False.
        """
        created = self.create_query(dataset, query)
        query_id = created.get("id") if isinstance(created, dict) else None
        if not query_id:
            raise CliError("[ERROR] Failed to get query ID from response.")

        started = self.create_query_result(dataset, query_id)
        result_id = None
        if isinstance(started, dict):
            result_id = started.get("query_result_id") or started.get("id")
        if not result_id:
            raise CliError("[ERROR] Failed to get query result ID from response.")

        if not wait:
            return {"query_id": query_id, "query_result_id": result_id, "complete": False}

        deadline = time.monotonic() + max(0, timeout)
        while True:
            result = self.get_query_result(dataset, result_id)
            if isinstance(result, dict) and result.get("complete"):
                return result
            if time.monotonic() >= deadline:
                raise CliError(
                    f"[ERROR] Query timed out after {timeout} seconds "
                    f"(query_result_id={result_id})."
                )
            time.sleep(poll_interval)

    # -------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------

    def send_events(self, dataset, events) -> list[dict[str, Any]]:
        """POST one event, or each event of a list in sequence.

        Stops at the first failure; earlier events stay sent.
        """
        if isinstance(events, dict):
            events = [events]
        if not isinstance(events, list) or not events:
            raise CliError("[ERROR] Events must be a JSON object or a non-empty array of objects.")
        sent = []
        for index, event in enumerate(events):
            if not isinstance(event, dict):
                raise CliError(f"[ERROR] Event #{index} is not a JSON object.")
            result = self.request("POST", f"/1/events/{quote_segment(dataset)}", data=event)
            sent.append({"index": index, "status": result.status})
        return sent

    def send_batch(self, dataset, events) -> Any:
        """POST an array of events to the batch endpoint in one request."""
        if not isinstance(events, list):
            raise CliError("[ERROR] Batch events must be a JSON array.")
        return self.request_json("POST", f"/1/batch/{quote_segment(dataset)}", data=events)
