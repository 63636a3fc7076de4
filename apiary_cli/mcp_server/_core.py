"""Core helpers: client caching, _call dispatcher, response contract."""

from __future__ import annotations

from apiary_cli import ApiaryClient, CliError, SetupError, ValidationError
from apiary_cli.config import CONTRACT_SCHEMA_VERSION
from apiary_cli.exceptions import ApiError
from apiary_cli.resources import resource_names

_client: ApiaryClient | None = None


def _get_client() -> ApiaryClient:
    """Return a cached ApiaryClient, creating one on first use."""
    global _client
    if _client is None:
        _client = ApiaryClient()
    return _client


def _contract_error(message: str, error_type: str = "error", **extra) -> dict:
    """Return a stable MCP error envelope."""
    detail = {"type": error_type, "message": message}
    detail.update(extra)
    return {
        "ok": False,
        "schema_version": CONTRACT_SCHEMA_VERSION,
        "type": error_type,
        "error": message,
        "error_detail": detail,
    }


def _finalize_tool_result(result):
    """Dicts gain ok/schema_version; other values are wrapped under ``data``."""
    if isinstance(result, dict):
        out = dict(result)
        out.setdefault("schema_version", CONTRACT_SCHEMA_VERSION)
        out.setdefault("ok", True)
        return out
    return {"ok": True, "schema_version": CONTRACT_SCHEMA_VERSION, "data": result}


_ALLOWED_METHODS = {
    "resolve_team",
    "fetch_environments",
    "require_environment",
    "list_resource",
    "get_resource",
    "validate_keys",
}

# api-keys responses can carry secrets; they stay CLI-only.
_ALLOWED_RESOURCES = frozenset(name for name in resource_names() if name != "api-keys")


def _check_resource(resource: str) -> None:
    if resource not in _ALLOWED_RESOURCES:
        raise CliError(
            f"[ERROR] Resource '{resource}' is not available. "
            f"Allowed: {', '.join(sorted(_ALLOWED_RESOURCES))}"
        )


def _call(method_name: str, **kwargs):
    """Call an ApiaryClient method, converting exceptions to error dicts."""
    if method_name not in _ALLOWED_METHODS:
        return _contract_error(f"Unknown method: {method_name}", "error")
    try:
        client = _get_client()
        return getattr(client, method_name)(**kwargs)
    except SetupError as e:
        return _contract_error(str(e), "setup")
    except ValidationError as e:
        return _contract_error(str(e), "validation", available=e.available)
    except ApiError as e:
        return _contract_error(str(e), "api", status=e.status)
    except CliError as e:
        return _contract_error(str(e), "error")
    except Exception as e:
        return _contract_error(f"Unexpected error: {e}", "error")
