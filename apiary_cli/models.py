"""
Typed models for credentials, environments, requests and responses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from apiary_cli import config
from apiary_cli.exceptions import CliError

MANAGEMENT = "management"
CONFIGURATION = "configuration"


def classify_key(key):
    """Return MANAGEMENT, CONFIGURATION, or None for an unrecognized key."""
    if not key:
        return None
    if key.startswith(config.MANAGEMENT_KEY_PREFIXES):
        return MANAGEMENT
    if (
        key.startswith(config.CONFIGURATION_KEY_PREFIXES)
        or len(key) == config.CONFIGURATION_KEY_LENGTH
    ):
        return CONFIGURATION
    return None


@dataclass(frozen=True)
class Credential:
    """An API key and its kind. Decides which auth header is sent."""

    key: str
    kind: str
    source: str = "-"

    def __post_init__(self):
        if self.kind not in (MANAGEMENT, CONFIGURATION):
            raise CliError(f"[ERROR] Unknown credential kind '{self.kind}'.")
        if not self.key:
            raise CliError(f"[ERROR] Empty {self.kind} key.")

    @property
    def is_management(self) -> bool:
        return self.kind == MANAGEMENT

    @classmethod
    def management(cls, key_id, secret=None, source="-"):
        """Build a management credential; id and secret join as ``id:secret``."""
        key = f"{key_id}:{secret}" if secret else key_id
        return cls(key=key, kind=MANAGEMENT, source=source)

    @classmethod
    def configuration(cls, key, source="-"):
        return cls(key=key, kind=CONFIGURATION, source=source)

    def masked(self) -> str:
        return self.key[:8] + "..." if len(self.key) > 8 else self.key

    def __repr__(self):
        return f"Credential(kind={self.kind!r}, key={self.masked()!r}, source={self.source!r})"


@dataclass(frozen=True)
class Environment:
    """One environment of a team."""

    slug: str
    name: str
    id: str = ""

    @classmethod
    def from_api(cls, item):
        """Parse a v2 JSON:API environment item (or an already-flat dict)."""
        if not isinstance(item, dict):
            raise CliError(
                f"[ERROR] Unexpected environment entry: expected object, got {type(item).__name__}."
            )
        attrs = item.get("attributes")
        if not isinstance(attrs, dict):
            attrs = item
        return cls(
            slug=str(attrs.get("slug") or ""),
            name=str(attrs.get("name") or ""),
            id=str(item.get("id") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "slug": self.slug}


@dataclass(frozen=True)
class RequestSpec:
    """A fully resolved request. Never mutated after construction."""

    method: str
    path: str
    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None
    team: str | None = None
    team_scoped: bool = False

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "query", MappingProxyType(dict(self.query)))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def json(cls, method, path, data=None, **kwargs):
        """Build a spec serializing *data* as the JSON body (None means no body)."""
        body = None
        if data is not None:
            body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        return cls(method=method, path=path, body=body, **kwargs)


@dataclass(frozen=True)
class ApiResult:
    """Successful response: status plus the raw, un-decoded body."""

    status: int
    body: bytes
    content_type: str = ""

    def json(self) -> Any:
        """Decode the body as JSON. An empty body decodes to None."""
        if not self.body or not self.body.strip():
            return None
        try:
            return json.loads(self.body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            if self.content_type and "json" not in self.content_type.lower():
                raise CliError(
                    f"[ERROR] Unexpected Content-Type from server ({self.content_type}). "
                    "This may be a proxy or network issue."
                ) from None
            raise CliError("[ERROR] Unexpected response from Honeycomb API (not valid JSON).") from None


@dataclass(frozen=True)
class ClientConfig:
    """Explicit connection settings, built once per process."""

    management: Credential | None = None
    configuration: Credential | None = None
    unpaired_management_id: str | None = None
    base_url: str = config.BASE_URL
    team: str | None = None
    environment: str | None = None
    timeout: int = 30

    @classmethod
    def from_env(
        cls,
        env=None,
        *,
        management_key_id=None,
        management_key_secret=None,
        config_key=None,
        api_key=None,
        api_url=None,
        api_endpoint=None,
        team=None,
        environment=None,
    ):
        """Resolve flags first, then env values. A legacy ``api_key`` is
        classified by prefix and only fills a slot left empty."""
        env = config.env if env is None else env

        management = None
        unpaired_management_id = None
        key_id = management_key_id or env.get("HONEYCOMB_MANAGEMENT_API_KEY_ID")
        if key_id:
            secret = management_key_secret or env.get("HONEYCOMB_MANAGEMENT_API_KEY")
            source = (
                "--management-key-id"
                if management_key_id
                else "env:HONEYCOMB_MANAGEMENT_API_KEY_ID"
            )
            if secret:
                management = Credential.management(key_id, secret, source=source)
            else:
                unpaired_management_id = key_id

        configuration = None
        cfg_key = config_key or env.get("HONEYCOMB_CONFIGURATION_API_KEY")
        if cfg_key:
            source = "--config-key" if config_key else "env:HONEYCOMB_CONFIGURATION_API_KEY"
            configuration = Credential.configuration(cfg_key, source=source)

        legacy = api_key or env.get("HONEYCOMB_API_KEY")
        if legacy:
            source = "--api-key" if api_key else "env:HONEYCOMB_API_KEY"
            kind = classify_key(legacy)
            if kind == MANAGEMENT and management is None:
                management = Credential(key=legacy, kind=MANAGEMENT, source=source)
                unpaired_management_id = None
            elif kind == CONFIGURATION and configuration is None:
                configuration = Credential(key=legacy, kind=CONFIGURATION, source=source)

        return cls(
            management=management,
            configuration=configuration,
            unpaired_management_id=unpaired_management_id,
            base_url=config.resolve_api_url(
                api_url or env.get("HONEYCOMB_API_URL"),
                api_endpoint or env.get("HONEYCOMB_API_ENDPOINT"),
            ),
            team=team or env.get("HONEYCOMB_TEAM") or None,
            environment=environment or env.get("HONEYCOMB_ENVIRONMENT") or None,
            timeout=max(1, config.HTTP_TIMEOUT_SECONDS),
        )


@dataclass(frozen=True)
class ObjectPayload:
    """Typed wrapper for raw JSON object payloads."""

    data: dict

    @classmethod
    def from_value(cls, value, context):
        if isinstance(value, dict):
            return cls(data=value)
        raise CliError(
            f"[ERROR] Invalid JSON in {context}: expected object, got {type(value).__name__}."
        )
