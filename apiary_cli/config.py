"""
apiary-cli shared configuration and constants.
Standalone module - no imports from other project files.

Credentials and team defaults are NOT module-level state here: they are
collected into a ClientConfig (see models.py) once at startup and passed
to the client explicitly. This module only owns the raw env lookup and the
transport tuning knobs.
"""

import os

# ---------------------------------------------------------------------------
# .env path and helpers
# ---------------------------------------------------------------------------

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_PACKAGE_DIR)

ENV_PATH = os.path.join(_PROJECT_ROOT, ".env")

# Keys that may also be supplied through the process environment.
KNOWN_ENV_KEYS = (
    "HONEYCOMB_MANAGEMENT_API_KEY_ID",
    "HONEYCOMB_MANAGEMENT_API_KEY",
    "HONEYCOMB_CONFIGURATION_API_KEY",
    "HONEYCOMB_API_KEY",
    "HONEYCOMB_API_URL",
    "HONEYCOMB_API_ENDPOINT",
    "HONEYCOMB_TEAM",
    "HONEYCOMB_ENVIRONMENT",
    "APIARY_HTTP_TIMEOUT_SECONDS",
    "APIARY_HTTP_MAX_RESPONSE_BYTES",
    "APIARY_HTTP_LOG",
)


def load_env():
    """Read KEY=value pairs from .env, then overlay known keys from os.environ."""
    env = {}
    if os.path.exists(ENV_PATH):
        with open(ENV_PATH) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, val = line.split("=", 1)
                    val = val.strip()
                    if len(val) >= 2 and val[0] == val[-1] and val[0] in "\"'":
                        val = val[1:-1]
                    env[key.strip()] = val
    for key in KNOWN_ENV_KEYS:
        value = os.environ.get(key)
        if value:
            env[key] = value
    return env


def _env_bool(key, default=False):
    """Parse common boolean env formats."""
    raw = env.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key, default):
    """Parse integer env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def resolve_api_url(api_url=None, api_endpoint=None):
    """Pick the API base URL: explicit URL first, then a bare endpoint host."""
    if api_url:
        return api_url.rstrip("/")
    if api_endpoint:
        if api_endpoint.startswith(("http://", "https://")):
            return api_endpoint.rstrip("/")
        return f"https://{api_endpoint}".rstrip("/")
    return BASE_URL


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "0.3.1"
CONTRACT_SCHEMA_VERSION = "1.0"

BASE_URL = "https://api.honeycomb.io"

VALID_FORMATS = ("json", "pretty", "table")

MANAGEMENT_KEY_PREFIXES = ("hcxmk_", "hcamk_")
CONFIGURATION_KEY_PREFIXES = ("hcaik_",)
CONFIGURATION_KEY_LENGTH = 64

TEAM_REQUIRED = "[SETUP_NEEDED] Team is required. Use --team flag or set HONEYCOMB_TEAM."
ENVIRONMENT_REQUIRED = (
    "[ERROR] Environment is required. Use --environment flag or set HONEYCOMB_ENVIRONMENT."
)
MANAGEMENT_KEY_REQUIRED = (
    "[SETUP_NEEDED] Management API key required for v2 endpoints. "
    "Set HONEYCOMB_MANAGEMENT_API_KEY_ID and HONEYCOMB_MANAGEMENT_API_KEY."
)
CONFIG_KEY_REQUIRED = (
    "[SETUP_NEEDED] Configuration API key required for v1 endpoints. "
    "Set HONEYCOMB_CONFIGURATION_API_KEY."
)

# ---------------------------------------------------------------------------
# Module-level state (loaded from .env / os.environ)
# ---------------------------------------------------------------------------

env = load_env()

HTTP_TIMEOUT_SECONDS = _env_int("APIARY_HTTP_TIMEOUT_SECONDS", 30)
HTTP_MAX_RESPONSE_BYTES = _env_int("APIARY_HTTP_MAX_RESPONSE_BYTES", 10_000_000)
HTTP_LOG_ENABLED = _env_bool("APIARY_HTTP_LOG", False)

QUERY_POLL_INTERVAL_SECONDS = 1.0
QUERY_DEFAULT_TIMEOUT_SECONDS = 30

RUNTIME_QUIET = False
