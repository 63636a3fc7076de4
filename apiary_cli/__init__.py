"""apiary-cli - CLI tool and Python client for the Honeycomb observability API."""

from apiary_cli.client import ApiaryClient
from apiary_cli.config import VERSION
from apiary_cli.environments import require_valid_environment, validate
from apiary_cli.exceptions import (
    ApiError,
    CliError,
    DispatchError,
    InputError,
    SetupError,
    TransportError,
    ValidationError,
)
from apiary_cli.models import (
    ApiResult,
    ClientConfig,
    Credential,
    Environment,
    RequestSpec,
)

__all__ = [
    "VERSION",
    "ApiaryClient",
    "ApiError",
    "ApiResult",
    "CliError",
    "ClientConfig",
    "Credential",
    "DispatchError",
    "Environment",
    "InputError",
    "RequestSpec",
    "SetupError",
    "TransportError",
    "ValidationError",
    "require_valid_environment",
    "validate",
]
