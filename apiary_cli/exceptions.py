"""
apiary-cli exception hierarchy.

All custom exceptions live here to avoid circular imports.
"""


class CliError(Exception):
    """Exit code 1 - validation, not-found, network, parse errors."""

    exit_code = 1


class SetupError(CliError):
    """Exit code 2 - missing API key, missing team."""

    exit_code = 2


class InputError(CliError):
    """Malformed user-supplied JSON (--data literal or file)."""


class ValidationError(CliError):
    """An environment reference did not resolve for a team."""

    def __init__(self, message, reference=None, team=None, available=None):
        super().__init__(message)
        self.reference = reference
        self.team = team
        self.available = list(available or [])


class DispatchError(CliError):
    """Raised by the request dispatcher when a request does not succeed."""


class TransportError(DispatchError):
    """DNS, connection or timeout failure. Never retried."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class ApiError(DispatchError):
    """Non-2xx HTTP response.

    ``body`` is the provider's text as decoded; ``body_bytes`` holds the raw
    bytes as received. ``truncated`` is set when the body exceeded the
    response size cap.
    """

    def __init__(
        self, status, body, reason="", request_id=None, body_bytes=None, truncated=False
    ):
        self.status = status
        self.body = body
        self.reason = reason
        self.request_id = request_id
        self.body_bytes = (body or "").encode("utf-8") if body_bytes is None else body_bytes
        self.truncated = truncated
        message = f"[ERROR] HTTP {status}: {body}" if body else f"[ERROR] HTTP {status}"
        if truncated:
            message += f" [truncated at {len(self.body_bytes)} bytes]"
        super().__init__(message)
