"""
HTTP request layer and security helpers for apiary-cli.

``send()`` is the single dispatch point: one request, no retries. It
returns the raw response bytes on 2xx and raises DispatchError otherwise.
"""

import http.client
import json
import re
import sys
import time
import urllib.error
import urllib.parse
import urllib.request
import uuid

from apiary_cli import config
from apiary_cli.exceptions import ApiError, CliError, InputError, TransportError
from apiary_cli.models import ApiResult

AUTH_HEADER = "Authorization"
LEGACY_AUTH_HEADER = "X-Honeycomb-Team"
TEAM_HEADER = "X-Honeycomb-Team-Slug"

_SECRET_QUERY_KEYS = {"key", "api_key", "apikey", "token", "secret"}


# ---------------------------------------------------------------------------
# Security helpers
# ---------------------------------------------------------------------------


def _mask_token(token):
    """Show only first 8 chars of a key for safe logging."""
    if not token:
        return ""
    return token[:8] + "..." if len(token) > 8 else token


def _safe_json_parse(text, context="input"):
    """Parse JSON with friendly error message on failure."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(
            f"[ERROR] Invalid JSON in {context}: {e.msg} at position {e.pos}"
        ) from None


def _sanitize_error(body, max_len=500):
    """Truncate and clean an error body for one-line display."""
    if not body:
        return ""
    cleaned = re.sub(r"<[^>]+>", "", body)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if len(cleaned) > max_len:
        return cleaned[:max_len] + "... [truncated]"
    return cleaned


def _sanitize_url_for_log(url):
    """Mask sensitive query params in URLs before logging."""
    parsed = urllib.parse.urlsplit(url)
    if not parsed.query:
        return url
    pairs = urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
    masked = []
    for key, value in pairs:
        if key.lower() in _SECRET_QUERY_KEYS:
            masked.append((key, "***"))
        else:
            masked.append((key, value))
    safe_query = urllib.parse.urlencode(masked, doseq=True)
    return urllib.parse.urlunsplit(
        (parsed.scheme, parsed.netloc, parsed.path, safe_query, parsed.fragment)
    )


def _log_http_event(**fields):
    """Emit structured HTTP logs to stderr when enabled."""
    if not config.HTTP_LOG_ENABLED:
        return
    print("[HTTP] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


def _auth_headers(credential):
    """Exactly one auth header, chosen by credential kind."""
    if credential.is_management:
        return {AUTH_HEADER: f"Bearer {credential.key}"}
    return {LEGACY_AUTH_HEADER: credential.key}


def build_headers(spec, credential):
    """Merge fixed headers, auth, team scoping and caller extras.

    Caller-supplied headers cannot override authentication.
    """
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": f"apiary-cli/{config.VERSION}",
        "X-Request-Id": str(uuid.uuid4()),
    }
    reserved = {AUTH_HEADER.lower(), LEGACY_AUTH_HEADER.lower(), TEAM_HEADER.lower()}
    for key, value in spec.headers.items():
        if key.lower() not in reserved:
            headers[key] = value
    headers.update(_auth_headers(credential))
    if spec.team_scoped and spec.team:
        headers[TEAM_HEADER] = spec.team
    return headers


def build_url(base_url, spec):
    url = base_url.rstrip("/") + spec.path
    if spec.query:
        url += "?" + urllib.parse.urlencode(list(spec.query.items()))
    return url


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def send(spec, credential, *, base_url=config.BASE_URL, timeout=None):
    """Send one authenticated request.

    Returns ApiResult on 2xx.
    Raises ApiError on non-2xx (status and body preserved verbatim),
    TransportError on DNS/connection/timeout failures.
    """
    url = build_url(base_url, spec)
    headers = build_headers(spec, credential)
    request_id = headers["X-Request-Id"]
    safe_url = _sanitize_url_for_log(url)
    timeout = max(1, timeout or config.HTTP_TIMEOUT_SECONDS)
    start = time.perf_counter()

    _log_http_event(
        phase="request",
        method=spec.method,
        url=safe_url,
        auth=credential.kind,
        key=_mask_token(credential.key),
        team=spec.team if spec.team_scoped else None,
        body_bytes=len(spec.body) if spec.body is not None else 0,
        request_id=request_id,
        timeout_seconds=timeout,
    )
    req = urllib.request.Request(url, data=spec.body, headers=headers, method=spec.method)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            content_type = resp.headers.get("Content-Type", "") or ""
            raw = resp.read(config.HTTP_MAX_RESPONSE_BYTES + 1)
            if len(raw) > config.HTTP_MAX_RESPONSE_BYTES:
                raise CliError(
                    "[ERROR] Response too large from Honeycomb API "
                    f"(>{config.HTTP_MAX_RESPONSE_BYTES} bytes)."
                )
            status = getattr(resp, "status", 200)
            _log_http_event(
                phase="response",
                method=spec.method,
                url=safe_url,
                status=status,
                content_type=content_type,
                bytes=len(raw),
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
                request_id=request_id,
            )
            return ApiResult(status=status, body=raw, content_type=content_type)
    except urllib.error.HTTPError as e:
        raw_error = e.read(config.HTTP_MAX_RESPONSE_BYTES + 1) if e.fp else b""
        truncated = len(raw_error) > config.HTTP_MAX_RESPONSE_BYTES
        raw_error = raw_error[: config.HTTP_MAX_RESPONSE_BYTES]
        error_body = raw_error.decode("utf-8", errors="replace")
        server_req_id = e.headers.get("X-Request-Id") if e.headers else None
        _log_http_event(
            phase="response",
            method=spec.method,
            url=safe_url,
            status=e.code,
            bytes=len(raw_error),
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            request_id=request_id,
            server_request_id=server_req_id,
            error=_sanitize_error(error_body, 200),
        )
        raise ApiError(
            e.code,
            error_body,
            reason=e.reason,
            request_id=server_req_id,
            body_bytes=raw_error,
            truncated=truncated,
        ) from e
    except TimeoutError as e:
        _log_http_event(
            phase="network_error",
            method=spec.method,
            url=safe_url,
            error="timeout",
            request_id=request_id,
        )
        raise TransportError(
            f"[ERROR] Request timed out after {timeout} seconds. Is {base_url} reachable?",
            cause=f"timed out after {timeout}s",
        ) from e
    except urllib.error.URLError as e:
        _log_http_event(
            phase="network_error",
            method=spec.method,
            url=safe_url,
            error=f"url_error: {e.reason}",
            request_id=request_id,
        )
        raise TransportError(f"[ERROR] Connection failed: {e.reason}", cause=str(e.reason)) from e
    except (OSError, http.client.HTTPException) as e:
        _log_http_event(
            phase="network_error",
            method=spec.method,
            url=safe_url,
            error=f"{type(e).__name__}: {e}",
            request_id=request_id,
        )
        raise TransportError(
            f"[ERROR] Connection failed: {type(e).__name__}: {e}", cause=str(e)
        ) from e
