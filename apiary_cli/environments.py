"""
Environment validation: resolve a user-supplied environment reference
(slug or display name) against a team's live environment list.

The list comes from an injected ``fetch_environments(team)`` callable so
the lookup can run against any source. Nothing is cached: every call
fetches exactly once.
"""

from __future__ import annotations

from typing import Callable, Sequence

from apiary_cli.exceptions import ValidationError
from apiary_cli.models import Environment

FetchEnvironments = Callable[[str], Sequence[Environment]]

MAX_LISTED_SLUGS = 10


def _format_available(slugs):
    if not slugs:
        return "none"
    shown = ", ".join(slugs[:MAX_LISTED_SLUGS])
    hidden = len(slugs) - MAX_LISTED_SLUGS
    if hidden > 0:
        shown += f" (+{hidden} more)"
    return shown


def find_environment(environments, reference):
    """Slug match first, then name match. First hit in list order wins."""
    for env in environments:
        if env.slug == reference:
            return env
    for env in environments:
        if env.name == reference:
            return env
    return None


def validate(team: str, environment_ref: str, fetch_environments: FetchEnvironments) -> Environment:
    """Resolve *environment_ref* within *team*.

    Raises ValidationError when the reference is empty, the team has no
    environments, or nothing matches by slug or name.
    """
    if not team or not team.strip():
        raise ValidationError("[ERROR] Team must not be empty.", environment_ref, team)
    if not environment_ref or not environment_ref.strip():
        raise ValidationError("[ERROR] Environment must not be empty.", environment_ref, team)

    environments = list(fetch_environments(team))
    match = find_environment(environments, environment_ref)
    if match is not None:
        return match

    slugs = [env.slug for env in environments if env.slug]
    raise ValidationError(
        f"[ERROR] Environment '{environment_ref}' not found. "
        f"Available: {_format_available(slugs)}",
        reference=environment_ref,
        team=team,
        available=slugs,
    )


def require_valid_environment(
    team: str, environment_ref: str, fetch_environments: FetchEnvironments
) -> Environment:
    """Like validate(), with a user-facing message naming team and reference."""
    try:
        return validate(team, environment_ref, fetch_environments)
    except ValidationError as e:
        if not (team or "").strip() or not (environment_ref or "").strip():
            raise
        raise ValidationError(
            f"[ERROR] Environment '{environment_ref}' not found in team '{team}'. "
            f"Valid environments: {_format_available(e.available)}. "
            f"Use 'apiary environments list --team {team}' to see available environments.",
            reference=environment_ref,
            team=team,
            available=e.available,
        ) from e
