"""Invite-portal request body synthesis.

Portal releases disagree on field names, so callers may pass a loose payload
(top-level fields or a nested ``invitation`` object) and the body sent to the
portal is derived from the first usable candidate for each field.
"""

import json
import math
import re
import secrets
import string
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field

from donorlink.domain.model.settings import PortalSettings

INVITE_ENDPOINT_BASES: tuple[str, ...] = (
    "/api/v1/invitations",
    "/api/v1/invites",
    "/api/invites",
    "/api/invitations",
    "/api/v2/invitations",
    "/api/v2/invites",
    "/api/v1/admin/invitations",
    "/api/v1/admin/invites",
    "/api/admin/invitations",
    "/api/admin/invites",
    "/api/v2/admin/invitations",
    "/api/v2/admin/invites",
    "/api/v1/invite",
    "/api/invite",
    "/api/v2/invite",
    "/api/v1/admin/invite",
    "/api/admin/invite",
    "/api/v2/admin/invite",
)

INVITE_CREATION_ENDPOINTS: tuple[str, ...] = (
    *INVITE_ENDPOINT_BASES,
    "/api/v1/invitations/create",
    "/api/invitations/create",
    "/api/v2/invitations/create",
    "/api/v1/admin/invitations/create",
    "/api/admin/invitations/create",
    "/api/v2/admin/invitations/create",
    "/api/invites/create",
    "/api/invite/create",
    "/api/v1/invites/create",
    "/api/v1/invite/create",
    "/api/v2/invites/create",
    "/api/v2/invite/create",
    "/api/admin/invites/create",
    "/api/admin/invite/create",
    "/api/v1/admin/invites/create",
    "/api/v1/admin/invite/create",
    "/api/v2/admin/invites/create",
    "/api/v2/admin/invite/create",
)

SERVER_VALUE_KEYS: tuple[str, ...] = (
    "server",
    "serverSelection",
    "selectedServer",
    "preferredServer",
    "targetServer",
    "serverSlug",
    "server_slug",
    "serverKey",
    "server_key",
    "serverIdentifier",
    "server_identifier",
    "serverId",
    "server_id",
    "serverIds",
    "server_ids",
    "defaultServer",
    "default_server",
    "defaultServerSelection",
    "default_server_selection",
    "defaultServerSlug",
    "default_server_slug",
    "defaultServerKey",
    "default_server_key",
    "defaultServerIdentifier",
    "default_server_identifier",
    "defaultServerId",
    "default_server_id",
    "defaultServerIds",
    "default_server_ids",
    "identifier",
)

CONFIGURED_SERVER_KEYS: tuple[str, ...] = (
    "server",
    "serverSelection",
    "serverSlug",
    "server_slug",
    "serverKey",
    "server_key",
    "serverIdentifier",
    "server_identifier",
    "server_ids",
    "serverIds",
    "defaultServerIds",
    "default_server_ids",
    "defaultServerId",
    "default_server_id",
    "defaultServer",
    "default_server",
    "defaultServerSelection",
    "defaultServerSlug",
    "default_server_slug",
    "defaultServerKey",
    "default_server_key",
    "defaultServerIdentifier",
    "default_server_identifier",
    "serverId",
    "server_id",
)

OBJECT_SERVER_KEYS = (
    "identifier",
    "server",
    "serverSlug",
    "server_slug",
    "serverId",
    "server_id",
    "id",
    "value",
    "key",
)

OBJECT_LABEL_KEYS = ("value", "name", "label", "identifier", "slug", "id")

INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits
INVITE_CODE_LENGTH = 10
MAX_INVITE_CODE_LENGTH = 64
DEFAULT_VALIDITY = timedelta(days=1)

_DELIMITERS = re.compile(r"[,\s]+")
_WHITESPACE = re.compile(r"\s+")


def _number_text(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def sanitize_string(value: Any) -> str | None:
    """Trimmed non-empty string form of a scalar, else None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, float)):
        return _number_text(value)
    return None


def sanitize_invite_code(value: Any) -> str | None:
    text = sanitize_string(value)
    if not text:
        return None
    return _WHITESPACE.sub("-", text)[:MAX_INVITE_CODE_LENGTH]


def to_finite_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return None
        try:
            number = float(trimmed)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def to_positive_integer(value: Any) -> int | None:
    """Round half up; only values above zero survive."""
    number = to_finite_number(value)
    if number is None:
        return None
    rounded = math.floor(number + 0.5)
    return rounded if rounded > 0 else None


def unique_strings(values: list[Any]) -> list[str]:
    """Sanitized strings, de-duplicated case-insensitively, order kept."""
    seen: set[str] = set()
    results: list[str] = []
    for value in values:
        text = sanitize_string(value)
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        results.append(text)
    return results


def collect_server_values(value: Any) -> list[str]:
    """Flatten whatever a caller passed as a server selection into tokens.

    Lists are walked, dicts contribute their id-like keys, JSON-looking strings
    are decoded, and other strings are split on commas and whitespace.
    """
    results: list[str] = []
    seen: set[str] = set()

    def push(token: str, key: str) -> None:
        if key not in seen:
            seen.add(key)
            results.append(token)

    def add(candidate: Any) -> None:
        if candidate is None or isinstance(candidate, bool):
            return
        if isinstance(candidate, (list, tuple)):
            for entry in candidate:
                add(entry)
            return
        if isinstance(candidate, dict):
            for key in OBJECT_SERVER_KEYS:
                if candidate.get(key) is not None:
                    add(candidate[key])
            return
        if isinstance(candidate, (int, float)):
            if math.isfinite(candidate):
                push(_number_text(candidate), f"num:{_number_text(candidate)}")
            return

        trimmed = str(candidate).strip()
        if not trimmed:
            return
        if (trimmed.startswith("[") and trimmed.endswith("]")) or (
            trimmed.startswith("{") and trimmed.endswith("}")
        ):
            try:
                add(json.loads(trimmed))
                return
            except ValueError:
                pass

        parts = [part for part in _DELIMITERS.split(trimmed) if part]
        if len(parts) > 1:
            for part in parts:
                add(part)
            return
        push(trimmed, trimmed.lower())

    add(value)
    return results


def stringify_server_id(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _number_text(value) if math.isfinite(value) else None
    if isinstance(value, str):
        return value.strip() or None
    return None


def _canonical_number(text: str) -> int | float | None:
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    if number.is_integer() and str(int(number)) == text:
        return int(number)
    if str(number) == text:
        return number
    return None


def normalize_server_id(value: Any) -> int | float | str | None:
    """Numeric strings in canonical form become numbers; others stay strings."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, (dict, list, tuple)):
        candidates = collect_server_values(value)
        return normalize_server_id(candidates[0]) if candidates else None

    text = str(value).strip()
    if not text:
        return None
    number = _canonical_number(text)
    return number if number is not None else text


def parse_server_ids(value: Any) -> list[int | float | str]:
    ids: list[int | float | str] = []
    seen: set[str] = set()
    for token in collect_server_values(value):
        number = _canonical_number(token)
        normalized: int | float | str = number if number is not None else token
        key = f"#{normalized}" if number is not None else f"str:{token.lower()}"
        if key in seen:
            continue
        seen.add(key)
        ids.append(normalized)
    return ids


def extract_server_ids(config: dict[str, Any] | None) -> list[int | float | str]:
    """Server ids from the first configured key that yields any."""
    if not isinstance(config, dict):
        return []
    for key in CONFIGURED_SERVER_KEYS:
        ids = parse_server_ids(config.get(key))
        if ids:
            return ids
    return []


def collect_server_preferences(source: dict[str, Any] | None) -> list[str]:
    if not isinstance(source, dict):
        return []
    results: list[str] = []
    seen: set[str] = set()
    for key in SERVER_VALUE_KEYS:
        if key not in source:
            continue
        for entry in collect_server_values(source[key]):
            value = stringify_server_id(entry)
            if value and value.lower() not in seen:
                seen.add(value.lower())
                results.append(value)
    return results


def collect_string_list(value: Any) -> list[str]:
    """De-duplicated strings from a list, a comma-separated string or objects."""
    results: list[str] = []
    seen: set[str] = set()

    def add(candidate: Any) -> None:
        if candidate is None:
            return
        if isinstance(candidate, (list, tuple)):
            for entry in candidate:
                add(entry)
            return
        if isinstance(candidate, dict):
            for key in OBJECT_LABEL_KEYS:
                if candidate.get(key) is not None:
                    add(candidate[key])
            return

        text = sanitize_string(candidate)
        if not text:
            return
        if "," in text:
            for part in text.split(","):
                if part.strip():
                    add(part.strip())
            return
        if text.lower() not in seen:
            seen.add(text.lower())
            results.append(text)

    add(value)
    return results


def generate_invite_code() -> str:
    return "".join(
        secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH)
    )


def _first(candidates: list[Any], convert: Any) -> Any:
    for candidate in candidates:
        converted = convert(candidate)
        if converted is not None:
            return converted
    return None


def _invitation(payload: dict[str, Any]) -> dict[str, Any]:
    nested = payload.get("invitation")
    return nested if isinstance(nested, dict) else {}


def determine_invite_code(payload: dict[str, Any]) -> str:
    """Caller's code (invitation first), else a fresh ``A-Z0-9`` code."""
    invitation = _invitation(payload)
    code = _first(
        [
            invitation.get("code"),
            invitation.get("inviteCode"),
            invitation.get("desiredCode"),
            payload.get("code"),
            payload.get("inviteCode"),
            payload.get("desiredCode"),
        ],
        sanitize_invite_code,
    )
    return code or generate_invite_code()


def parse_timestamp(value: Any) -> datetime | None:
    """Absolute timestamp from a datetime or an ISO-8601 string."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 with milliseconds and a ``Z`` suffix."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def resolve_timestamp(
    absolute_candidates: list[Any], day_candidates: list[Any], now: datetime
) -> datetime | None:
    absolute = _first(absolute_candidates, parse_timestamp)
    if absolute is not None:
        return absolute
    days = _first(day_candidates, to_positive_integer)
    if days is not None:
        return now + timedelta(days=days)
    return None


def _is_enabled(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return False


class ServerContext(BaseModel):
    """Server preferences for one invite: caller's first, then configured."""

    requested: list[str] = Field(default_factory=list)
    configured: list[str] = Field(default_factory=list)

    @property
    def preferences(self) -> list[str]:
        return unique_strings([*self.requested, *self.configured])

    @property
    def selected(self) -> str | None:
        preferences = self.preferences
        return preferences[0] if preferences else None


def resolve_server_context(
    payload: dict[str, Any], settings: PortalSettings
) -> ServerContext:
    configured = unique_strings(
        [stringify_server_id(value) for value in extract_server_ids(settings.to_values())]
    )
    requested = unique_strings(
        [
            *collect_server_preferences(_invitation(payload)),
            *collect_server_preferences(payload),
        ]
    )
    return ServerContext(requested=requested, configured=configured)


def build_invitation_body(
    payload: dict[str, Any],
    settings: PortalSettings,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Derive the portal invite body from a loose payload and portal defaults.

    Args:
        payload: Top-level fields plus an optional nested ``invitation``
        settings: Portal settings supplying defaults
        now: Base for relative durations (defaults to the current time)

    Returns:
        JSON body with ``code``, ``unlimited``/``max_uses``, ``durationAt``,
        ``expiresAt``, server selection and the optional fields that resolved
    """
    now = now or datetime.now(UTC)
    invitation = _invitation(payload)
    defaults = settings.to_values()
    body: dict[str, Any] = {}

    context = resolve_server_context(payload, settings)
    if context.selected:
        body["server"] = context.selected
        body["server_ids"] = parse_server_ids(context.preferences)

    body["code"] = determine_invite_code(payload)

    if _is_enabled(invitation.get("unlimited", payload.get("unlimited"))):
        body["unlimited"] = True
    else:
        body["unlimited"] = False
        body["max_uses"] = (
            _first(
                [
                    invitation.get("max_uses"),
                    invitation.get("maxUses"),
                    payload.get("max_uses"),
                    payload.get("maxUses"),
                    invitation.get("userLimit"),
                    invitation.get("user_limit"),
                    payload.get("userLimit"),
                    payload.get("user_limit"),
                ],
                to_positive_integer,
            )
            or 1
        )

    duration_at = resolve_timestamp(
        [invitation.get("durationAt"), payload.get("durationAt")],
        [
            invitation.get("duration"),
            invitation.get("days"),
            payload.get("duration"),
            payload.get("days"),
            defaults.get("defaultDurationDays"),
        ],
        now,
    )
    expires_at = resolve_timestamp(
        [
            invitation.get("expiresAt"),
            invitation.get("expires"),
            payload.get("expiresAt"),
            payload.get("expires"),
        ],
        [
            invitation.get("expiresInDays"),
            invitation.get("expires_in_days"),
            payload.get("expiresInDays"),
            payload.get("expires_in_days"),
        ],
        now,
    )
    if duration_at is None and expires_at is None:
        duration_at = expires_at = now + DEFAULT_VALIDITY
    body["durationAt"] = format_timestamp(duration_at or expires_at)
    body["expiresAt"] = format_timestamp(expires_at or duration_at)

    profile = _first(
        [
            invitation.get("profile"),
            invitation.get("profileName"),
            payload.get("profile"),
            payload.get("profileName"),
            defaults.get("defaultProfile"),
        ],
        sanitize_string,
    )
    if profile:
        body["profile"] = profile

    library_source = next(
        (
            candidate
            for candidate in (
                invitation.get("libraries"),
                invitation.get("libraryIds"),
                payload.get("libraries"),
                payload.get("libraryIds"),
                defaults.get("defaultLibraries"),
            )
            if candidate is not None
        ),
        None,
    )
    libraries = collect_string_list(library_source)
    if libraries:
        body["libraries"] = libraries

    message = _first(
        [
            invitation.get("message"),
            invitation.get("note"),
            payload.get("message"),
            payload.get("note"),
        ],
        sanitize_string,
    )
    if message:
        body["message"] = message

    username = _first(
        [
            invitation.get("username"),
            invitation.get("name"),
            payload.get("username"),
            payload.get("name"),
        ],
        sanitize_string,
    )
    if username:
        body["username"] = username

    email = _first(
        [
            invitation.get("email"),
            invitation.get("recipientEmail"),
            payload.get("email"),
        ],
        sanitize_string,
    )
    if email:
        body["email"] = email

    for extra in (invitation.get("extraFields"), payload.get("extraFields")):
        if not isinstance(extra, dict):
            continue
        for key, value in extra.items():
            if value is not None and key not in body:
                body[key] = value

    return body
