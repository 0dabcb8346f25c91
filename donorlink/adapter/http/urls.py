"""URL composition helpers shared by the provider adapters."""

from urllib.parse import parse_qsl, quote, urlencode, urljoin, urlsplit, urlunsplit


def build_request_url(base_url: str, path: str) -> str:
    """Join a configured base URL and a candidate endpoint path.

    Leading path segments that repeat the base URL's trailing segments are
    dropped first (longest case-insensitive overlap), so a base ending in
    ``/api/v1`` joined with ``/api/v1/invites`` yields ``.../api/v1/invites``.

    Args:
        base_url: Configured provider base URL
        path: Candidate endpoint path

    Returns:
        Absolute URL
    """
    sanitized = (base_url or "").rstrip("/")
    parts = urlsplit(f"{sanitized}/")
    base = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
    base_segments = [segment for segment in parts.path.split("/") if segment]

    normalized = (path or "").lstrip("/")
    path_segments = normalized.split("/") if normalized else []

    overlap = 0
    for count in range(min(len(base_segments), len(path_segments)), 0, -1):
        tail = base_segments[len(base_segments) - count :]
        head = path_segments[:count]
        if all(
            left and right and left.lower() == right.lower()
            for left, right in zip(tail, head)
        ):
            overlap = count
            break

    return urljoin(base, "/".join(path_segments[overlap:]))


def set_query_param(url: str, key: str, value: str) -> str:
    """Set (or replace) a single query parameter."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != key]
    query.append((key, value))
    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path or "/", urlencode(query), parts.fragment)
    )


def get_portal_url(base_url: str | None) -> str:
    """Public origin of the invite portal.

    Path segments from the first ``api`` segment onwards are cut, along with
    query and fragment. Unparsable input is returned trimmed.
    """
    trimmed = str(base_url or "").strip()
    if not trimmed:
        return ""

    parts = urlsplit(trimmed)
    if not parts.scheme or not parts.netloc:
        return trimmed.rstrip("/")

    segments = [segment for segment in parts.path.split("/") if segment]
    for index, segment in enumerate(segments):
        if segment.lower() == "api":
            segments = segments[:index]
            break

    path = "/" + "/".join(segments) if segments else ""
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def build_invite_url(base_url: str | None, invite_path: str | None, code: object) -> str:
    """Synthesize a portal invite URL when the portal did not return one."""
    if code is None:
        return ""
    normalized_code = str(code).strip()
    if not normalized_code:
        return ""

    portal = (get_portal_url(base_url) or str(base_url or "")).rstrip("/")
    if not portal:
        return ""

    segment = (invite_path or "").strip().strip("/") or "invite"
    return f"{portal}/{segment}/{quote(normalized_code, safe='')}"


def normalize_id(value: object) -> str:
    """Comparison form of a server identifier: trimmed, lowercase, no dashes."""
    return str("" if value is None else value).strip().lower().replace("-", "")
