"""Outbound HTTP transport.

Every provider call goes through a ``Transport``. The production transport
wraps ``httpx.AsyncClient``; tests inject ``ScriptedTransport``, which replays
queued responses and records the calls it received.
"""

import json as jsonlib
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import httpx
import logfire
from pydantic import BaseModel, ConfigDict, Field

from donorlink.adapter.error import TransportError


class TransportResponse(BaseModel):
    """Status, headers and raw text of a provider response."""

    model_config = ConfigDict(frozen=True)

    status: int
    text: str = ""
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status < 300

    def json_body(self) -> Any:
        """Parse the body as JSON.

        Returns:
            Parsed JSON value, or None when the body is empty or not JSON
        """
        if not self.text:
            return None
        try:
            return jsonlib.loads(self.text)
        except ValueError:
            return None

    def details(self) -> Any:
        """Parsed JSON body, falling back to the raw text."""
        parsed = self.json_body()
        return parsed if parsed is not None else (self.text or None)


def redact_url(url: str) -> str:
    """Strip query and fragment so tokens never reach the logs."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class Transport:
    """Generic outbound HTTP interface."""

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        json: Any = None,
        data: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> TransportResponse:
        """Send one request.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Request headers
            params: Query parameters merged into the URL
            json: JSON body
            data: Form-encoded body
            timeout: Per-call ceiling in seconds (falls back to the default)

        Returns:
            The provider response, whatever its status

        Raises:
            TransportError: On network failure or timeout
        """
        raise NotImplementedError


class HttpxTransport(Transport):
    """Transport backed by httpx."""

    def __init__(self, timeout_seconds: float = 15.0) -> None:
        self.timeout_seconds = timeout_seconds

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        json: Any = None,
        data: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> TransportResponse:
        try:
            async with httpx.AsyncClient(
                timeout=timeout or self.timeout_seconds
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers=headers,
                    params=params,
                    json=json,
                    data=data,
                )
        except httpx.TimeoutException as e:
            logfire.warn(
                "Outbound request timed out", method=method, url=redact_url(url)
            )
            raise TransportError(
                f"Request to {urlsplit(url).netloc} timed out", details=str(e)
            ) from e
        except httpx.HTTPError as e:
            logfire.warn(
                "Outbound request failed",
                method=method,
                url=redact_url(url),
                error=str(e),
            )
            raise TransportError(str(e) or e.__class__.__name__) from e

        return TransportResponse(
            status=response.status_code,
            text=response.text,
            headers=dict(response.headers),
        )


class TransportCall(BaseModel):
    """A request received by ``ScriptedTransport``."""

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, str] | None = None
    body: Any = None
    form: dict[str, str] | None = None


class ScriptedRoute(BaseModel):
    """A queued response, optionally limited to a method and URL fragment."""

    status: int = 200
    body: Any = None
    method: str | None = None
    match: str | None = None
    error: str | None = None
    times: int | None = None

    def matches(self, method: str, url: str) -> bool:
        if self.times is not None and self.times <= 0:
            return False
        if self.method and self.method.upper() != method.upper():
            return False
        if self.match and self.match not in url:
            return False
        return True


class ScriptedTransport(Transport):
    """Transport that replays scripted responses.

    Routes are checked in the order they were added; the first route whose
    method and URL fragment match answers the call. Unmatched calls get 404.
    """

    def __init__(self) -> None:
        self.routes: list[ScriptedRoute] = []
        self.calls: list[TransportCall] = []

    def add(
        self,
        status: int = 200,
        body: Any = None,
        *,
        method: str | None = None,
        match: str | None = None,
        error: str | None = None,
        times: int | None = None,
    ) -> "ScriptedTransport":
        """Queue a response. ``times=None`` answers indefinitely."""
        self.routes.append(
            ScriptedRoute(
                status=status,
                body=body,
                method=method,
                match=match,
                error=error,
                times=times,
            )
        )
        return self

    def reset(self) -> None:
        self.routes.clear()
        self.calls.clear()

    def calls_to(self, fragment: str, method: str | None = None) -> list[TransportCall]:
        """Recorded calls whose URL contains ``fragment``."""
        return [
            call
            for call in self.calls
            if fragment in call.url
            and (method is None or call.method.upper() == method.upper())
        ]

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        json: Any = None,
        data: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> TransportResponse:
        self.calls.append(
            TransportCall(
                method=method.upper(),
                url=url,
                headers=dict(headers or {}),
                params=params,
                body=json,
                form=data,
            )
        )

        for route in self.routes:
            if not route.matches(method, url):
                continue
            if route.times is not None:
                route.times -= 1
            if route.error:
                raise TransportError(route.error)
            if route.body is None:
                text = ""
            elif isinstance(route.body, str):
                text = route.body
            else:
                text = jsonlib.dumps(route.body)
            return TransportResponse(status=route.status, text=text)

        return TransportResponse(status=404, text="")
