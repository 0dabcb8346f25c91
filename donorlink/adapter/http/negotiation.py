"""Authentication and endpoint negotiation for API-key providers.

A provider whose authentication style and route prefix vary between releases
is called through two nested loops:

- ``perform_request`` tries every ``AuthStrategy`` against one URL and stops
  at the first status other than 401/403.
- ``request_with_fallback`` walks the candidate endpoint paths, skipping
  404/405 and retrying a 415 once with a form-encoded body.

Every attempt is recorded so a terminal failure can say exactly what was tried.
"""

from typing import Any
from urllib.parse import urlsplit

import logfire
from pydantic import BaseModel, ConfigDict

from donorlink.adapter.error import EndpointNotFoundError, TransportError
from donorlink.adapter.http.transport import Transport, TransportResponse
from donorlink.adapter.http.urls import build_request_url, set_query_param

ACCEPT_HEADER = "application/json, text/plain, */*"

UNAUTHORIZED_STATUSES = (401, 403)
PATH_MISS_STATUSES = (404, 405)


class AuthStrategy(BaseModel):
    """One way of presenting an API key."""

    model_config = ConfigDict(frozen=True)

    label: str
    header: str | None = None
    scheme: str | None = None
    query_param: str | None = None

    def apply(self, url: str, api_key: str) -> tuple[str, dict[str, str]]:
        """Return the URL and headers carrying ``api_key``."""
        headers: dict[str, str] = {}
        if self.header:
            headers[self.header] = f"{self.scheme} {api_key}" if self.scheme else api_key
        if self.query_param:
            url = set_query_param(url, self.query_param, api_key)
        return url, headers


# Order matters: the query parameter is the last resort and never carries a header
AUTH_STRATEGIES: tuple[AuthStrategy, ...] = (
    AuthStrategy(label="x-api-key", header="X-API-KEY"),
    AuthStrategy(label="x-api-key-camel", header="X-Api-Key"),
    AuthStrategy(label="bearer", header="Authorization", scheme="Bearer"),
    AuthStrategy(label="token", header="Authorization", scheme="Token"),
    AuthStrategy(label="raw-authorization", header="Authorization"),
    AuthStrategy(label="query-param", query_param="api_key"),
)


class RequestAttempt(BaseModel):
    """A single request made during negotiation."""

    model_config = ConfigDict(frozen=True)

    url: str
    status: int | str
    strategy: str | None = None
    format: str | None = None

    def describe(self) -> str:
        """Human-readable summary without query string (keys never leak)."""
        if "://" in self.url:
            path = urlsplit(self.url).path or "/"
        else:
            path = self.url
        format_label = f" [{self.format}]" if self.format else ""
        strategy_label = f" {{{self.strategy}}}" if self.strategy else ""
        return f"{path}{format_label}{strategy_label} ({self.status})"


class NegotiatedResponse(BaseModel):
    """The response that ended negotiation plus every attempt on the way."""

    response: TransportResponse
    url: str
    attempts: list[RequestAttempt]


def describe_attempts(attempts: list[RequestAttempt]) -> str:
    return ", ".join(attempt.describe() for attempt in attempts)


def to_form_body(body: dict[str, Any]) -> dict[str, str]:
    """Flatten a JSON body into form fields, skipping null values."""
    form: dict[str, str] = {}
    for key, value in body.items():
        if value is None:
            continue
        if isinstance(value, bool):
            form[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            form[key] = ",".join(str(entry) for entry in value)
        else:
            form[key] = str(value)
    return form


async def perform_request(
    transport: Transport,
    *,
    method: str,
    url: str,
    api_key: str,
    body: dict[str, Any] | None = None,
    body_format: str = "json",
    timeout: float | None = None,
) -> NegotiatedResponse:
    """Try every auth strategy against one URL.

    Args:
        transport: Outbound transport
        method: HTTP method
        url: Absolute URL
        api_key: Provider API key
        body: Request body (ignored for GET)
        body_format: "json" or "form"
        timeout: Per-call ceiling in seconds

    Returns:
        The first non-401/403 response, or the last 401/403 if every
        strategy was rejected

    Raises:
        TransportError: If every strategy failed on the network
    """
    attempts: list[RequestAttempt] = []
    rejected: tuple[TransportResponse, str] | None = None
    last_error: TransportError | None = None

    for strategy in AUTH_STRATEGIES:
        request_url, auth_headers = strategy.apply(url, api_key)
        headers = {"Accept": ACCEPT_HEADER, **auth_headers}

        json_body = None
        form_body = None
        if body is not None and method.upper() != "GET":
            if body_format == "form":
                headers["Content-Type"] = "application/x-www-form-urlencoded"
                form_body = to_form_body(body)
            else:
                headers["Content-Type"] = "application/json"
                json_body = body

        try:
            response = await transport.request(
                method,
                request_url,
                headers=headers,
                json=json_body,
                data=form_body,
                timeout=timeout,
            )
        except TransportError as e:
            attempts.append(
                RequestAttempt(
                    url=request_url,
                    status=e.message or "network error",
                    strategy=strategy.label,
                    format=body_format,
                )
            )
            last_error = e
            continue

        attempts.append(
            RequestAttempt(
                url=request_url,
                status=response.status,
                strategy=strategy.label,
                format=body_format,
            )
        )

        if response.status not in UNAUTHORIZED_STATUSES:
            return NegotiatedResponse(response=response, url=request_url, attempts=attempts)

        rejected = (response, request_url)

    if rejected is not None:
        return NegotiatedResponse(response=rejected[0], url=rejected[1], attempts=attempts)

    message = (
        last_error.message
        if last_error is not None
        else "Request failed for all authentication strategies"
    )
    raise TransportError(message, attempts=attempts)


async def request_with_fallback(
    transport: Transport,
    *,
    base_url: str,
    api_key: str,
    method: str,
    paths: list[str],
    body: dict[str, Any] | None = None,
    timeout: float | None = None,
    service: str = "provider",
) -> NegotiatedResponse:
    """Walk candidate endpoint paths until one answers.

    Args:
        transport: Outbound transport
        base_url: Configured provider base URL
        api_key: Provider API key
        method: HTTP method
        paths: Candidate paths, tried in order
        body: JSON body, retried as a form on 415
        timeout: Per-call ceiling in seconds
        service: Provider name used in the failure message

    Returns:
        The first response that is not a path miss

    Raises:
        EndpointNotFoundError: If every path missed or failed on the network
    """
    attempts: list[RequestAttempt] = []
    base = (base_url or "").rstrip("/")
    sends_body = body is not None and method.upper() != "GET"

    for path in paths:
        if not path:
            continue

        url = build_request_url(base, path)
        try:
            result = await perform_request(
                transport,
                method=method,
                url=url,
                api_key=api_key,
                body=body,
                body_format="json",
                timeout=timeout,
            )
        except TransportError as e:
            attempts.extend(
                e.attempts or [RequestAttempt(url=url, status=e.message, format="json")]
            )
            continue

        attempts.extend(result.attempts)
        if result.response.status in PATH_MISS_STATUSES:
            continue

        if result.response.status == 415 and sends_body:
            logfire.info("Retrying with form body", service=service, path=path)
            try:
                result = await perform_request(
                    transport,
                    method=method,
                    url=result.url,
                    api_key=api_key,
                    body=body,
                    body_format="form",
                    timeout=timeout,
                )
            except TransportError as e:
                attempts.extend(
                    e.attempts
                    or [RequestAttempt(url=result.url, status=e.message, format="form")]
                )
                continue

            attempts.extend(result.attempts)
            if result.response.status in (*PATH_MISS_STATUSES, 415):
                continue

        return NegotiatedResponse(
            response=result.response, url=result.url, attempts=attempts
        )

    summary = describe_attempts(attempts) if attempts else ", ".join(p for p in paths if p)
    logfire.warn(
        "No endpoint answered", service=service, method=method, attempts=len(attempts)
    )
    raise EndpointNotFoundError(
        f"The {service} API endpoint was not found. "
        f"Check the {service} base URL. Tried: {summary}",
        attempts=attempts,
    )
