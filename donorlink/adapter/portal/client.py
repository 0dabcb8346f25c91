"""Invite-portal HTTP client.

Talks to a Wizarr-style invite portal whose route prefix and authentication
style depend on the deployed release. Endpoint and auth discovery is delegated
to ``request_with_fallback``; this module maps portal answers onto the invite
vocabulary and the portal error taxonomy.
"""

from typing import Any
from urllib.parse import quote

import logfire

from donorlink.adapter.error import (
    EndpointNotFoundError,
    PortalRequestFailed,
    PortalServerSelectionRequired,
    PortalUnauthorized,
    PortalUnreachable,
    ProviderNotConfiguredError,
    TransportError,
)
from donorlink.adapter.http.negotiation import NegotiatedResponse, request_with_fallback
from donorlink.adapter.http.transport import Transport
from donorlink.adapter.http.urls import build_invite_url
from donorlink.adapter.portal.body import (
    INVITE_CREATION_ENDPOINTS,
    INVITE_ENDPOINT_BASES,
    build_invitation_body,
    sanitize_string,
)
from donorlink.adapter.portal.servers import (
    AmbiguousServers,
    SingleServer,
    classify_servers,
    extract_available_servers,
    format_server_options,
    server_selection,
)
from donorlink.domain.model.settings import PortalSettings
from donorlink.domain.service.invite_service import PortalClient
from donorlink.domain.value import ConnectionReport, PortalInvite, PortalInviteRequest

SERVICE_NAME = "invite portal"
VALIDATION_STATUSES = (400, 422)
UNAUTHORIZED_STATUSES = (401, 403)

CONNECTION_TEST_PAYLOAD: dict[str, Any] = {
    "code": "connection-test",
    "maxUses": 1,
    "duration": 1,
}


def _error_message(details: Any, text: str) -> str:
    if isinstance(details, dict) and details.get("error"):
        return str(details["error"])
    return text


class HttpPortalClient(PortalClient):
    """Invite-portal client over the shared transport."""

    def __init__(self, transport: Transport, timeout: float | None = None) -> None:
        """Initialize portal client.

        Args:
            transport: Outbound transport
            timeout: Per-call ceiling in seconds
        """
        self.transport = transport
        self.timeout = timeout

    @staticmethod
    def _require_configured(settings: PortalSettings) -> None:
        if not settings.is_configured:
            raise ProviderNotConfiguredError("Invite portal API is not configured")

    async def _send(
        self,
        settings: PortalSettings,
        method: str,
        paths: list[str] | tuple[str, ...],
        body: dict[str, Any] | None = None,
    ) -> NegotiatedResponse:
        try:
            return await request_with_fallback(
                self.transport,
                base_url=settings.base_url,
                api_key=settings.api_key,
                method=method,
                paths=list(paths),
                body=body,
                timeout=self.timeout,
                service=SERVICE_NAME,
            )
        except EndpointNotFoundError as e:
            raise PortalUnreachable(e.message, attempts=e.attempts) from e
        except TransportError as e:
            raise PortalUnreachable(
                f"The invite portal could not be reached: {e.message}",
                attempts=e.attempts,
            ) from e

    async def create_invite(
        self, settings: PortalSettings, request: PortalInviteRequest
    ) -> PortalInvite:
        """Create an invite, negotiating server selection once if needed.

        Args:
            settings: Portal settings
            request: Invite fields

        Returns:
            Normalized invite code and URL

        Raises:
            ProviderNotConfiguredError: If base URL or API key is missing
            PortalUnreachable: If no endpoint answered
            PortalUnauthorized: If every auth strategy was rejected
            PortalServerSelectionRequired: If the portal offers several servers
            PortalRequestFailed: On any other non-OK answer
        """
        self._require_configured(settings)
        body = build_invitation_body(request.to_payload(), settings)

        with logfire.span("portal.create_invite", code=body["code"]):
            result = await self._send(settings, "POST", INVITE_CREATION_ENDPOINTS, body)
            response = result.response

            if response.status in VALIDATION_STATUSES:
                details = response.details()
                offer = classify_servers(details)
                if isinstance(offer, AmbiguousServers):
                    options = format_server_options(offer.servers)
                    logfire.warn(
                        "Portal requires a server selection",
                        servers=len(offer.servers),
                    )
                    raise PortalServerSelectionRequired(
                        "The invite portal requires selecting a server before "
                        "creating invites. Update the portal settings with a "
                        f"default server selection. Available servers: {options}.",
                        servers=offer.servers,
                        status=response.status,
                        details=details,
                        attempts=result.attempts,
                    )
                if isinstance(offer, SingleServer):
                    fallback = server_selection(offer.server)
                    if fallback and fallback != sanitize_string(body.get("server")):
                        logfire.info("Retrying invite with the only offered server")
                        body = {**body, "server": fallback}
                        result = await self._send(
                            settings, "POST", INVITE_CREATION_ENDPOINTS, body
                        )
                        response = result.response

            if response.status in UNAUTHORIZED_STATUSES:
                raise PortalUnauthorized(
                    "The invite portal rejected the provided API key",
                    status=response.status,
                    details=response.details(),
                    attempts=result.attempts,
                )

            if not response.ok:
                details = response.details()
                reason = _error_message(details, response.text)
                message = f"Failed to create portal invite: {reason}"
                options = format_server_options(extract_available_servers(details))
                if options:
                    message = f"{message} Available servers: {options}."
                raise PortalRequestFailed(
                    message,
                    status=response.status,
                    details=details,
                    attempts=result.attempts,
                )

            data = response.json_body()
            if not isinstance(data, dict):
                raise PortalRequestFailed(
                    "Unexpected response from the invite portal while creating invite",
                    status=response.status,
                    details=response.text,
                )

            code = (
                sanitize_string(
                    data.get("code")
                    or data.get("invite_code")
                    or data.get("inviteCode")
                    or data.get("id")
                )
                or body["code"]
            )
            url_candidate = (
                data.get("url")
                or data.get("invite_url")
                or data.get("link")
                or data.get("inviteUrl")
                or data.get("full_url")
            )
            url = url_candidate.strip() if isinstance(url_candidate, str) else ""
            invite = PortalInvite(
                invite_code=code,
                invite_url=url
                or build_invite_url(settings.base_url, settings.invite_path, code),
                raw=data,
            )
            logfire.info("Portal invite created", code=invite.invite_code)
            return invite

    async def revoke_invite(self, settings: PortalSettings, code: str) -> None:
        """Delete an invite by code.

        Raises:
            PortalRequestFailed: If the portal answered with a non-OK status
            PortalUnreachable: If the portal could not be reached
        """
        self._require_configured(settings)
        if not code:
            raise PortalRequestFailed("An invite code is required to revoke a portal invite")

        encoded = quote(code, safe="")
        with logfire.span("portal.revoke_invite", code=code):
            try:
                result = await request_with_fallback(
                    self.transport,
                    base_url=settings.base_url,
                    api_key=settings.api_key,
                    method="DELETE",
                    paths=[f"{path}/{encoded}" for path in INVITE_ENDPOINT_BASES],
                    timeout=self.timeout,
                    service=SERVICE_NAME,
                )
            except EndpointNotFoundError as e:
                if all(attempt.status in (404, 405) for attempt in e.attempts):
                    logfire.info("Portal invite already gone", code=code)
                    return
                raise PortalUnreachable(e.message, attempts=e.attempts) from e

            if not result.response.ok:
                raise PortalRequestFailed(
                    f"Failed to revoke portal invite: {result.response.text}",
                    status=result.response.status,
                    details=result.response.details(),
                    attempts=result.attempts,
                )
            logfire.info("Portal invite deleted", code=code)

    async def verify_connection(self, settings: PortalSettings) -> ConnectionReport:
        """Probe the portal with a throwaway invite.

        A validation error counts as success: the key was accepted.

        Raises:
            PortalUnauthorized: If the API key was rejected
            PortalRequestFailed: On any other non-OK answer
        """
        self._require_configured(settings)
        body = build_invitation_body(dict(CONNECTION_TEST_PAYLOAD), settings)

        with logfire.span("portal.verify_connection"):
            result = await self._send(settings, "POST", INVITE_CREATION_ENDPOINTS, body)
            response = result.response

            if response.status in UNAUTHORIZED_STATUSES:
                raise PortalUnauthorized(
                    "The invite portal rejected the provided API key",
                    status=response.status,
                    attempts=result.attempts,
                )
            if response.status in VALIDATION_STATUSES:
                return ConnectionReport(
                    message=(
                        "Invite portal API key accepted. "
                        "Received validation error as expected."
                    ),
                    status=response.status,
                    details=response.details(),
                )
            if not response.ok:
                raise PortalRequestFailed(
                    f"Invite portal verification failed ({response.status}): "
                    f"{response.text}",
                    status=response.status,
                    details=response.details(),
                    attempts=result.attempts,
                )
            return ConnectionReport(
                message="Invite portal API responded successfully.",
                status=response.status,
                details=response.details(),
            )
