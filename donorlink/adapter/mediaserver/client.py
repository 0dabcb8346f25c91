"""Plex media-server client.

Invites are plex.tv shared-server grants bound to the owned server the token
resolves to. Resolution walks the account resource catalog, then the legacy
server list for the numeric id older endpoints still require; the result is
cached in ``MediaServerCache`` until the ``mediaServer`` settings change.
"""

from typing import Any
from urllib.parse import quote, urlencode, urlsplit

import logfire

from donorlink.adapter.error import (
    MediaServerRequestFailed,
    MediaServerUnauthorized,
    MediaServerUnreachable,
    ProviderNotConfiguredError,
    RecipientNotFound,
    TransportError,
)
from donorlink.adapter.http.transport import Transport, TransportResponse
from donorlink.adapter.http.urls import set_query_param
from donorlink.adapter.mediaserver.cache import MediaServerCache, ServerDescriptor
from donorlink.adapter.mediaserver.parsing import (
    ResourceAmbiguous,
    ResourceEmpty,
    SectionCatalog,
    extract_error_message,
    extract_user_id,
    find_server_entry,
    map_invite_response,
    matches_account_id,
    matches_email,
    parse_invited_id,
    parse_library_sections,
    parse_resources,
    parse_server_list,
    parse_server_sections,
    resolve_owned_server,
    split_ids,
    users_from_payload,
)
from donorlink.domain.model.settings import MediaServerSettings
from donorlink.domain.service.media_server_service import MediaServerClient
from donorlink.domain.value import AccessChangeResult, ConnectionReport, MediaInvite

PLEX_TV_BASE_URL = "https://plex.tv"
USER_LIST_ENDPOINTS = ("/accounts", "/api/v2/home/users", "/api/home/users")
LIBRARY_SECTIONS_ENDPOINT = "/library/sections"
RESOURCES_PATH = "/api/resources?includeHttps=1&includeRelay=1"
SERVERS_PATH = "/api/servers"
V2_SHARED_SERVERS_PATH = "/api/v2/shared_servers"

PRODUCT = "DonorLink"
PRODUCT_VERSION = "1.0"
DEVICE = "DonorLink Server"
PLATFORM = "Web"

NOT_FOUND_STATUSES = (404, 410)
UNAUTHORIZED_STATUSES = (401, 403)
TOKEN_REJECTED = "Plex rejected the provided token."


def _flag(value: bool) -> str:
    return "1" if value else "0"


def client_identifier(settings: MediaServerSettings) -> str:
    server = settings.server_identifier.strip()
    return f"donorlink-{server}" if server else "donorlink"


def plex_headers(settings: MediaServerSettings, **extra: str) -> dict[str, str]:
    return {
        "X-Plex-Product": PRODUCT,
        "X-Plex-Version": PRODUCT_VERSION,
        "X-Plex-Device": DEVICE,
        "X-Plex-Device-Name": DEVICE,
        "X-Plex-Platform": PLATFORM,
        "X-Plex-Client-Identifier": client_identifier(settings),
        "X-Plex-Token": settings.token,
        **extra,
    }


def server_url(settings: MediaServerSettings, path: str) -> str:
    """URL on the media server itself, carrying the token."""
    return set_query_param(
        f"{settings.base_url.strip().rstrip('/')}{path}", "X-Plex-Token", settings.token
    )


def plex_tv_url(settings: MediaServerSettings, path: str) -> str:
    """URL on plex.tv, carrying the token."""
    path_part, _, query = path.strip().partition("?")
    normalized = "/" + path_part.strip().strip("/")
    url = f"{PLEX_TV_BASE_URL}{normalized}"
    if query:
        url = f"{url}?{query}"
    return set_query_param(url, "X-Plex-Token", settings.token)


def _host(url: str) -> str:
    return urlsplit(url).netloc.lower() if url else ""


class PlexClient(MediaServerClient):
    """Plex implementation of the media-server interface."""

    def __init__(
        self,
        transport: Transport,
        cache: MediaServerCache,
        timeout: float | None = None,
    ) -> None:
        """Initialize Plex client.

        Args:
            transport: Outbound transport
            cache: Process-wide discovery cache
            timeout: Per-call ceiling in seconds
        """
        self.transport = transport
        self.cache = cache
        self.timeout = timeout

    @staticmethod
    def _require_configured(settings: MediaServerSettings) -> None:
        if not settings.is_configured:
            raise ProviderNotConfiguredError("Plex base URL and token must be configured")

    async def _call(
        self,
        method: str,
        url: str,
        context: str,
        *,
        headers: dict[str, str] | None = None,
        json: Any = None,
    ) -> TransportResponse:
        """Send one request; network failures and token rejection are fatal."""
        try:
            response = await self.transport.request(
                method, url, headers=headers, json=json, timeout=self.timeout
            )
        except TransportError as e:
            raise MediaServerUnreachable(f"{context}: {e.message}") from e
        if response.status in UNAUTHORIZED_STATUSES:
            raise MediaServerUnauthorized(TOKEN_REJECTED, status=response.status)
        return response

    @staticmethod
    def _failed(context: str, response: TransportResponse) -> MediaServerRequestFailed:
        details = extract_error_message(response.text)
        suffix = f": {details}" if details else ""
        return MediaServerRequestFailed(
            f"{context}: {response.status}{suffix}",
            status=response.status,
            details=details or None,
        )

    # =========================================================================
    # Server discovery
    # =========================================================================

    async def _resources(self, settings: MediaServerSettings) -> Any:
        context = "Failed to fetch Plex resources"
        response = await self._call(
            "GET",
            plex_tv_url(settings, RESOURCES_PATH),
            context,
            headers=plex_headers(settings),
        )
        if not response.ok:
            raise self._failed(context, response)
        return parse_resources(response.text)

    async def _servers(self, settings: MediaServerSettings) -> Any:
        context = "Failed to resolve Plex server id"
        response = await self._call(
            "GET",
            plex_tv_url(settings, SERVERS_PATH),
            context,
            headers=plex_headers(settings),
        )
        if not response.ok:
            raise self._failed(context, response)
        return parse_server_list(response.text)

    async def resolve_server(self, settings: MediaServerSettings) -> ServerDescriptor:
        """Resolve (and cache) the owned server the settings point at.

        Without a configured server identifier the server whose connections
        share the base URL's host is used, else the only owned server.

        Raises:
            MediaServerRequestFailed: If no owned server matches
        """
        configured = settings.server_identifier.strip()
        cached = self.cache.get_descriptor(settings.token, configured)
        if cached:
            return cached

        with logfire.span("plex.resolve_server"):
            devices = await self._resources(settings)
            if not configured:
                host = _host(settings.base_url)
                for device in devices:
                    if device.is_server and device.is_owned and any(
                        _host(uri) == host for uri in device.connections
                    ):
                        configured = device.client_identifier or ""
                        break

            resolution = resolve_owned_server(devices, configured or None)
            if isinstance(resolution, ResourceEmpty):
                raise MediaServerRequestFailed(resolution.reason)
            if isinstance(resolution, ResourceAmbiguous):
                names = ", ".join(
                    f"{device.name} ({device.client_identifier})"
                    for device in resolution.candidates[:5]
                )
                raise MediaServerRequestFailed(
                    f'Plex server identifier "{configured}" was not found in '
                    f"/api/resources. Owned servers: {names}"
                )

            device = resolution.device
            machine_identifier = device.client_identifier or configured
            legacy_id = None
            try:
                entry = find_server_entry(await self._servers(settings), machine_identifier)
                legacy_id = entry.id if entry else None
            except (MediaServerRequestFailed, MediaServerUnreachable) as e:
                logfire.warn("Legacy Plex server id unavailable", error=e.message)

            descriptor = ServerDescriptor(
                machine_identifier=machine_identifier,
                legacy_numeric_id=legacy_id,
                name=device.name,
                client_identifier=device.client_identifier,
            )
            self.cache.set_descriptor(settings.token, settings.server_identifier, descriptor)
            logfire.info(
                "Plex server resolved",
                server=descriptor.name,
                has_legacy_id=legacy_id is not None,
            )
            return descriptor

    async def section_catalog(
        self, settings: MediaServerSettings, descriptor: ServerDescriptor
    ) -> SectionCatalog:
        context = "Failed to query Plex library sections"
        path = f"{SERVERS_PATH}/{quote(descriptor.machine_identifier, safe='')}"
        response = await self._call("GET", plex_tv_url(settings, path), context)
        if not response.ok:
            raise self._failed(context, response)
        catalog = parse_server_sections(response.text)
        if not catalog.available_ids():
            raise MediaServerRequestFailed(
                "Plex did not return any library sections for the selected server; "
                "verify the server is reachable and published."
            )
        return catalog

    # =========================================================================
    # Users
    # =========================================================================

    async def _users(self, settings: MediaServerSettings) -> tuple[list[dict[str, Any]], str]:
        base = settings.base_url.strip().rstrip("/")
        preferred = self.cache.get_user_list_path(base)
        paths = [preferred] if preferred else []
        paths += [path for path in USER_LIST_ENDPOINTS if path != preferred]

        missed: list[str] = []
        for path in paths:
            context = "Unable to connect to Plex server"
            response = await self._call(
                "GET", server_url(settings, path), context, headers={"Accept": "application/json"}
            )
            if response.status == 404:
                missed.append(path)
                if path == preferred:
                    self.cache.forget_user_list_path(base)
                continue
            if not response.ok:
                raise self._failed(f"Plex returned an error for {path}", response)

            self.cache.set_user_list_path(base, path)
            return users_from_payload(response.json_body()), path

        raise MediaServerRequestFailed(
            "Plex returned 404 (Not Found) for the supported user list endpoints "
            f"({', '.join(missed)}). Confirm the base URL is correct and that the "
            "server supports the Plex accounts or home users API.",
            status=404,
        )

    async def _invited_id(self, settings: MediaServerSettings, email: str) -> str | None:
        context = "Failed to resolve Plex invitedId via /api/home/users"
        url = plex_tv_url(settings, f"/api/home/users?{urlencode({'invitedEmail': email})}")
        response = await self._call("GET", url, context, headers={"Accept": "application/json"})
        if response.status == 404:
            return None
        if not response.ok:
            raise self._failed(context, response)

        invited_id = parse_invited_id(response.text, email)
        if invited_id:
            return invited_id

        users, _ = await self._users(settings)
        for user in users:
            related = [user]
            if isinstance(user.get("account"), dict):
                related.append(user["account"])
            if any(matches_email(entry, email) for entry in related):
                for entry in related:
                    user_id = extract_user_id(entry)
                    if user_id:
                        return user_id
        return None

    async def list_users(self, settings: MediaServerSettings) -> list[dict[str, Any]]:
        self._require_configured(settings)
        with logfire.span("plex.list_users"):
            users, _ = await self._users(settings)
            return users

    async def revoke_user(
        self,
        settings: MediaServerSettings,
        *,
        email: str | None = None,
        account_id: str | None = None,
    ) -> AccessChangeResult:
        """Remove a user found by account id or email.

        Returns:
            ``skipped`` when unconfigured; ``success=False`` with a reason
            when the user does not exist
        """
        if not settings.is_configured:
            return AccessChangeResult(skipped=True, reason="Plex integration disabled")

        with logfire.span("plex.revoke_user"):
            users, path = await self._users(settings)
            target = None
            if account_id:
                target = next((u for u in users if matches_account_id(u, account_id)), None)
            if target is None and email:
                target = next((u for u in users if matches_email(u, email)), None)
            if target is None:
                return AccessChangeResult(reason="User not found on Plex server")

            user_id = target.get("id") or target.get("uuid") or target.get("userID")
            if not user_id:
                return AccessChangeResult(reason="Unable to determine Plex user id")

            context = "Failed to revoke Plex user"
            response = await self._call(
                "DELETE",
                server_url(settings, f"{path}/{quote(str(user_id), safe='')}"),
                context,
                headers={"Accept": "application/json"},
            )
            if response.status == 404:
                return AccessChangeResult(reason="User not found on Plex server")
            if not response.ok:
                raise self._failed(context, response)

            logfire.info("Plex user removed", user_id=str(user_id))
            return AccessChangeResult(success=True, user=target)

    # =========================================================================
    # Invites
    # =========================================================================

    async def create_invite(
        self,
        settings: MediaServerSettings,
        email: str,
        friendly_name: str | None = None,
        library_section_ids: list[str] | None = None,
    ) -> MediaInvite:
        self._require_configured(settings)
        email = (email or "").strip()
        if not email:
            raise MediaServerRequestFailed("Recipient email is required to create Plex invites")

        with logfire.span("plex.create_invite"):
            descriptor = await self.resolve_server(settings)
            catalog = await self.section_catalog(settings, descriptor)
            available = catalog.available_ids()

            requested = split_ids(
                library_section_ids
                if library_section_ids is not None
                else settings.library_section_ids
            )
            if requested:
                resolved = [catalog.resolve(section) or section for section in requested]
                sections = list(dict.fromkeys(s for s in resolved if s in available))
            else:
                sections = available
            if not sections:
                raise MediaServerRequestFailed(
                    "None of the requested librarySectionIds exist on the Plex server. "
                    f"Requested={requested} Available={available}"
                )

            invited_id = await self._invited_id(settings, email)
            if not invited_id:
                raise RecipientNotFound(
                    f"Plex did not return an invitedId for {email}; verify the user "
                    "has logged into Plex at least once."
                )

            body: dict[str, Any] = {
                "machineIdentifier": descriptor.machine_identifier,
                "librarySectionIds": sections,
                "invitedId": invited_id,
                "invitedEmail": email,
            }
            if friendly_name and friendly_name.strip():
                body["friendlyName"] = friendly_name.strip()
            body["settings"] = {
                "allowSync": _flag(settings.allow_sync),
                "allowCameraUpload": _flag(settings.allow_camera_upload),
                "allowChannels": _flag(settings.allow_channels),
            }

            context = "Failed to connect to Plex invite API"
            response = await self._call(
                "POST",
                plex_tv_url(settings, V2_SHARED_SERVERS_PATH),
                context,
                headers=plex_headers(
                    settings,
                    **{"Accept": "application/json", "Content-Type": "application/json"},
                ),
                json=body,
            )
            if not response.ok:
                raise self._failed("Plex invite creation failed", response)

            invite = map_invite_response(response.json_body() or {})
            if not invite.invite_id and not invite.invite_url:
                raise MediaServerRequestFailed("Plex did not return an invite identifier")
            logfire.info("Plex invite created", invite_id=invite.invite_id)
            return invite

    async def cancel_invite(
        self, settings: MediaServerSettings, invite_id: str
    ) -> AccessChangeResult:
        """Delete a pending shared-server grant.

        Returns:
            ``success=False`` with "Invite not found on Plex server" on 404/410
        """
        self._require_configured(settings)
        if not invite_id:
            raise MediaServerRequestFailed("Invite id is required to cancel Plex invites")

        with logfire.span("plex.cancel_invite", invite_id=invite_id):
            descriptor = await self.resolve_server(settings)
            if not descriptor.legacy_numeric_id:
                raise MediaServerRequestFailed(
                    "Plex did not return a legacy numeric server id; cancelling "
                    "invites is not supported via this token."
                )

            path = (
                f"/api/servers/{quote(descriptor.legacy_numeric_id, safe='')}"
                f"/shared_servers/{quote(str(invite_id), safe='')}"
            )
            response = await self._call(
                "DELETE",
                plex_tv_url(settings, path),
                "Failed to connect to Plex invite API",
                headers=plex_headers(settings),
            )
            if response.status in NOT_FOUND_STATUSES:
                logfire.info("Plex invite already gone", invite_id=invite_id)
                return AccessChangeResult(reason="Invite not found on Plex server")
            if not response.ok:
                raise self._failed("Plex invite cancellation failed", response)
            return AccessChangeResult(success=True)

    async def verify_connection(self, settings: MediaServerSettings) -> ConnectionReport:
        """Check server resolution, invite endpoint and library access."""
        self._require_configured(settings)

        with logfire.span("plex.verify_connection"):
            descriptor = await self.resolve_server(settings)

            endpoint_available = True
            endpoint_version = "v2"
            if descriptor.legacy_numeric_id:
                endpoint_version = "legacy"
                path = (
                    f"/api/servers/{quote(descriptor.legacy_numeric_id, safe='')}"
                    "/shared_servers"
                )
                context = "Failed to verify Plex invite configuration"
                response = await self._call(
                    "GET", plex_tv_url(settings, path), context, headers=plex_headers(settings)
                )
                if response.status in NOT_FOUND_STATUSES:
                    endpoint_available = False
                elif not response.ok:
                    raise self._failed(context, response)

            catalog = await self.section_catalog(settings, descriptor)
            configured_sections = [
                catalog.resolve(section) or section
                for section in split_ids(settings.library_section_ids)
            ]

            context = "Failed to load Plex library sections"
            response = await self._call(
                "GET",
                server_url(settings, LIBRARY_SECTIONS_ENDPOINT),
                context,
                headers={"Accept": "application/json"},
            )
            if not response.ok:
                raise self._failed(context, response)
            libraries = parse_library_sections(response.text)
            if not libraries:
                raise MediaServerRequestFailed(
                    "No Plex libraries were found. Confirm the token has access to your server."
                )

            remapped: dict[str, dict[str, Any]] = {}
            for library in libraries:
                library_id = catalog.resolve(library.id) or library.id
                if library_id and library_id not in remapped:
                    remapped[library_id] = {"id": library_id, "title": library.title}

            return ConnectionReport(
                message="Plex invite configuration verified successfully.",
                details={
                    "serverIdentifier": descriptor.machine_identifier,
                    "librarySectionIds": configured_sections,
                    "inviteEndpointAvailable": endpoint_available,
                    "inviteEndpointVersion": endpoint_version,
                },
                libraries=list(remapped.values()),
            )
