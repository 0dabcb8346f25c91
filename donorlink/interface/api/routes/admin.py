"""Admin routes.

Login opens a server-stored session whose id travels in an HTTP-only
cookie. Every other route except ``/session`` requires that session.
"""

from typing import Any

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Body, Depends, Query, Request, Response

from donorlink.application.usecase.admin import (
    AdminLoginRequest,
    AdminLoginUseCase,
    AdminLogoutUseCase,
    AdminSessionRequest,
    CreateProspectRequest,
    CreateProspectResponse,
    CreateProspectUseCase,
    GetAdminSessionUseCase,
    GetSettingsUseCase,
    IssueSubscriberInviteRequest,
    IssueSubscriberInviteUseCase,
    IssueSubscriberShareLinkUseCase,
    ListEventsRequest,
    ListEventsResponse,
    ListEventsUseCase,
    ListProspectsResponse,
    ListProspectsUseCase,
    ListSubscribersResponse,
    ListSubscribersUseCase,
    ResendInviteEmailUseCase,
    RevokeSubscriberResponse,
    RevokeSubscriberUseCase,
    SettingsResponse,
    SubscriberInviteResponse,
    SubscriberRequest,
    UpdateSettingsRequest,
    UpdateSettingsResponse,
    UpdateSettingsUseCase,
    VerifySettingsRequest,
    VerifySettingsResponse,
    VerifySettingsUseCase,
)
from donorlink.application.usecase.admin.views import ShareLinkSummary
from donorlink.config import Settings
from donorlink.domain.model.session import ServerSession
from donorlink.domain.service import AdminSessionService
from donorlink.interface.api.rate_limit import admin_login_rate_limit


async def require_admin(request: Request) -> ServerSession:
    """Resolve the admin session from the cookie.

    Raises:
        UnauthorizedError: If the cookie is missing or the session expired
    """
    container = request.state.dishka_container
    settings = await container.get(Settings)
    admin_session_service = await container.get(AdminSessionService)
    return await admin_session_service.require_session(
        request.cookies.get(settings.admin.session_cookie_name)
    )


router = APIRouter(prefix="/api/admin", tags=["admin"], route_class=DishkaRoute)

protected = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    route_class=DishkaRoute,
    dependencies=[Depends(require_admin)],
)


# =============================================================================
# Session
# =============================================================================


@router.post("/login", dependencies=[Depends(admin_login_rate_limit)])
async def login(
    body: AdminLoginRequest,
    response: Response,
    settings: FromDishka[Settings],
    admin_login_use_case: FromDishka[AdminLoginUseCase],
) -> dict[str, Any]:
    """Check the admin password and set the session cookie."""
    result = await admin_login_use_case.execute(body)
    response.set_cookie(
        key=settings.admin.session_cookie_name,
        value=result.session_id or "",
        max_age=settings.admin.session_ttl_hours * 3600,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        path="/",
    )
    return result.public()


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    settings: FromDishka[Settings],
    admin_logout_use_case: FromDishka[AdminLogoutUseCase],
) -> dict[str, Any]:
    """Close the session and clear the cookie."""
    cookie_name = settings.admin.session_cookie_name
    result = await admin_logout_use_case.execute(
        AdminSessionRequest(session_id=request.cookies.get(cookie_name))
    )
    response.delete_cookie(key=cookie_name, path="/")
    return result.public()


@router.get("/session")
async def get_session(
    request: Request,
    settings: FromDishka[Settings],
    get_admin_session_use_case: FromDishka[GetAdminSessionUseCase],
) -> dict[str, Any]:
    """Whether the cookie carries a live session."""
    result = await get_admin_session_use_case.execute(
        AdminSessionRequest(
            session_id=request.cookies.get(settings.admin.session_cookie_name)
        )
    )
    return result.public()


# =============================================================================
# Subscribers
# =============================================================================


@protected.get("/subscribers", response_model=ListSubscribersResponse)
async def list_subscribers(
    list_subscribers_use_case: FromDishka[ListSubscribersUseCase],
) -> ListSubscribersResponse:
    """Donors with their invites, payments and share link."""
    return await list_subscribers_use_case.execute()


@protected.post("/subscribers/{donor_id}/invite", response_model=SubscriberInviteResponse)
async def issue_subscriber_invite(
    donor_id: str,
    issue_subscriber_invite_use_case: FromDishka[IssueSubscriberInviteUseCase],
    body: IssueSubscriberInviteRequest | None = None,
) -> SubscriberInviteResponse:
    """Issue a fresh portal invite and email it."""
    request = (body or IssueSubscriberInviteRequest()).model_copy(
        update={"donor_id": donor_id}
    )
    return await issue_subscriber_invite_use_case.execute(request)


@protected.post("/subscribers/{donor_id}/email", response_model=SubscriberInviteResponse)
async def resend_invite_email(
    donor_id: str,
    resend_invite_email_use_case: FromDishka[ResendInviteEmailUseCase],
) -> SubscriberInviteResponse:
    """Email the active invite again."""
    return await resend_invite_email_use_case.execute(
        SubscriberRequest(donor_id=donor_id)
    )


@protected.post("/subscribers/{donor_id}/share-link", response_model=ShareLinkSummary)
async def issue_subscriber_share_link(
    donor_id: str,
    issue_subscriber_share_link_use_case: FromDishka[IssueSubscriberShareLinkUseCase],
) -> ShareLinkSummary:
    """Mint the donor's share link or regenerate its tokens."""
    return await issue_subscriber_share_link_use_case.execute(
        SubscriberRequest(donor_id=donor_id)
    )


@protected.post("/subscribers/{donor_id}/revoke", response_model=RevokeSubscriberResponse)
async def revoke_subscriber(
    donor_id: str,
    revoke_subscriber_use_case: FromDishka[RevokeSubscriberUseCase],
) -> RevokeSubscriberResponse:
    """Cancel the donor and remove their access."""
    return await revoke_subscriber_use_case.execute(SubscriberRequest(donor_id=donor_id))


# =============================================================================
# Prospects and audit log
# =============================================================================


@protected.get("/prospects", response_model=ListProspectsResponse)
async def list_prospects(
    list_prospects_use_case: FromDishka[ListProspectsUseCase],
) -> ListProspectsResponse:
    return await list_prospects_use_case.execute()


@protected.post("/prospects", response_model=CreateProspectResponse)
async def create_prospect(
    body: CreateProspectRequest,
    create_prospect_use_case: FromDishka[CreateProspectUseCase],
) -> CreateProspectResponse:
    """Record a lead and mint their share link."""
    return await create_prospect_use_case.execute(body)


@protected.get("/events", response_model=ListEventsResponse)
async def list_events(
    list_events_use_case: FromDishka[ListEventsUseCase],
    limit: int = Query(default=100, ge=1, le=500),
) -> ListEventsResponse:
    """Most recent audit events first."""
    return await list_events_use_case.execute(ListEventsRequest(limit=limit))


# =============================================================================
# Settings
# =============================================================================


@protected.get("/settings", response_model=SettingsResponse)
async def get_settings(
    get_settings_use_case: FromDishka[GetSettingsUseCase],
) -> SettingsResponse:
    return await get_settings_use_case.execute()


@protected.put("/settings/{group}", response_model=UpdateSettingsResponse)
async def update_settings(
    group: str,
    update_settings_use_case: FromDishka[UpdateSettingsUseCase],
    values: dict[str, Any] | None = Body(default=None),
) -> UpdateSettingsResponse:
    """Persist a settings group. The body is the group's values."""
    return await update_settings_use_case.execute(
        UpdateSettingsRequest(group=group, values=values or {})
    )


@protected.post("/settings/{group}/test", response_model=VerifySettingsResponse)
async def verify_settings(
    group: str,
    verify_settings_use_case: FromDishka[VerifySettingsUseCase],
    overrides: dict[str, Any] | None = Body(default=None),
) -> VerifySettingsResponse:
    """Check provider connectivity with stored settings plus unsaved edits."""
    return await verify_settings_use_case.execute(
        VerifySettingsRequest(group=group, overrides=overrides or {})
    )
