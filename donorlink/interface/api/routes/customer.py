"""Donor self-service routes.

A donor signs in with the password set through their share link. The
server-stored session id travels in its own HTTP-only cookie, separate from
the admin one.
"""

from typing import Any

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, Request, Response

from donorlink.application.usecase.customer import (
    CustomerLoginRequest,
    CustomerLoginUseCase,
    CustomerLogoutUseCase,
    CustomerSessionRequest,
    GenerateCustomerInviteRequest,
    GenerateCustomerInviteUseCase,
    GetCustomerSessionUseCase,
    UpdateCustomerProfileRequest,
    UpdateCustomerProfileUseCase,
)
from donorlink.config import Settings
from donorlink.interface.api.rate_limit import api_rate_limit, customer_login_rate_limit

router = APIRouter(
    prefix="/api/customer",
    tags=["customer"],
    route_class=DishkaRoute,
    dependencies=[Depends(api_rate_limit)],
)


def session_cookie(request: Request, settings: Settings) -> str | None:
    return request.cookies.get(settings.customer.session_cookie_name)


@router.get("/session")
async def get_session(
    request: Request,
    settings: FromDishka[Settings],
    get_customer_session_use_case: FromDishka[GetCustomerSessionUseCase],
) -> dict[str, Any]:
    """Dashboard for the signed-in donor, or ``authenticated: false``."""
    result = await get_customer_session_use_case.execute(
        CustomerSessionRequest(session_id=session_cookie(request, settings))
    )
    return result.public()


@router.post("/login", dependencies=[Depends(customer_login_rate_limit)])
async def login(
    body: CustomerLoginRequest,
    response: Response,
    settings: FromDishka[Settings],
    customer_login_use_case: FromDishka[CustomerLoginUseCase],
) -> dict[str, Any]:
    """Check email and password and set the session cookie."""
    result = await customer_login_use_case.execute(body)
    response.set_cookie(
        key=settings.customer.session_cookie_name,
        value=result.session_id or "",
        max_age=settings.customer.session_ttl_hours * 3600,
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
    customer_logout_use_case: FromDishka[CustomerLogoutUseCase],
) -> dict[str, Any]:
    await customer_logout_use_case.execute(
        CustomerSessionRequest(session_id=session_cookie(request, settings))
    )
    response.delete_cookie(key=settings.customer.session_cookie_name, path="/")
    return {"success": True}


@router.post("/profile")
async def update_profile(
    body: UpdateCustomerProfileRequest,
    request: Request,
    settings: FromDishka[Settings],
    update_customer_profile_use_case: FromDishka[UpdateCustomerProfileUseCase],
) -> dict[str, Any]:
    result = await update_customer_profile_use_case.execute(
        body.model_copy(update={"session_id": session_cookie(request, settings)})
    )
    return result.public()


@router.post("/invite")
async def generate_invite(
    request: Request,
    settings: FromDishka[Settings],
    generate_customer_invite_use_case: FromDishka[GenerateCustomerInviteUseCase],
    body: GenerateCustomerInviteRequest | None = None,
) -> dict[str, Any]:
    """Invite for the signed-in donor; the body is optional."""
    body = body or GenerateCustomerInviteRequest()
    result = await generate_customer_invite_use_case.execute(
        body.model_copy(update={"session_id": session_cookie(request, settings)})
    )
    return result.public()
