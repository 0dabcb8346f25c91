"""Share-link routes.

Anonymous, scoped by the link token. Mutating calls must present the
link's session token as ``Authorization: Bearer <token>``, as an
``X-Share-Session`` header or as ``sessionToken`` in the body, checked in
that order.
"""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, Header

from donorlink.application.usecase.share import (
    GenerateShareInviteRequest,
    GenerateShareInviteUseCase,
    GetShareLinkRequest,
    GetShareLinkUseCase,
    SetupShareAccountRequest,
    SetupShareAccountUseCase,
    ShareProjection,
    StartShareCheckoutRequest,
    StartShareCheckoutResponse,
    StartShareCheckoutUseCase,
)
from donorlink.interface.api.rate_limit import api_rate_limit

router = APIRouter(prefix="/share", tags=["share"], route_class=DishkaRoute)


def provided_session_token(
    authorization: str | None,
    share_session: str | None,
    body_token: str | None,
) -> str | None:
    """Pick the session token from the first place that carries one."""
    header = (authorization or "").strip()
    if header.lower().startswith("bearer "):
        token = header[7:].strip()
        if token:
            return token
    token = (share_session or "").strip()
    if token:
        return token
    token = (body_token or "").strip()
    return token or None


@router.get("/{token}", response_model=ShareProjection)
async def get_share_link(
    token: str,
    get_share_link_use_case: FromDishka[GetShareLinkUseCase],
) -> ShareProjection:
    """Projection of the link, its owner and their active invite."""
    return await get_share_link_use_case.execute(GetShareLinkRequest(token=token))


@router.post(
    "/{token}",
    response_model=ShareProjection,
    dependencies=[Depends(api_rate_limit)],
)
async def generate_share_invite(
    token: str,
    body: GenerateShareInviteRequest,
    generate_share_invite_use_case: FromDishka[GenerateShareInviteUseCase],
    authorization: str | None = Header(default=None),
    x_share_session: str | None = Header(default=None),
) -> ShareProjection:
    """Return the donor's active invite, creating one when needed."""
    request = body.model_copy(
        update={
            "token": token,
            "session_token": provided_session_token(
                authorization, x_share_session, body.session_token
            ),
        }
    )
    return await generate_share_invite_use_case.execute(request)


@router.post(
    "/{token}/account",
    response_model=ShareProjection,
    dependencies=[Depends(api_rate_limit)],
)
async def setup_share_account(
    token: str,
    body: SetupShareAccountRequest,
    setup_share_account_use_case: FromDishka[SetupShareAccountUseCase],
    authorization: str | None = Header(default=None),
    x_share_session: str | None = Header(default=None),
) -> ShareProjection:
    """Set the account password, promoting a prospect to a donor."""
    request = body.model_copy(
        update={
            "token": token,
            "session_token": provided_session_token(
                authorization, x_share_session, body.session_token
            ),
        }
    )
    return await setup_share_account_use_case.execute(request)


@router.post(
    "/{token}/paypal-checkout",
    response_model=StartShareCheckoutResponse,
    dependencies=[Depends(api_rate_limit)],
)
async def start_share_checkout(
    token: str,
    body: StartShareCheckoutRequest,
    start_share_checkout_use_case: FromDishka[StartShareCheckoutUseCase],
    authorization: str | None = Header(default=None),
    x_share_session: str | None = Header(default=None),
) -> StartShareCheckoutResponse:
    """Create a PayPal subscription and return its approval URL."""
    request = body.model_copy(
        update={
            "token": token,
            "session_token": provided_session_token(
                authorization, x_share_session, body.session_token
            ),
        }
    )
    return await start_share_checkout_use_case.execute(request)
