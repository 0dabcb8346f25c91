"""Share-link use cases."""

from donorlink.application.usecase.share.generate_share_invite import (
    GenerateShareInviteRequest,
    GenerateShareInviteUseCase,
)
from donorlink.application.usecase.share.get_share_link import (
    GetShareLinkRequest,
    GetShareLinkUseCase,
)
from donorlink.application.usecase.share.projection import (
    ShareProjection,
    build_projection,
    resolve_share_link,
)
from donorlink.application.usecase.share.setup_share_account import (
    SetupShareAccountRequest,
    SetupShareAccountUseCase,
)
from donorlink.application.usecase.share.start_share_checkout import (
    StartShareCheckoutRequest,
    StartShareCheckoutResponse,
    StartShareCheckoutUseCase,
)

__all__ = [
    "GenerateShareInviteRequest",
    "GenerateShareInviteUseCase",
    "GetShareLinkRequest",
    "GetShareLinkUseCase",
    "SetupShareAccountRequest",
    "SetupShareAccountUseCase",
    "ShareProjection",
    "StartShareCheckoutRequest",
    "StartShareCheckoutResponse",
    "StartShareCheckoutUseCase",
    "build_projection",
    "resolve_share_link",
]
