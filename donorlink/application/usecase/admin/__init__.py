"""Admin use cases."""

from donorlink.application.usecase.admin.events import (
    ListEventsRequest,
    ListEventsResponse,
    ListEventsUseCase,
)
from donorlink.application.usecase.admin.prospects import (
    CreateProspectRequest,
    CreateProspectResponse,
    CreateProspectUseCase,
    ListProspectsResponse,
    ListProspectsUseCase,
)
from donorlink.application.usecase.admin.session import (
    AdminLoginRequest,
    AdminLoginUseCase,
    AdminLogoutUseCase,
    AdminSessionRequest,
    AdminSessionResponse,
    GetAdminSessionUseCase,
)
from donorlink.application.usecase.admin.settings import (
    GetSettingsUseCase,
    SettingsResponse,
    UpdateSettingsRequest,
    UpdateSettingsResponse,
    UpdateSettingsUseCase,
    VerifySettingsRequest,
    VerifySettingsResponse,
    VerifySettingsUseCase,
)
from donorlink.application.usecase.admin.subscribers import (
    IssueSubscriberInviteRequest,
    IssueSubscriberInviteUseCase,
    IssueSubscriberShareLinkUseCase,
    ListSubscribersResponse,
    ListSubscribersUseCase,
    ResendInviteEmailUseCase,
    RevokeSubscriberResponse,
    RevokeSubscriberUseCase,
    SubscriberInviteResponse,
    SubscriberRequest,
)

__all__ = [
    "AdminLoginRequest",
    "AdminLoginUseCase",
    "AdminLogoutUseCase",
    "AdminSessionRequest",
    "AdminSessionResponse",
    "CreateProspectRequest",
    "CreateProspectResponse",
    "CreateProspectUseCase",
    "GetAdminSessionUseCase",
    "GetSettingsUseCase",
    "IssueSubscriberInviteRequest",
    "IssueSubscriberInviteUseCase",
    "IssueSubscriberShareLinkUseCase",
    "ListEventsRequest",
    "ListEventsResponse",
    "ListEventsUseCase",
    "ListProspectsResponse",
    "ListProspectsUseCase",
    "ListSubscribersResponse",
    "ListSubscribersUseCase",
    "ResendInviteEmailUseCase",
    "RevokeSubscriberResponse",
    "RevokeSubscriberUseCase",
    "SettingsResponse",
    "SubscriberInviteResponse",
    "SubscriberRequest",
    "UpdateSettingsRequest",
    "UpdateSettingsResponse",
    "UpdateSettingsUseCase",
    "VerifySettingsRequest",
    "VerifySettingsResponse",
    "VerifySettingsUseCase",
]
