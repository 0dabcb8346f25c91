"""Donor self-service use cases."""

from donorlink.application.usecase.customer.account import (
    GenerateCustomerInviteRequest,
    GenerateCustomerInviteUseCase,
    UpdateCustomerProfileRequest,
    UpdateCustomerProfileUseCase,
)
from donorlink.application.usecase.customer.dashboard import (
    CustomerDashboard,
    CustomerSessionRequest,
)
from donorlink.application.usecase.customer.session import (
    CustomerLoginRequest,
    CustomerLoginUseCase,
    CustomerLogoutUseCase,
    GetCustomerSessionUseCase,
)

__all__ = [
    "CustomerDashboard",
    "CustomerLoginRequest",
    "CustomerLoginUseCase",
    "CustomerLogoutUseCase",
    "CustomerSessionRequest",
    "GenerateCustomerInviteRequest",
    "GenerateCustomerInviteUseCase",
    "GetCustomerSessionUseCase",
    "UpdateCustomerProfileRequest",
    "UpdateCustomerProfileUseCase",
]
