"""Subscription lifecycle: access control and webhook ordering."""

from donorlink.application.usecase.lifecycle.access import (
    AccessController,
    InviteOutcome,
    RevocationReport,
)
from donorlink.application.usecase.lifecycle.executor import SubscriptionEventExecutor

__all__ = [
    "AccessController",
    "InviteOutcome",
    "RevocationReport",
    "SubscriptionEventExecutor",
]
