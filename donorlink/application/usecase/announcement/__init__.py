"""Announcement use cases."""

from donorlink.application.usecase.announcement.get_announcements import (
    AnnouncementResponse,
    GetAnnouncementsUseCase,
)

__all__ = ["AnnouncementResponse", "GetAnnouncementsUseCase"]
