"""Public announcement banner routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from donorlink.application.usecase.announcement import (
    AnnouncementResponse,
    GetAnnouncementsUseCase,
)

router = APIRouter(prefix="/api", tags=["announcements"], route_class=DishkaRoute)


@router.get("/announcements", response_model=AnnouncementResponse)
async def get_announcements(
    get_announcements_use_case: FromDishka[GetAnnouncementsUseCase],
) -> AnnouncementResponse:
    """Current banner shown on the public pages."""
    return await get_announcements_use_case.execute()
