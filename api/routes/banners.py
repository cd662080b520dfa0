"""API route for the static banner content."""

from fastapi import APIRouter

from agent.routing.banners import BANNERS, DEFAULT_BANNER, get_banner
from api.models.chat import BannerResponse

router = APIRouter(prefix="/banners", tags=["banners"])


@router.get("/{banner_type}", response_model=BannerResponse)
async def read_banner(banner_type: str) -> BannerResponse:
    """Banner for a type; unknown types return the general banner."""
    resolved = banner_type if banner_type in BANNERS else DEFAULT_BANNER
    return BannerResponse(type=resolved, **get_banner(resolved))
