"""
Feed API router.
Implements GET /v1/feed/foryou.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Response

from foryou.api.dependencies import get_for_you_service, get_viewer_id
from foryou.config import get_settings
from foryou.models.schemas import ErrorResponse, ForYouResponse
from foryou.services.feed import ForYouService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/feed", tags=["feed"])


@router.get(
    "/foryou",
    response_model=ForYouResponse,
    summary="Get For You Feed",
    description="""
    Personalized, paginated For You feed.

    Stories are scored on completion rate, likes, recency, replays,
    48h velocity, creator authority, follows, and (when the variant enables
    collaborative filtering) topic and co-engagement affinity. Stories shown
    to the viewer or session in the last 24h are excluded and creators seen
    in the last 4h are penalised. At most a fixed number of stories per
    creator appear per page.
    """,
    responses={
        200: {"description": "Ranked page returned"},
        500: {"model": ErrorResponse, "description": "Candidate pool unavailable"},
    },
)
async def get_for_you_feed(
    response: Response,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(
        default=None,
        ge=1,
        description="Stories per page (defaults to DEFAULT_FEED_LIMIT)",
    ),
    variant: Optional[str] = Query(
        default=None,
        max_length=16,
        description="Explicit A/B variant override",
    ),
    x_session_id: Optional[str] = Header(
        default=None,
        alias="X-Session-Id",
        description="Client session identifier",
    ),
    viewer_id: Optional[str] = Depends(get_viewer_id),
    service: ForYouService = Depends(get_for_you_service),
) -> ForYouResponse:
    """For You endpoint."""
    settings = get_settings()
    effective_limit = min(limit or settings.DEFAULT_FEED_LIMIT, settings.MAX_FEED_LIMIT)

    feed_response = await service.get_for_you(
        page=page,
        limit=effective_limit,
        variant=variant,
        viewer_id=viewer_id,
        session_id=x_session_id,
    )

    # Every response is per-viewer and records exposures; never cache it
    response.headers["Cache-Control"] = "private, no-store"
    response.headers["Vary"] = "X-User-Id, X-Session-Id"
    response.headers["X-Assigned-Variant"] = feed_response.assigned_variant

    return feed_response
