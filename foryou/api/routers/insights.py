"""
Ranking insight router.
Read-only views for debugging rankings and reporting on the A/B split.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query

from foryou.api.dependencies import (
    get_exposure_recorder,
    get_for_you_service,
    get_viewer_id,
    require_admin,
)
from foryou.config import get_settings
from foryou.models.schemas import ErrorResponse, ExposureSummary, InspectResponse
from foryou.services.exposure import ExposureRecorder
from foryou.services.feed import ForYouService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/recs", tags=["ranking-insights"])


@router.get(
    "/inspect",
    response_model=InspectResponse,
    summary="Inspect For You Ranking",
    description="""
    Ranks a page for the caller exactly as the For You feed would and
    returns each story's score with its per-term breakdown. Nothing is
    recorded, so inspecting does not hide stories from the real feed.
    """,
    responses={500: {"model": ErrorResponse, "description": "Candidate pool unavailable"}},
)
async def inspect_ranking(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    variant: Optional[str] = Query(default=None, max_length=16),
    x_session_id: Optional[str] = Header(default=None, alias="X-Session-Id"),
    viewer_id: Optional[str] = Depends(get_viewer_id),
    service: ForYouService = Depends(get_for_you_service),
) -> InspectResponse:
    settings = get_settings()
    return await service.inspect(
        page=page,
        limit=min(limit or settings.DEFAULT_FEED_LIMIT, settings.MAX_FEED_LIMIT),
        variant=variant,
        viewer_id=viewer_id,
        session_id=x_session_id,
    )


@router.get(
    "/exposures/summary",
    response_model=ExposureSummary,
    summary="Exposure Counts per Variant",
    dependencies=[Depends(require_admin)],
)
async def exposure_summary(
    days: Optional[int] = Query(default=None, ge=1, le=90),
    recorder: ExposureRecorder = Depends(get_exposure_recorder),
) -> ExposureSummary:
    """Admin-only. Daily exposure counts per variant, 30 days by default."""
    return await recorder.summarize(days=days or get_settings().EXPOSURE_SUMMARY_DAYS)
