"""
Ranking config admin router.
Lists and upserts per-variant weight documents.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from foryou.api.dependencies import get_config_provider, require_admin
from foryou.models.schemas import ConfigListResponse, ConfigUpsertRequest, RankingConfigRow
from foryou.services.config_provider import ConfigProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/recs", tags=["ranking-config"])


@router.get("/config", response_model=ConfigListResponse, summary="List Ranking Configs")
async def list_configs(
    key: Optional[str] = Query(default=None),
    variant: Optional[str] = Query(default=None),
    provider: ConfigProvider = Depends(get_config_provider),
) -> ConfigListResponse:
    return ConfigListResponse(configs=await provider.list_configs(key=key, variant=variant))


@router.put("/config", response_model=RankingConfigRow, summary="Upsert Ranking Config")
async def upsert_config(
    payload: ConfigUpsertRequest,
    admin_id: str = Depends(require_admin),
    provider: ConfigProvider = Depends(get_config_provider),
) -> RankingConfigRow:
    """Admin-only. Takes effect for new requests once the cached weights expire."""
    row = await provider.save_config(
        key=payload.key,
        variant=payload.variant,
        data=payload.data,
        active=payload.active,
    )
    logger.info(f"Ranking config updated by {admin_id}", extra={"variant": row.variant})
    return row
