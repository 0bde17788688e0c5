"""
Liveness and readiness checks.
"""
from fastapi import APIRouter

from foryou.api.dependencies import get_config_circuit_breaker, get_weights_cache
from foryou.config import get_settings
from foryou.services.variants import VARIANTS

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness")
async def health_check() -> dict:
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness")
async def readiness_check() -> dict:
    """
    Ranking stays available while the config store is down (defaults are
    served), so readiness reports the breaker instead of failing on it.
    """
    breaker = get_config_circuit_breaker()
    settings = get_settings()
    return {
        "status": "ready",
        "circuit_breaker": {
            "name": breaker.name,
            "state": breaker.state.value,
            "failure_count": breaker.failure_count,
        },
        "ranking_config": {
            "key": settings.RANKING_CONFIG_KEY,
            "variants": list(VARIANTS),
            "cached_entries": get_weights_cache().size(),
        },
        "feature_flags": {
            "personalization_enabled": settings.PERSONALIZATION_ENABLED,
            "kill_switch_active": settings.KILL_SWITCH_ACTIVE,
        },
    }
