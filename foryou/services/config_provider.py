"""
Ranking weight configuration.
Read-through cache over the config store with built-in per-variant defaults.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from foryou.core.cache import TTLCache
from foryou.core.circuit_breaker import CircuitBreaker
from foryou.core.clock import Clock, utc_now
from foryou.core.exceptions import ValidationError
from foryou.models.interfaces import RankingConfigRepository
from foryou.models.schemas import RankingConfigRow, RankingWeights
from foryou.services.variants import DEFAULT_VARIANT, normalize_variant

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_KEY = "fyp_weights"

# Variant B moves weight from completion to velocity and turns on
# collaborative filtering.
DEFAULT_WEIGHTS: Dict[str, RankingWeights] = {
    "A": RankingWeights(),
    "B": RankingWeights(completion=0.28, velocity=0.18, cf_enabled=True, cf_max_boost=0.3),
}


def default_weights(variant: Optional[str]) -> RankingWeights:
    """Built-in weights for a variant; unknown variants get variant A's."""
    return DEFAULT_WEIGHTS.get(normalize_variant(variant), DEFAULT_WEIGHTS[DEFAULT_VARIANT])


def merge_weights(base: RankingWeights, overrides: Dict[str, Any]) -> RankingWeights:
    """
    Overlay a stored (possibly partial) weight document on ``base``.

    Raises:
        pydantic.ValidationError: If the merged document is not valid weights
    """
    data = base.model_dump()
    for name, value in overrides.items():
        if name == "diversity" and isinstance(value, dict):
            data["diversity"] = {**data["diversity"], **value}
        else:
            data[name] = value
    return RankingWeights.model_validate(data)


class ConfigProvider:
    """
    Resolves RankingWeights per variant.

    Never fails: a missing row, an invalid document, or an unreachable
    store all resolve to the variant's defaults.
    """

    def __init__(
        self,
        repository: RankingConfigRepository,
        config_key: str = DEFAULT_CONFIG_KEY,
        cache: Optional[TTLCache[RankingWeights]] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._repository = repository
        self._config_key = config_key
        self._cache = cache or TTLCache[RankingWeights](ttl_seconds=60)
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            name="ranking_config_store",
            failure_threshold=5,
            recovery_timeout_sec=30,
        )
        self._clock = clock

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._circuit_breaker

    def _cache_key(self, variant: str) -> str:
        return f"{self._config_key}:{variant}"

    async def get_weights(self, variant: Optional[str]) -> RankingWeights:
        """Weights for ``variant`` from cache, store, or defaults."""
        label = normalize_variant(variant)
        cache_key = self._cache_key(label)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        base = default_weights(label)
        row = await self._circuit_breaker.call(
            lambda: self._repository.get_config(self._config_key, label),
            fallback=lambda: None,
        )

        weights = base
        if row is not None:
            try:
                weights = merge_weights(base, row.data)
            except PydanticValidationError as e:
                logger.warning(
                    f"Invalid stored weights for variant={label}, using defaults: {e}",
                    extra={"variant": label},
                )

        self._cache.set(cache_key, weights)
        return weights

    async def list_configs(
        self,
        key: Optional[str] = None,
        variant: Optional[str] = None,
    ) -> List[RankingConfigRow]:
        label = normalize_variant(variant) if variant else None
        return await self._repository.list_configs(key=key, variant=label)

    async def save_config(
        self,
        key: str,
        variant: str,
        data: Dict[str, Any],
        active: bool = True,
    ) -> RankingConfigRow:
        """
        Upsert a config row (admin path) and drop the cached weights.

        Raises:
            ValidationError: If ``data`` does not produce valid weights
        """
        label = normalize_variant(variant)
        if key == self._config_key:
            try:
                merge_weights(default_weights(label), data)
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid ranking weights",
                    details={"errors": e.errors(include_url=False, include_context=False)},
                ) from e

        row = RankingConfigRow(
            key=key,
            variant=label,
            data=data,
            active=active,
            updated_at=self._clock(),
        )
        await self._repository.upsert(row)
        self._cache.delete(self._cache_key(label))
        logger.info(f"Ranking config saved: key={key}", extra={"variant": label})
        return row
