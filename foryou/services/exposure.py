"""
Exposure recording.
Appends one row per shown story so later requests can suppress it,
and summarises the log per variant for experiment reporting.
"""
import logging
from datetime import timedelta
from typing import List, Sequence

from foryou.core.clock import Clock, utc_now
from foryou.models.interfaces import ExposureRepository
from foryou.models.schemas import Candidate, ExposureRecord, ExposureSummary, Identity
from foryou.services.variants import VARIANTS

logger = logging.getLogger(__name__)


class ExposureRecorder:
    """Best-effort writer and reporting reader for the exposure log."""

    def __init__(self, exposure_repo: ExposureRepository, clock: Clock = utc_now) -> None:
        self._exposure_repo = exposure_repo
        self._clock = clock

    async def record_exposures(
        self,
        identity: Identity,
        variant: str,
        items: List[Candidate],
        start_position: int,
    ) -> None:
        """
        Log ``items`` at absolute 1-based positions ``start_position + 1 ...``.

        Failures are logged and swallowed; a lost exposure only weakens
        future suppression.
        """
        if not items:
            return

        now = self._clock()
        records = [
            ExposureRecord(
                viewer_id=identity.viewer_id,
                session_id=identity.session_id,
                variant=variant,
                item_id=item.id,
                position=start_position + index + 1,
                created_at=now,
            )
            for index, item in enumerate(items)
        ]
        try:
            await self._exposure_repo.append(records)
        except Exception as e:
            logger.warning(
                f"Failed to record {len(records)} exposures: {e!r}",
                extra={
                    "variant": variant,
                    "viewer_id": identity.viewer_id,
                    "session_id": identity.session_id,
                },
            )

    async def summarize(
        self,
        days: int = 30,
        variants: Sequence[str] = VARIANTS,
    ) -> ExposureSummary:
        """
        Exposure counts per UTC day and variant over the last ``days`` days.

        Every reported day lists each known variant, zero when it had no
        exposures. Unlike recording, a read failure propagates.
        """
        since = self._clock() - timedelta(days=days)
        raw = await self._exposure_repo.counts_by_variant_day(since)
        counts = {
            day: {**{variant: 0 for variant in variants}, **per_variant}
            for day, per_variant in sorted(raw.items())
        }
        return ExposureSummary(since=since, counts=counts)
