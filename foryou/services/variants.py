"""
A/B variant assignment.
Viewers are bucketed by a stable hash so a returning viewer keeps their variant.
"""
import hashlib
from typing import Optional, Sequence

from foryou.core.clock import RandomSource

VARIANTS: Sequence[str] = ("A", "B")
DEFAULT_VARIANT = "A"


def normalize_variant(variant: Optional[str]) -> str:
    """Upper-case label; blank or missing means the default variant."""
    label = (variant or "").strip().upper()
    return label or DEFAULT_VARIANT


def stable_bucket(key: str, buckets: int) -> int:
    """MD5-based bucket in ``[0, buckets)``, identical across processes."""
    hash_bytes = hashlib.md5(key.encode()).digest()
    return int.from_bytes(hash_bytes[:4], byteorder="big") % buckets


def assign_variant(
    viewer_id: Optional[str],
    explicit: Optional[str],
    rng: RandomSource,
) -> str:
    """
    Resolve the variant for one request.

    An explicit override wins. Otherwise a viewer is bucketed by hash and
    anonymous or session-only traffic is split uniformly at random.
    """
    if explicit and explicit.strip():
        return normalize_variant(explicit)
    if viewer_id:
        return VARIANTS[stable_bucket(viewer_id, len(VARIANTS))]
    return VARIANTS[min(int(rng.random() * len(VARIANTS)), len(VARIANTS) - 1)]
