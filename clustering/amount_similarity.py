"""Monetary amount (ransom) similarity → 0–1. Robust to scale; amounts assumed in one currency."""

from typing import Optional

from clustering.config import AMOUNT_TOLERANCE
from core.models import safe_number


def relative_difference(a: float, b: float) -> float:
    """|a - b| / max(a, b, 1)."""
    return abs(a - b) / max(a, b, 1.0)


def amount_ratio_score(a: Optional[float], b: Optional[float]) -> float:
    """max(0, 1 - relative difference). Missing or invalid amount on either side → 0."""
    x, y = safe_number(a), safe_number(b)
    if x is None or y is None:
        return 0.0
    return max(0.0, 1.0 - relative_difference(x, y))


def amount_relative_score(a: Optional[float], b: Optional[float], tolerance: float = AMOUNT_TOLERANCE) -> float:
    """1.0 when the relative difference is within tolerance (±10% by default), else 0."""
    x, y = safe_number(a), safe_number(b)
    if x is None or y is None:
        return 0.0
    return 1.0 if relative_difference(x, y) <= tolerance else 0.0
