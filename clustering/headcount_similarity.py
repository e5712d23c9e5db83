"""Headcount similarity over {male, female, kids, total} → 0–1."""

import math
from typing import Optional

from clustering.config import SUBCOUNT_TOLERANCE, TOTAL_TOLERANCE
from core.models import Headcount


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    na = math.sqrt(sum(x * x for x in a))
    nb = math.sqrt(sum(y * y for y in b))
    if na == 0 and nb == 0:
        return 1.0
    if na == 0 or nb == 0:
        return 0.0
    return max(0.0, min(1.0, dot / (na * nb)))


def headcount_cosine_score(a: Optional[Headcount], b: Optional[Headcount]) -> float:
    """Cosine of [male, female, kids, total]; missing components are 0, missing total is derived."""
    if a is None or b is None:
        return 0.0
    return _cosine(a.vector(), b.vector())


def headcount_tolerance_score(
    a: Optional[Headcount],
    b: Optional[Headcount],
    subcount_tolerance: float = SUBCOUNT_TOLERANCE,
    total_tolerance: float = TOTAL_TOLERANCE,
) -> float:
    """
    1.0 if every sub-field present on both sides differs by <= subcount_tolerance
    and the (derived) totals by <= total_tolerance. No jointly present field → 0.
    """
    if a is None or b is None:
        return 0.0
    checks = []
    for name in ("male", "female", "kids"):
        x, y = a.get(name), b.get(name)
        if x is not None and y is not None:
            checks.append(abs(x - y) <= subcount_tolerance)
    t1, t2 = a.effective_total, b.effective_total
    if t1 is not None and t2 is not None:
        checks.append(abs(t1 - t2) <= total_tolerance)
    if not checks:
        return 0.0
    return 1.0 if all(checks) else 0.0
