"""Date proximity score: how close two event dates are → 0–1 (closer = higher)."""

import math
from datetime import date
from typing import Optional

from clustering.config import DATE_TAU_DAYS, DATE_WINDOW_DAYS


def days_between(d1: Optional[date], d2: Optional[date]) -> Optional[int]:
    if d1 is None or d2 is None:
        return None
    return abs((d1 - d2).days)


def date_decay_score(d1: Optional[date], d2: Optional[date], tau_days: float = DATE_TAU_DAYS) -> float:
    """
    exp(-Δdays / tau): 1.0 on the same day, ~0.37 at Δ = tau.
    Missing date on either side → 0.
    """
    delta = days_between(d1, d2)
    if delta is None:
        return 0.0
    return math.exp(-delta / tau_days)


def date_window_score(d1: Optional[date], d2: Optional[date], window_days: float = DATE_WINDOW_DAYS) -> float:
    """1.0 when the dates are at most window_days apart (same day or ±1 by default), else 0."""
    delta = days_between(d1, d2)
    if delta is None:
        return 0.0
    return 1.0 if delta <= window_days else 0.0
