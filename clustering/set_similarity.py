"""Categorical aspects: event-type set, transport mode, condition set. Equality → 1, else 0."""

from typing import Iterable, Optional

from core.models import normalize_set, normalize_text


def set_equal_score(a: Optional[Iterable[str]], b: Optional[Iterable[str]]) -> float:
    """1.0 if the normalized sets are equal (order-insensitive); empty set on either side → 0."""
    s1, s2 = normalize_set(a), normalize_set(b)
    if not s1 or not s2:
        return 0.0
    return 1.0 if s1 == s2 else 0.0


def transport_equal_score(a: Optional[str], b: Optional[str]) -> float:
    s1, s2 = normalize_text(a), normalize_text(b)
    if not s1 or not s2:
        return 0.0
    return 1.0 if s1 == s2 else 0.0
