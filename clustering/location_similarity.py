"""Location similarity over free-text place names → 0–1."""

import re
from typing import Optional

from clustering.config import COUNTRY_BONUS
from core.models import normalize_text

# Articles, prepositions and administrative-division nouns carry no place identity
STOPWORDS = frozenset({
    "the", "a", "an", "of", "and", "to", "in", "on", "at",
    "de", "la", "el", "le", "du", "von",
    "province", "voivodeship", "state", "county", "region", "district", "city", "town",
})

_PUNCT = re.compile(r"[^\w,\s]+")
_SPLIT = re.compile(r"[,\s]+")


def tokenize_location(text: Optional[str]) -> list[str]:
    """Lower-case tokens split on commas/whitespace, punctuation stripped, stop words dropped."""
    if not text:
        return []
    cleaned = _PUNCT.sub(" ", text.lower()).replace("_", " ")
    return [t for t in _SPLIT.split(cleaned) if t and t not in STOPWORDS]


def last_segment(text: Optional[str]) -> str:
    """Last non-empty comma-separated segment (usually the country), lower-cased."""
    if not text:
        return ""
    parts = [p.strip() for p in text.lower().split(",") if p.strip()]
    return parts[-1] if parts else ""


def jaccard(a: set, b: set) -> float:
    if not a and not b:
        return 1.0
    union = len(a | b)
    return len(a & b) / union if union else 0.0


def location_jaccard_score(a: Optional[str], b: Optional[str], country_bonus: float = COUNTRY_BONUS) -> float:
    """
    Token-set jaccard, plus country_bonus (capped at 1.0) when the last comma
    segment matches exactly. Missing location on either side → 0, and so is a
    location made only of stop words ("District"), which names no place.
    """
    if not normalize_text(a) or not normalize_text(b):
        return 0.0
    tokens_a, tokens_b = set(tokenize_location(a)), set(tokenize_location(b))
    if not tokens_a or not tokens_b:
        return 0.0
    score = jaccard(tokens_a, tokens_b)
    last_a, last_b = last_segment(a), last_segment(b)
    if last_a and last_a == last_b:
        score = min(1.0, score + country_bonus)
    return score


def location_exact_score(a: Optional[str], b: Optional[str]) -> float:
    """1.0 when trimmed, case-folded strings are equal."""
    s1, s2 = normalize_text(a), normalize_text(b)
    if not s1 or not s2:
        return 0.0
    return 1.0 if s1 == s2 else 0.0
