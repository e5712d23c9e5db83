"""Per-bucket quantitative summary: date span, location tokens, averaged headcounts and amounts."""

import statistics
from collections import Counter
from typing import Sequence

from clustering.config import LOCATION_MAJORITY
from clustering.location_similarity import tokenize_location
from core.models import HEADCOUNT_FIELDS, BucketAggregates, Record, normalize_text

TOP_LOCATION_TOKENS = 8
TOP_COMMON_LOCATIONS = 3


def date_range(records: Sequence[Record]) -> dict | None:
    dates = sorted(r.date.isoformat() for r in records if r.date is not None)
    if not dates:
        return None
    return {"earliest": dates[0], "latest": dates[-1]}


def location_tokens_top(records: Sequence[Record], limit: int = TOP_LOCATION_TOKENS) -> list[tuple[str, int]]:
    """Most frequent location tokens; ties keep first-seen order."""
    counts = Counter()
    for r in records:
        counts.update(tokenize_location(r.location))
    return counts.most_common(limit)


def headcount_avg(records: Sequence[Record]) -> dict[str, float]:
    """Mean per sub-field over members with a headcount (missing sub-field = 0, total derived)."""
    with_counts = [r.headcount for r in records if r.headcount is not None]
    if not with_counts:
        return {name: 0.0 for name in HEADCOUNT_FIELDS}
    n = len(with_counts)
    return {name: round(sum(h.get(name) or 0.0 for h in with_counts) / n, 1) for name in HEADCOUNT_FIELDS}


def monetary_amount_stats(records: Sequence[Record]) -> dict | None:
    amounts = sorted(r.monetary_amount for r in records if r.monetary_amount is not None)
    if not amounts:
        return None
    return {
        "n": len(amounts),
        "mean": round(statistics.fmean(amounts), 2),
        "median": round(statistics.median(amounts), 2),
        "min": amounts[0],
        "max": amounts[-1],
    }


def common_locations(records: Sequence[Record], limit: int = TOP_COMMON_LOCATIONS) -> list[tuple[str, int]]:
    """Most frequent full location strings (normalized), not just tokens."""
    counts = Counter(n for n in (normalize_text(r.location) for r in records) if n)
    return counts.most_common(limit)


def dominant_location(records: Sequence[Record], majority: float = LOCATION_MAJORITY) -> str | None:
    """Normalized location held by at least `majority` of all members, else None."""
    top = common_locations(records, limit=1)
    if not records or not top:
        return None
    location, count = top[0]
    return location if count / len(records) >= majority else None


def aggregate_bucket(records: Sequence[Record], location_majority: float = LOCATION_MAJORITY) -> BucketAggregates:
    stats = monetary_amount_stats(records)
    return BucketAggregates(
        date_range=date_range(records),
        location_tokens_top=location_tokens_top(records),
        headcount_avg=headcount_avg(records),
        monetary_amount_avg=stats["mean"] if stats else None,
        monetary_amount_stats=stats,
        common_locations=common_locations(records),
        dominant_location=dominant_location(records, location_majority),
    )
