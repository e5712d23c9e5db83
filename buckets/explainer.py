"""
Explain a bucket: which aspects are commonly shared by *all* members.

Each aspect has its own all-members-must-agree rule (ConsensusRules), independent
of the weights and threshold that formed the bucket. A member missing an
attribute always makes that aspect not shared. Membership is never changed here.
"""

import logging
from typing import Optional, Sequence

from clustering.config import ConsensusRules
from core.models import Aspect, AspectExplanation, BucketExplanation, Record, normalize_text

logger = logging.getLogger("similar_entries.buckets.explainer")

NO_SHARED_VALUE = "—"


def format_number(x: float) -> str:
    return str(int(x)) if float(x).is_integer() else f"{x:g}"


def format_range(lo: float, hi: float) -> str:
    """'min' when equal, else 'min–max'."""
    if lo == hi:
        return format_number(lo)
    return f"{format_number(lo)}–{format_number(hi)}"


def format_set(values) -> str:
    return ", ".join(sorted(set(values)))


def pretty_location(normalized: str) -> str:
    """Capitalize each comma segment: 'aleppo, syria' → 'Aleppo, Syria'."""
    parts = [p.strip() for p in normalized.split(",") if p.strip()]
    return ", ".join(p[:1].upper() + p[1:] for p in parts)


def _not_shared(aspect: Aspect, display: Optional[str] = None) -> AspectExplanation:
    return AspectExplanation(aspect=aspect, shared=False, value=None, display=display)


def explain_date(records: Sequence[Record], rules: ConsensusRules) -> AspectExplanation:
    dates = [r.date for r in records]
    if not dates or any(d is None for d in dates):
        return _not_shared(Aspect.DATE)
    earliest, latest = min(dates), max(dates)
    if (latest - earliest).days > rules.date_window_days:
        return _not_shared(Aspect.DATE)
    return AspectExplanation(
        aspect=Aspect.DATE,
        shared=True,
        value={"earliest": earliest.isoformat(), "latest": latest.isoformat()},
    )


def _explain_exact_text(aspect: Aspect, values: list, pretty=lambda s: s) -> AspectExplanation:
    normalized = [normalize_text(v) for v in values]
    if not normalized or not all(normalized) or len(set(normalized)) != 1:
        return _not_shared(aspect)
    return AspectExplanation(aspect=aspect, shared=True, value=normalized[0], display=pretty(normalized[0]))


def explain_location(records: Sequence[Record], rules: ConsensusRules) -> AspectExplanation:
    return _explain_exact_text(Aspect.LOCATION, [r.location for r in records], pretty_location)


def explain_transport(records: Sequence[Record], rules: ConsensusRules) -> AspectExplanation:
    return _explain_exact_text(Aspect.TRANSPORT, [r.transport for r in records])


def explain_headcount(records: Sequence[Record], rules: ConsensusRules) -> AspectExplanation:
    """Per sub-field: shared if every member has it and max - min is within tolerance."""
    shared_fields = {}
    parts = []
    for name in ("male", "female", "kids", "total"):
        tolerance = rules.total_tolerance if name == "total" else rules.subcount_tolerance
        values = [r.headcount.get(name) if r.headcount is not None else None for r in records]
        if not values or any(v is None for v in values):
            continue
        lo, hi = min(values), max(values)
        if hi - lo > tolerance:
            continue
        shared_fields[name] = {"min": lo, "max": hi}
        parts.append(f"{name} {format_range(lo, hi)}")
    if not shared_fields:
        return _not_shared(Aspect.HEADCOUNT)
    return AspectExplanation(aspect=Aspect.HEADCOUNT, shared=True, value=shared_fields, display=", ".join(parts))


def explain_monetary_amount(records: Sequence[Record], rules: ConsensusRules) -> AspectExplanation:
    """Shared if every member has an amount and none deviates from the mean by more than the tolerance."""
    amounts = [r.monetary_amount for r in records]
    if not amounts or any(a is None for a in amounts):
        return _not_shared(Aspect.MONETARY_AMOUNT)
    mean = sum(amounts) / len(amounts)
    max_dev = max(abs(a - mean) for a in amounts)
    if mean == 0:
        ok = max_dev == 0
    else:
        ok = max_dev / mean <= rules.amount_tolerance
    if not ok:
        return _not_shared(Aspect.MONETARY_AMOUNT)
    return AspectExplanation(
        aspect=Aspect.MONETARY_AMOUNT,
        shared=True,
        value={"mean": round(mean, 2), "min": min(amounts), "max": max(amounts)},
    )


def _explain_set(aspect: Aspect, sets: list) -> AspectExplanation:
    """Shared if every member's normalized set is non-empty and identical; always reported."""
    if not sets or any(not s for s in sets) or len(set(sets)) != 1:
        return _not_shared(aspect, display=NO_SHARED_VALUE)
    common = sorted(sets[0])
    return AspectExplanation(aspect=aspect, shared=True, value=common, display=format_set(common))


def explain_event_types(records: Sequence[Record], rules: ConsensusRules) -> AspectExplanation:
    return _explain_set(Aspect.EVENT_TYPES, [r.event_types for r in records])


def explain_conditions(records: Sequence[Record], rules: ConsensusRules) -> AspectExplanation:
    return _explain_set(Aspect.CONDITIONS, [r.conditions for r in records])


EXPLAINERS = {
    Aspect.DATE: explain_date,
    Aspect.LOCATION: explain_location,
    Aspect.HEADCOUNT: explain_headcount,
    Aspect.MONETARY_AMOUNT: explain_monetary_amount,
    Aspect.EVENT_TYPES: explain_event_types,
    Aspect.TRANSPORT: explain_transport,
    Aspect.CONDITIONS: explain_conditions,
}


def explain_bucket(records: Sequence[Record], rules: Optional[ConsensusRules] = None) -> BucketExplanation:
    """One explanation per aspect, in Aspect order."""
    rules = rules or ConsensusRules()
    explanation = BucketExplanation(aspects=[EXPLAINERS[aspect](records, rules) for aspect in Aspect])
    logger.debug("explained bucket size=%d shared=%s", len(records), explanation.shared_aspects)
    return explanation
