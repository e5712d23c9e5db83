"""Entry models: normalized records in, buckets and similarity edges out."""

import math
from dataclasses import dataclass, field
import datetime
from enum import Enum
from typing import Any, Optional

HEADCOUNT_FIELDS = ("male", "female", "kids", "total")


class Aspect(str, Enum):
    """Record attribute with its own similarity function. Values are the weight keys."""

    DATE = "date"
    LOCATION = "location"
    HEADCOUNT = "counts"
    MONETARY_AMOUNT = "ransom"
    EVENT_TYPES = "eventTypes"
    TRANSPORT = "transport"
    CONDITIONS = "conditions"


def safe_number(value: Any) -> Optional[float]:
    """Finite, non-negative number or None. Bools and numeric strings are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number) or number < 0:
        return None
    return number


def parse_date(value: Any) -> Optional[datetime.date]:
    """Calendar date from a date or an ISO string (time part ignored). None if unparsable."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def normalize_text(value: Any) -> str:
    """Trimmed, case-folded, whitespace-collapsed text ('' for missing)."""
    if not isinstance(value, str):
        return ""
    return " ".join(value.split()).casefold()


def normalize_set(values: Any) -> frozenset:
    """Trimmed, case-folded members; blanks and non-strings dropped."""
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(n for n in (normalize_text(v) for v in values) if n)


@dataclass(frozen=True)
class Headcount:
    male: Optional[float] = None
    female: Optional[float] = None
    kids: Optional[float] = None
    total: Optional[float] = None

    def __post_init__(self):
        for name in HEADCOUNT_FIELDS:
            object.__setattr__(self, name, safe_number(getattr(self, name)))

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Headcount"]:
        if not isinstance(data, dict):
            return None
        headcount = cls(**{name: data.get(name) for name in HEADCOUNT_FIELDS})
        return headcount if headcount.is_present else None

    @property
    def is_present(self) -> bool:
        return any(getattr(self, name) is not None for name in HEADCOUNT_FIELDS)

    @property
    def effective_total(self) -> Optional[float]:
        """Explicit total, else sum of the sub-counts that are present."""
        if self.total is not None:
            return self.total
        parts = [v for v in (self.male, self.female, self.kids) if v is not None]
        return sum(parts) if parts else None

    def get(self, name: str) -> Optional[float]:
        if name == "total":
            return self.effective_total
        return getattr(self, name)

    def vector(self) -> list[float]:
        """[male, female, kids, total] with missing components as 0."""
        return [self.male or 0.0, self.female or 0.0, self.kids or 0.0, self.effective_total or 0.0]

    def to_dict(self):
        return {name: getattr(self, name) for name in HEADCOUNT_FIELDS}


@dataclass(frozen=True)
class Record:
    """One normalized journal entry. Identity is `id`; nothing else is derived from it."""

    id: str
    date: Optional[datetime.date] = None
    location: Optional[str] = None
    headcount: Optional[Headcount] = None
    monetary_amount: Optional[float] = None
    event_types: frozenset = field(default_factory=frozenset)
    transport: Optional[str] = None
    conditions: frozenset = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "date", parse_date(self.date))
        object.__setattr__(self, "monetary_amount", safe_number(self.monetary_amount))
        object.__setattr__(self, "event_types", normalize_set(self.event_types))
        object.__setattr__(self, "conditions", normalize_set(self.conditions))
        for name in ("location", "transport"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                object.__setattr__(self, name, None)
        if self.headcount is not None and not isinstance(self.headcount, Headcount):
            object.__setattr__(self, "headcount", Headcount.from_dict(self.headcount))
        if self.headcount is not None and not self.headcount.is_present:
            object.__setattr__(self, "headcount", None)

    @classmethod
    def from_dict(cls, data: dict) -> "Record":
        """Build from the canonical schema. Unknown keys are ignored, bad values become absent."""
        headcount = data.get("headcount")
        if not isinstance(headcount, Headcount):
            headcount = Headcount.from_dict(headcount)
        return cls(
            id=str(data["id"]),
            date=data.get("date"),
            location=data.get("location"),
            headcount=headcount,
            monetary_amount=data.get("monetaryAmount"),
            event_types=data.get("eventTypes") or frozenset(),
            transport=data.get("transport"),
            conditions=data.get("conditions") or frozenset(),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "date": self.date.isoformat() if self.date else None,
            "location": self.location,
            "headcount": self.headcount.to_dict() if self.headcount else None,
            "monetaryAmount": self.monetary_amount,
            "eventTypes": sorted(self.event_types),
            "transport": self.transport,
            "conditions": sorted(self.conditions),
        }


@dataclass(frozen=True)
class SimilarityEdge:
    a: str
    b: str
    score: float  # 0.0 - 1.0

    def to_dict(self):
        return {"a": self.a, "b": self.b, "score": round(self.score, 3)}


@dataclass
class BucketAggregates:
    """Quantitative summary of a bucket; read-only, never affects membership."""

    date_range: Optional[dict] = None  # {"earliest": iso, "latest": iso}
    location_tokens_top: list = field(default_factory=list)  # list of (token, count)
    headcount_avg: dict = field(default_factory=lambda: {name: 0.0 for name in HEADCOUNT_FIELDS})
    monetary_amount_avg: Optional[float] = None
    monetary_amount_stats: Optional[dict] = None  # n, mean, median, min, max
    common_locations: list = field(default_factory=list)  # list of (location, count)
    dominant_location: Optional[str] = None

    def to_dict(self):
        return {
            "dateRange": self.date_range,
            "locationTokensTop": [{"token": t, "count": c} for t, c in self.location_tokens_top],
            "headcountAvg": dict(self.headcount_avg),
            "monetaryAmountAvg": self.monetary_amount_avg,
            "monetaryAmountStats": self.monetary_amount_stats,
            "commonLocations": [{"location": loc, "count": c} for loc, c in self.common_locations],
            "dominantLocation": self.dominant_location,
        }


@dataclass
class AspectExplanation:
    aspect: Aspect
    shared: bool
    value: Any = None  # raw value(s); None when not shared
    display: Optional[str] = None  # None for locale-formatted aspects (date, amount)

    def to_dict(self):
        return {"aspect": self.aspect.value, "shared": self.shared, "value": self.value, "display": self.display}


@dataclass
class BucketExplanation:
    aspects: list = field(default_factory=list)  # list of AspectExplanation, fixed aspect order

    @property
    def shared_aspects(self) -> list[str]:
        return [a.aspect.value for a in self.aspects if a.shared]

    def get(self, aspect: Aspect) -> Optional[AspectExplanation]:
        return next((a for a in self.aspects if a.aspect == aspect), None)

    def to_dict(self):
        return {"sharedAspects": self.shared_aspects, "aspects": [a.to_dict() for a in self.aspects]}


@dataclass
class Bucket:
    bucket_id: str
    entry_ids: list  # input order
    internal_edges: list = field(default_factory=list)  # list of SimilarityEdge
    aggregates: BucketAggregates = field(default_factory=BucketAggregates)
    explanation: BucketExplanation = field(default_factory=BucketExplanation)

    @property
    def size(self) -> int:
        return len(self.entry_ids)

    def to_dict(self):
        return {
            "bucketId": self.bucket_id,
            "entryIds": list(self.entry_ids),
            "size": self.size,
            "similarityEdges": [e.to_dict() for e in self.internal_edges],
            **self.aggregates.to_dict(),
            "explanation": self.explanation.to_dict(),
        }


@dataclass
class SimilarityResult:
    buckets: list = field(default_factory=list)  # list of Bucket, largest first
    pairwise: list = field(default_factory=list)  # list of SimilarityEdge

    def to_dict(self):
        return {
            "buckets": [b.to_dict() for b in self.buckets],
            "pairwise": [e.to_dict() for e in self.pairwise],
        }
