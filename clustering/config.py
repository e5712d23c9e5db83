"""
Weights, threshold and per-aspect strategy selection.

Tunable via env (read when callers pass None):
- SIMILARITY_THRESHOLD: min overall score for an edge (default 0.7).
- SIMILARITY_WEIGHTS: JSON object or comma-separated key=value (e.g. date=0.25,location=0.35,counts=0.25,ransom=0.15).
- SIMILARITY_STRATEGY: "continuous" (decay/jaccard/cosine/ratio) or "strict" (boolean windows).
- SIMILARITY_DATE_TAU_DAYS: tolerance of the date decay (default 7).
- SIMILARITY_WORKERS: threads for the pairwise scan (default 1 = sequential).

Historical variants disagreed on several tolerances; every one of them is a named
constant below so both values stay available.
"""

import json
import logging
import math
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from core.models import Aspect

logger = logging.getLogger("similar_entries.clustering.config")

DEFAULT_THRESHOLD = 0.7

# Date: decay tolerance, strict pairwise window, consensus window (canonical 2, historical 1 and 7)
DATE_TAU_DAYS = 7.0
DATE_WINDOW_DAYS = 1
CONSENSUS_DATE_WINDOW_DAYS = 2
LOOSE_DATE_WINDOW_DAYS = 7

# Monetary amount: relative tolerance (canonical 10%, historical 25%)
AMOUNT_TOLERANCE = 0.10
LOOSE_AMOUNT_TOLERANCE = 0.25

# Location: country bonus for the jaccard strategy; share of members for a dominant location
COUNTRY_BONUS = 0.15
LOCATION_MAJORITY = 0.5
STRICT_LOCATION_MAJORITY = 0.6

# Headcount: per sub-field tolerance and total tolerance
SUBCOUNT_TOLERANCE = 1
TOTAL_TOLERANCE = 3

DEFAULT_WEIGHTS = {
    Aspect.DATE: 0.25,
    Aspect.LOCATION: 0.35,
    Aspect.HEADCOUNT: 0.25,
    Aspect.MONETARY_AMOUNT: 0.15,
}

# Accepted spellings for weight keys besides the Aspect values themselves
WEIGHT_ALIASES = {
    "headcount": Aspect.HEADCOUNT,
    "monetaryamount": Aspect.MONETARY_AMOUNT,
    "monetary_amount": Aspect.MONETARY_AMOUNT,
    "amount": Aspect.MONETARY_AMOUNT,
    "event_types": Aspect.EVENT_TYPES,
    "eventtypes": Aspect.EVENT_TYPES,
    "eventtype": Aspect.EVENT_TYPES,
}

DATE_STRATEGIES = ("decay", "window")
LOCATION_STRATEGIES = ("jaccard", "exact")
HEADCOUNT_STRATEGIES = ("cosine", "tolerance")
AMOUNT_STRATEGIES = ("ratio", "relative")


@dataclass(frozen=True)
class SimilarityConfig:
    """Strategy per aspect plus its parameters. Sets and transport have a single (equality) rule."""

    date_strategy: str = "decay"
    date_tau_days: float = DATE_TAU_DAYS
    date_window_days: float = DATE_WINDOW_DAYS
    location_strategy: str = "jaccard"
    country_bonus: float = COUNTRY_BONUS
    headcount_strategy: str = "cosine"
    subcount_tolerance: float = SUBCOUNT_TOLERANCE
    total_tolerance: float = TOTAL_TOLERANCE
    amount_strategy: str = "ratio"
    amount_tolerance: float = AMOUNT_TOLERANCE

    def __post_init__(self):
        for name, allowed in (
            ("date_strategy", DATE_STRATEGIES),
            ("location_strategy", LOCATION_STRATEGIES),
            ("headcount_strategy", HEADCOUNT_STRATEGIES),
            ("amount_strategy", AMOUNT_STRATEGIES),
        ):
            if getattr(self, name) not in allowed:
                raise ValueError(f"{name} must be one of {allowed}, got {getattr(self, name)!r}")
        if self.date_tau_days <= 0:
            raise ValueError("date_tau_days must be positive")

    @classmethod
    def preset(cls, name: str) -> "SimilarityConfig":
        """'continuous' or 'strict'."""
        key = (name or "").strip().lower()
        if key not in PRESETS:
            raise ValueError(f"unknown similarity strategy {name!r} (expected one of {sorted(PRESETS)})")
        return PRESETS[key]

    @classmethod
    def from_env(cls) -> "SimilarityConfig":
        base = PRESETS["continuous"]
        name = os.environ.get("SIMILARITY_STRATEGY", "").strip().lower()
        if name:
            if name in PRESETS:
                base = PRESETS[name]
            else:
                logger.warning("ignoring SIMILARITY_STRATEGY=%r (expected one of %s)", name, sorted(PRESETS))
        tau = _env_float("SIMILARITY_DATE_TAU_DAYS")
        if tau is not None and tau > 0:
            base = replace(base, date_tau_days=tau)
        return base


PRESETS = {
    "continuous": SimilarityConfig(),
    "strict": SimilarityConfig(
        date_strategy="window",
        location_strategy="exact",
        headcount_strategy="tolerance",
        amount_strategy="relative",
    ),
}
CONTINUOUS = PRESETS["continuous"]
STRICT = PRESETS["strict"]


@dataclass(frozen=True)
class ConsensusRules:
    """All-members-must-agree tolerances used only to explain a bucket."""

    date_window_days: float = CONSENSUS_DATE_WINDOW_DAYS
    subcount_tolerance: float = SUBCOUNT_TOLERANCE
    total_tolerance: float = TOTAL_TOLERANCE
    amount_tolerance: float = AMOUNT_TOLERANCE
    location_majority: float = LOCATION_MAJORITY


def _env_float(name: str) -> Optional[float]:
    v = os.environ.get(name)
    if v is None or v.strip() == "":
        return None
    try:
        return float(v.strip())
    except ValueError:
        logger.warning("ignoring %s=%r (not a number)", name, v)
        return None


def resolve_aspect(key: Any) -> Optional[Aspect]:
    """Map a weight key to an Aspect; None for unknown keys."""
    if isinstance(key, Aspect):
        return key
    if not isinstance(key, str):
        return None
    k = key.strip()
    for aspect in Aspect:
        if k == aspect.value or k.lower() == aspect.value.lower():
            return aspect
    return WEIGHT_ALIASES.get(k.lower())


def _weight_value(value: Any) -> float:
    """Non-numeric, non-finite or negative weights count as 0 (aspect excluded)."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0.0
    if not isinstance(value, (int, float)):
        return 0.0
    value = float(value)
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def _parse_weight_string(s: str) -> Optional[dict]:
    s = s.strip()
    if not s:
        return None
    if s.startswith("{"):
        try:
            data = json.loads(s)
        except ValueError:
            return None
        return data if isinstance(data, dict) else None
    out = {}
    for part in s.split(","):
        if not part.strip():
            continue
        if "=" not in part:
            return None
        key, value = part.split("=", 1)
        out[key.strip()] = value.strip()
    return out or None


def parse_weights(raw: Any) -> dict[Aspect, float]:
    """
    Normalize a weight configuration to {Aspect: weight > 0}.
    raw: mapping, JSON object string, "key=value,..." string, or None (defaults).
    Unknown keys are ignored; unusable values exclude the aspect. A string that cannot
    be parsed at all falls back to DEFAULT_WEIGHTS.
    """
    if raw is None:
        return dict(DEFAULT_WEIGHTS)
    if isinstance(raw, str):
        parsed = _parse_weight_string(raw)
        if parsed is None:
            logger.warning("unparsable weights %r; using defaults", raw[:200])
            return dict(DEFAULT_WEIGHTS)
        raw = parsed
    if not isinstance(raw, Mapping):
        logger.warning("weights must be a mapping, got %s; using defaults", type(raw).__name__)
        return dict(DEFAULT_WEIGHTS)

    weights: dict[Aspect, float] = {}
    for key, value in raw.items():
        aspect = resolve_aspect(key)
        if aspect is None:
            logger.debug("ignoring unknown weight key %r", key)
            continue
        w = _weight_value(value)
        if w > 0:
            weights[aspect] = w
        else:
            weights.pop(aspect, None)
    return weights


def similarity_threshold(value: Optional[float] = None) -> float:
    """Explicit value, else SIMILARITY_THRESHOLD, else DEFAULT_THRESHOLD; clamped to [0, 1]."""
    if value is None:
        value = _env_float("SIMILARITY_THRESHOLD")
    if value is None or isinstance(value, bool):
        return DEFAULT_THRESHOLD
    try:
        t = float(value)
    except (TypeError, ValueError):
        return DEFAULT_THRESHOLD
    if not math.isfinite(t):
        return DEFAULT_THRESHOLD
    return max(0.0, min(1.0, t))


def similarity_weights(value: Any = None) -> dict[Aspect, float]:
    """Explicit weights, else SIMILARITY_WEIGHTS, else DEFAULT_WEIGHTS."""
    if value is None:
        env = os.environ.get("SIMILARITY_WEIGHTS")
        if env and env.strip():
            return parse_weights(env)
    return parse_weights(value)


def similarity_workers(value: Optional[int] = None) -> int:
    if value is None:
        value = _env_float("SIMILARITY_WORKERS")
    if value is None or isinstance(value, bool):
        return 1
    try:
        workers = float(value)
    except (TypeError, ValueError):
        workers = math.nan
    if not math.isfinite(workers):
        logger.warning("ignoring SIMILARITY_WORKERS=%r (not a finite number)", value)
        return 1
    return max(1, int(workers))
