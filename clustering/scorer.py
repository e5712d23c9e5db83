"""
Combine per-aspect scores into one pairwise similarity.

Aspects with weight <= 0 (or absent) are excluded. An aspect whose attribute is
missing on both records is undefined and dropped from the average; missing on
one side scores 0. Result = Σ(weight·score) / Σ(weight), 0 when nothing qualifies.
"""

import math
from typing import Callable, Mapping, Optional

from clustering.amount_similarity import amount_ratio_score, amount_relative_score
from clustering.config import CONTINUOUS, SimilarityConfig, parse_weights
from clustering.date_proximity import date_decay_score, date_window_score
from clustering.headcount_similarity import headcount_cosine_score, headcount_tolerance_score
from clustering.location_similarity import location_exact_score, location_jaccard_score
from clustering.set_similarity import set_equal_score, transport_equal_score
from core.models import Aspect, Record

AspectFn = Callable[[Record, Record], float]

# Whether a record carries the attribute an aspect compares
PRESENT: dict[Aspect, Callable[[Record], bool]] = {
    Aspect.DATE: lambda r: r.date is not None,
    Aspect.LOCATION: lambda r: r.location is not None,
    Aspect.HEADCOUNT: lambda r: r.headcount is not None,
    Aspect.MONETARY_AMOUNT: lambda r: r.monetary_amount is not None,
    Aspect.EVENT_TYPES: lambda r: bool(r.event_types),
    Aspect.TRANSPORT: lambda r: r.transport is not None,
    Aspect.CONDITIONS: lambda r: bool(r.conditions),
}


def aspect_functions(config: SimilarityConfig = CONTINUOUS) -> dict[Aspect, AspectFn]:
    """Pick one scoring function per aspect according to the configured strategies."""
    if config.date_strategy == "decay":
        date_fn = lambda a, b: date_decay_score(a.date, b.date, config.date_tau_days)
    else:
        date_fn = lambda a, b: date_window_score(a.date, b.date, config.date_window_days)

    if config.location_strategy == "jaccard":
        location_fn = lambda a, b: location_jaccard_score(a.location, b.location, config.country_bonus)
    else:
        location_fn = lambda a, b: location_exact_score(a.location, b.location)

    if config.headcount_strategy == "cosine":
        headcount_fn = lambda a, b: headcount_cosine_score(a.headcount, b.headcount)
    else:
        headcount_fn = lambda a, b: headcount_tolerance_score(
            a.headcount, b.headcount, config.subcount_tolerance, config.total_tolerance
        )

    if config.amount_strategy == "ratio":
        amount_fn = lambda a, b: amount_ratio_score(a.monetary_amount, b.monetary_amount)
    else:
        amount_fn = lambda a, b: amount_relative_score(a.monetary_amount, b.monetary_amount, config.amount_tolerance)

    return {
        Aspect.DATE: date_fn,
        Aspect.LOCATION: location_fn,
        Aspect.HEADCOUNT: headcount_fn,
        Aspect.MONETARY_AMOUNT: amount_fn,
        Aspect.EVENT_TYPES: lambda a, b: set_equal_score(a.event_types, b.event_types),
        Aspect.TRANSPORT: lambda a, b: transport_equal_score(a.transport, b.transport),
        Aspect.CONDITIONS: lambda a, b: set_equal_score(a.conditions, b.conditions),
    }


class PairwiseScorer:
    """Scores record pairs for one weight configuration; builds the strategy table once."""

    def __init__(self, weights: Mapping[Aspect, float], config: Optional[SimilarityConfig] = None):
        self.config = config or CONTINUOUS
        self.weights = parse_weights(weights)
        functions = aspect_functions(self.config)
        # Fixed Aspect order keeps float summation order (and so symmetry) stable
        self._active = [(aspect, self.weights[aspect], functions[aspect]) for aspect in Aspect if aspect in self.weights]

    def aspect_scores(self, a: Record, b: Record) -> dict[Aspect, float]:
        """Per-aspect scores for the weighted aspects that are defined for this pair."""
        scores: dict[Aspect, float] = {}
        for aspect, _, fn in self._active:
            present = PRESENT[aspect]
            if not present(a) and not present(b):
                continue
            s = fn(a, b)
            if s is None or not math.isfinite(s):
                continue
            scores[aspect] = s
        return scores

    def score(self, a: Record, b: Record) -> float:
        total_w = 0.0
        num = 0.0
        scores = self.aspect_scores(a, b)
        for aspect, w, _ in self._active:
            if aspect in scores:
                total_w += w
                num += w * scores[aspect]
        if total_w == 0:
            return 0.0
        return max(0.0, min(1.0, num / total_w))


def overall_similarity(
    a: Record,
    b: Record,
    weights: Mapping[Aspect, float],
    config: Optional[SimilarityConfig] = None,
) -> float:
    """Weighted average of the defined aspect scores, in [0, 1]."""
    return PairwiseScorer(weights, config).score(a, b)


def aspect_scores(
    a: Record,
    b: Record,
    weights: Mapping[Aspect, float],
    config: Optional[SimilarityConfig] = None,
) -> dict[Aspect, float]:
    return PairwiseScorer(weights, config).aspect_scores(a, b)
