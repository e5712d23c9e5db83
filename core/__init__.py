"""Core entry models. The orchestration entry point lives in core.engine (group_similar_entries)."""

from core.models import (
    Aspect,
    AspectExplanation,
    Bucket,
    BucketAggregates,
    BucketExplanation,
    Headcount,
    Record,
    SimilarityEdge,
    SimilarityResult,
)

__all__ = [
    "Aspect",
    "AspectExplanation",
    "Bucket",
    "BucketAggregates",
    "BucketExplanation",
    "Headcount",
    "Record",
    "SimilarityEdge",
    "SimilarityResult",
]
