"""Bucket enrichment: quantitative aggregates and shared-aspect explanations."""

from buckets.aggregator import aggregate_bucket
from buckets.explainer import explain_bucket

__all__ = ["aggregate_bucket", "explain_bucket"]
