"""Clustering: per-aspect similarity → weighted pairwise score → thresholded union-find buckets."""

from clustering.config import SimilarityConfig, ConsensusRules, parse_weights, CONTINUOUS, STRICT
from clustering.scorer import PairwiseScorer, overall_similarity, aspect_scores
from clustering.union_find import DisjointSet
from clustering.builder import build_clusters, score_pairs

__all__ = [
    "SimilarityConfig",
    "ConsensusRules",
    "parse_weights",
    "CONTINUOUS",
    "STRICT",
    "PairwiseScorer",
    "overall_similarity",
    "aspect_scores",
    "DisjointSet",
    "build_clusters",
    "score_pairs",
]
