"""
Threshold the pairwise similarity of every record pair into edges and take
connected components (union-find) as buckets.

O(n^2) comparisons; batches are bounded (low thousands). The scan may
be split over threads; edges are merged back in row order before the union-find
phase runs sequentially, so results do not depend on the worker count.
"""

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping, Optional, Sequence

from clustering.config import DEFAULT_THRESHOLD, SimilarityConfig
from clustering.scorer import PairwiseScorer
from clustering.union_find import DisjointSet
from core.models import Aspect, Record, SimilarityEdge

logger = logging.getLogger("similar_entries.clustering.builder")

# Rows per submitted task when the scan runs on a thread pool
ROWS_PER_TASK = 64


def _score_rows(
    scorer: PairwiseScorer,
    records: Sequence[Record],
    rows: range,
    threshold: float,
) -> list[tuple[int, int, float]]:
    """Qualifying (i, j, score) for i in rows and every j > i, in scan order."""
    out = []
    n = len(records)
    for i in rows:
        left = records[i]
        for j in range(i + 1, n):
            s = scorer.score(left, records[j])
            if s >= threshold:
                out.append((i, j, s))
    return out


def score_pairs(
    records: Sequence[Record],
    weights: Mapping[Aspect, float],
    threshold: float = DEFAULT_THRESHOLD,
    config: Optional[SimilarityConfig] = None,
    max_workers: int = 1,
) -> list[tuple[int, int, float]]:
    """All index pairs (i < j) whose overall similarity is >= threshold, in row-major order."""
    scorer = PairwiseScorer(weights, config)
    n = len(records)
    if max_workers <= 1 or n <= ROWS_PER_TASK:
        return _score_rows(scorer, records, range(n), threshold)

    chunks = [range(start, min(start + ROWS_PER_TASK, n)) for start in range(0, n, ROWS_PER_TASK)]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(_score_rows, scorer, records, rows, threshold) for rows in chunks]
        # Collect in submission order so the edge list matches the sequential scan
        results = [future.result() for future in futures]
    return [pair for chunk in results for pair in chunk]


def build_clusters(
    records: Sequence[Record],
    weights: Mapping[Aspect, float],
    threshold: float = DEFAULT_THRESHOLD,
    config: Optional[SimilarityConfig] = None,
    max_workers: int = 1,
) -> tuple[list[list[int]], list[SimilarityEdge]]:
    """
    Partition records into groups of indices (singletons included) plus the edge list.
    Groups are ordered largest first; equal sizes keep the order in which the scan
    first reaches them (position of their first member in the input).
    """
    n = len(records)
    if n == 0:
        return [], []

    duplicates = [rid for rid, c in Counter(r.id for r in records).items() if c > 1]
    if duplicates:
        logger.warning("duplicate record ids in batch (kept as distinct records): %s", duplicates[:10])

    pairs = score_pairs(records, weights, threshold, config=config, max_workers=max_workers)

    dsu = DisjointSet(n)
    edges: list[SimilarityEdge] = []
    for i, j, s in pairs:
        dsu.union(i, j)
        edges.append(SimilarityEdge(a=records[i].id, b=records[j].id, score=s))

    # groups() lists sets by smallest member; sorted() is stable, so ties keep that order
    groups = sorted(dsu.groups(), key=len, reverse=True)
    logger.debug("clustered records=%d edges=%d groups=%d threshold=%.3f", n, len(edges), len(groups), threshold)
    return groups, edges
