"""Group similar entries: score all pairs, cluster, then summarize and explain each bucket.
Stateless per call; nothing is kept between invocations.
"""

import logging
from typing import Any, Iterable, Optional, Union

from buckets.aggregator import aggregate_bucket
from buckets.explainer import explain_bucket
from clustering.builder import build_clusters
from clustering.config import (
    ConsensusRules,
    SimilarityConfig,
    similarity_threshold,
    similarity_weights,
    similarity_workers,
)
from core.models import Bucket, Record, SimilarityResult

logger = logging.getLogger("similar_entries.core.engine")


def _as_records(entries: Iterable[Union[Record, dict]]) -> list[Record]:
    records = []
    for entry in entries or []:
        if isinstance(entry, Record):
            records.append(entry)
        elif isinstance(entry, dict) and entry.get("id") not in (None, ""):
            records.append(Record.from_dict(entry))
        else:
            logger.warning("skipping entry without id: %r", entry if not isinstance(entry, dict) else sorted(entry))
    return records


def group_similar_entries(
    entries: Iterable[Union[Record, dict]],
    weights: Any = None,
    threshold: Optional[float] = None,
    min_bucket_size: int = 1,
    config: Optional[SimilarityConfig] = None,
    rules: Optional[ConsensusRules] = None,
    max_workers: Optional[int] = None,
) -> SimilarityResult:
    """
    Cluster entries into buckets of likely duplicates.
    entries: Record instances or canonical-schema dicts.
    weights/threshold/max_workers: if None, read from env (SIMILARITY_*); else use passed values.
    min_bucket_size: output filter only; clustering and the pairwise list are unaffected.
    """
    records = _as_records(entries)
    weights = similarity_weights(weights)
    threshold = similarity_threshold(threshold)
    config = config or SimilarityConfig.from_env()
    rules = rules or ConsensusRules()

    groups, edges = build_clusters(
        records,
        weights,
        threshold=threshold,
        config=config,
        max_workers=similarity_workers(max_workers),
    )

    buckets: list[Bucket] = []
    for idx, group in enumerate(groups, start=1):
        members = [records[i] for i in group]
        ids = {r.id for r in members}
        buckets.append(Bucket(
            bucket_id=f"bucket-{idx}",
            entry_ids=[r.id for r in members],
            internal_edges=[e for e in edges if e.a in ids and e.b in ids],
            aggregates=aggregate_bucket(members, location_majority=rules.location_majority),
            explanation=explain_bucket(members, rules),
        ))

    kept = [b for b in buckets if b.size >= max(1, min_bucket_size)]
    logger.info(
        "grouped entries=%d edges=%d buckets=%d returned=%d threshold=%.3f weights=%s",
        len(records), len(edges), len(buckets), len(kept), threshold,
        {a.value: w for a, w in weights.items()},
    )
    return SimilarityResult(buckets=kept, pairwise=edges)
