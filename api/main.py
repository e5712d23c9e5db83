"""
FastAPI backend: group submitted (or stored) journal entries into buckets of likely duplicates.
The similarity core only sees normalized Records; raw rows are mapped by ingest.rows here.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Optional, Union

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from clustering.config import SimilarityConfig
from core.engine import group_similar_entries
from core.models import Record
from ingest.rows import canonical_key, load_jsonl_rows, normalize_row

load_dotenv(override=True)

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("similar_entries.api")

DEFAULT_MIN_BUCKET_SIZE = 2


def entries_path() -> str:
    """JSON-lines file of consented rows read by GET /api/entries/similar."""
    return os.environ.get("ENTRIES_PATH", "data/consented-journals.jsonl")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("similar entries api starting entries_path=%s", entries_path())
    yield


app = FastAPI(title="Similar Entries API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------------------------------------------------------
# Request/response models
# -----------------------------------------------------------------------------
class SimilarRequest(BaseModel):
    records: list[dict] = Field(default_factory=list)  # raw rows; field names normalized server-side
    weights: Optional[Union[dict[str, Any], str]] = None  # aspect → weight; None = defaults
    threshold: Optional[float] = None
    minsize: int = DEFAULT_MIN_BUCKET_SIZE  # output filter only
    strategy: Optional[str] = None  # "continuous" | "strict"; None = SIMILARITY_STRATEGY env


class SimilarResponse(BaseModel):
    buckets: list[dict]
    pairwise: list[dict]
    entryById: dict[str, dict]


# -----------------------------------------------------------------------------
# No-cache for dynamic API responses (avoid 304 for stale data)
# -----------------------------------------------------------------------------
NO_CACHE_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate", "Pragma": "no-cache"}


def _row_link(row: dict) -> Optional[str]:
    keys = {canonical_key(k): v for k, v in row.items()}
    for k in ("link", "url", "id"):
        if keys.get(k):
            return str(keys[k])
    return None


def _normalize(rows: list[dict]) -> tuple[list[Record], dict[str, dict]]:
    """Records for the core plus the dashboard display map (identity and shown fields), one pass."""
    records: list[Record] = []
    entry_by_id: dict[str, dict] = {}
    for row in rows:
        record = normalize_row(row)
        if record is None:
            continue
        records.append(record)
        display = record.to_dict()
        display["link"] = _row_link(row)
        entry_by_id[record.id] = display
    return records, entry_by_id


def _run(rows: list[dict], weights: Any, threshold: Optional[float], minsize: int, strategy: Optional[str]) -> JSONResponse:
    try:
        config = SimilarityConfig.preset(strategy) if strategy else None
    except ValueError as e:
        logger.warning("similar rejected: %s", e)
        return JSONResponse(status_code=400, content={"detail": str(e)}, headers=NO_CACHE_HEADERS)

    records, entry_by_id = _normalize(rows)
    if len(records) < len(rows):
        logger.warning("similar: %d of %d rows had no id/link/url and were skipped", len(rows) - len(records), len(rows))

    result = group_similar_entries(records, weights=weights, threshold=threshold, min_bucket_size=minsize, config=config)
    content = SimilarResponse(entryById=entry_by_id, **result.to_dict()).model_dump()
    return JSONResponse(content=content, headers=NO_CACHE_HEADERS)


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
@app.post("/api/entries/similar", response_model=SimilarResponse)
def post_similar(body: SimilarRequest):
    """Bucket the submitted rows. Weights/threshold fall back to env defaults when omitted."""
    logger.info("similar received rows=%d threshold=%s minsize=%d strategy=%s",
                len(body.records), body.threshold, body.minsize, body.strategy)
    return _run(body.records, body.weights, body.threshold, body.minsize, body.strategy)


@app.get("/api/entries/similar", response_model=SimilarResponse)
def get_similar(
    threshold: Optional[float] = None,
    weights: Optional[str] = Query(default=None, description="JSON object, e.g. {\"date\":0.25,\"location\":0.35}"),
    minsize: int = DEFAULT_MIN_BUCKET_SIZE,
    strategy: Optional[str] = None,
):
    """Bucket the stored consented rows (ENTRIES_PATH)."""
    path = entries_path()
    if not os.path.isfile(path):
        logger.debug("get_similar entries file not found path=%s", path)
        raise HTTPException(status_code=404, detail="Entries file not found")
    rows = load_jsonl_rows(path)
    logger.info("similar loaded rows=%d path=%s", len(rows), path)
    return _run(rows, weights, threshold, minsize, strategy)


@app.get("/health")
def health():
    return JSONResponse(
        content={"status": "ok", "entries_path": entries_path()},
        headers=NO_CACHE_HEADERS,
    )
