"""
Raw journal rows → canonical Records (no external services).

Rows come from several reporters and storage paths, so the same field shows up as
"event types", "event_types" or "eventTypes". Field names are matched ignoring
case, spaces, underscores and hyphens. Anything that cannot be mapped is left
absent; the core never sees raw rows.
"""

import json
import logging
import math
import re
from pathlib import Path
from typing import Any, Iterable, Optional

from core.models import Headcount, Record

logger = logging.getLogger("similar_entries.ingest.rows")

ID_KEYS = ("id", "link", "url")
DATE_KEYS = ("date", "dateevent", "eventdate")
LOCATION_KEYS = ("location", "locationdisplayname", "place")
HEADCOUNT_KEYS = ("counts", "people", "headcount")
AMOUNT_KEYS = ("ransom", "monetaryamount", "amount", "ransomamount")
EVENT_TYPE_KEYS = ("eventtypes", "eventtype", "events")
TRANSPORT_KEYS = ("transport", "vehicle", "transportmode")
CONDITION_KEYS = ("conditions", "condition")
LOCATION_TEXT_KEYS = ("displayname", "text", "name", "label")

_KEY_NOISE = re.compile(r"[\s_\-]+")
_NUMBER = re.compile(r"^[+]?\d+(?:[.,]\d+)?$")


def canonical_key(key: Any) -> str:
    return _KEY_NOISE.sub("", str(key)).lower()


def _index(row: dict) -> dict[str, Any]:
    """Canonical key → value; first spelling wins when a row repeats a field."""
    out: dict[str, Any] = {}
    for k, v in row.items():
        out.setdefault(canonical_key(k), v)
    return out


def _first(index: dict, keys: Iterable[str]) -> Any:
    for k in keys:
        v = index.get(k)
        if v is not None and v != "":
            return v
    return None


def parse_number(value: Any) -> Optional[float]:
    """Numbers and numeric strings ("1,500" is read as 1500); anything else → None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        s = value.strip().replace(" ", "")
        if re.fullmatch(r"\d{1,3}(,\d{3})+(\.\d+)?", s):
            s = s.replace(",", "")
        if not _NUMBER.match(s):
            return None
        number = float(s.replace(",", "."))
    else:
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def parse_string_set(value: Any) -> list[str]:
    """List of strings, or a comma/semicolon separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [p.strip() for p in re.split(r"[,;]", value) if p.strip()]
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return []


def parse_location(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict):
        text = _first(_index(value), LOCATION_TEXT_KEYS)
        return text.strip() if isinstance(text, str) and text.strip() else None
    return None


def parse_headcount(index: dict) -> Optional[Headcount]:
    """Nested counts/people/headcount mapping, else flat male/female/kids/total fields."""
    nested = _first(index, HEADCOUNT_KEYS)
    source = _index(nested) if isinstance(nested, dict) else index
    kids = source.get("kids")
    if kids is None:
        kids = source.get("children")
    headcount = Headcount(
        male=parse_number(source.get("male")),
        female=parse_number(source.get("female")),
        kids=parse_number(kids),
        total=parse_number(source.get("total")),
    )
    return headcount if headcount.is_present else None


def normalize_row(row: Any) -> Optional[Record]:
    """Map one raw row onto the canonical schema; None when the row has no usable id."""
    if not isinstance(row, dict):
        return None
    index = _index(row)
    rid = _first(index, ID_KEYS)
    if rid is None or not str(rid).strip():
        return None
    return Record(
        id=str(rid).strip(),
        date=_first(index, DATE_KEYS),
        location=parse_location(_first(index, LOCATION_KEYS)),
        headcount=parse_headcount(index),
        monetary_amount=parse_number(_first(index, AMOUNT_KEYS)),
        event_types=frozenset(parse_string_set(_first(index, EVENT_TYPE_KEYS))),
        transport=_first(index, TRANSPORT_KEYS),
        conditions=frozenset(parse_string_set(_first(index, CONDITION_KEYS))),
    )


def normalize_rows(rows: Iterable[Any]) -> list[Record]:
    records = []
    skipped = 0
    for row in rows or []:
        record = normalize_row(row)
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        logger.warning("skipped %d row(s) without id/link/url", skipped)
    return records


def load_jsonl_rows(path: str | Path) -> list[dict]:
    """Read a JSON-lines file; blank and malformed lines are skipped."""
    rows = []
    bad = 0
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except ValueError:
                bad += 1
                continue
            if isinstance(obj, dict):
                rows.append(obj)
            else:
                bad += 1
    if bad:
        logger.warning("skipped %d malformed line(s) in %s", bad, path)
    return rows
