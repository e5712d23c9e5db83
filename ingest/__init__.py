"""Raw row ingestion: field-name normalization and JSON-lines loading."""

from ingest.rows import load_jsonl_rows, normalize_row, normalize_rows

__all__ = ["load_jsonl_rows", "normalize_row", "normalize_rows"]
