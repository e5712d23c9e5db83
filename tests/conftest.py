"""Pytest fixtures for similar-entries tests."""

import pytest

from core.models import Headcount, Record

SIMILARITY_ENV = (
    "SIMILARITY_THRESHOLD",
    "SIMILARITY_WEIGHTS",
    "SIMILARITY_STRATEGY",
    "SIMILARITY_DATE_TAU_DAYS",
    "SIMILARITY_WORKERS",
)


@pytest.fixture(autouse=True)
def clean_similarity_env(monkeypatch):
    """Tuning env vars from the developer's shell must not leak into tests."""
    for name in SIMILARITY_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def equal_weights():
    """The four quantitative aspects, equally weighted."""
    return {"date": 1, "location": 1, "counts": 1, "ransom": 1}


@pytest.fixture
def abc_entries():
    """Canonical-schema dicts: A and B describe the same event, C is unrelated."""
    return [
        {"id": "A", "date": "2024-01-01", "location": "Aleppo, Syria", "headcount": {"total": 4}, "monetaryAmount": 1000},
        {"id": "B", "date": "2024-01-02", "location": "Aleppo, Syria", "headcount": {"total": 5}, "monetaryAmount": 1050},
        {"id": "C", "date": "2024-06-01", "location": "Paris, France", "headcount": {"total": 2}},
    ]


@pytest.fixture
def abc_records(abc_entries):
    return [Record.from_dict(e) for e in abc_entries]


@pytest.fixture
def full_record():
    """Record with every attribute present."""
    return Record(
        id="full-1",
        date="2024-03-10",
        location="Kufra, Libya",
        headcount=Headcount(male=3, female=2, kids=1, total=6),
        monetary_amount=2500,
        event_types=["kidnapping", "extortion"],
        transport="truck",
        conditions=["no water"],
    )


@pytest.fixture
def mixed_records():
    """Two near-duplicate pairs (Kufra, Sabha) interleaved with a loner."""
    return [
        Record(id="k1", date="2024-03-10", location="Kufra, Libya", headcount=Headcount(male=3, total=4), monetary_amount=2000),
        Record(id="s1", date="2024-04-01", location="Sabha, Libya", headcount=Headcount(male=10, total=10), monetary_amount=500),
        Record(id="k2", date="2024-03-11", location="Kufra, Libya", headcount=Headcount(male=3, total=5), monetary_amount=2100),
        Record(id="s2", date="2024-04-02", location="Sabha, Libya", headcount=Headcount(male=11, total=11), monetary_amount=520),
        Record(id="x1", date="2023-01-01", location="Bamako, Mali", headcount=Headcount(female=2, kids=3), monetary_amount=90000),
    ]


@pytest.fixture
def app_client(tmp_path, monkeypatch):
    """FastAPI TestClient reading stored entries from a temp path."""
    from fastapi.testclient import TestClient
    import api.main as main_module
    monkeypatch.setenv("ENTRIES_PATH", str(tmp_path / "entries.jsonl"))
    return TestClient(main_module.app)
