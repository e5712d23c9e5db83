"""
Post a demo batch of journal rows to /api/entries/similar and print the buckets.

Run with the API already running (python run_api.py). Optionally set API_URL in env.
Rows deliberately mix field spellings ("eventTypes" vs "event types") and include two
near-duplicate groups plus a few unrelated entries.
Usage: python seed_demo_entries.py [--strategy strict]
"""

import os
import sys
from datetime import date, timedelta

import httpx

API_URL = (os.environ.get("API_URL") or "http://localhost:8000").rstrip("/")

BASE = date(2024, 3, 10)


def _day(offset: int) -> str:
    return (BASE + timedelta(days=offset)).isoformat()


# Demo rows: group 1 (Kufra, three reports), group 2 (Sabha, two reports), three loners
DEMO_ROWS = [
    {"id": "j-01", "date": _day(0), "location": "Kufra, Libya", "counts": {"male": 3, "female": 1, "total": 4},
     "ransom": 2000, "eventTypes": ["kidnapping", "extortion"], "transport": "truck"},
    {"id": "j-02", "date": _day(1), "location": "kufra,  libya", "counts": {"male": 3, "female": 2, "total": 5},
     "ransom": 2100, "event types": "kidnapping; extortion", "transport": "Truck"},
    {"link": "https://example.org/j-03", "date": _day(2), "location": "Kufra District, Libya",
     "male": 4, "female": 1, "ransom": "1,950", "event_types": ["extortion", "kidnapping"]},
    {"id": "j-04", "date": _day(20), "location": "Sabha, Libya", "counts": {"male": 10, "total": 10},
     "ransom": 500, "eventTypes": ["detention"], "conditions": ["no water"]},
    {"id": "j-05", "date": _day(21), "location": "Sabha, Libya", "counts": {"male": 11, "total": 11},
     "ransom": 520, "eventTypes": ["detention"], "conditions": ["no water"]},
    {"id": "j-06", "date": _day(60), "location": "Agadez, Niger", "counts": {"female": 2, "kids": 3},
     "eventTypes": ["abandonment"], "transport": "pickup"},
    {"id": "j-07", "date": _day(-40), "location": "Tripoli, Libya", "ransom": 8000},
    {"id": "j-08", "location": "Bamako, Mali", "counts": {"total": 30}},
]


def main():
    strategy = None
    if "--strategy" in sys.argv:
        strategy = sys.argv[sys.argv.index("--strategy") + 1]
    print(f"Posting {len(DEMO_ROWS)} demo rows to {API_URL}/api/entries/similar (strategy={strategy or 'env'})")
    client = httpx.Client(timeout=30.0)
    try:
        r = client.post(
            f"{API_URL}/api/entries/similar",
            json={"records": DEMO_ROWS, "minsize": 2, "strategy": strategy},
            headers={"Content-Type": "application/json"},
        )
        if not r.is_success:
            print(f"  FAILED {r.status_code} {r.text[:200]}")
            return
        data = r.json()
        for bucket in data.get("buckets", []):
            shared = bucket.get("explanation", {}).get("sharedAspects", [])
            print(f"  {bucket['bucketId']} size={bucket['size']} entries={bucket['entryIds']} shared={shared}")
        print(f"Done. {len(data.get('pairwise', []))} similarity edge(s) above threshold.")
    finally:
        client.close()


if __name__ == "__main__":
    main()
