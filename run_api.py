#!/usr/bin/env python3
"""
Run the Similar Entries API.
Tuning comes from the environment (or .env): SIMILARITY_THRESHOLD, SIMILARITY_WEIGHTS,
SIMILARITY_STRATEGY, ENTRIES_PATH. PORT and RELOAD control the server.
"""
import os

from dotenv import load_dotenv

load_dotenv()

import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.environ.get("RELOAD", "0") == "1",
    )
