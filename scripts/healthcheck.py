"""
Container health check against the sync service's /api/v1/health endpoint.
"""

from __future__ import annotations

import json
import os
import sys
from urllib.error import URLError
from urllib.request import urlopen


def main() -> int:
    port = os.getenv("PORT", "8000")
    path = os.getenv("HEALTHCHECK_PATH", "/api/v1/health")
    url = f"http://127.0.0.1:{port}{path}"

    try:
        with urlopen(url, timeout=2) as response:
            if not 200 <= response.status < 400:
                return 1
            body = json.loads(response.read().decode("utf-8"))
    except (URLError, TimeoutError, ValueError):
        return 1

    data = body.get("data") if isinstance(body, dict) else None
    return 0 if isinstance(data, dict) and data.get("status") == "UP" else 1


if __name__ == "__main__":
    sys.exit(main())
