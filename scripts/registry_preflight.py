"""Tiny alias registry preflight.

Runs one GET /aliases?check=<handle> against GNS_API_BASE_URL (loads .env).
Prints status code + first part of response.

Usage:
  python scripts/registry_preflight.py [handle]
"""

from __future__ import annotations

import sys

import httpx

from handle_resolver.settings import get_settings


def main() -> None:
    s = get_settings()
    handle = sys.argv[1] if len(sys.argv) > 1 else "preflight_check"
    url = s.gns_api_base_url + "/aliases"

    try:
        r = httpx.get(url, params={"check": handle}, timeout=s.gns_api_timeout_seconds, follow_redirects=True)
        print("status:", r.status_code)
        print("body_snippet:", r.text[:500])
    except Exception as exc:
        print("exception:", type(exc).__name__, str(exc))


if __name__ == "__main__":
    main()
