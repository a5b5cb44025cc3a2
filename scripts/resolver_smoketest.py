from __future__ import annotations

import asyncio
import secrets
import sys
from pathlib import Path

# Allow running as: python scripts/resolver_smoketest.py
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import httpx

from handle_resolver.alias_client import AliasClient
from handle_resolver.deps import reserving_identity_creator
from handle_resolver.main import app
from handle_resolver.resolver import HandleResolver


async def run() -> int:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://registry.local") as http:
        client = AliasClient("http://registry.local", client=http)
        create = reserving_identity_creator(client, public_key=secrets.token_hex(32))
        resolver = HandleResolver(client, create, debounce_seconds=0.05)
        resolver.add_listener(lambda snap: print(f"  {snap.status.value:<9} {snap.message() or ''}"))

        for text in ["A", "Al", "@admin", "smoke", "smoke_te", "smoke_test"]:
            print(f"> {text!r}")
            resolver.on_input_changed(text)
        await asyncio.sleep(0.3)

        if resolver.status.value != "available":
            print("expected 'available', got", resolver.status.value)
            return 1

        await resolver.commit()
        print("identity_created:", resolver.identity_created)

        # A second resolver now sees the handle as taken.
        other = HandleResolver(client, create, debounce_seconds=0.05)
        other.on_input_changed("smoke_test")
        await asyncio.sleep(0.3)
        print("second resolver:", other.status.value, other.reason)
        other.dispose()
        return 0 if other.status.value == "taken" else 1


def main() -> int:
    return asyncio.run(run())


if __name__ == "__main__":
    raise SystemExit(main())
