from __future__ import annotations

from typing import Awaitable, Callable, Optional

from handle_resolver.alias_client import AliasClient
from handle_resolver.registry_store import InMemoryAliasRegistry
from handle_resolver.resolver import HandleResolver, IdentityCreator
from handle_resolver.settings import Settings, get_settings

# Single registry per process for the development server. Tests reset it with clear().
_REGISTRY = InMemoryAliasRegistry()


def get_settings_dep() -> Settings:
    """FastAPI dependency for settings.

    Delegates to handle_resolver.settings.get_settings (canonical constructor).
    """
    return get_settings()


def get_registry() -> InMemoryAliasRegistry:
    return _REGISTRY


def get_alias_client(settings: Optional[Settings] = None) -> AliasClient:
    s = settings or get_settings()
    return AliasClient(s.gns_api_base_url, timeout_seconds=s.gns_api_timeout_seconds)


def reserving_identity_creator(
    client: AliasClient, *, public_key: str, signature: str = ""
) -> Callable[[str], Awaitable[None]]:
    """Identity creation step that reserves the confirmed handle for `public_key`.

    ReservationError propagates so the resolver can surface it as a CommitError.
    """

    async def _create(handle: str) -> None:
        await client.reserve_handle(handle, public_key=public_key, signature=signature)

    return _create


def build_resolver(
    create_identity: IdentityCreator,
    *,
    alias_client: Optional[AliasClient] = None,
    settings: Optional[Settings] = None,
) -> HandleResolver:
    s = settings or get_settings()
    client = alias_client or get_alias_client(s)
    return HandleResolver(client, create_identity, debounce_seconds=s.debounce_seconds)
