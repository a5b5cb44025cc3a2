from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

from handle_resolver.errors import HandleTakenError
from handle_resolver.validation import RESERVED_HANDLES, normalize_handle


@dataclass(frozen=True)
class AliasRecord:
    handle: str
    public_key: str
    reserved_at: float


class InMemoryAliasRegistry:
    """Thread-safe in-memory alias registry for local development.

    Stored only in the API process memory (cleared on restart) and not shared
    across instances. Platform-reserved words are never available.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._aliases: Dict[str, AliasRecord] = {}

    def is_available(self, handle: str) -> bool:
        h = normalize_handle(handle)
        if not h or h in RESERVED_HANDLES:
            return False
        with self._lock:
            return h not in self._aliases

    def reserve(self, handle: str, *, public_key: str) -> AliasRecord:
        h = normalize_handle(handle)
        if not h:
            raise ValueError("Handle is required")
        if h in RESERVED_HANDLES:
            raise HandleTakenError(h)
        with self._lock:
            if h in self._aliases:
                raise HandleTakenError(h)
            record = AliasRecord(handle=h, public_key=public_key, reserved_at=time.time())
            self._aliases[h] = record
            return record

    def get(self, handle: str) -> Optional[AliasRecord]:
        h = normalize_handle(handle)
        if not h:
            return None
        with self._lock:
            return self._aliases.get(h)

    def clear(self) -> None:
        with self._lock:
            self._aliases.clear()
