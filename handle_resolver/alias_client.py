from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from handle_resolver.errors import AvailabilityCheckError, ReservationError
from handle_resolver.models import (
    AliasCheckResponse,
    AliasReserveResponse,
    AvailabilityResult,
    ReservationResult,
)
from handle_resolver.validation import normalize_handle

logger = logging.getLogger("handle_resolver.alias_client")


def _response_snippet(response: httpx.Response | None) -> str:
    if response is None:
        return ""
    try:
        return response.text[:500]
    except Exception:
        return ""


class AliasClient:
    """Async client for the alias registry.

    The optional `client` param exists for testing/injection; if omitted, the
    client creates its own AsyncClient and closes it in `aclose()`.
    """

    def __init__(self, base_url: str, *, timeout_seconds: float = 10.0, client: httpx.AsyncClient | None = None):
        self._base_url = (base_url or "").strip().rstrip("/")
        self._timeout = timeout_seconds
        self._client = client
        self._owns_client = client is None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AliasClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def __call__(self, handle: str) -> AvailabilityResult:
        return await self.check_handle(handle)

    async def check_handle(self, handle: str) -> AvailabilityResult:
        """GET /aliases?check=<handle>.

        Raises AvailabilityCheckError for anything that is not a clean
        ``{"success": true, "data": {"available": <bool>}}`` answer.
        """
        clean = normalize_handle(handle)
        try:
            r = await self._http().get("/aliases", params={"check": clean})
            r.raise_for_status()
            payload = r.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code if e.response is not None else None
            logger.warning(
                "Alias registry returned HTTP error",
                extra={"status_code": status, "handle": clean, "response_snippet": _response_snippet(e.response)},
            )
            raise AvailabilityCheckError(
                f"Availability check failed: HTTP {status}", status_code=status, detail=_response_snippet(e.response)
            ) from e
        except httpx.HTTPError as e:
            logger.warning(
                "Availability check failed due to HTTP error",
                extra={"base_url": self._base_url, "handle": clean, "detail": str(e)},
            )
            raise AvailabilityCheckError(f"Availability check failed: {type(e).__name__}", detail=str(e)) from e
        except ValueError as e:
            raise AvailabilityCheckError("Alias registry response was not valid JSON", detail=str(e)) from e

        try:
            envelope = AliasCheckResponse.model_validate(payload)
        except ValidationError as e:
            raise AvailabilityCheckError("Alias registry response has an unexpected shape", detail=str(e)) from e

        if not envelope.success or envelope.data is None:
            raise AvailabilityCheckError(
                envelope.error or "Alias registry did not report availability",
                status_code=r.status_code,
                detail=envelope.message,
            )
        return envelope.data

    async def reserve_handle(self, handle: str, *, public_key: str, signature: str = "") -> ReservationResult:
        """POST /aliases/<handle>/reserve for a freshly created identity."""
        clean = normalize_handle(handle)
        body = {"publicKey": public_key, "signature": signature}
        try:
            r = await self._http().post(f"/aliases/{clean}/reserve", json=body)
        except httpx.HTTPError as e:
            logger.warning(
                "Handle reservation failed due to HTTP error",
                extra={"base_url": self._base_url, "handle": clean, "detail": str(e)},
            )
            raise ReservationError(f"Handle reservation failed: {type(e).__name__}", detail=str(e)) from e

        try:
            envelope = AliasReserveResponse.model_validate(r.json())
        except (ValueError, ValidationError):
            envelope = AliasReserveResponse(success=False, error=f"HTTP {r.status_code}")

        if r.is_error or not envelope.success or envelope.data is None:
            logger.warning(
                "Alias registry refused reservation",
                extra={"status_code": r.status_code, "handle": clean, "response_snippet": _response_snippet(r)},
            )
            raise ReservationError(
                envelope.error or f"Handle reservation failed: HTTP {r.status_code}",
                status_code=r.status_code,
                detail=envelope.message,
            )
        return envelope.data
