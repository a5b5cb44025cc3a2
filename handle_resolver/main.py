"""Development alias registry.

Serves the two endpoints the onboarding flow talks to, backed by an in-memory
store. Run with: uvicorn handle_resolver.main:app --reload
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Body, Depends, FastAPI, Query
from fastapi.responses import JSONResponse

from handle_resolver import deps
from handle_resolver.errors import HandleTakenError
from handle_resolver.logging_config import configure_logging
from handle_resolver.models import ReserveRequest
from handle_resolver.registry_store import InMemoryAliasRegistry
from handle_resolver.settings import Settings
from handle_resolver.validation import normalize_handle, validate_handle

configure_logging(deps.get_settings().log_level)

logger = logging.getLogger("handle_resolver.registry")

APP_VERSION = "1.0.0"

app = FastAPI(title="Alias Registry (dev)", version=APP_VERSION)


def _error(status_code: int, error: str, message: Optional[str] = None) -> JSONResponse:
    body = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    return JSONResponse(body, status_code=status_code)


@app.get("/aliases")
def check_alias(
    check: Optional[str] = Query(default=None),
    registry: InMemoryAliasRegistry = Depends(deps.get_registry),
):
    handle = normalize_handle(check)
    if not handle:
        return _error(400, "Missing check query parameter")

    reason = validate_handle(handle)
    if reason is not None and reason != "reserved":
        return _error(400, "Invalid handle format", reason)

    available = registry.is_available(handle)
    return JSONResponse({"success": True, "data": {"handle": handle, "available": available}})


@app.post("/aliases/{handle}/reserve")
def reserve_alias(
    handle: str,
    payload: ReserveRequest = Body(...),
    registry: InMemoryAliasRegistry = Depends(deps.get_registry),
):
    clean = normalize_handle(handle)
    reason = validate_handle(clean)
    if reason is not None and reason != "reserved":
        return _error(400, "Invalid handle format", reason)

    # Signatures are accepted as-is; this registry does not verify them.
    try:
        record = registry.reserve(clean, public_key=payload.public_key)
    except HandleTakenError as e:
        return _error(409, "Handle already taken", str(e))

    logger.info("Handle reserved", extra={"handle": record.handle})
    return JSONResponse(
        {
            "success": True,
            "data": {"handle": record.handle, "reserved": True, "message": f"@{record.handle} reserved"},
        }
    )


@app.get("/healthz")
def healthz():
    return JSONResponse({"ok": True, "service": "alias-registry", "version": APP_VERSION})


@app.get("/configz")
def configz(settings: Settings = Depends(deps.get_settings_dep)):
    return JSONResponse(
        {
            "gns_api_base_url": settings.gns_api_base_url,
            "handle_debounce_ms": settings.handle_debounce_ms,
            "log_level": settings.log_level,
        }
    )
