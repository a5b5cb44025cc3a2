from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Optional

from handle_resolver.errors import CommitError
from handle_resolver.models import HandleStatus, ResolverSnapshot
from handle_resolver.validation import normalize_handle, validate_handle

logger = logging.getLogger("handle_resolver.resolver")

DEFAULT_DEBOUNCE_SECONDS = 0.5

AvailabilityChecker = Callable[[str], Awaitable[Any]]
IdentityCreator = Callable[[str], Awaitable[Any]]
Listener = Callable[[ResolverSnapshot], None]


def interpret_availability(result: Any) -> Optional[bool]:
    """Return True/False for a clean availability answer, None for anything else.

    Clean answers are a bare bool, a mapping with a boolean ``available`` key, or
    an object with a boolean ``available`` attribute (e.g. AvailabilityResult).
    Truthy non-bools such as ``1`` or ``"true"`` are not clean.
    """
    if isinstance(result, bool):
        return result
    if isinstance(result, Mapping):
        value = result.get("available")
    else:
        value = getattr(result, "available", None)
    return value if isinstance(value, bool) else None


class HandleResolver:
    """Debounced validation/availability state machine for choosing a handle.

    All methods must be called from the event loop that runs the availability
    checks. ``on_input_changed`` is synchronous and updates state immediately;
    only the checking -> available/taken step happens later, after the
    debounce delay and the remote answer.

    Every input change bumps ``pending_query_id``. A remote answer is applied
    only when the token captured at input time still equals it, so answers for
    superseded input are dropped no matter when they arrive. Remote calls are
    never cancelled.
    """

    def __init__(
        self,
        check_availability: AvailabilityChecker,
        create_identity: IdentityCreator,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self._check = check_availability
        self._create = create_identity
        self._debounce = max(0.0, float(debounce_seconds))

        self._status = HandleStatus.empty
        self._reason: Optional[str] = None
        self._candidate: Optional[str] = None
        self._pending_query_id = 0

        self._timer: Optional[asyncio.TimerHandle] = None
        self._inflight: set[asyncio.Task] = set()
        self._listeners: list[Listener] = []

        self._disposed = False
        self._committing = False
        self._identity_created = False

    @property
    def status(self) -> HandleStatus:
        return self._status

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    @property
    def candidate(self) -> Optional[str]:
        return self._candidate

    @property
    def pending_query_id(self) -> int:
        return self._pending_query_id

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def committing(self) -> bool:
        return self._committing

    @property
    def identity_created(self) -> bool:
        return self._identity_created

    def snapshot(self) -> ResolverSnapshot:
        return ResolverSnapshot(
            status=self._status,
            reason=self._reason,
            candidate=self._candidate,
            pending_query_id=self._pending_query_id,
        )

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(snapshot)`` after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def on_input_changed(self, text: str) -> None:
        if self._disposed:
            return
        if self._committing:
            logger.debug("Input change ignored while commit is in flight")
            return

        handle = normalize_handle(text)

        self._cancel_timer()
        self._pending_query_id += 1

        if not handle:
            self._set_state(HandleStatus.empty, None, None)
            return

        reason = validate_handle(handle)
        if reason is not None:
            self._set_state(HandleStatus.invalid, reason, handle)
            return

        token = self._pending_query_id
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._debounce, self._on_debounce_fired, handle, token)
        logger.debug("Availability check scheduled", extra={"handle": handle, "token": token})
        self._set_state(HandleStatus.checking, None, handle)

    async def check_availability(self, candidate: str, token: int) -> None:
        if self._disposed or token != self._pending_query_id:
            return

        try:
            result = await self._check(candidate)
        except Exception as e:
            available = None
            logger.warning(
                "Availability check failed; treating handle as available",
                extra={"handle": candidate, "token": token, "detail": f"{type(e).__name__}: {e}"},
            )
        else:
            available = interpret_availability(result)
            if available is None:
                logger.warning(
                    "Availability check returned a malformed answer; treating handle as available",
                    extra={"handle": candidate, "token": token, "response": repr(result)[:200]},
                )

        if self._disposed:
            return
        if token != self._pending_query_id:
            logger.debug(
                "Dropping stale availability answer",
                extra={"handle": candidate, "token": token, "current_token": self._pending_query_id},
            )
            return

        if available is False:
            self._set_state(HandleStatus.taken, f"@{candidate} is already taken", candidate)
        else:
            # Fail open: the registry is the final authority at reservation time.
            self._set_state(HandleStatus.available, None, candidate)

    async def commit(self) -> None:
        """Create the identity for the confirmed handle.

        No-op unless the status is ``available``. Raises CommitError when identity
        creation fails; the status stays ``available`` so the commit can be retried.
        Must not be awaited concurrently with itself; a second call while one is in
        flight does nothing.
        """
        if self._disposed or self._committing:
            return
        if self._status != HandleStatus.available or self._candidate is None:
            return

        handle = self._candidate
        self._committing = True
        try:
            await self._create(handle)
        except Exception as e:
            logger.warning("Identity creation failed", extra={"handle": handle, "detail": str(e)})
            raise CommitError(handle, f"Identity creation failed for @{handle}: {type(e).__name__}: {e}") from e
        finally:
            self._committing = False

        self._identity_created = True
        logger.info("Identity created", extra={"handle": handle})
        self.dispose()

    def dispose(self) -> None:
        """Tear down: cancel the debounce timer and ignore every later event."""
        if self._disposed:
            return
        self._disposed = True
        self._cancel_timer()
        self._listeners.clear()

    def _on_debounce_fired(self, handle: str, token: int) -> None:
        self._timer = None
        if self._disposed or token != self._pending_query_id:
            return
        task = asyncio.get_running_loop().create_task(self.check_availability(handle, token))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _set_state(self, status: HandleStatus, reason: Optional[str], candidate: Optional[str]) -> None:
        self._status = status
        self._reason = reason
        self._candidate = candidate

        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("Resolver listener raised", extra={"status": status.value})
