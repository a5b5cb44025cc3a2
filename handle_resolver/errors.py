from __future__ import annotations

from typing import Optional


class HandleResolverError(Exception):
    """Base class for errors raised by this package."""


class RegistryError(HandleResolverError):
    """The alias registry could not be reached or refused the request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class AvailabilityCheckError(RegistryError):
    """No usable availability answer. The resolver fails open on this."""


class ReservationError(RegistryError):
    pass


class HandleTakenError(HandleResolverError):
    def __init__(self, handle: str):
        super().__init__(f"@{handle} is already taken")
        self.handle = handle


class CommitError(HandleResolverError):
    """Identity creation failed for a confirmed handle; the commit may be retried."""

    def __init__(self, handle: str, message: str):
        super().__init__(message)
        self.handle = handle
