from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class HandleStatus(str, Enum):
    empty = "empty"
    invalid = "invalid"
    checking = "checking"
    available = "available"
    taken = "taken"


class ResolverSnapshot(BaseModel):
    """Point-in-time view of the resolver handed to listeners."""

    model_config = ConfigDict(frozen=True)

    status: HandleStatus = HandleStatus.empty
    reason: Optional[str] = None
    candidate: Optional[str] = None
    pending_query_id: int = 0

    def message(self) -> Optional[str]:
        if self.status == HandleStatus.checking:
            return "Checking availability..."
        if self.status == HandleStatus.available and self.candidate:
            return f"@{self.candidate} is available!"
        return self.reason


class AvailabilityResult(BaseModel):
    handle: Optional[str] = None
    available: StrictBool


class AliasCheckResponse(BaseModel):
    """Envelope returned by GET /aliases?check=<handle>."""

    success: bool = False
    data: Optional[AvailabilityResult] = None
    error: Optional[str] = None
    message: Optional[str] = None


class ReserveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    public_key: str = Field(..., min_length=1, alias="publicKey")
    signature: str = Field(default="")


class ReservationResult(BaseModel):
    handle: str
    reserved: bool = True
    message: Optional[str] = None


class AliasReserveResponse(BaseModel):
    """Envelope returned by POST /aliases/<handle>/reserve."""

    success: bool = False
    data: Optional[ReservationResult] = None
    error: Optional[str] = None
    message: Optional[str] = None
