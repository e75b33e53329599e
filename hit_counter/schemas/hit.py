from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Union
from datetime import datetime, timezone

UNKNOWN = "Unknown"


def to_utc(value: datetime) -> datetime:
    """Naive timestamps are taken as UTC, aware ones converted to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    try:
        return value.astimezone(timezone.utc)
    except OverflowError:
        # e.g. 0001-01-01T00:00:00+01:00 has no UTC representation
        raise ValueError("timestamp out of range")


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase names on the wire"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HitRecord(CamelModel):
    """
    One recorded hit.

    The id is assigned by the storage backend on append and is opaque to
    everything else: sequential ints for in-memory and relational storage,
    strings for the document store.
    """

    id: Optional[Union[int, str]] = None
    timestamp: datetime
    user_agent: str = UNKNOWN
    client_address: str = UNKNOWN

    @field_validator("timestamp")
    @classmethod
    def normalize_to_utc(cls, value: datetime) -> datetime:
        return to_utc(value)


class HitCreate(BaseModel):
    """
    Body of POST /api/log-hit.

    timestamp is optional here on purpose: a missing timestamp is reported
    by HitService as a validation error with a 400, not a schema 422.
    """

    timestamp: Optional[datetime] = None
    user_agent: Optional[str] = Field(
        None, validation_alias=AliasChoices("userAgent", "user_agent")
    )
    client_address: Optional[str] = Field(
        None, validation_alias=AliasChoices("clientAddress", "client_address", "ip")
    )

    @field_validator("timestamp")
    @classmethod
    def normalize_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Out-of-range instants fail here, as a request validation error"""
        return to_utc(value) if value is not None else None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "timestamp": "2024-01-01T10:30:00Z",
                "userAgent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
                "clientAddress": "192.168.1.1",
            }
        }
    )


class HitStats(CamelModel):
    total_hits: int = 0
    hits_today: int = 0
    hits_this_week: int = 0
    hits_this_month: int = 0


class HitLoggedResponse(CamelModel):
    success: bool = True
    message: str = "Hit logged successfully"


class HitsResponse(CamelModel):
    success: bool = True
    count: int
    recent_hits: List[HitRecord]
    timestamp: datetime


class StatsResponse(CamelModel):
    success: bool = True
    stats: HitStats


class HealthResponse(CamelModel):
    status: str = "healthy"
    service: str
    database: str
    timestamp: datetime


class ErrorResponse(CamelModel):
    success: bool = False
    message: str
    count: Optional[int] = None

    def to_content(self) -> dict:
        """JSON body for a JSONResponse, without unset optional fields"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
