from .hit import (
    UNKNOWN,
    ErrorResponse,
    HealthResponse,
    HitCreate,
    HitLoggedResponse,
    HitRecord,
    HitsResponse,
    HitStats,
    StatsResponse,
)

__all__ = [
    "UNKNOWN",
    "ErrorResponse",
    "HealthResponse",
    "HitCreate",
    "HitLoggedResponse",
    "HitRecord",
    "HitsResponse",
    "HitStats",
    "StatsResponse",
]
