from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from hit_counter.dependencies import get_hit_storage
from hit_counter.schemas.hit import HealthResponse
from hit_counter.storage.strategies import HitStorageStrategy

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(
    request: Request,
    storage: HitStorageStrategy = Depends(get_hit_storage)
):
    """Health check endpoint, reporting the active storage backend"""
    return HealthResponse(
        service=request.app.state.service_name,
        database=storage.kind,
        timestamp=datetime.now(timezone.utc),
    )
