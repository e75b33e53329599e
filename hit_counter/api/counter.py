from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from hit_counter.dependencies import get_hit_service
from hit_counter.exceptions import StorageOperationError
from hit_counter.schemas.hit import ErrorResponse, HitsResponse, StatsResponse
from hit_counter.services.hit_service import HitService

router = APIRouter(prefix="/api/hits", tags=["hit-counter"])
log = structlog.get_logger()


@router.get("", response_model=HitsResponse)
async def get_hits(hit_service: HitService = Depends(get_hit_service)):
    """Total hit count plus the most recent hits, newest first"""
    try:
        count, recent = await hit_service.get_hits()
    except StorageOperationError:
        log.exception("fetch_hits_failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(message="Failed to fetch hits", count=0).to_content()
        )

    return HitsResponse(
        count=count,
        recent_hits=recent,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/stats", response_model=StatsResponse)
async def get_hit_stats(hit_service: HitService = Depends(get_hit_service)):
    """Total hits and hits for today, the last 7 days and the last 30 days"""
    try:
        stats = await hit_service.get_stats()
    except StorageOperationError:
        log.exception("fetch_hit_stats_failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(message="Failed to fetch hit statistics").to_content()
        )

    return StatsResponse(stats=stats)
