import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from hit_counter.dependencies import get_hit_service
from hit_counter.exceptions import HitValidationError, StorageOperationError
from hit_counter.schemas.hit import ErrorResponse, HitCreate, HitLoggedResponse
from hit_counter.services.hit_service import HitService

router = APIRouter(prefix="/api", tags=["hit-logger"])
log = structlog.get_logger()


@router.post("/log-hit", response_model=HitLoggedResponse)
async def log_hit(
    payload: HitCreate,
    hit_service: HitService = Depends(get_hit_service)
):
    """
    Record one hit.

    400 when the timestamp is missing (nothing is stored),
    500 when the storage write fails.
    """
    try:
        await hit_service.log_hit(payload)
    except HitValidationError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(message=str(e)).to_content()
        )
    except StorageOperationError:
        log.exception("log_hit_failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(message="Failed to log hit").to_content()
        )

    return HitLoggedResponse()
