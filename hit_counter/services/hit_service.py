from datetime import datetime
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

import structlog

from hit_counter.exceptions import HitValidationError
from hit_counter.schemas.hit import UNKNOWN, HitCreate, HitRecord, HitStats
from hit_counter.storage.strategies import HitStorageStrategy
from hit_counter.storage.windows import StatsWindows

log = structlog.get_logger()


class HitService:
    """
    Hit service with the storage strategy injected.

    Used by both processes: the hit-logger calls log_hit, the hit-counter
    calls get_hits and get_stats. Storage errors are not caught here, they
    propagate to the route.
    """

    def __init__(
        self,
        storage: HitStorageStrategy,
        recent_limit: int = 10,
        stats_timezone: Optional[str] = None
    ):
        """
        Initialize hit service with dependencies.

        Args:
            storage: Active storage backend for this process
            recent_limit: Size of the recent hits list
            stats_timezone: IANA zone whose midnight starts "today"
                            (None: server local time)
        """
        self.storage = storage
        self.recent_limit = recent_limit
        self.stats_tz = ZoneInfo(stats_timezone) if stats_timezone else None

    async def log_hit(self, payload: HitCreate) -> HitRecord:
        """
        Validate and store a hit.

        Raises:
            HitValidationError: if the timestamp is missing
            StorageOperationError: if the backend write fails
        """
        if payload.timestamp is None:
            raise HitValidationError("Timestamp is required")

        record = HitRecord(
            timestamp=payload.timestamp,
            user_agent=payload.user_agent or UNKNOWN,
            client_address=payload.client_address or UNKNOWN,
        )
        stored = await self.storage.append(record)

        log.info("hit_logged", id=stored.id, database=self.storage.kind,
                 timestamp=stored.timestamp.isoformat())
        return stored

    async def get_hits(self) -> Tuple[int, List[HitRecord]]:
        """Total count and the most recent hits, newest first"""
        count = await self.storage.count()
        recent = await self.storage.list_recent(self.recent_limit)
        return count, recent

    async def get_stats(self, now: Optional[datetime] = None) -> HitStats:
        """Total and windowed hit counts as of `now` (default: current time)"""
        windows = StatsWindows.at(now, tz=self.stats_tz)
        return await self.storage.stats(windows)
