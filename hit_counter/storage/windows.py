"""
Time windows for hit statistics.

All backends bucket hits against the same three boundaries:
- today: midnight of the current calendar day (local time)
- week:  now minus 7 days (rolling)
- month: now minus 30 days (rolling)

A hit counts toward a window iff its timestamp >= the boundary, so the
windows are inclusive and nested: today ⊆ week ⊆ month ⊆ total.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Iterable, Optional

from hit_counter.schemas.hit import HitStats

WEEK = timedelta(days=7)
MONTH = timedelta(days=30)


@dataclass(frozen=True)
class StatsWindows:
    """Window boundaries evaluated once per stats query (aware UTC)"""

    now: datetime
    today: datetime
    week: datetime
    month: datetime

    @classmethod
    def at(cls, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> "StatsWindows":
        """
        Compute boundaries relative to `now`.

        Args:
            now: Reference instant (default: current time). Naive values are UTC.
            tz: Zone whose midnight starts "today" (default: server local time)
        """
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        local_now = now.astimezone(tz) if tz is not None else now.astimezone()
        midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)

        return cls(
            now=now.astimezone(timezone.utc),
            today=midnight.astimezone(timezone.utc),
            week=(now - WEEK).astimezone(timezone.utc),
            month=(now - MONTH).astimezone(timezone.utc),
        )

    def tally(self, timestamps: Iterable[datetime]) -> HitStats:
        """Count timestamps per window on the client side"""
        stats = HitStats()
        for ts in timestamps:
            stats.total_hits += 1
            if ts >= self.today:
                stats.hits_today += 1
            if ts >= self.week:
                stats.hits_this_week += 1
            if ts >= self.month:
                stats.hits_this_month += 1
        return stats
