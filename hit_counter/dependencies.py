"""
FastAPI dependencies for dependency injection.

The storage backend is selected once in the app lifespan and kept on
app.state; these providers hand it to routes instead of routes reaching
for a module-level global.

Pattern: Dependency Injection
- Routes never know which backend is active
- Tests swap the storage through app.dependency_overrides
"""

from fastapi import Depends, Request

from hit_counter.config import Settings
from hit_counter.services.hit_service import HitService
from hit_counter.storage.strategies import HitStorageStrategy


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_hit_storage(request: Request) -> HitStorageStrategy:
    """Process-wide storage chosen at startup"""
    return request.app.state.storage


def get_hit_service(
    storage: HitStorageStrategy = Depends(get_hit_storage),
    settings: Settings = Depends(get_settings)
) -> HitService:
    """Get HitService with its storage injected"""
    return HitService(
        storage=storage,
        recent_limit=settings.recent_hits_limit,
        stats_timezone=settings.stats_timezone,
    )
