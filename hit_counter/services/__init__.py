from .hit_service import HitService

__all__ = ["HitService"]
