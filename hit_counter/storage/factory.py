"""
Factory for creating hit storage instances.

Selection runs once per process, during startup, and falls back to
in-memory storage when the durable store can't be reached.
"""

from enum import Enum

import redis
import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool

from hit_counter.config import Settings
from hit_counter.exceptions import StorageConnectError
from .strategies import (
    DocumentHitStorage,
    HitStorageStrategy,
    InMemoryHitStorage,
    RelationalHitStorage,
)

log = structlog.get_logger()


class HitStorageBackend(Enum):
    """Available hit storage backends"""
    DOCUMENT = "document"
    RELATIONAL = "relational"
    MEMORY = "in-memory"

    @classmethod
    def _missing_(cls, value):
        """Case-insensitive lookup, accepting "cosmos", "sql" and "memory" too"""
        if not isinstance(value, str):
            return None
        name = value.strip().lower()
        for member in cls:
            if member.value == name:
                return member
        aliases = {
            "cosmos": cls.DOCUMENT,
            "sql": cls.RELATIONAL,
            "memory": cls.MEMORY,
        }
        return aliases.get(name)


class HitStorageFactory:
    """
    Backend selector.

    Unlike a cached singleton factory, create() builds a new instance on
    every call; the app calls it once in its lifespan and keeps the result
    on app.state.
    """

    @classmethod
    def create(cls, settings: Settings) -> HitStorageStrategy:
        """
        Select and connect the hit storage for this process.

        Never raises: a missing connection string, an unrecognized db_type
        and a failed connection all end in InMemoryHitStorage.

        Args:
            settings: Service settings (db_type, connection_string)

        Returns:
            Connected durable storage, or InMemoryHitStorage when none is
            configured or the connection fails
        """
        if not settings.db_type:
            log.info("storage_selected", database=InMemoryHitStorage.kind,
                     reason="no backend configured")
            return InMemoryHitStorage()

        if not settings.connection_string:
            log.info("storage_selected", database=InMemoryHitStorage.kind,
                     requested=settings.db_type, reason="no connection string provided")
            return InMemoryHitStorage()

        try:
            backend = HitStorageBackend(settings.db_type)
        except ValueError:
            log.warning("storage_unknown_backend", requested=settings.db_type,
                        database=InMemoryHitStorage.kind)
            return InMemoryHitStorage()

        if backend == HitStorageBackend.MEMORY:
            log.info("storage_selected", database=InMemoryHitStorage.kind)
            return InMemoryHitStorage()

        try:
            storage = cls._connect(backend, settings)
        except StorageConnectError as e:
            log.error("storage_connect_failed", requested=backend.value, error=str(e))
            log.warning("storage_fallback", database=InMemoryHitStorage.kind)
            return InMemoryHitStorage()

        log.info("storage_connected", database=storage.kind)
        return storage

    @staticmethod
    def _create_engine(connection_string: str):
        """
        SQLAlchemy engine for the connection string.

        An in-memory SQLite database exists per connection, so it gets a
        single shared connection (StaticPool) that threadpool workers can use.
        """
        url = make_url(connection_string)
        if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
            return create_engine(
                url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        return create_engine(url, pool_pre_ping=True)

    @staticmethod
    def _connect(backend: HitStorageBackend, settings: Settings) -> HitStorageStrategy:
        """Open the durable store, raising StorageConnectError on any failure"""
        if backend == HitStorageBackend.DOCUMENT:
            try:
                redis_client = redis.from_url(
                    settings.connection_string,
                    decode_responses=False,
                    socket_connect_timeout=2,
                )
                # Test connection immediately
                redis_client.ping()
            except Exception as e:
                raise StorageConnectError(f"Redis connection failed: {e}") from e
            return DocumentHitStorage(redis_client, container=settings.document_container)

        if backend == HitStorageBackend.RELATIONAL:
            engine = None
            try:
                engine = HitStorageFactory._create_engine(settings.connection_string)
                return RelationalHitStorage(engine).connect()
            except Exception as e:
                if engine is not None:
                    engine.dispose()
                raise StorageConnectError(f"Database connection failed: {e}") from e

        raise ValueError(f"Unknown storage backend: {backend}")
