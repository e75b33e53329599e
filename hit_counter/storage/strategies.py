"""
Hit storage strategies using Strategy Pattern.

Allows switching between storage models without touching the services:
- InMemory: process-local fallback
- Document: schemaless JSON documents in a Redis hash
- Relational: rows in a SQL table via SQLAlchemy
"""

from abc import ABC, abstractmethod
from datetime import timezone
from typing import List
import asyncio
import uuid

import redis
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy import case, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from hit_counter.database import Base
from hit_counter.exceptions import StorageOperationError
from hit_counter.models.hit import Hit
from hit_counter.schemas.hit import HitRecord, HitStats
from hit_counter.storage.windows import StatsWindows


class HitStorageStrategy(ABC):
    """
    Abstract base class for hit storage strategies.

    Records are immutable and append-only, so the interface has no update
    or delete. list_recent, count and stats have client-side defaults
    built on list_all; backends that can push them down to the server
    override them.

    All methods are async because storage operations involve I/O.
    """

    kind: str = ""

    @abstractmethod
    async def append(self, record: HitRecord) -> HitRecord:
        """
        Store a single hit.

        Args:
            record: HitRecord without an id

        Returns:
            The stored record, carrying its backend-assigned id

        Raises:
            StorageOperationError: if the backend call fails
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[HitRecord]:
        """Every stored hit, in no particular order"""
        pass

    async def list_recent(self, limit: int = 10) -> List[HitRecord]:
        """The `limit` most recent hits, newest first"""
        hits = await self.list_all()
        hits.sort(key=lambda hit: hit.timestamp, reverse=True)
        return hits[:limit]

    async def count(self) -> int:
        """Total number of stored hits"""
        return len(await self.list_all())

    async def stats(self, windows: StatsWindows) -> HitStats:
        """Hit counts for the total and each time window"""
        hits = await self.list_all()
        return windows.tally(hit.timestamp for hit in hits)

    async def close(self) -> None:
        """Release client resources at shutdown"""
        return None


class InMemoryHitStorage(HitStorageStrategy):
    """
    In-memory hit storage using a Python list.

    Pros:
    - No external dependencies
    - Never fails

    Cons:
    - Not shared: the hit-logger and hit-counter processes each get their
      own list, so counts read by one never include hits written to the other
    - Lost on restart

    Used when no durable store is configured or reachable at startup.
    """

    kind = "in-memory"

    def __init__(self):
        """Initialize empty hit list"""
        self._hits: List[HitRecord] = []
        self._lock = asyncio.Lock()

    async def append(self, record: HitRecord) -> HitRecord:
        """Append under the lock so ids stay sequential and unique"""
        async with self._lock:
            stored = record.model_copy(update={"id": len(self._hits) + 1})
            self._hits.append(stored)
        return stored

    async def list_all(self) -> List[HitRecord]:
        """Snapshot of the list (completed appends only)"""
        return list(self._hits)

    async def count(self) -> int:
        return len(self._hits)


class DocumentHitStorage(HitStorageStrategy):
    """
    Document storage on Redis.

    The container is one Redis hash; each hit is a JSON document stored
    under its own id, which doubles as the partition key.

    Pros:
    - Schemaless (documents can grow new fields)
    - Cheap appends

    Cons:
    - No server-side filtering: list_all and stats fetch the whole
      container, so cost grows linearly with the number of hits

    Redis calls are blocking, so they run in the threadpool.
    """

    kind = "document"

    def __init__(self, redis_client, container: str = "HitCounterDB:Hits"):
        """
        Initialize document storage.

        Args:
            redis_client: Connected Redis client instance (redis.Redis)
            container: Key of the hash holding the hit documents
        """
        self.redis = redis_client
        self.container = container

    @staticmethod
    def _new_id() -> str:
        return f"hit_{uuid.uuid4().hex}"

    async def append(self, record: HitRecord) -> HitRecord:
        """Write the full document under a fresh UUID-based id"""
        stored = record.model_copy(update={"id": self._new_id()})
        document = stored.model_dump_json(by_alias=True)
        try:
            await run_in_threadpool(self.redis.hset, self.container, stored.id, document)
        except redis.RedisError as e:
            raise StorageOperationError(f"Document store write failed: {e}") from e
        return stored

    async def list_all(self) -> List[HitRecord]:
        """Fetch every document in the container (HGETALL)"""
        try:
            documents = await run_in_threadpool(self.redis.hgetall, self.container)
        except redis.RedisError as e:
            raise StorageOperationError(f"Document store read failed: {e}") from e
        try:
            return [HitRecord.model_validate_json(doc) for doc in documents.values()]
        except ValidationError as e:
            raise StorageOperationError(f"Malformed document in {self.container}: {e}") from e

    async def count(self) -> int:
        """Number of documents (HLEN), same as len(list_all())"""
        try:
            return await run_in_threadpool(self.redis.hlen, self.container)
        except redis.RedisError as e:
            raise StorageOperationError(f"Document store count failed: {e}") from e

    async def close(self) -> None:
        self.redis.close()


class RelationalHitStorage(HitStorageStrategy):
    """
    Relational storage via SQLAlchemy.

    Pros:
    - Server-side COUNT, ORDER BY ... LIMIT and conditional aggregation,
      so reads never pull the whole table
    - Database-generated ids

    Cons:
    - Needs a schema (created on startup if absent)

    Any SQLAlchemy URL works: SQLite for development, PostgreSQL or
    SQL Server (mssql+pyodbc) in production.
    """

    kind = "relational"

    def __init__(self, engine):
        """
        Initialize relational storage.

        Args:
            engine: SQLAlchemy Engine bound to the target database
        """
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def connect(self) -> "RelationalHitStorage":
        """Check connectivity and create the hits table if it doesn't exist"""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        Base.metadata.create_all(bind=self.engine)
        return self

    @staticmethod
    def _to_record(row: Hit) -> HitRecord:
        return HitRecord(
            id=row.id,
            timestamp=row.timestamp.replace(tzinfo=timezone.utc),
            user_agent=row.user_agent,
            client_address=row.client_address,
        )

    @staticmethod
    def _naive_utc(value):
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def _insert(self, record: HitRecord) -> HitRecord:
        with self.session_factory() as session:
            row = Hit(
                timestamp=self._naive_utc(record.timestamp),
                user_agent=record.user_agent,
                client_address=record.client_address,
            )
            session.add(row)
            session.commit()
            return self._to_record(row)

    def _select_all(self) -> List[HitRecord]:
        with self.session_factory() as session:
            rows = session.scalars(select(Hit).order_by(Hit.id)).all()
            return [self._to_record(row) for row in rows]

    def _select_recent(self, limit: int) -> List[HitRecord]:
        with self.session_factory() as session:
            query = (
                select(Hit)
                .order_by(Hit.timestamp.desc(), Hit.id.desc())
                .limit(limit)
            )
            return [self._to_record(row) for row in session.scalars(query).all()]

    def _select_count(self) -> int:
        with self.session_factory() as session:
            return session.scalar(select(func.count()).select_from(Hit))

    def _select_stats(self, windows: StatsWindows) -> HitStats:
        def since(boundary):
            return func.coalesce(
                func.sum(case((Hit.timestamp >= self._naive_utc(boundary), 1), else_=0)),
                0,
            )

        query = select(
            func.count(Hit.id),
            since(windows.today),
            since(windows.week),
            since(windows.month),
        )
        with self.session_factory() as session:
            total, today, week, month = session.execute(query).one()
        # SUM comes back as Decimal on some dialects
        return HitStats(
            total_hits=int(total),
            hits_today=int(today),
            hits_this_week=int(week),
            hits_this_month=int(month),
        )

    async def _run(self, fn, *args):
        """Run a blocking query in the threadpool, wrapping driver errors"""
        try:
            return await run_in_threadpool(fn, *args)
        except SQLAlchemyError as e:
            raise StorageOperationError(f"Relational store query failed: {e}") from e

    async def append(self, record: HitRecord) -> HitRecord:
        """Parameterized INSERT; the database assigns the id"""
        return await self._run(self._insert, record)

    async def list_all(self) -> List[HitRecord]:
        return await self._run(self._select_all)

    async def list_recent(self, limit: int = 10) -> List[HitRecord]:
        """ORDER BY timestamp DESC LIMIT n"""
        return await self._run(self._select_recent, limit)

    async def count(self) -> int:
        """SELECT COUNT(*) on the server"""
        return await self._run(self._select_count)

    async def stats(self, windows: StatsWindows) -> HitStats:
        """All four counts in one round trip using SUM(CASE ...)"""
        return await self._run(self._select_stats, windows)

    async def close(self) -> None:
        self.engine.dispose()
