"""Redis-backed TaskStore implementation."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional

import redis.asyncio as aioredis

from .base import Task, TaskStatus, TaskStore

logger = logging.getLogger(__name__)


class RedisTaskStore(TaskStore):
    """
    Redis-backed task store.

    Key layout (under a configurable prefix, "task" by default):
    - `<prefix>:<id>`: the task as a JSON document.
    - `<prefix>:next_id`: INCR counter, so ids are never reused.
    - `<prefix>:ids`: sorted set of ids scored by id, for insertion order.
    - `<prefix>:titles`: hash of title -> id, for exact uniqueness lookups.
    - `<prefix>:status:<STATUS>`: set of ids per status, for counts and filters.

    Supports both a single `REDIS_URL` and individual host/port/password environment variables.
    """

    def __init__(self, redis_url: Optional[str] = None, prefix: Optional[str] = None):
        """
        Configure the Redis connection URL and key prefix.

        Args:
            redis_url: Optional Redis URL. Falls back to env vars when omitted.
            prefix: Key namespace. Falls back to TASK_STORE_REDIS_PREFIX, then "task".
        """
        redis_url = redis_url or os.getenv("REDIS_URL")

        # If REDIS_URL not set, try individual parameters
        if not redis_url:
            host = os.getenv("REDIS_HOST")
            port = os.getenv("REDIS_PORT")
            password = os.getenv("REDIS_PASSWORD")

            if host:
                port = port or "6379"
                if password:
                    redis_url = f"redis://:{password}@{host}:{port}"
                else:
                    redis_url = f"redis://{host}:{port}"
            else:
                raise ValueError(
                    "Redis configuration is missing. Set REDIS_URL or a combination of "
                    "(REDIS_HOST, REDIS_PORT and REDIS_PASSWORD)"
                )

        self.redis_url = redis_url
        self.redis: Optional[aioredis.Redis] = None
        self.prefix = prefix or os.getenv("TASK_STORE_REDIS_PREFIX") or "task"

    async def _get_redis(self) -> aioredis.Redis:
        """Get or lazily create the shared Redis connection with basic connectivity checks."""
        if self.redis is None:
            try:
                self.redis = aioredis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    max_connections=10,
                )
                await self.redis.ping()
            except Exception as exc:  # pragma: no cover - network errors are runtime concerns
                self.redis = None
                raise ConnectionError(
                    f"Failed to connect to Redis at {self.redis_url}. "
                    f"Error: {str(exc)}. "
                    "Make sure Redis is running or REDIS_URL "
                    "(or REDIS_HOST/REDIS_PORT/REDIS_PASSWORD) is set correctly."
                ) from exc
            logger.info("Redis task store connected prefix=%s", self.prefix)
        return self.redis

    def _task_key(self, task_id: int) -> str:
        return f"{self.prefix}:{task_id}"

    def _status_key(self, status: TaskStatus) -> str:
        return f"{self.prefix}:status:{status.value}"

    @property
    def _ids_key(self) -> str:
        return f"{self.prefix}:ids"

    @property
    def _titles_key(self) -> str:
        return f"{self.prefix}:titles"

    @property
    def _counter_key(self) -> str:
        return f"{self.prefix}:next_id"

    async def save(self, task: Task) -> Task:
        """Write the task document and keep the id, title and status indexes in step."""
        redis = await self._get_redis()
        now = datetime.now(timezone.utc)
        status = task.status or TaskStatus.TODO

        if task.id is None:
            task_id = await redis.incr(self._counter_key)
            stored = Task(
                id=task_id,
                title=task.title,
                description=task.description,
                status=status,
                created_at=now,
                updated_at=now,
            )
            previous = None
        else:
            previous = await self.find_by_id(task.id)
            created_at = previous.created_at if previous else now
            stored = Task(
                id=task.id,
                title=task.title,
                description=task.description,
                status=status,
                created_at=created_at,
                updated_at=max(now, created_at),
            )

        async with redis.pipeline(transaction=True) as pipe:
            pipe.set(self._task_key(stored.id), json.dumps(self._to_document(stored)))
            pipe.zadd(self._ids_key, {str(stored.id): stored.id})
            if previous is not None:
                if previous.title != stored.title:
                    await self._queue_title_release(pipe, previous.title, stored.id)
                if previous.status != stored.status:
                    pipe.srem(self._status_key(previous.status), stored.id)
            pipe.hset(self._titles_key, stored.title, stored.id)
            pipe.sadd(self._status_key(stored.status), stored.id)
            await pipe.execute()

        return stored

    async def find_by_id(self, task_id: int) -> Optional[Task]:
        redis = await self._get_redis()
        data = await redis.get(self._task_key(task_id))
        if data:
            return self._from_document(json.loads(data))
        return None

    async def exists_by_id(self, task_id: int) -> bool:
        redis = await self._get_redis()
        return bool(await redis.exists(self._task_key(task_id)))

    async def delete_by_id(self, task_id: int) -> None:
        task = await self.find_by_id(task_id)
        if task is None:
            return
        redis = await self._get_redis()
        async with redis.pipeline(transaction=True) as pipe:
            pipe.delete(self._task_key(task_id))
            pipe.zrem(self._ids_key, str(task_id))
            await self._queue_title_release(pipe, task.title, task_id)
            pipe.srem(self._status_key(task.status), task_id)
            await pipe.execute()

    async def find_all(self) -> List[Task]:
        redis = await self._get_redis()
        ids = await redis.zrange(self._ids_key, 0, -1)
        return await self._load_many(ids)

    async def find_by_status_order_by_created_at_desc(
        self, status: TaskStatus
    ) -> List[Task]:
        redis = await self._get_redis()
        ids = await redis.smembers(self._status_key(status))
        tasks = await self._load_many(sorted(ids, key=int))
        tasks.sort(key=lambda task: (task.created_at, task.id), reverse=True)
        return tasks

    async def exists_by_title(self, title: str) -> bool:
        redis = await self._get_redis()
        return bool(await redis.hexists(self._titles_key, title))

    async def count_by_status(self, status: TaskStatus) -> int:
        redis = await self._get_redis()
        return await redis.scard(self._status_key(status))

    async def count(self) -> int:
        redis = await self._get_redis()
        return await redis.zcard(self._ids_key)

    async def search_by_keyword(self, keyword: str) -> List[Task]:
        needle = keyword.lower()
        return [
            task
            for task in await self.find_all()
            if needle in task.title.lower()
            or (task.description is not None and needle in task.description.lower())
        ]

    async def close(self) -> None:
        """Close the shared Redis connection (idempotent)."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None

    async def _queue_title_release(self, pipe, title: str, task_id: int) -> None:
        """Queue removal of the title index entry for a task giving up this title.

        The entry is only touched while it still points at task_id. When another
        task holds the same title it takes the entry over instead.
        """
        redis = await self._get_redis()
        owner = await redis.hget(self._titles_key, title)
        if owner is None or int(owner) != task_id:
            return
        for other in await self.find_all():
            if other.id != task_id and other.title == title:
                pipe.hset(self._titles_key, title, other.id)
                return
        pipe.hdel(self._titles_key, title)

    async def _load_many(self, ids: List[str]) -> List[Task]:
        if not ids:
            return []
        redis = await self._get_redis()
        documents = await redis.mget([self._task_key(int(task_id)) for task_id in ids])
        return [self._from_document(json.loads(doc)) for doc in documents if doc]

    @staticmethod
    def _to_document(task: Task) -> Dict:
        return {
            "id": task.id,
            "title": task.title,
            "description": task.description,
            "status": task.status.value,
            "created_at": task.created_at.isoformat(),
            "updated_at": task.updated_at.isoformat(),
        }

    @staticmethod
    def _from_document(document: Dict) -> Task:
        return Task(
            id=document["id"],
            title=document["title"],
            description=document.get("description"),
            status=TaskStatus(document["status"]),
            created_at=datetime.fromisoformat(document["created_at"]),
            updated_at=datetime.fromisoformat(document["updated_at"]),
        )
