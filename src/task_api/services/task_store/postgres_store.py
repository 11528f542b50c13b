"""PostgreSQL-backed TaskStore implementation."""

from __future__ import annotations

import logging
import os
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import asyncpg

from .base import Task, TaskStatus, TaskStore

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _env_int(name: str, default: int) -> int:
    """Ensure that environment variables expected to be integers can
    actually be parsed as integers. If no environment variable is available,
    return a default value."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer.") from exc


def _require_env(name: str, description: str) -> str:
    """
    Confirm that required environment variables are available and
    return an informative message if they aren't.
    """
    value = os.getenv(name)
    if not value:
        raise ValueError(f"{name} must be set for the PostgreSQL task store ({description}).")
    return value


def _validate_identifier(value: str, label: str) -> str:
    """Ensure schema and table names passed via TASK_STORE_POSTGRES_SCHEMA /
    TASK_STORE_POSTGRES_TABLE conform to postgres naming rules. Names must begin
    with a letter or underscore; subsequent characters may be letters, digits
    or underscores."""
    if not value:
        raise ValueError(f"{label} cannot be empty.")
    if not _IDENTIFIER_RE.match(value):
        raise ValueError(
            f"Invalid {label} '{value}'. "
            "Only alphanumeric characters and underscores are allowed, "
            "and the first character must be a letter or underscore."
        )
    return value


@dataclass
class _ConnectionConfig:
    """Holds connection configuration for asyncpg.create_pool."""
    kwargs: Dict[str, Any]
    dsn: Optional[str] = None


class PostgreSQLTaskStore(TaskStore):
    """PostgreSQL implementation of the TaskStore abstraction.

    - Validates environment/configuration settings (schema, table, pool size).
    - Translates between Task entities and SQL rows.
    - Manages the connection pool and schema/table/index auto-creation.

    Ids come from a BIGSERIAL column so they are never reused. Title
    uniqueness is left to the service layer; the table carries no UNIQUE
    constraint."""

    _COLUMNS = "id, title, description, status, created_at, updated_at"

    def __init__(
        self,
        dsn: Optional[str] = None,
        *,
        schema: Optional[str] = None,
        table: Optional[str] = None,
        max_pool_size: Optional[int] = None,
    ) -> None:
        self._connection_config = self._build_connection_config(
            dsn or os.getenv("TASK_STORE_POSTGRES_DSN")
        )

        self.schema = _validate_identifier(
            (schema or os.getenv("TASK_STORE_POSTGRES_SCHEMA") or "public"),
            "schema",
        )
        self.table = _validate_identifier(
            (table or os.getenv("TASK_STORE_POSTGRES_TABLE") or "tasks"),
            "table",
        )
        self._qualified_table = (
            f"{self._quote_identifier(self.schema)}.{self._quote_identifier(self.table)}"
        )
        self._status_index = _validate_identifier(f"{self.table}_status_idx", "index")
        self._title_index = _validate_identifier(f"{self.table}_title_idx", "index")

        self.max_pool_size = max_pool_size or _env_int(
            "TASK_STORE_POSTGRES_POOL_SIZE", default=10
        )

        self._pool: Optional[asyncpg.Pool] = None
        self._ddl_initialized: bool = False

    # Public API
    async def save(self, task: Task) -> Task:
        status = (task.status or TaskStatus.TODO).value
        now = datetime.now(timezone.utc)

        async with self._connection() as conn:
            if task.id is None:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO {self._qualified_table} (
                        title, description, status, created_at, updated_at
                    )
                    VALUES ($1, $2, $3, $4, $4)
                    RETURNING {self._COLUMNS}
                    """,
                    task.title,
                    task.description,
                    status,
                    now,
                )
            else:
                row = await conn.fetchrow(
                    f"""
                    UPDATE {self._qualified_table}
                    SET
                        title = $2,
                        description = $3,
                        status = $4,
                        updated_at = GREATEST($5, created_at)
                    WHERE id = $1
                    RETURNING {self._COLUMNS}
                    """,
                    task.id,
                    task.title,
                    task.description,
                    status,
                    now,
                )
                if row is None:
                    raise LookupError(f"Task {task.id} no longer exists")

        return self._row_to_task(row)

    async def find_by_id(self, task_id: int) -> Optional[Task]:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {self._COLUMNS} FROM {self._qualified_table} WHERE id = $1",
                task_id,
            )
        return self._row_to_task(row) if row else None

    async def exists_by_id(self, task_id: int) -> bool:
        async with self._connection() as conn:
            return await conn.fetchval(
                f"SELECT EXISTS (SELECT 1 FROM {self._qualified_table} WHERE id = $1)",
                task_id,
            )

    async def delete_by_id(self, task_id: int) -> None:
        async with self._connection() as conn:
            await conn.execute(
                f"DELETE FROM {self._qualified_table} WHERE id = $1",
                task_id,
            )

    async def find_all(self) -> List[Task]:
        async with self._connection() as conn:
            rows = await conn.fetch(
                f"SELECT {self._COLUMNS} FROM {self._qualified_table} ORDER BY id"
            )
        return [self._row_to_task(row) for row in rows]

    async def find_by_status_order_by_created_at_desc(
        self, status: TaskStatus
    ) -> List[Task]:
        async with self._connection() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {self._COLUMNS}
                FROM {self._qualified_table}
                WHERE status = $1
                ORDER BY created_at DESC, id DESC
                """,
                status.value,
            )
        return [self._row_to_task(row) for row in rows]

    async def exists_by_title(self, title: str) -> bool:
        async with self._connection() as conn:
            return await conn.fetchval(
                f"SELECT EXISTS (SELECT 1 FROM {self._qualified_table} WHERE title = $1)",
                title,
            )

    async def count_by_status(self, status: TaskStatus) -> int:
        async with self._connection() as conn:
            return await conn.fetchval(
                f"SELECT COUNT(*) FROM {self._qualified_table} WHERE status = $1",
                status.value,
            )

    async def count(self) -> int:
        async with self._connection() as conn:
            return await conn.fetchval(f"SELECT COUNT(*) FROM {self._qualified_table}")

    async def search_by_keyword(self, keyword: str) -> List[Task]:
        # strpos keeps % and _ in the keyword literal, unlike LIKE
        async with self._connection() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {self._COLUMNS}
                FROM {self._qualified_table}
                WHERE strpos(lower(title), lower($1)) > 0
                   OR strpos(lower(coalesce(description, '')), lower($1)) > 0
                ORDER BY id
                """,
                keyword,
            )
        return [self._row_to_task(row) for row in rows]

    async def close(self) -> None:
        if self._pool:
            await self._pool.close()
            self._pool = None

    def _build_connection_config(self, dsn: Optional[str]) -> _ConnectionConfig:
        """Collect the connection information that will be used to establish
        the asyncpg connection pool."""
        if dsn:
            return _ConnectionConfig(kwargs={}, dsn=dsn)

        host = _require_env("POSTGRES_HOST", "hostname of the Postgres instance")
        port = int(_require_env("POSTGRES_PORT", "port number"))
        user = _require_env("POSTGRES_USER", "database role/user")
        password = _require_env("POSTGRES_PASSWORD", "database role password")
        database = _require_env("POSTGRES_DB", "target database name")

        kwargs: Dict[str, Any] = {
            "host": host,
            "port": port,
            "user": user,
            "database": database,
            "password": password,
        }
        return _ConnectionConfig(kwargs=kwargs, dsn=None)

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            kwargs = dict(self._connection_config.kwargs)
            if self._connection_config.dsn:
                kwargs["dsn"] = self._connection_config.dsn
            try:
                self._pool = await asyncpg.create_pool(
                    min_size=1,
                    max_size=self.max_pool_size,
                    **kwargs,
                )
            except (OSError, asyncpg.PostgresError) as exc:
                raise ConnectionError(
                    f"Failed to connect to PostgreSQL. Error: {str(exc)}. "
                    "Check TASK_STORE_POSTGRES_DSN or the POSTGRES_* variables."
                ) from exc
            logger.info("PostgreSQL task store pool ready table=%s", self._qualified_table)
        return self._pool

    @asynccontextmanager
    async def _connection(self) -> asyncpg.Connection:
        """Acquire a connection from the pool, ensure the schema/table/indexes
        exist on first use, yield it for the caller's query, and release it back
        to the pool afterward."""
        pool = await self._get_pool()
        conn = await pool.acquire()
        try:
            if not self._ddl_initialized:
                if self.schema != "public":
                    await conn.execute(
                        f"CREATE SCHEMA IF NOT EXISTS {self._quote_identifier(self.schema)}"
                    )

                await conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {self._qualified_table} (
                        id BIGSERIAL PRIMARY KEY,
                        title TEXT NOT NULL,
                        description VARCHAR(500),
                        status TEXT NOT NULL,
                        created_at TIMESTAMPTZ NOT NULL,
                        updated_at TIMESTAMPTZ NOT NULL
                    )
                    """
                )
                await conn.execute(
                    f"""
                    CREATE INDEX IF NOT EXISTS {self._quote_identifier(self._status_index)}
                    ON {self._qualified_table} (status, created_at)
                    """
                )
                await conn.execute(
                    f"""
                    CREATE INDEX IF NOT EXISTS {self._quote_identifier(self._title_index)}
                    ON {self._qualified_table} (title)
                    """
                )
                self._ddl_initialized = True
            yield conn
        finally:
            await pool.release(conn)

    @staticmethod
    def _row_to_task(row: asyncpg.Record) -> Task:
        """Build a Task from a row, normalizing timestamps to aware UTC datetimes."""
        return Task(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            status=TaskStatus(row["status"]),
            created_at=PostgreSQLTaskStore._coerce_datetime(row["created_at"]),
            updated_at=PostgreSQLTaskStore._coerce_datetime(row["updated_at"]),
        )

    @staticmethod
    def _coerce_datetime(value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @staticmethod
    def _quote_identifier(identifier: str) -> str:
        """Return an identifier wrapped in double quotes so it is safe to embed in SQL statements."""
        return f'"{identifier}"'
