"""PostgreSQL database client for local development.

This module provides a connection pool, the table definitions for users and
profiles, and helper functions for running queries against a local PostgreSQL
database as an alternative to Supabase.
"""
from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Generator

import psycopg2
from psycopg2 import pool, sql
from psycopg2.extras import RealDictCursor

from src.infrastructure.logging import get_logger

logger = get_logger("database.postgres")

Query = str | sql.Composable

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password TEXT NOT NULL,
    avatar TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL UNIQUE REFERENCES users (id) ON DELETE CASCADE,
    company TEXT,
    website TEXT,
    location TEXT,
    bio TEXT,
    status TEXT,
    githubusername TEXT,
    skills JSONB NOT NULL DEFAULT '[]'::jsonb,
    social JSONB NOT NULL DEFAULT '{}'::jsonb,
    experience JSONB NOT NULL DEFAULT '[]'::jsonb,
    education JSONB NOT NULL DEFAULT '[]'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""


class PostgresClient:
    """PostgreSQL database client with connection pooling."""

    def __init__(self) -> None:
        self.enabled = os.getenv("USE_LOCAL_DB", "0") == "1"
        self._pool: Any = None

        if self.enabled:
            try:
                self._pool = pool.ThreadedConnectionPool(
                    minconn=1,
                    maxconn=int(os.getenv("POSTGRES_POOL_SIZE", "10")),
                    host=os.getenv("POSTGRES_HOST", "localhost"),
                    port=int(os.getenv("POSTGRES_PORT", "5432")),
                    database=os.getenv("POSTGRES_DB", "devconnector"),
                    user=os.getenv("POSTGRES_USER", "devconnector"),
                    password=os.getenv("POSTGRES_PASSWORD", "devconnector_dev_password"),
                )
            except psycopg2.Error as exc:  # pragma: no cover
                raise RuntimeError(f"Failed to initialize PostgreSQL connection pool: {exc}") from exc

    @contextmanager
    def get_connection(self) -> Generator[Any, None, None]:
        """Get a database connection from the pool.

        Commits when the block exits cleanly and rolls back otherwise.

        Raises:
            RuntimeError: If local database is not enabled.
        """
        if not self.enabled or self._pool is None:
            raise RuntimeError("Local PostgreSQL database is not enabled")

        conn = None
        try:
            conn = self._pool.getconn()
            yield conn
            conn.commit()
        except Exception:
            if conn:
                conn.rollback()
            raise
        finally:
            if conn:
                self._pool.putconn(conn)

    @contextmanager
    def get_cursor(self, dict_cursor: bool = True) -> Generator[Any, None, None]:
        with self.get_connection() as conn:
            cursor_factory = RealDictCursor if dict_cursor else None
            cursor = conn.cursor(cursor_factory=cursor_factory)
            try:
                yield cursor
            finally:
                cursor.close()

    def execute_one(self, query: Query, params: tuple = ()) -> dict[str, Any] | None:
        """Execute a query and return a single row, or None if nothing matched."""
        with self.get_cursor() as cursor:
            cursor.execute(query, params)
            result = cursor.fetchone()
            return dict(result) if result else None

    def execute_many(self, query: Query, params: tuple = ()) -> list[dict[str, Any]]:
        with self.get_cursor() as cursor:
            cursor.execute(query, params)
            return [dict(row) for row in cursor.fetchall()]

    def execute_insert(self, query: Query, params: tuple = ()) -> dict[str, Any]:
        """Execute a write with a RETURNING clause and return the written row.

        Raises:
            RuntimeError: If the statement returned no row.
        """
        with self.get_cursor() as cursor:
            cursor.execute(query, params)
            result = cursor.fetchone()
            if not result:
                raise RuntimeError("Insert query did not return a row")
            return dict(result)

    def execute_update(self, query: Query, params: tuple = ()) -> int:
        """Execute an UPDATE or DELETE and return the number of affected rows."""
        with self.get_cursor(dict_cursor=False) as cursor:
            cursor.execute(query, params)
            return cursor.rowcount

    def ensure_schema(self) -> None:
        with self.get_cursor(dict_cursor=False) as cursor:
            cursor.execute(SCHEMA)
        logger.info("postgres_schema_ready")

    def close(self) -> None:
        if self._pool:
            self._pool.closeall()


_POSTGRES_CLIENT: PostgresClient | None = None


def get_postgres_client() -> PostgresClient | None:
    """Get PostgreSQL client singleton, or None unless ``USE_LOCAL_DB=1``."""
    global _POSTGRES_CLIENT
    if os.getenv("USE_LOCAL_DB", "0") != "1":
        return None
    if _POSTGRES_CLIENT is None:
        _POSTGRES_CLIENT = PostgresClient()
    return _POSTGRES_CLIENT
