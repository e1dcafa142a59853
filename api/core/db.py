"""
Connection pool and query helpers for the catalog database.

One asyncpg pool per process, opened by the app lifespan in `main.py`.
Repositories use `fetch_one` / `fetch_all` / `execute` for single
statements and `transaction()` when a product and its characteristics and
images must be written together. Placeholders are asyncpg's `$1, $2, ...`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import config

_pool: asyncpg.Pool | None = None

logger = logging.getLogger(__name__)


def _drop_query_param(url: str, name: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != name]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment))


def database_url() -> str:
    """
    DATABASE_URL with `sslmode` removed; asyncpg rejects libpq-only options.
    """
    url = config.env_str("DATABASE_URL", "")
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _drop_query_param(url, "sslmode")


async def init_pool(dsn: str | None = None) -> None:
    global _pool
    if _pool is not None:
        return None
    min_size = config.env_int("DB_POOL_MIN_SIZE", 1)
    max_size = max(min_size, config.env_int("DB_POOL_MAX_SIZE", 5))
    _pool = await asyncpg.create_pool(
        dsn=dsn or database_url(),
        min_size=min_size,
        max_size=max_size,
        command_timeout=config.env_int("DB_COMMAND_TIMEOUT", 30),
    )
    logger.info("db_pool_opened min_size=%s max_size=%s", min_size, max_size)


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None
    logger.info("db_pool_closed")


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


@asynccontextmanager
async def transaction() -> AsyncIterator[asyncpg.Connection]:
    """
    Borrow a connection and run the block in one transaction; it is rolled
    back if the block raises.
    """
    async with pool().acquire() as conn:
        async with conn.transaction():
            yield conn


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    row = await pool().fetchrow(sql, *args)
    return dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    return [dict(r) for r in await pool().fetch(sql, *args)]


async def execute(sql: str, *args: Any) -> None:
    await pool().execute(sql, *args)
