"""
Database setup: pool creation and the blog_posts schema
"""

import logging

import asyncpg

from blog_service.db_context import DatabaseManager

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS blog_posts (
    id BIGSERIAL PRIMARY KEY,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    author TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE,
    published BOOLEAN NOT NULL DEFAULT FALSE,
    published_at TIMESTAMP WITH TIME ZONE,
    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS blog_posts_created_at_idx ON blog_posts (created_at DESC);
"""


async def create_pool(
    dsn: str,
    pool_name: str = "default",
    min_size: int = 1,
    max_size: int = 10,
) -> asyncpg.Pool:
    """Open an asyncpg pool and register it with the DatabaseManager."""
    try:
        pool = await asyncpg.create_pool(dsn, min_size=min_size, max_size=max_size)
    except (OSError, asyncpg.PostgresError):
        logger.exception("Failed to connect to PostgreSQL for pool %r", pool_name)
        raise

    await DatabaseManager.add_pool(pool_name, pool)
    logger.info("Database pool %r ready (min=%d, max=%d)", pool_name, min_size, max_size)
    return pool


async def create_schema(pool: asyncpg.Pool):
    """Create the blog_posts table and its index if they don't exist."""
    async with pool.acquire() as conn:
        await conn.execute(SCHEMA_SQL)
    logger.info("blog_posts schema ready")
