import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from functools import wraps
from typing import Any

import asyncpg

logger = logging.getLogger(__name__)

# Connection bound to the running task while a transaction is open
_current_connection: ContextVar[asyncpg.Connection | None] = ContextVar(
    "current_connection", default=None
)
_db_pools: dict[str, asyncpg.Pool] = {}


class DatabaseManager:
    """Registry of named asyncpg pools and the per-task transaction context"""

    @classmethod
    async def add_pool(cls, name: str, pool: asyncpg.Pool):
        """Register a database pool under a name"""
        _db_pools[name] = pool

    @classmethod
    async def get_pool(cls, name: str = "default") -> asyncpg.Pool:
        """Get a database pool by name"""
        if name not in _db_pools:
            raise ValueError(f"Database pool '{name}' not found")
        return _db_pools[name]

    @classmethod
    async def close_pool(cls, name: str = "default"):
        """Unregister a pool and close it. Unknown names are ignored."""
        pool = _db_pools.pop(name, None)
        if pool is not None:
            await pool.close()
            logger.info("Closed database pool %r", name)

    @classmethod
    def get_current_connection(cls) -> asyncpg.Connection | None:
        """Get the current active connection from context"""
        return _current_connection.get()

    @classmethod
    def log_query(cls, query: str, params: list[Any]):
        logger.debug("SQL: %s params=%r", query, params)

    @classmethod
    @asynccontextmanager
    async def transaction(cls, db_name: str = "default"):
        """Context manager for database transactions.

        Behavior:
        - Inside an existing transaction, opens a nested transaction (a
          savepoint) on the same connection, so a failure inside it can be
          rolled back without aborting the outer transaction.
        - Otherwise acquires a connection from the named pool, starts a
          transaction and binds the connection to the current context until
          the block exits. The connection always goes back to the pool.

        Args:
            db_name: Name of the database pool to use
        """
        current_conn = _current_connection.get()

        if current_conn:
            async with current_conn.transaction():
                yield current_conn
        else:
            pool = await cls.get_pool(db_name)
            async with pool.acquire() as conn, conn.transaction():
                conn_token = _current_connection.set(conn)
                try:
                    yield conn
                finally:
                    _current_connection.reset(conn_token)


def transactional(db_name: str = "default"):
    """Decorator to run a coroutine function within a database transaction.

    Example:
        @transactional("default")
        async def rename(post_id, title):
            return await repo.update(post_id, {"title": title})
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            async with DatabaseManager.transaction(db_name):
                return await func(*args, **kwargs)

        return wrapper

    return decorator
