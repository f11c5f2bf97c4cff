import logging
from typing import Any

import asyncpg

from blog_service.db_context import DatabaseManager
from blog_service.errors import ConflictError

logger = logging.getLogger(__name__)


class DatabaseOperations:
    """Composition class for database operations.

    Every call runs on the connection bound by ``DatabaseManager.transaction``.
    Unique violations are re-raised as ``ConflictError``.
    """

    @staticmethod
    def get_connection() -> asyncpg.Connection:
        """Get the current database connection from context"""
        conn = DatabaseManager.get_current_connection()
        if not conn:
            raise ValueError(
                "No active transaction found. Repository methods must be called within a transaction context."
            )
        return conn

    @staticmethod
    def _conflict(exc: asyncpg.UniqueViolationError) -> ConflictError:
        constraint = getattr(exc, "constraint_name", None)
        logger.warning("Unique constraint %s violated: %s", constraint, exc)
        return ConflictError(
            f"Unique constraint violated: {constraint or 'unknown'}", constraint
        )

    async def fetch_all(self, query: str, params: list[Any]) -> list[Any]:
        """Execute query and fetch all rows"""
        conn = self.get_connection()
        DatabaseManager.log_query(query, params)
        return await conn.fetch(query, *params)

    async def fetch_one(self, query: str, params: list[Any]) -> Any:
        """Execute a query and fetch one row"""
        conn = self.get_connection()
        DatabaseManager.log_query(query, params)
        try:
            return await conn.fetchrow(query, *params)
        except asyncpg.UniqueViolationError as exc:
            raise self._conflict(exc) from exc

    async def fetch_value(self, query: str, params: list[Any]) -> Any:
        """Execute query and fetch single value"""
        conn = self.get_connection()
        DatabaseManager.log_query(query, params)
        return await conn.fetchval(query, *params)

    async def execute_query(self, query: str, params: list[Any]) -> str:
        """Execute query and return the command status (e.g. ``DELETE 1``)"""
        conn = self.get_connection()
        DatabaseManager.log_query(query, params)
        try:
            return await conn.execute(query, *params)
        except asyncpg.UniqueViolationError as exc:
            raise self._conflict(exc) from exc
