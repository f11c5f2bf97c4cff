"""Repository class"""

from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from blog_service.database_operations import DatabaseOperations
from blog_service.query_builder import QueryBuilder

T = TypeVar("T", bound=BaseModel)


class RepositoryConfig(BaseModel):
    """Configuration options for Repository"""

    db_schema: str | None = Field(default=None, description="Database schema name")


class Repository(Generic[T]):
    """Fluent repository over one table with integer, database-assigned ids.

    Query methods (``where``, ``order_by_desc``, ``limit`` ...) return a new
    repository carrying the extended query; execution methods (``get``,
    ``first``, ``count``) run it on the connection of the current transaction.

    ``created_at``/``updated_at`` columns declared on the entity are filled in
    automatically on insert and update.
    """

    def __init__(
        self,
        entity_class: type[T],
        table_name: str,
        config: RepositoryConfig | None = None,
    ):
        if entity_class is None:
            raise ValueError("entity_class is required")
        if not table_name:
            raise ValueError("table_name is required")

        self.entity_class = entity_class
        self.table_name = table_name
        self.config = config or RepositoryConfig()
        self._qualified_table_name = (
            f"{self.config.db_schema}.{table_name}"
            if self.config.db_schema
            else table_name
        )
        self._query_builder: QueryBuilder | None = None

        fields = entity_class.model_fields
        self._has_created_at = "created_at" in fields
        self._has_updated_at = "updated_at" in fields

        self.db_ops = DatabaseOperations()

    @property
    def qualified_table_name(self) -> str:
        return self._qualified_table_name

    def _map_row(self, row: Any) -> T:
        return self.entity_class(**dict(row))

    def _get_or_create_query_builder(self) -> QueryBuilder:
        if self._query_builder is None:
            return QueryBuilder(self._qualified_table_name)
        return self._query_builder

    def _clone_with_query_builder(self, query_builder: QueryBuilder):
        """Create a copy of this repository carrying the given query builder"""
        new_repo = object.__new__(type(self))
        new_repo.__dict__.update(self.__dict__)
        new_repo._query_builder = query_builder
        return new_repo

    def _apply_automatic_fields(
        self, data: dict[str, Any], is_create: bool = True
    ) -> dict[str, Any]:
        """Fill created_at on insert and refresh updated_at on every write"""
        current_time = datetime.now(UTC)

        if is_create and self._has_created_at and data.get("created_at") is None:
            data["created_at"] = current_time
        if self._has_updated_at:
            if is_create:
                data["updated_at"] = data.get("updated_at") or data.get(
                    "created_at", current_time
                )
            else:
                data["updated_at"] = current_time
        return data

    # Fluent query methods that return a new repository instance
    def select(self, *fields: str):
        return self._clone_with_query_builder(
            self._get_or_create_query_builder().select(*fields)
        )

    def where(self, field: Any, *args: Any):
        """Add a WHERE condition: where(field, value) or where(field, operator, value)"""
        return self._clone_with_query_builder(
            self._get_or_create_query_builder().where(str(field), *args)
        )

    def order_by(self, field: Any):
        return self._clone_with_query_builder(
            self._get_or_create_query_builder().order_by(str(field))
        )

    def order_by_desc(self, field: Any):
        return self._clone_with_query_builder(
            self._get_or_create_query_builder().order_by_desc(str(field))
        )

    def limit(self, count: int):
        return self._clone_with_query_builder(
            self._get_or_create_query_builder().limit(count)
        )

    def offset(self, count: int):
        return self._clone_with_query_builder(
            self._get_or_create_query_builder().offset(count)
        )

    # Execution methods for fluent queries
    async def get(self) -> list[T]:
        """Execute the query and return all matching entities"""
        query, params = self._get_or_create_query_builder().build()
        rows = await self.db_ops.fetch_all(query, params)
        return [self._map_row(row) for row in rows]

    async def first(self) -> T | None:
        """Execute the query and return the first matching entity"""
        query, params = self._get_or_create_query_builder().limit(1).build()
        row = await self.db_ops.fetch_one(query, params)
        return self._map_row(row) if row else None

    async def count(self) -> int:
        """Execute the query and return the count of matching records"""
        query, params = self._get_or_create_query_builder().select("COUNT(*)").build()
        result = await self.db_ops.fetch_value(query, params)
        return result or 0

    async def exists(self) -> bool:
        """Check if any records match the query"""
        query, params = (
            self._get_or_create_query_builder().select("1").limit(1).build()
        )
        return await self.db_ops.fetch_value(query, params) is not None

    def to_sql(self) -> str:
        """Return the SQL query string for debugging"""
        return self._get_or_create_query_builder().to_sql()

    def build(self) -> tuple[str, list[Any]]:
        """Build the SQL query and parameters"""
        return self._get_or_create_query_builder().build()

    # CRUD operations
    async def find_by_id(self, entity_id: int) -> T | None:
        return await self.where("id", entity_id).first()

    async def insert(self, fields: dict[str, Any]) -> T:
        """Insert a row and return it as stored, including generated columns"""
        fields = self._apply_automatic_fields(dict(fields), is_create=True)

        columns = ", ".join(fields.keys())
        values = list(fields.values())
        placeholders = ", ".join([f"${i + 1}" for i in range(len(values))])

        row = await self.db_ops.fetch_one(
            f"INSERT INTO {self._qualified_table_name} ({columns}) "
            f"VALUES ({placeholders}) RETURNING *",
            values,
        )
        return self._map_row(row)

    async def update(self, entity_id: int, fields: dict[str, Any]) -> T | None:
        """Apply a partial update; returns None when no row has that id.

        An empty ``fields`` still refreshes ``updated_at`` when the table has one.
        """
        update_dict = self._apply_automatic_fields(dict(fields), is_create=False)

        if not update_dict:
            return await self.find_by_id(entity_id)

        set_clause = ", ".join(
            [f"{k} = ${i + 2}" for i, k in enumerate(update_dict.keys())]
        )
        values = [entity_id, *update_dict.values()]

        row = await self.db_ops.fetch_one(
            f"UPDATE {self._qualified_table_name} SET {set_clause} "
            f"WHERE id = $1 RETURNING *",
            values,
        )
        return self._map_row(row) if row else None

    async def delete(self, entity_id: int) -> bool:
        """Hard delete by id; False when nothing was removed"""
        result = await self.db_ops.execute_query(
            f"DELETE FROM {self._qualified_table_name} WHERE id = $1", [entity_id]
        )
        return result != "DELETE 0"
