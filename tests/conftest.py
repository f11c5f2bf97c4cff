import asyncpg
import pytest
import pytest_asyncio
from testcontainers.postgres import PostgresContainer

from blog_service.db_context import DatabaseManager
from blog_service.db_setup import create_schema
from blog_service.post_repository import PostRepository
from blog_service.service import PostService

TEST_POOL = "test_db"


@pytest.fixture(scope="session")
def postgres_container():
    """Start a PostgreSQL test container for the session."""
    with PostgresContainer("postgres:17") as postgres:
        yield postgres


@pytest_asyncio.fixture
async def test_db_pool(postgres_container):
    """Create a pool against the test container, with the blog schema, for each test."""
    host = postgres_container.get_container_host_ip()
    port = postgres_container.get_exposed_port(5432)
    dsn = f"postgresql://{postgres_container.username}:{postgres_container.password}@{host}:{port}/{postgres_container.dbname}"

    # A new pool per test avoids sharing connections across event loops
    pool = await asyncpg.create_pool(dsn, min_size=1, max_size=5)
    await create_schema(pool)
    await DatabaseManager.add_pool(TEST_POOL, pool)

    yield pool

    async with pool.acquire() as conn:
        await conn.execute("TRUNCATE TABLE blog_posts RESTART IDENTITY;")

    await DatabaseManager.close_pool(TEST_POOL)


@pytest.fixture
def post_repo():
    return PostRepository()


@pytest.fixture
def post_service(test_db_pool, post_repo):
    return PostService(post_repo, db_name=TEST_POOL)
