"""
Integration test configuration with testcontainers.

This module provides a session-scoped PostgreSQL container and a
function-scoped session factory with the quorum schema applied:

- The container is started once per test session (scope="session")
- Every test gets a fresh engine; all quorum tables are truncated after it
- Tests are skipped when Docker is not available

Usage:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_example(session_factory: async_sessionmaker[AsyncSession]) -> None:
        repo = PostgresDecisionRepository(session_factory)
        ...
"""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from quoroom.bootstrap.database import to_async_url

from tests.integration.sql_helpers import execute_sql_file

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"

_TABLES = (
    "quorum_votes",
    "quorum_decisions",
    "voter_health",
    "room_activity",
    "room_voters",
    "rooms",
)


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container.

    The container is started once and reused across all integration tests.
    """
    try:
        container = PostgresContainer("postgres:16-alpine")
        container.start()
    except Exception as e:
        pytest.skip(f"Docker not available for integration tests: {e}")
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Get the container URL in postgresql+asyncpg:// form."""
    return to_async_url(postgres_container.get_connection_url())


@pytest.fixture
async def session_factory(
    postgres_async_url: str,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Per-test session factory over a migrated, empty schema."""
    engine = create_async_engine(postgres_async_url, echo=False)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as session, session.begin():
        for path in sorted(MIGRATIONS_DIR.glob("*.sql")):
            await execute_sql_file(session, path)

    yield factory

    async with factory() as session, session.begin():
        await session.execute(text(f"TRUNCATE {', '.join(_TABLES)} CASCADE"))
    await engine.dispose()
