"""Pytest configuration and fixtures."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from prompt_blocks.domain.services.override_cache import OverrideCache
from prompt_blocks.infrastructure.redis import RedisClient
from prompt_blocks.persistence.database import Base
from prompt_blocks.persistence.models import *  # noqa: F401, F403


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
async def db_session():
    """Create a test database session."""
    # Use in-memory SQLite for testing
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Override cache with no shared tier."""
    return OverrideCache(ttl_seconds=60, redis=RedisClient(enabled=False), clock=clock)


@pytest.fixture
def llm_client():
    """LLM client double; tests set ``complete`` return values."""
    from unittest.mock import AsyncMock

    from prompt_blocks.llm.client import LLMClient

    client = AsyncMock(spec=LLMClient)
    client.model_name = "test-model"
    return client


@pytest.fixture
async def client(db_session, cache, llm_client):
    """Create a test API client bound to the test database and LLM double."""
    from httpx import ASGITransport, AsyncClient

    from prompt_blocks.api.deps import get_llm, get_prompt_service
    from prompt_blocks.domain.services.prompt_service import PromptService
    from prompt_blocks.main import app

    app.dependency_overrides[get_prompt_service] = lambda: PromptService(db_session, cache=cache)
    app.dependency_overrides[get_llm] = lambda: llm_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()
