"""Shared test fixtures.

Environment variables are set before the application is imported because
settings, the engine and the rate limiter are created at import time.
"""

import json
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "false"
os.environ["AUTH_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LLM_API_KEY"] = "test-key"
os.environ.pop("REDIS_URL", None)

from collections.abc import AsyncGenerator, Callable  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from rbac_api.database import get_db  # noqa: E402
from rbac_api.exceptions import ServiceUnavailableError  # noqa: E402
from rbac_api.main import app  # noqa: E402
from rbac_api.models.orm import Base  # noqa: E402
from rbac_api.providers.base import TextGenerationProvider  # noqa: E402
from rbac_api.services.context_service import RbacContextManager  # noqa: E402


class FakeProvider(TextGenerationProvider):
    """Returns queued replies instead of calling a remote service."""

    name = "fake"

    def __init__(self) -> None:
        self.replies: list[str | Exception] = []
        self.prompts: list[str] = []
        self.closed = False

    def queue(self, *replies: str | Exception) -> None:
        self.replies.extend(replies)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise ServiceUnavailableError("No reply queued")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self) -> None:
        self.closed = True


def llm_reply(command_type: str, confidence: float = 0.9, **parameters: Any) -> str:
    """Render a reply the way the text generation service formats it."""
    return json.dumps(
        {
            "type": command_type,
            "parameters": parameters,
            "confidence": confidence,
            "message": f"Will run {command_type}",
            "validation_errors": [],
            "suggestions": [],
        }
    )


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def reply() -> Callable[..., str]:
    return llm_reply


@pytest.fixture
def context_manager() -> RbacContextManager:
    return RbacContextManager()


@pytest.fixture
async def client(
    session_maker: async_sessionmaker[AsyncSession],
    provider: FakeProvider,
    context_manager: RbacContextManager,
) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as db:
            try:
                yield db
                await db.commit()
            except SQLAlchemyError:
                await db.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.state.text_provider = provider
    app.state.context_manager = context_manager
    app.state.cache = None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
