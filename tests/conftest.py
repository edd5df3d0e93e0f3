"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mergewatch.directory import (
    Repository,
    RepositoryDirectory,
    RepositoryRegistration,
)
from mergewatch.schema import init_database
from tests.helpers.payloads import REPO_FULL_NAME, REPO_ID

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from dramatiq.brokers.stub import StubBroker


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """Return a SQLite URL in the test's temporary directory."""
    return f"sqlite+aiosqlite:///{tmp_path / 'mergewatch_test.db'}"


@pytest_asyncio.fixture
async def session_factory(
    database_url: str,
) -> typ.AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Yield a fresh async session factory backed by sqlite."""
    engine = create_async_engine(database_url)
    try:
        await init_database(engine)
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()


class RegisterRepoFn(typ.Protocol):
    """Callable fixture for registering directory repositories."""

    def __call__(
        self,
        github_repo_id: int = REPO_ID,
        full_name: str = REPO_FULL_NAME,
        *,
        slack_channel_id: str | None = None,
        is_active: bool = True,
    ) -> cabc.Awaitable[Repository]:
        """Register a repository and return the stored row."""
        ...


@pytest.fixture
def register_repo(
    session_factory: async_sessionmaker[AsyncSession],
) -> RegisterRepoFn:
    """Return a factory for registering test repositories."""

    async def _register(
        github_repo_id: int = REPO_ID,
        full_name: str = REPO_FULL_NAME,
        *,
        slack_channel_id: str | None = None,
        is_active: bool = True,
    ) -> Repository:
        async with session_factory() as session, session.begin():
            repo, _ = await RepositoryDirectory(session).register(
                RepositoryRegistration(
                    github_repo_id=github_repo_id,
                    full_name=full_name,
                    slack_channel_id=slack_channel_id,
                    is_active=is_active,
                )
            )
            return repo

    return _register


@pytest.fixture
def stub_broker() -> typ.Iterator[StubBroker]:
    """Yield the in-memory broker the actors are bound to, emptied."""
    from dramatiq.brokers.stub import StubBroker

    import mergewatch.jobs.actors  # noqa: F401 - declares actors on the broker
    from mergewatch.jobs._broker import configure_broker

    broker = configure_broker()
    assert isinstance(broker, StubBroker), "tests require the stub broker"
    broker.flush_all()
    try:
        yield broker
    finally:
        broker.flush_all()
