"""Unit tests for the team notification consumer."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import typing as typ
from unittest import mock

import pytest

from mergewatch.pulls import (
    PullRequestAttributes,
    PullRequestIdentity,
    PullRequestStore,
)
from mergewatch.teams import (
    LoggingTeamNotifier,
    PullRequestNotFoundError,
    TeamNotification,
    TeamNotificationService,
)
from mergewatch.webhooks import WebhookEventLogger

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from tests.conftest import RegisterRepoFn

_MERGED = dt.datetime(2026, 2, 13, 10, 0, tzinfo=dt.UTC)


@dc.dataclass(slots=True)
class RecordingNotifier:
    """Collects notifications instead of delivering them."""

    sent: list[TeamNotification] = dc.field(default_factory=list)

    async def notify(self, notification: TeamNotification) -> None:
        self.sent.append(notification)


class FailingNotifier:
    """Notifier whose delivery always fails."""

    async def notify(self, notification: TeamNotification) -> None:
        msg = f"slack unavailable for {notification.repository}"
        raise ConnectionError(msg)


async def _store_pull_request(
    session_factory: async_sessionmaker[AsyncSession],
    register_repo: RegisterRepoFn,
) -> PullRequestIdentity:
    repo = await register_repo(slack_channel_id="C0123")
    async with session_factory() as session, session.begin():
        result = await PullRequestStore(session).upsert(
            repo,
            999,
            PullRequestAttributes(
                github_pr_id="12345",
                title="Test PR",
                state="closed",
                author="testuser",
                base_branch="main",
                head_branch="feature/test",
                created_at=_MERGED,
                updated_at=_MERGED,
                merged_at=_MERGED,
            ),
        )
    return result.identity


class TestTeamNotificationService:
    """Tests for TeamNotificationService.notify."""

    @pytest.mark.asyncio
    async def test_notifies_with_stored_details(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        register_repo: RegisterRepoFn,
    ) -> None:
        """The notifier receives the stored pull request and repository."""
        identity = await _store_pull_request(session_factory, register_repo)
        notifier = RecordingNotifier()

        notification = await TeamNotificationService(
            session_factory, notifier
        ).notify(identity)

        assert notifier.sent == [notification], "expected one notification"
        assert notification == TeamNotification(
            repository="owner/test-repo",
            slack_channel_id="C0123",
            number=999,
            title="Test PR",
            author="testuser",
            base_branch="main",
            head_branch="feature/test",
            merged_at=_MERGED,
        )

    @pytest.mark.asyncio
    async def test_missing_pull_request_raises(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        """An identity with no stored row fails so the job is retried."""
        events = mock.create_autospec(WebhookEventLogger, instance=True)
        service = TeamNotificationService(
            session_factory, RecordingNotifier(), event_logger=events
        )
        identity = PullRequestIdentity(repository_id=1, number=404)

        with pytest.raises(PullRequestNotFoundError) as excinfo:
            await service.notify(identity)

        assert excinfo.value.identity == identity
        events.log_notification_failed.assert_called_once()
        events.log_notification_sent.assert_not_called()

    @pytest.mark.asyncio
    async def test_notifier_failure_propagates(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        register_repo: RegisterRepoFn,
    ) -> None:
        """Delivery errors are logged and re-raised."""
        identity = await _store_pull_request(session_factory, register_repo)
        events = mock.create_autospec(WebhookEventLogger, instance=True)
        service = TeamNotificationService(
            session_factory, FailingNotifier(), event_logger=events
        )

        with pytest.raises(ConnectionError):
            await service.notify(identity)

        events.log_notification_failed.assert_called_once()


@pytest.mark.asyncio
async def test_logging_notifier_accepts_notifications() -> None:
    """The default notifier records without raising."""
    notification = TeamNotification(
        repository="owner/test-repo",
        slack_channel_id=None,
        number=1,
        title="Docs",
        author="testuser",
        base_branch="main",
        head_branch="docs",
        merged_at=None,
    )
    await LoggingTeamNotifier().notify(notification)
