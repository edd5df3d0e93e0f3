"""Resolve a pull request identity and hand it to the team notifier."""

from __future__ import annotations

import typing as typ

from mergewatch.directory.storage import Repository
from mergewatch.pulls.store import PullRequestStore
from mergewatch.teams.errors import PullRequestNotFoundError
from mergewatch.teams.notifier import TeamNotification
from mergewatch.webhooks.observability import WebhookEventLogger

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from mergewatch.pulls.models import PullRequestIdentity
    from mergewatch.teams.notifier import TeamNotifier


class TeamNotificationService:
    """Consumer side of the team notification job."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: TeamNotifier,
        *,
        event_logger: WebhookEventLogger | None = None,
    ) -> None:
        """Store the session factory and the notifier to deliver through."""
        self._session_factory = session_factory
        self._notifier = notifier
        self._events = event_logger or WebhookEventLogger()

    async def notify(self, identity: PullRequestIdentity) -> TeamNotification:
        """Load the pull request for *identity* and notify its teams.

        Raises
        ------
        PullRequestNotFoundError
            If no pull request is stored for *identity*.

        """
        try:
            notification = await self._load(identity)
            await self._notifier.notify(notification)
        except Exception as exc:
            self._events.log_notification_failed(identity, exc)
            raise

        self._events.log_notification_sent(
            repository=notification.repository,
            number=notification.number,
            channel=notification.slack_channel_id,
        )
        return notification

    async def _load(self, identity: PullRequestIdentity) -> TeamNotification:
        async with self._session_factory() as session:
            pull_request = await PullRequestStore(session).get(identity)
            if pull_request is None:
                raise PullRequestNotFoundError(identity)
            repository = await session.get(Repository, pull_request.repository_id)
            if repository is None:  # pragma: no cover - guarded by the foreign key
                raise PullRequestNotFoundError(identity)
            return TeamNotification.from_records(repository, pull_request)
