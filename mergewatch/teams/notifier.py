"""Notification payloads and the sink that delivers them.

Routing a merged pull request to Slack teams (CODEOWNERS matching, message
formatting) lives behind :class:`TeamNotifier`. The default notifier only
records the request in the log.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from mergewatch.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    import datetime as dt

    from mergewatch.directory.storage import Repository
    from mergewatch.pulls.storage import PullRequest

logger = get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class TeamNotification:
    """Everything a notifier needs about one merged pull request."""

    repository: str
    slack_channel_id: str | None
    number: int
    title: str
    author: str
    base_branch: str
    head_branch: str
    merged_at: dt.datetime | None

    @classmethod
    def from_records(
        cls, repository: Repository, pull_request: PullRequest
    ) -> TeamNotification:
        """Build a notification from stored rows."""
        return cls(
            repository=repository.full_name,
            slack_channel_id=repository.slack_channel_id,
            number=pull_request.number,
            title=pull_request.title,
            author=pull_request.author,
            base_branch=pull_request.base_branch,
            head_branch=pull_request.head_branch,
            merged_at=pull_request.merged_at,
        )


class TeamNotifier(typ.Protocol):
    """Delivers a team notification."""

    async def notify(self, notification: TeamNotification) -> None:
        """Send *notification* to the responsible teams."""
        ...


class LoggingTeamNotifier:
    """Notifier that records notifications in the log instead of Slack."""

    async def notify(self, notification: TeamNotification) -> None:
        """Log *notification*."""
        log_info(
            logger,
            "Team notification for %s#%d (%s) by %s into %s, channel=%s",
            notification.repository,
            notification.number,
            notification.title,
            notification.author,
            notification.base_branch,
            notification.slack_channel_id,
        )
