"""Team notification consumer for merged pull requests."""

from __future__ import annotations

from .errors import PullRequestNotFoundError
from .notifier import LoggingTeamNotifier, TeamNotification, TeamNotifier
from .service import TeamNotificationService

__all__ = [
    "LoggingTeamNotifier",
    "PullRequestNotFoundError",
    "TeamNotification",
    "TeamNotificationService",
    "TeamNotifier",
]
