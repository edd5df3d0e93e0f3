"""Pull request store: last-known state of merged pull requests."""

from __future__ import annotations

from .errors import PullRequestUpsertError
from .models import PullRequestAttributes, PullRequestIdentity, UpsertResult
from .storage import PullRequest, PullRequestState
from .store import PullRequestStore

__all__ = [
    "PullRequest",
    "PullRequestAttributes",
    "PullRequestIdentity",
    "PullRequestState",
    "PullRequestStore",
    "PullRequestUpsertError",
    "UpsertResult",
]
