"""Value objects for the pull request store."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt

    from mergewatch.pulls.storage import PullRequest


@dataclasses.dataclass(frozen=True, slots=True)
class PullRequestIdentity:
    """Stable reference to a stored pull request.

    This is what crosses the queue to the team notification consumer, so
    it holds only JSON-friendly scalars.
    """

    repository_id: int
    number: int


@dataclasses.dataclass(frozen=True, slots=True)
class PullRequestAttributes:
    """Column values written by an upsert, all taken from the payload."""

    github_pr_id: str
    title: str
    state: str
    author: str
    base_branch: str
    head_branch: str
    created_at: dt.datetime
    updated_at: dt.datetime
    merged_at: dt.datetime | None = None
    body: str | None = None
    base_sha: str | None = None
    head_sha: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class UpsertResult:
    """Outcome of :meth:`PullRequestStore.upsert`."""

    pull_request: PullRequest
    created: bool

    @property
    def identity(self) -> PullRequestIdentity:
        """Return the identity of the stored row."""
        return PullRequestIdentity(
            repository_id=self.pull_request.repository_id,
            number=self.pull_request.number,
        )
