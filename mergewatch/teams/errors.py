"""Errors raised by the team notification consumer."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from mergewatch.pulls.models import PullRequestIdentity


class PullRequestNotFoundError(LookupError):
    """Raised when a notification references a pull request not yet stored.

    The job is retried, which covers a consumer that outruns the commit of
    the reconciliation that enqueued it.
    """

    def __init__(self, identity: PullRequestIdentity) -> None:
        """Record the identity that could not be resolved."""
        self.identity = identity
        super().__init__(
            f"pull request #{identity.number} for repository "
            f"{identity.repository_id} not found"
        )
