"""Errors raised by the pull request store."""

from __future__ import annotations


class PullRequestUpsertError(RuntimeError):
    """Raised when a unique-key conflict cannot be resolved into an update."""

    def __init__(self, repository_id: int, number: int) -> None:
        """Record the key that could neither be inserted nor reloaded."""
        self.repository_id = repository_id
        self.number = number
        super().__init__(
            f"pull request #{number} for repository {repository_id} "
            "conflicted on insert but could not be reloaded"
        )
