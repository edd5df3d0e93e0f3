"""Errors specific to the repository directory."""

from __future__ import annotations


class DirectoryError(Exception):
    """Base class for repository directory errors."""


class InvalidRepositoryNameError(DirectoryError, ValueError):
    """Raised when a full name is not in ``owner/name`` form."""

    def __init__(self, full_name: str) -> None:
        """Record the rejected name."""
        self.full_name = full_name
        super().__init__(
            f"Invalid repository name: expected 'owner/name', got {full_name!r}"
        )


class RepositoryConflictError(DirectoryError):
    """Raised when a full name is already bound to another GitHub id."""

    def __init__(self, full_name: str, github_repo_id: int) -> None:
        """Record the conflicting name and the id that already owns it."""
        self.full_name = full_name
        self.github_repo_id = github_repo_id
        super().__init__(
            f"{full_name} is already registered for GitHub repository "
            f"{github_repo_id}"
        )
