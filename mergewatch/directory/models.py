"""Value objects exchanged with the repository directory."""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

if typ.TYPE_CHECKING:
    from mergewatch.directory.storage import Repository


class LookupConfidence(enum.StrEnum):
    """How a repository was matched to a webhook payload."""

    EXTERNAL_ID = "external_id"
    DISPLAY_NAME = "display_name"


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryIdentity:
    """Repository identity as supplied by a webhook payload.

    Either field may be missing; ``github_repo_id`` wins whenever present.
    """

    github_repo_id: int | None = None
    full_name: str | None = None

    @property
    def is_empty(self) -> bool:
        """Return True when the payload carried no usable identity."""
        return self.github_repo_id is None and not self.full_name

    def describe(self) -> str:
        """Render the identity for log lines."""
        return f"{self.full_name or '?'} (id: {self.github_repo_id})"


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryMatch:
    """Result of a successful directory lookup."""

    repository: Repository
    confidence: LookupConfidence


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryRegistration:
    """Fields accepted when registering a repository in the directory."""

    github_repo_id: int
    full_name: str
    default_branch: str = "main"
    slack_channel_id: str | None = None
    installation_id: str | None = None
    is_active: bool = True
