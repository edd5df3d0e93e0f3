"""Persistence model for the pull request store."""

from __future__ import annotations

import datetime as dt  # noqa: TC003
import enum

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mergewatch.common.storage import Base, UTCDateTime
from mergewatch.directory.storage import Repository


class PullRequestState(enum.StrEnum):
    """GitHub pull request states as reported in webhook payloads."""

    OPEN = "open"
    CLOSED = "closed"


class PullRequest(Base):
    """Last-known state of a tracked pull request.

    Rows are keyed by ``(repository_id, number)``; ``github_pr_id`` is
    informational and overwritten on every reconciliation. The GitHub
    timestamps are copied from payloads and never recomputed locally.
    """

    __tablename__ = "pull_requests"
    __table_args__ = (
        UniqueConstraint(
            "repository_id", "number", name="uq_pull_requests_repository_number"
        ),
        Index("ix_pull_requests_github_pr_id", "github_pr_id"),
        Index("ix_pull_requests_state", "state"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False
    )
    number: Mapped[int]
    github_pr_id: Mapped[str] = mapped_column(String(64))
    title: Mapped[str] = mapped_column(String(1024))
    body: Mapped[str | None] = mapped_column(Text(), default=None)
    state: Mapped[str] = mapped_column(String(16))
    author: Mapped[str] = mapped_column(String(255))
    base_branch: Mapped[str] = mapped_column(String(255))
    base_sha: Mapped[str | None] = mapped_column(String(64), default=None)
    head_branch: Mapped[str] = mapped_column(String(255))
    head_sha: Mapped[str | None] = mapped_column(String(64), default=None)
    merged_at: Mapped[dt.datetime | None] = mapped_column(UTCDateTime())
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime())
    updated_at: Mapped[dt.datetime] = mapped_column(UTCDateTime())

    repository: Mapped[Repository] = relationship()
