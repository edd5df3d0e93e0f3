"""Persistence model for the repository directory."""

from __future__ import annotations

import datetime as dt  # noqa: TC003

from sqlalchemy import BigInteger, Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mergewatch.common.storage import Base, UTCDateTime
from mergewatch.common.time import utcnow


class Repository(Base):
    """GitHub repository tracked for merge notifications.

    ``github_repo_id`` is the canonical join key for webhook payloads;
    ``full_name`` is kept for display and for the low-confidence lookup path
    used when a payload carries no stable id.
    """

    __tablename__ = "repositories"
    __table_args__ = (
        UniqueConstraint("github_repo_id", name="uq_repositories_github_repo_id"),
        UniqueConstraint("full_name", name="uq_repositories_full_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    github_repo_id: Mapped[int] = mapped_column(BigInteger)
    full_name: Mapped[str] = mapped_column(String(255))
    owner: Mapped[str] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(String(255))
    default_branch: Mapped[str] = mapped_column(String(255), default="main")
    slack_channel_id: Mapped[str | None] = mapped_column(String(64), default=None)
    installation_id: Mapped[str | None] = mapped_column(String(64), default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(
        UTCDateTime(), default=utcnow, onupdate=utcnow
    )
