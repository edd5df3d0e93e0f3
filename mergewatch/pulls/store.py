"""Upserts and lookups for the pull request store."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from mergewatch.pulls.errors import PullRequestUpsertError
from mergewatch.pulls.models import UpsertResult
from mergewatch.pulls.storage import PullRequest

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from mergewatch.directory.storage import Repository
    from mergewatch.pulls.models import PullRequestAttributes, PullRequestIdentity


def _apply(pull_request: PullRequest, attributes: PullRequestAttributes) -> None:
    for field in dc.fields(attributes):
        setattr(pull_request, field.name, getattr(attributes, field.name))


class PullRequestStore:
    """Session-scoped access to ``pull_requests``.

    The pair ``(repository_id, number)`` is the upsert key. Existing rows
    are read with ``SELECT ... FOR UPDATE`` so concurrent reconciliations of
    the same pull request serialise on the row; two workers racing to create
    the same row are reconciled by the unique constraint, with the loser
    reloading the winner's row and updating it in place.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Bind the store to an open session."""
        self._session = session

    async def get(self, identity: PullRequestIdentity) -> PullRequest | None:
        """Return the stored pull request for *identity*, if any."""
        return await self._load(identity.repository_id, identity.number)

    async def upsert(
        self,
        repository: Repository,
        number: int,
        attributes: PullRequestAttributes,
    ) -> UpsertResult:
        """Create or update the pull request ``number`` of *repository*.

        Every attribute is overwritten, so replaying the same attributes
        leaves the row unchanged.

        Raises
        ------
        PullRequestUpsertError
            If the insert hit the unique constraint but no row could be
            reloaded afterwards.

        """
        existing = await self._load(repository.id, number, for_update=True)
        if existing is not None:
            _apply(existing, attributes)
            await self._session.flush()
            return UpsertResult(existing, created=False)

        pull_request = PullRequest(repository_id=repository.id, number=number)
        _apply(pull_request, attributes)
        try:
            async with self._session.begin_nested():
                self._session.add(pull_request)
                await self._session.flush()
        except IntegrityError as exc:
            with self._session.no_autoflush:
                existing = await self._load(repository.id, number, for_update=True)
            if existing is None:
                raise PullRequestUpsertError(repository.id, number) from exc
            _apply(existing, attributes)
            await self._session.flush()
            return UpsertResult(existing, created=False)

        return UpsertResult(pull_request, created=True)

    async def _load(
        self, repository_id: int, number: int, *, for_update: bool = False
    ) -> PullRequest | None:
        stmt = select(PullRequest).where(
            PullRequest.repository_id == repository_id,
            PullRequest.number == number,
        )
        if for_update:
            stmt = stmt.with_for_update()
        return await self._session.scalar(stmt)
