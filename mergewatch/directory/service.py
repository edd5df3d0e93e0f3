"""Repository directory lookups and registration.

The directory answers one question for the webhook pipeline: which tracked
repository, if any, does a payload refer to? Lookups key off GitHub's
stable repository id. The display name (``owner/name``) is consulted only
when a payload carries no id at all, and such matches are reported with
:attr:`LookupConfidence.DISPLAY_NAME` so callers can tell them apart.
"""

from __future__ import annotations

import typing as typ

from sqlalchemy import select

from mergewatch.directory.errors import (
    InvalidRepositoryNameError,
    RepositoryConflictError,
)
from mergewatch.directory.models import LookupConfidence, RepositoryMatch
from mergewatch.directory.storage import Repository

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from mergewatch.directory.models import (
        RepositoryIdentity,
        RepositoryRegistration,
    )


def split_full_name(full_name: str) -> tuple[str, str]:
    """Split ``owner/name`` into its parts.

    >>> split_full_name("octo/reef")
    ('octo', 'reef')

    """
    owner, sep, name = full_name.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise InvalidRepositoryNameError(full_name)
    return owner, name


class RepositoryDirectory:
    """Session-scoped view over the ``repositories`` table.

    Parameters
    ----------
    session:
        Session the lookups run in. Callers own its transaction.

    """

    def __init__(self, session: AsyncSession) -> None:
        """Bind the directory to an open session."""
        self._session = session

    async def find_by_external_id(self, github_repo_id: int) -> Repository | None:
        """Return the active repository with this GitHub id, if tracked."""
        return await self._session.scalar(
            select(Repository).where(
                Repository.github_repo_id == github_repo_id,
                Repository.is_active.is_(True),
            )
        )

    async def find_by_name(self, full_name: str) -> Repository | None:
        """Return the active repository with this ``owner/name``, if tracked."""
        return await self._session.scalar(
            select(Repository).where(
                Repository.full_name == full_name,
                Repository.is_active.is_(True),
            )
        )

    async def find(self, identity: RepositoryIdentity) -> RepositoryMatch | None:
        """Resolve a payload identity to a tracked repository.

        When the identity carries a GitHub id, only the id is consulted; a
        miss is final even if a repository with the same display name
        exists. The name is used only for id-less identities.

        Returns
        -------
        RepositoryMatch | None
            The match and how it was made, or ``None`` for untracked or
            inactive repositories.

        """
        if identity.is_empty:
            return None

        if identity.github_repo_id is not None:
            repo = await self.find_by_external_id(identity.github_repo_id)
            confidence = LookupConfidence.EXTERNAL_ID
        else:
            repo = await self.find_by_name(typ.cast("str", identity.full_name))
            confidence = LookupConfidence.DISPLAY_NAME

        if repo is None:
            return None
        return RepositoryMatch(repo, confidence)

    async def register(
        self, registration: RepositoryRegistration
    ) -> tuple[Repository, bool]:
        """Insert or update a repository keyed by its GitHub id.

        A rename on GitHub shows up here as a new ``full_name`` for an
        existing id and simply overwrites the stored name.

        Returns
        -------
        tuple[Repository, bool]
            The stored repository and ``True`` when it was newly created.

        Raises
        ------
        InvalidRepositoryNameError
            If ``full_name`` is not ``owner/name``.
        RepositoryConflictError
            If another GitHub id already owns ``full_name``.

        """
        owner, name = split_full_name(registration.full_name)

        holder = await self._session.scalar(
            select(Repository).where(Repository.full_name == registration.full_name)
        )
        if holder is not None and holder.github_repo_id != registration.github_repo_id:
            raise RepositoryConflictError(
                registration.full_name, holder.github_repo_id
            )

        repo = await self._session.scalar(
            select(Repository).where(
                Repository.github_repo_id == registration.github_repo_id
            )
        )
        created = repo is None
        if repo is None:
            repo = Repository(github_repo_id=registration.github_repo_id)
            self._session.add(repo)

        repo.full_name = registration.full_name
        repo.owner = owner
        repo.name = name
        repo.default_branch = registration.default_branch
        repo.slack_channel_id = registration.slack_channel_id
        repo.installation_id = registration.installation_id
        repo.is_active = registration.is_active
        await self._session.flush()
        return repo, created
