"""Repository directory: which GitHub repositories mergewatch tracks.

Usage
-----
Resolve a webhook payload's repository inside an open session::

    from mergewatch.directory import RepositoryDirectory, RepositoryIdentity

    directory = RepositoryDirectory(session)
    match = await directory.find(RepositoryIdentity(github_repo_id=12345))

Register a repository from the command line::

    mergewatch-directory register octo/reef --github-repo-id 12345 \
        --slack-channel C0123456

"""

from mergewatch.directory.errors import (
    DirectoryError,
    InvalidRepositoryNameError,
    RepositoryConflictError,
)
from mergewatch.directory.models import (
    LookupConfidence,
    RepositoryIdentity,
    RepositoryMatch,
    RepositoryRegistration,
)
from mergewatch.directory.service import RepositoryDirectory, split_full_name
from mergewatch.directory.storage import Repository

__all__ = [
    "DirectoryError",
    "InvalidRepositoryNameError",
    "LookupConfidence",
    "Repository",
    "RepositoryConflictError",
    "RepositoryDirectory",
    "RepositoryIdentity",
    "RepositoryMatch",
    "RepositoryRegistration",
    "split_full_name",
]
