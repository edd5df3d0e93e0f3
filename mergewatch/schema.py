"""Create the mergewatch schema in one pass.

Importing the storage modules registers every table with ``Base.metadata``
before ``create_all`` runs.
"""

from __future__ import annotations

import typing as typ

from mergewatch.common.storage import Base
from mergewatch.directory.storage import Repository
from mergewatch.pulls.storage import PullRequest
from mergewatch.webhooks.deliveries import ProcessedDelivery

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

TABLES = (
    Repository.__table__,
    PullRequest.__table__,
    ProcessedDelivery.__table__,
)


async def init_database(engine: AsyncEngine) -> None:
    """Create the directory, pull request and delivery ledger tables if absent."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, tables=TABLES)
