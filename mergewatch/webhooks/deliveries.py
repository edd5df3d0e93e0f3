"""Short-lived idempotency cache keyed by ``X-GitHub-Delivery``.

GitHub redelivers a webhook with the same delivery id, and the job queue
may run a job more than once. When enabled, the reconciler checks the
ledger before upserting and records the delivery id only once the team
notification has been handed to the broker. A worker that dies between the
upsert and the hand-off leaves no record, so the redelivered job notifies.
Two copies of a delivery processed concurrently may both notify; the
pipeline stays at-least-once.
"""

from __future__ import annotations

import datetime as dt  # noqa: TC003
import typing as typ

from sqlalchemy import Index, String, delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, mapped_column

from mergewatch.common.storage import Base, UTCDateTime
from mergewatch.common.time import utcnow

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class ProcessedDelivery(Base):
    """Delivery id already reconciled and notified within the dedupe window."""

    __tablename__ = "processed_deliveries"
    __table_args__ = (Index("ix_processed_deliveries_processed_at", "processed_at"),)

    delivery_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    processed_at: Mapped[dt.datetime] = mapped_column(UTCDateTime(), default=utcnow)


class DeliveryLedger:
    """Look up and record delivery ids within an open session.

    Parameters
    ----------
    session:
        Session whose transaction the lookups and records join.
    window:
        How long a record suppresses replays of the same delivery id.

    """

    def __init__(self, session: AsyncSession, window: dt.timedelta) -> None:
        """Bind the ledger to a session and retention window."""
        self._session = session
        self._window = window

    async def is_recorded(
        self, delivery_id: str, *, now: dt.datetime | None = None
    ) -> bool:
        """Return True when *delivery_id* was recorded inside the window.

        Records older than the window are purged first, so an id replayed
        after the window is treated as new.
        """
        await self.purge_expired(now=now)
        stored = await self._session.scalar(
            select(ProcessedDelivery.delivery_id).where(
                ProcessedDelivery.delivery_id == delivery_id
            )
        )
        return stored is not None

    async def record(self, delivery_id: str, *, now: dt.datetime | None = None) -> bool:
        """Record *delivery_id*, returning False if it was already recorded."""
        try:
            async with self._session.begin_nested():
                self._session.add(
                    ProcessedDelivery(
                        delivery_id=delivery_id, processed_at=now or utcnow()
                    )
                )
                await self._session.flush()
        except IntegrityError:
            return False
        return True

    async def purge_expired(self, *, now: dt.datetime | None = None) -> None:
        """Delete records that fell out of the window."""
        cutoff = (now or utcnow()) - self._window
        await self._session.execute(
            delete(ProcessedDelivery).where(ProcessedDelivery.processed_at < cutoff)
        )
