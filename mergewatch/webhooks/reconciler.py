"""Reconcile GitHub webhook deliveries into the pull request store.

A delivery produces at most one pull request upsert and at most one team
notification, or nothing at all. Filtering happens here rather than at the
HTTP receiver so new event kinds can be handled without touching it:

1. anything other than a ``pull_request`` event is dropped;
2. pull requests whose ``merged`` flag is not ``true`` are dropped;
3. payloads for repositories missing from the directory are dropped;
4. the pull request is upserted by ``(repository, number)``;
5. the team notification job is enqueued with the stored identity.

Drops are not errors. Payload shape problems in events that survive the
filters raise :class:`PayloadShapeError` before anything is written.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import enum
import typing as typ

from mergewatch.directory.models import LookupConfidence
from mergewatch.directory.service import RepositoryDirectory
from mergewatch.pulls.store import PullRequestStore
from mergewatch.webhooks.deliveries import DeliveryLedger
from mergewatch.webhooks.models import (
    PULL_REQUEST_EVENT,
    decode_envelope,
    decode_merged_pull_request,
)
from mergewatch.webhooks.observability import IgnoreReason, WebhookEventLogger

if typ.TYPE_CHECKING:
    import datetime as dt

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from mergewatch.pulls.models import PullRequestIdentity
    from mergewatch.webhooks.models import WebhookEvent


class NotificationDispatcher(typ.Protocol):
    """Fire-and-forget producer for the team notification job."""

    def dispatch(self, identity: PullRequestIdentity) -> None:
        """Enqueue a notification for the stored pull request."""
        ...


class ReconcileStatus(enum.StrEnum):
    """Terminal state of one reconciliation."""

    IGNORED = "ignored"
    CREATED = "created"
    UPDATED = "updated"


@dc.dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    """What a reconciliation did, for callers and tests."""

    status: ReconcileStatus
    reason: IgnoreReason | None = None
    identity: PullRequestIdentity | None = None

    @classmethod
    def ignored(cls, reason: IgnoreReason) -> ReconcileOutcome:
        """Return an outcome for a dropped delivery."""
        return cls(ReconcileStatus.IGNORED, reason=reason)


@dc.dataclass(frozen=True, slots=True)
class _Upserted:
    identity: PullRequestIdentity
    repository: str
    created: bool


class WebhookReconciler:
    """Apply webhook deliveries to the repository's pull request state.

    Parameters
    ----------
    session_factory:
        Async session factory for the directory and store.
    dispatcher:
        Producer for the team notification job.
    dedupe_window:
        Lifetime of delivery-id records. A delivery is recorded only after
        its notification was enqueued. ``None`` disables the idempotency
        cache.
    event_logger:
        Structured event sink; a default logger is used when omitted.

    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dispatcher: NotificationDispatcher,
        *,
        dedupe_window: dt.timedelta | None = None,
        event_logger: WebhookEventLogger | None = None,
    ) -> None:
        """Store collaborators used by every reconciliation."""
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._dedupe_window = dedupe_window
        self._events = event_logger or WebhookEventLogger()

    async def reconcile(self, event: WebhookEvent) -> ReconcileOutcome:
        """Reconcile a single delivery.

        Raises
        ------
        PayloadShapeError
            If a merge event for a tracked repository lacks required fields.

        """
        if event.event_type != PULL_REQUEST_EVENT:
            return self._ignore(event, IgnoreReason.UNSUPPORTED_EVENT)

        envelope = decode_envelope(event.payload)
        if not envelope.is_merged:
            return self._ignore(
                event,
                IgnoreReason.NOT_MERGED,
                detail=(
                    f"action={envelope.action} "
                    f"number={envelope.pull_request.number}"
                ),
            )

        identity = envelope.repository_identity
        async with self._session_factory() as session, session.begin():
            match = await RepositoryDirectory(session).find(identity)
            if match is None:
                return self._ignore(
                    event, IgnoreReason.UNKNOWN_REPOSITORY, detail=identity.describe()
                )
            if match.confidence is LookupConfidence.DISPLAY_NAME:
                self._events.log_repository_fallback(
                    delivery_id=event.delivery_id, identity=identity
                )

            pull_request = decode_merged_pull_request(event.payload)
            attributes = pull_request.to_attributes()

            if await self._already_processed(session, event.delivery_id):
                return self._ignore(event, IgnoreReason.DUPLICATE_DELIVERY)

            result = await PullRequestStore(session).upsert(
                match.repository, pull_request.number, attributes
            )
            upserted = _Upserted(
                identity=result.identity,
                repository=match.repository.full_name,
                created=result.created,
            )

        self._events.log_reconciled(
            delivery_id=event.delivery_id,
            repository=upserted.repository,
            number=upserted.identity.number,
            created=upserted.created,
        )
        await asyncio.to_thread(self._dispatcher.dispatch, upserted.identity)
        self._events.log_notification_enqueued(upserted.identity)
        await self._record_delivery(event.delivery_id)
        return ReconcileOutcome(
            ReconcileStatus.CREATED if upserted.created else ReconcileStatus.UPDATED,
            identity=upserted.identity,
        )

    async def _already_processed(
        self, session: AsyncSession, delivery_id: str | None
    ) -> bool:
        if self._dedupe_window is None or not delivery_id:
            return False
        return await DeliveryLedger(session, self._dedupe_window).is_recorded(
            delivery_id
        )

    async def _record_delivery(self, delivery_id: str | None) -> None:
        """Record a notified delivery so later replays are skipped."""
        if self._dedupe_window is None or not delivery_id:
            return
        async with self._session_factory() as session, session.begin():
            await DeliveryLedger(session, self._dedupe_window).record(delivery_id)

    def _ignore(
        self,
        event: WebhookEvent,
        reason: IgnoreReason,
        *,
        detail: str | None = None,
    ) -> ReconcileOutcome:
        self._events.log_ignored(
            event_type=event.event_type,
            delivery_id=event.delivery_id,
            reason=reason,
            detail=detail,
        )
        return ReconcileOutcome.ignored(reason)
