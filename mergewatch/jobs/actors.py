"""Dramatiq actors for webhook reconciliation and team notification.

Both actors run on the worker pool, decoupled from the HTTP receiver by
the broker. Unhandled exceptions fail the message and Dramatiq's
``Retries`` middleware redelivers it with exponential backoff.

Usage
-----
Run a worker::

    MERGEWATCH_DATABASE_URL=postgresql+asyncpg://... \
    MERGEWATCH_REDIS_URL=redis://localhost:6379/0 \
    dramatiq mergewatch.jobs.actors

Queue a delivery by hand:

>>> process_github_webhook_job.send(
...     event_type="pull_request",
...     delivery_id="72d3162e-cc78-11e3-81ab-4c9367dc0958",
...     payload={"action": "closed", "pull_request": {...}, "repository": {...}},
... )

"""

from __future__ import annotations

import asyncio
import typing as typ

import dramatiq
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mergewatch.config import MergewatchConfig
from mergewatch.jobs._broker import configure_broker
from mergewatch.jobs.producers import DramatiqNotificationDispatcher
from mergewatch.logging import get_logger, log_info
from mergewatch.pulls.models import PullRequestIdentity
from mergewatch.teams.notifier import LoggingTeamNotifier, TeamNotifier
from mergewatch.teams.service import TeamNotificationService
from mergewatch.webhooks.models import WebhookEvent
from mergewatch.webhooks.reconciler import WebhookReconciler

SessionFactory: typ.TypeAlias = async_sessionmaker[AsyncSession]

T = typ.TypeVar("T")

logger = get_logger(__name__)

configure_broker()

_MAX_RETRIES = 10
_MIN_BACKOFF_MS = 1_000
_MAX_BACKOFF_MS = 5 * 60 * 1_000


def _run_with_database(
    async_fn: typ.Callable[[SessionFactory, MergewatchConfig], typ.Awaitable[T]],
) -> T:
    """Run *async_fn* against a fresh engine on a fresh event loop.

    The engine is disposed before the loop closes so pooled connections
    never outlive the loop they were opened on.
    """
    config = MergewatchConfig.from_env()
    database_url = config.require_database_url()

    async def run() -> T:
        engine = create_async_engine(database_url)
        try:
            session_factory = async_sessionmaker(engine, expire_on_commit=False)
            return await async_fn(session_factory, config)
        finally:
            await engine.dispose()

    return asyncio.run(run())


def _build_notifier() -> TeamNotifier:
    return LoggingTeamNotifier()


@dramatiq.actor(
    queue_name="team_notifications",
    max_retries=_MAX_RETRIES,
    min_backoff=_MIN_BACKOFF_MS,
    max_backoff=_MAX_BACKOFF_MS,
)
def update_pull_request_teams_job(repository_id: int, number: int) -> str:
    """Notify the teams responsible for a merged pull request.

    Parameters
    ----------
    repository_id
        Directory id of the repository owning the pull request.
    number
        Pull request number within the repository.

    Returns
    -------
    str
        ``owner/name#number`` of the notified pull request.

    Raises
    ------
    PullRequestNotFoundError
        If the pull request is not stored (yet); the message is retried.

    """
    identity = PullRequestIdentity(repository_id=repository_id, number=number)

    async def execute(
        session_factory: SessionFactory, _config: MergewatchConfig
    ) -> str:
        service = TeamNotificationService(session_factory, _build_notifier())
        notification = await service.notify(identity)
        return f"{notification.repository}#{notification.number}"

    return _run_with_database(execute)


@dramatiq.actor(
    queue_name="github_webhooks",
    max_retries=_MAX_RETRIES,
    min_backoff=_MIN_BACKOFF_MS,
    max_backoff=_MAX_BACKOFF_MS,
)
def process_github_webhook_job(
    event_type: str | None,
    delivery_id: str | None,
    payload: dict[str, typ.Any],
) -> str:
    """Reconcile one GitHub webhook delivery.

    Parameters
    ----------
    event_type
        Value of the ``X-GitHub-Event`` header.
    delivery_id
        Value of the ``X-GitHub-Delivery`` header.
    payload
        Decoded webhook body.

    Returns
    -------
    str
        The reconciliation status (``ignored``, ``created`` or ``updated``).

    Raises
    ------
    PayloadShapeError
        If a merge event for a tracked repository is malformed.

    """
    event = WebhookEvent(
        event_type=event_type, delivery_id=delivery_id, payload=payload
    )
    log_info(
        logger,
        "Processing GitHub webhook: event=%s, delivery=%s",
        event_type,
        delivery_id,
    )

    async def execute(session_factory: SessionFactory, config: MergewatchConfig) -> str:
        reconciler = WebhookReconciler(
            session_factory,
            DramatiqNotificationDispatcher(update_pull_request_teams_job),
            dedupe_window=config.delivery_dedupe_window,
        )
        outcome = await reconciler.reconcile(event)
        return outcome.status.value

    return _run_with_database(execute)
