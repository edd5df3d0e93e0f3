"""Structured log events for the webhook pipeline.

Every outcome of a delivery is observable only through these lines: the
webhook sender sees 200 or 400, and dropped events leave no other trace.
Events use the ``[event.type] key=value`` layout so log aggregators can
parse them.

Usage
-----
>>> event_logger = WebhookEventLogger()
>>> event_logger.log_received(event_type="pull_request", delivery_id="abc")

"""

from __future__ import annotations

import enum
import typing as typ

from mergewatch.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    from mergewatch.directory.models import RepositoryIdentity
    from mergewatch.pulls.models import PullRequestIdentity

logger = get_logger(__name__)


class WebhookEventType(enum.StrEnum):
    """Structured log event types for webhook processing."""

    RECEIVED = "webhook.received"
    REJECTED = "webhook.rejected"
    IGNORED = "webhook.ignored"
    REPOSITORY_FALLBACK = "webhook.repository.fallback"
    PULL_REQUEST_RECONCILED = "pull_request.reconciled"
    NOTIFICATION_ENQUEUED = "notification.enqueued"
    NOTIFICATION_SENT = "notification.sent"
    NOTIFICATION_FAILED = "notification.failed"


class IgnoreReason(enum.StrEnum):
    """Why a delivery produced no side effects."""

    UNSUPPORTED_EVENT = "unsupported_event"
    NOT_MERGED = "not_merged"
    UNKNOWN_REPOSITORY = "unknown_repository"
    DUPLICATE_DELIVERY = "duplicate_delivery"


class WebhookEventLogger:
    """Emit structured webhook events via femtologging."""

    def log_received(self, *, event_type: str | None, delivery_id: str | None) -> None:
        """Log an accepted delivery before it is enqueued."""
        log_info(
            logger,
            "[%s] event_type=%s delivery_id=%s",
            WebhookEventType.RECEIVED,
            event_type,
            delivery_id,
        )

    def log_rejected(
        self,
        *,
        delivery_id: str | None,
        reason: str,
        raw_body: bytes,
    ) -> None:
        """Log a delivery refused at the HTTP boundary, with its raw body."""
        log_error(
            logger,
            "[%s] delivery_id=%s reason=%s raw_body=%r",
            WebhookEventType.REJECTED,
            delivery_id,
            reason,
            raw_body,
        )

    def log_ignored(
        self,
        *,
        event_type: str | None,
        delivery_id: str | None,
        reason: IgnoreReason,
        detail: str | None = None,
    ) -> None:
        """Log a delivery that was deliberately dropped.

        Unknown repositories are logged at WARNING so misconfigured
        directories surface; every other reason is routine.
        """
        template = "[%s] event_type=%s delivery_id=%s reason=%s detail=%s"
        args = (
            WebhookEventType.IGNORED,
            event_type,
            delivery_id,
            reason,
            detail,
        )
        if reason is IgnoreReason.UNKNOWN_REPOSITORY:
            log_warning(logger, template, *args)
        else:
            log_info(logger, template, *args)

    def log_repository_fallback(
        self, *, delivery_id: str | None, identity: RepositoryIdentity
    ) -> None:
        """Log a repository matched by display name instead of GitHub id."""
        log_warning(
            logger,
            "[%s] delivery_id=%s repository=%s",
            WebhookEventType.REPOSITORY_FALLBACK,
            delivery_id,
            identity.describe(),
        )

    def log_reconciled(
        self,
        *,
        delivery_id: str | None,
        repository: str,
        number: int,
        created: bool,
    ) -> None:
        """Log a successful pull request upsert."""
        log_info(
            logger,
            "[%s] delivery_id=%s repository=%s number=%d outcome=%s",
            WebhookEventType.PULL_REQUEST_RECONCILED,
            delivery_id,
            repository,
            number,
            "created" if created else "updated",
        )

    def log_notification_enqueued(self, identity: PullRequestIdentity) -> None:
        """Log the hand-off to the team notification job."""
        log_info(
            logger,
            "[%s] repository_id=%d number=%d",
            WebhookEventType.NOTIFICATION_ENQUEUED,
            identity.repository_id,
            identity.number,
        )

    def log_notification_sent(
        self, *, repository: str, number: int, channel: str | None
    ) -> None:
        """Log a team notification handed to the notifier."""
        log_info(
            logger,
            "[%s] repository=%s number=%d channel=%s",
            WebhookEventType.NOTIFICATION_SENT,
            repository,
            number,
            channel,
        )

    def log_notification_failed(
        self, identity: PullRequestIdentity, error: BaseException
    ) -> None:
        """Log a failed team notification before the job is retried."""
        log_error(
            logger,
            "[%s] repository_id=%d number=%d error_type=%s error_message=%s",
            WebhookEventType.NOTIFICATION_FAILED,
            identity.repository_id,
            identity.number,
            type(error).__name__,
            str(error),
            exc_info=error,
        )
