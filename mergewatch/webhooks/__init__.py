"""Webhook reconciliation: payload models, filtering and store updates."""

from __future__ import annotations

from .deliveries import DeliveryLedger, ProcessedDelivery
from .errors import PayloadShapeError, PayloadShapeReason
from .models import PULL_REQUEST_EVENT, MergedPullRequest, WebhookEvent
from .observability import IgnoreReason, WebhookEventLogger
from .reconciler import (
    NotificationDispatcher,
    ReconcileOutcome,
    ReconcileStatus,
    WebhookReconciler,
)

__all__ = [
    "PULL_REQUEST_EVENT",
    "DeliveryLedger",
    "IgnoreReason",
    "MergedPullRequest",
    "NotificationDispatcher",
    "PayloadShapeError",
    "PayloadShapeReason",
    "ProcessedDelivery",
    "ReconcileOutcome",
    "ReconcileStatus",
    "WebhookEvent",
    "WebhookEventLogger",
    "WebhookReconciler",
]
