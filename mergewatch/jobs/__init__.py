"""Background jobs: Dramatiq broker setup, actors and queue producers.

Import :mod:`mergewatch.jobs.actors` to declare the actors; the producers
here can be used without it.
"""

from __future__ import annotations

from .producers import (
    DramatiqNotificationDispatcher,
    DramatiqWebhookQueue,
    WebhookQueue,
)

__all__ = [
    "DramatiqNotificationDispatcher",
    "DramatiqWebhookQueue",
    "WebhookQueue",
]
