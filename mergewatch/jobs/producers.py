"""Queue producers bridging domain objects onto Dramatiq actors.

The web process and the reconciler depend on the small protocols below
rather than on Dramatiq, which keeps them testable with recording fakes.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import dramatiq

    from mergewatch.pulls.models import PullRequestIdentity
    from mergewatch.webhooks.models import WebhookEvent


class WebhookQueue(typ.Protocol):
    """Durable producer for webhook reconciliation jobs."""

    def enqueue(self, event: WebhookEvent) -> None:
        """Enqueue *event* for asynchronous reconciliation."""
        ...


class DramatiqWebhookQueue:
    """Send webhook events to the reconciliation actor."""

    def __init__(self, actor: dramatiq.Actor) -> None:
        """Wrap the actor that reconciles webhook events."""
        self._actor = actor

    def enqueue(self, event: WebhookEvent) -> None:
        """Send the event's job arguments to the broker."""
        self._actor.send(**event.to_job_kwargs())


class DramatiqNotificationDispatcher:
    """Send pull request identities to the team notification actor."""

    def __init__(self, actor: dramatiq.Actor) -> None:
        """Wrap the actor that notifies teams."""
        self._actor = actor

    def dispatch(self, identity: PullRequestIdentity) -> None:
        """Send *identity* to the broker."""
        self._actor.send(
            repository_id=identity.repository_id,
            number=identity.number,
        )
