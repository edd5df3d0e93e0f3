"""Falcon resource receiving GitHub webhook deliveries.

The receiver does no filtering: every well-formed delivery is enqueued and
answered with 200 so GitHub does not retry. Bodies that cannot be parsed
are rejected with 400 and their raw bytes logged.
"""

from __future__ import annotations

import asyncio
import typing as typ
from http import HTTPStatus

from mergewatch.api.errors import InvalidPayloadError, WebhookSignatureError
from mergewatch.api.webhooks.parsing import parse_webhook_body
from mergewatch.api.webhooks.signature import verify_signature
from mergewatch.webhooks.models import WebhookEvent
from mergewatch.webhooks.observability import WebhookEventLogger

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from mergewatch.jobs.producers import WebhookQueue

__all__ = ["GithubWebhookResource"]

EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"
SIGNATURE_HEADER = "X-Hub-Signature-256"


class GithubWebhookResource:
    """Accept GitHub webhook deliveries and enqueue them for reconciliation.

    Parameters
    ----------
    queue
        Producer for the reconciliation job.
    secret
        Shared webhook secret. When set, ``X-Hub-Signature-256`` must
        match the body or the delivery is refused with 401.
    event_logger
        Structured event sink; a default logger is used when omitted.

    """

    def __init__(
        self,
        queue: WebhookQueue,
        *,
        secret: str | None = None,
        event_logger: WebhookEventLogger | None = None,
    ) -> None:
        """Store the queue and verification settings."""
        self._queue = queue
        self._secret = secret
        self._events = event_logger or WebhookEventLogger()

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /github-webhooks.

        Raises
        ------
        WebhookSignatureError
            If a secret is configured and the signature does not match.
        InvalidPayloadError
            If the body is neither form data nor a JSON object.

        """
        event_type = req.get_header(EVENT_HEADER)
        delivery_id = req.get_header(DELIVERY_HEADER)
        raw_body = await req.stream.read()

        try:
            if self._secret is not None:
                verify_signature(
                    raw_body, req.get_header(SIGNATURE_HEADER), self._secret
                )
            payload = parse_webhook_body(raw_body, req.content_type)
        except (InvalidPayloadError, WebhookSignatureError) as exc:
            self._events.log_rejected(
                delivery_id=delivery_id, reason=exc.reason, raw_body=raw_body
            )
            raise

        self._events.log_received(event_type=event_type, delivery_id=delivery_id)
        event = WebhookEvent(
            event_type=event_type, delivery_id=delivery_id, payload=payload
        )
        # Broker clients block on I/O.
        await asyncio.to_thread(self._queue.enqueue, event)

        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK
