"""Application factory for the Mergewatch Falcon ASGI application.

This module provides ``create_app()`` which builds the Falcon ASGI
application with health endpoints and, when a webhook queue is supplied,
the GitHub webhook receiver.

Usage
-----
Create a health-only app::

    app = create_app()

Create an app that accepts webhooks::

    from mergewatch.api.app import AppDependencies, create_app
    from mergewatch.jobs import DramatiqWebhookQueue
    from mergewatch.jobs.actors import process_github_webhook_job

    deps = AppDependencies(
        webhook_queue=DramatiqWebhookQueue(process_github_webhook_job),
        webhook_secret="s3cret",
    )
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from mergewatch.api.errors import (
    InvalidPayloadError,
    WebhookSignatureError,
    handle_invalid_payload,
    handle_webhook_signature,
)
from mergewatch.api.health.resources import HealthResource, ReadyResource

if typ.TYPE_CHECKING:
    from mergewatch.jobs.producers import WebhookQueue

__all__ = ["WEBHOOK_ROUTE", "AppDependencies", "create_app"]

WEBHOOK_ROUTE = "/github-webhooks"


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    webhook_queue
        Producer for reconciliation jobs. The webhook route is only
        registered when this is provided.
    webhook_secret
        Optional shared secret for ``X-Hub-Signature-256`` verification.

    """

    webhook_queue: WebhookQueue | None = None
    webhook_secret: str | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None`` or without a
        webhook queue, only ``/health`` and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    app = falcon.asgi.App()  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource())

    if dependencies is not None and dependencies.webhook_queue is not None:
        from mergewatch.api.webhooks.resources import GithubWebhookResource

        app.add_route(
            WEBHOOK_ROUTE,
            GithubWebhookResource(
                dependencies.webhook_queue,
                secret=dependencies.webhook_secret,
            ),
        )

    app.add_error_handler(InvalidPayloadError, handle_invalid_payload)
    app.add_error_handler(WebhookSignatureError, handle_webhook_signature)

    return app
