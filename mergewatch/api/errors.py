"""Domain exceptions and Falcon error handlers for the API layer.

Usage
-----
Register error handlers on the Falcon app::

    from mergewatch.api.errors import (
        InvalidPayloadError,
        WebhookSignatureError,
        handle_invalid_payload,
        handle_webhook_signature,
    )

    app.add_error_handler(InvalidPayloadError, handle_invalid_payload)
    app.add_error_handler(WebhookSignatureError, handle_webhook_signature)

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = [
    "InvalidPayloadError",
    "WebhookSignatureError",
    "handle_invalid_payload",
    "handle_webhook_signature",
]


class InvalidPayloadError(Exception):
    """Raised when a webhook body is neither form data nor a JSON object.

    Maps to HTTP 400. The delivery is terminal: nothing is enqueued and
    the sender is not expected to retry.

    Attributes
    ----------
    reason
        Human-readable description of the parse failure.

    """

    def __init__(self, reason: str) -> None:
        """Initialize with the parse failure description."""
        self.reason = reason
        super().__init__(reason)


class WebhookSignatureError(Exception):
    """Raised when ``X-Hub-Signature-256`` is missing or does not match.

    Maps to HTTP 401.
    """

    def __init__(self, reason: str) -> None:
        """Initialize with the verification failure description."""
        self.reason = reason
        super().__init__(reason)

    @classmethod
    def missing(cls) -> WebhookSignatureError:
        """Return an error for deliveries without a signature header."""
        return cls("missing X-Hub-Signature-256 header")

    @classmethod
    def malformed(cls) -> WebhookSignatureError:
        """Return an error for headers without the ``sha256=`` prefix."""
        return cls("signature header must start with 'sha256='")

    @classmethod
    def mismatch(cls) -> WebhookSignatureError:
        """Return an error for signatures that do not match the body."""
        return cls("signature does not match payload")


async def handle_invalid_payload(
    _req: Request,
    resp: Response,
    ex: InvalidPayloadError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidPayloadError`` to an HTTP 400 JSON response."""
    resp.status = falcon.HTTP_400
    resp.media = {"title": "Bad request", "description": ex.reason}


async def handle_webhook_signature(
    _req: Request,
    resp: Response,
    ex: WebhookSignatureError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``WebhookSignatureError`` to an HTTP 401 JSON response."""
    resp.status = falcon.HTTP_401
    resp.media = {"title": "Invalid signature", "description": ex.reason}
