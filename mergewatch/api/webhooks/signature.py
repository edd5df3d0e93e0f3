"""GitHub webhook signature verification.

GitHub signs each delivery with HMAC-SHA256 over the raw request body using
the webhook's shared secret and sends ``sha256=<hexdigest>`` in
``X-Hub-Signature-256``.
"""

from __future__ import annotations

import hashlib
import hmac

from mergewatch.api.errors import WebhookSignatureError

_PREFIX = "sha256="


def compute_signature(body: bytes, secret: str) -> str:
    """Return the ``X-Hub-Signature-256`` value GitHub would send for *body*."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return _PREFIX + digest


def verify_signature(body: bytes, signature_header: str | None, secret: str) -> None:
    """Raise unless *signature_header* matches *body* under *secret*.

    Raises
    ------
    WebhookSignatureError
        If the header is missing, malformed, or does not match.

    """
    if not signature_header:
        raise WebhookSignatureError.missing()
    if not signature_header.startswith(_PREFIX):
        raise WebhookSignatureError.malformed()
    if not hmac.compare_digest(compute_signature(body, secret), signature_header):
        raise WebhookSignatureError.mismatch()
