"""HTTP receiver for GitHub webhook deliveries."""

from mergewatch.api.webhooks.parsing import parse_webhook_body
from mergewatch.api.webhooks.resources import GithubWebhookResource
from mergewatch.api.webhooks.signature import compute_signature, verify_signature

__all__ = [
    "GithubWebhookResource",
    "compute_signature",
    "parse_webhook_body",
    "verify_signature",
]
