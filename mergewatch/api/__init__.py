"""Mergewatch HTTP API layer.

This package provides the Falcon ASGI application that receives GitHub
webhook deliveries and exposes liveness and readiness probes.

Public API
----------
create_app
    Application factory registering health endpoints and, when a webhook
    queue is provided, the ``POST /github-webhooks`` receiver.
"""

from mergewatch.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
