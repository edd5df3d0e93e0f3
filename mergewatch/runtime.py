"""Mergewatch runtime entrypoint for the webhook receiver.

This module provides the ASGI application factory used by Granian. It
delegates to :func:`mergewatch.api.app.create_app` for application
construction while keeping the ``mergewatch.runtime:create_app`` entrypoint
stable.

The receiver always registers ``POST /github-webhooks`` and hands every
accepted delivery to the Dramatiq broker, so the web process needs
``MERGEWATCH_REDIS_URL`` (or ``MERGEWATCH_ALLOW_STUB_BROKER`` locally) but
no database.

Configuration is driven by environment variables:

- ``MERGEWATCH_HOST``: Bind address (default ``0.0.0.0``)
- ``MERGEWATCH_PORT``: Listen port (default ``8080``)
- ``MERGEWATCH_LOG_LEVEL``: Log level (default ``INFO``)
- ``MERGEWATCH_WEBHOOK_SECRET``: Optional webhook signature secret
- ``MERGEWATCH_REDIS_URL``: Broker URL

Run the service directly with ``python -m mergewatch.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from mergewatch.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid MERGEWATCH_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application wired to the Dramatiq queue.

    Returns
    -------
    falcon.asgi.App
        Application serving ``/health``, ``/ready`` and
        ``POST /github-webhooks``.

    """
    from mergewatch.api.app import AppDependencies
    from mergewatch.api.app import create_app as _create_api_app
    from mergewatch.config import MergewatchConfig
    from mergewatch.jobs.actors import process_github_webhook_job
    from mergewatch.jobs.producers import DramatiqWebhookQueue

    config = MergewatchConfig.from_env()
    deps = AppDependencies(
        webhook_queue=DramatiqWebhookQueue(process_github_webhook_job),
        webhook_secret=config.webhook_secret,
    )
    return _create_api_app(deps)


def main() -> None:
    """Start the Mergewatch receiver using Granian.

    Reads ``MERGEWATCH_HOST``, ``MERGEWATCH_PORT`` and
    ``MERGEWATCH_LOG_LEVEL`` from the environment and starts the ASGI
    server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("MERGEWATCH_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("MERGEWATCH_PORT", "8080"))
    log_level_str = os.environ.get("MERGEWATCH_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid MERGEWATCH_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting Mergewatch receiver on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "mergewatch.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
