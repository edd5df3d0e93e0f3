"""Broker selection for the Dramatiq actors.

Actors bind to the global broker when they are declared, so
:func:`configure_broker` runs at import time of :mod:`mergewatch.jobs.actors`
before any ``@dramatiq.actor`` decorator.
"""

from __future__ import annotations

import os
import sys
import threading

import dramatiq
from dramatiq.brokers.stub import StubBroker

from mergewatch.config import MergewatchConfig

_BROKER_LOCK = threading.Lock()
_configured_broker: dramatiq.Broker | None = None


def _is_running_tests() -> bool:
    """Check if the current process is running in a test environment.

    Detects pytest by checking for the pytest module in sys.modules or
    pytest-specific environment variables set by pytest and pytest-xdist.
    """
    return "pytest" in sys.modules or any(
        key in os.environ
        for key in ["PYTEST_CURRENT_TEST", "PYTEST_XDIST_WORKER", "PYTEST_ADDOPTS"]
    )


def _should_use_stub_broker() -> bool:
    """Return True when an in-memory broker is acceptable."""
    allow_stub = os.environ.get("MERGEWATCH_ALLOW_STUB_BROKER", "")
    return allow_stub.lower() in {"1", "true", "yes"} or _is_running_tests()


def _build_broker() -> dramatiq.Broker:
    redis_url = MergewatchConfig.from_env().redis_url
    if redis_url is not None:
        from dramatiq.brokers.redis import RedisBroker

        return RedisBroker(url=redis_url)
    if _should_use_stub_broker():
        return StubBroker()
    message = (
        "No Dramatiq broker configured. Set MERGEWATCH_REDIS_URL, or "
        "MERGEWATCH_ALLOW_STUB_BROKER=1 for local/test runs."
    )
    raise RuntimeError(message)


def configure_broker() -> dramatiq.Broker:
    """Install and return the process-wide Dramatiq broker.

    Redis backs the queue whenever ``MERGEWATCH_REDIS_URL`` is set, giving
    jobs durability across process restarts. Otherwise a ``StubBroker`` is
    installed under pytest or when ``MERGEWATCH_ALLOW_STUB_BROKER`` is
    truthy.

    Thread-safe and idempotent: later calls return the first broker.

    Raises
    ------
    RuntimeError
        If no Redis URL is configured outside a test/stub-allowed context.

    """
    global _configured_broker

    if _configured_broker is not None:
        return _configured_broker

    with _BROKER_LOCK:
        if _configured_broker is None:
            broker = _build_broker()
            dramatiq.set_broker(broker)
            _configured_broker = broker
        return _configured_broker
