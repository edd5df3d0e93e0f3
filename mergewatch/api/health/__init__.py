"""Liveness and readiness probes."""

from mergewatch.api.health.resources import HealthResource, ReadyResource

__all__ = ["HealthResource", "ReadyResource"]
