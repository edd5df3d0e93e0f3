"""Process configuration for the webhook receiver and job workers.

Usage
-----
Create a configuration with defaults:

>>> config = MergewatchConfig()
>>> config.delivery_dedupe_seconds
0

Or load from environment variables:

>>> import os
>>> os.environ["MERGEWATCH_DELIVERY_DEDUPE_SECONDS"] = "3600"
>>> MergewatchConfig.from_env().delivery_dedupe_seconds
3600

"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import os


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing for the current process."""

    @classmethod
    def missing(cls, env_var: str) -> ConfigurationError:
        """Return an error naming the unset environment variable."""
        return cls(f"{env_var} is required")


def _optional_str(env_var: str) -> str | None:
    raw = os.environ.get(env_var, "").strip()
    return raw or None


@dc.dataclass(frozen=True, slots=True)
class MergewatchConfig:
    """Settings shared by the web process, the worker and the CLI.

    Attributes
    ----------
    database_url
        SQLAlchemy async URL of the repository directory and pull request
        store. Required wherever reconciliation runs.
    redis_url
        Redis URL backing the Dramatiq broker. When ``None`` the broker
        module only allows a stub broker (tests, local runs).
    webhook_secret
        Shared secret configured on the GitHub webhook. When set, inbound
        deliveries must carry a valid ``X-Hub-Signature-256``.
    delivery_dedupe_seconds
        How long a processed ``X-GitHub-Delivery`` id suppresses replays.
        ``0`` disables the idempotency cache.

    """

    database_url: str | None = None
    redis_url: str | None = None
    webhook_secret: str | None = None
    delivery_dedupe_seconds: int = 0

    @property
    def delivery_dedupe_window(self) -> dt.timedelta | None:
        """Return the dedupe window, or ``None`` when disabled."""
        if self.delivery_dedupe_seconds == 0:
            return None
        return dt.timedelta(seconds=self.delivery_dedupe_seconds)

    def require_database_url(self) -> str:
        """Return ``database_url`` or raise when it is not configured."""
        if self.database_url is None:
            raise ConfigurationError.missing("MERGEWATCH_DATABASE_URL")
        return self.database_url

    @staticmethod
    def _parse_non_negative_int(env_var: str, default: int) -> int:
        """Read a non-negative integer env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            msg = f"{env_var} must be an integer, got: {raw!r}"
            raise ValueError(msg) from exc
        if value < 0:
            msg = f"{env_var} must not be negative, got: {value}"
            raise ValueError(msg)
        return value

    @classmethod
    def from_env(cls) -> MergewatchConfig:
        """Create configuration from environment variables.

        Reads ``MERGEWATCH_DATABASE_URL``, ``MERGEWATCH_REDIS_URL``,
        ``MERGEWATCH_WEBHOOK_SECRET`` and
        ``MERGEWATCH_DELIVERY_DEDUPE_SECONDS``. Blank values count as unset.

        Raises
        ------
        ValueError
            If ``MERGEWATCH_DELIVERY_DEDUPE_SECONDS`` is not a non-negative
            integer.

        """
        return cls(
            database_url=_optional_str("MERGEWATCH_DATABASE_URL"),
            redis_url=_optional_str("MERGEWATCH_REDIS_URL"),
            webhook_secret=_optional_str("MERGEWATCH_WEBHOOK_SECRET"),
            delivery_dedupe_seconds=cls._parse_non_negative_int(
                "MERGEWATCH_DELIVERY_DEDUPE_SECONDS", 0
            ),
        )
