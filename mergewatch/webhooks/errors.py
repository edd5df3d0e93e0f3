"""Errors raised while reconciling webhook payloads."""

from __future__ import annotations

import enum


class PayloadShapeReason(enum.StrEnum):
    """Machine-readable reasons for payload shape failures."""

    INVALID_PAYLOAD = "invalid_payload"
    INVALID_TIMESTAMP = "invalid_timestamp"


class PayloadShapeError(Exception):
    """Raised when a filtered-in event lacks the fields reconciliation needs.

    The error fails the job so the queue's retry policy applies; it is a
    signal that GitHub's payload drifted or a producer sent something
    unexpected, never a silent drop.
    """

    def __init__(
        self,
        message: str,
        reason: PayloadShapeReason | str | None = None,
    ) -> None:
        """Store a machine-readable reason for programmatic handling."""
        super().__init__(message)
        self.reason = reason

    @classmethod
    def invalid_payload(cls, message: str) -> PayloadShapeError:
        """Create an error when the payload does not match the expected shape."""
        return cls(message, reason=PayloadShapeReason.INVALID_PAYLOAD)

    @classmethod
    def invalid_timestamp(cls, field: str) -> PayloadShapeError:
        """Create an error for timestamps that are not aware ISO-8601 values."""
        return cls(
            f"{field} is not a timezone-aware ISO-8601 timestamp",
            reason=PayloadShapeReason.INVALID_TIMESTAMP,
        )
