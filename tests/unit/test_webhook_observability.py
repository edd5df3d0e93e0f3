"""Unit tests for structured webhook log events."""

from __future__ import annotations

import pytest

from mergewatch.directory import RepositoryIdentity
from mergewatch.pulls import PullRequestIdentity
from mergewatch.webhooks import IgnoreReason, WebhookEventLogger
from mergewatch.webhooks.observability import WebhookEventType


class _FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        del stack_info
        self.calls.append((level, message, exc_info))
        return message


@pytest.fixture
def fake_logger(monkeypatch: pytest.MonkeyPatch) -> _FakeLogger:
    """Replace the observability module logger."""
    fake = _FakeLogger()
    monkeypatch.setattr("mergewatch.webhooks.observability.logger", fake)
    return fake


class TestWebhookEventLogger:
    """Tests for WebhookEventLogger."""

    def test_log_received(self, fake_logger: _FakeLogger) -> None:
        """Accepted deliveries log their headers."""
        WebhookEventLogger().log_received(event_type="pull_request", delivery_id="d-1")

        [(level, message, _)] = fake_logger.calls
        assert level == "INFO"
        assert message == "[webhook.received] event_type=pull_request delivery_id=d-1"

    def test_log_rejected_includes_raw_body(self, fake_logger: _FakeLogger) -> None:
        """Rejected deliveries keep the raw body for triage."""
        WebhookEventLogger().log_rejected(
            delivery_id=None, reason="not JSON", raw_body=b"invalid json"
        )

        [(level, message, _)] = fake_logger.calls
        assert level == "ERROR"
        assert WebhookEventType.REJECTED in message
        assert "reason=not JSON" in message
        assert "raw_body=b'invalid json'" in message

    @pytest.mark.parametrize(
        ("reason", "expected_level"),
        [
            (IgnoreReason.NOT_MERGED, "INFO"),
            (IgnoreReason.UNSUPPORTED_EVENT, "INFO"),
            (IgnoreReason.UNKNOWN_REPOSITORY, "WARNING"),
        ],
    )
    def test_log_ignored_levels(
        self,
        fake_logger: _FakeLogger,
        reason: IgnoreReason,
        expected_level: str,
    ) -> None:
        """Unknown repositories stand out from routine drops."""
        WebhookEventLogger().log_ignored(
            event_type="pull_request", delivery_id="d-1", reason=reason
        )

        [(level, message, _)] = fake_logger.calls
        assert level == expected_level
        assert f"reason={reason}" in message

    def test_log_repository_fallback(self, fake_logger: _FakeLogger) -> None:
        """Display-name matches are reported with the payload identity."""
        WebhookEventLogger().log_repository_fallback(
            delivery_id="d-1", identity=RepositoryIdentity(full_name="octo/reef")
        )

        [(level, message, _)] = fake_logger.calls
        assert level == "WARNING"
        assert "repository=octo/reef (id: None)" in message

    def test_log_reconciled(self, fake_logger: _FakeLogger) -> None:
        """Upserts report whether a row was created."""
        WebhookEventLogger().log_reconciled(
            delivery_id="d-1", repository="octo/reef", number=7, created=False
        )

        [(_, message, _)] = fake_logger.calls
        assert message == (
            "[pull_request.reconciled] delivery_id=d-1 repository=octo/reef "
            "number=7 outcome=updated"
        )

    def test_log_notification_failed_attaches_exception(
        self, fake_logger: _FakeLogger
    ) -> None:
        """Failures carry the error type and exc_info."""
        error = ConnectionError("slack down")

        WebhookEventLogger().log_notification_failed(
            PullRequestIdentity(repository_id=3, number=7), error
        )

        [(level, message, exc_info)] = fake_logger.calls
        assert level == "ERROR"
        assert "error_type=ConnectionError" in message
        assert exc_info is error
