"""Unit tests for the Dramatiq actors and producers."""

from __future__ import annotations

import typing as typ

import dramatiq
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from mergewatch.config import ConfigurationError
from mergewatch.directory import RepositoryDirectory, RepositoryRegistration
from mergewatch.schema import init_database
from mergewatch.jobs import DramatiqNotificationDispatcher, DramatiqWebhookQueue
from mergewatch.pulls import PullRequestIdentity
from mergewatch.teams import PullRequestNotFoundError
from mergewatch.webhooks import WebhookEvent
from tests.helpers import run_async
from tests.helpers.payloads import REPO_FULL_NAME, REPO_ID, pull_request_payload

if typ.TYPE_CHECKING:
    from dramatiq.brokers.stub import StubBroker

_WEBHOOK_QUEUE = "github_webhooks"
_TEAMS_QUEUE = "team_notifications"


def _prepare_database(database_url: str) -> int:
    """Create the schema, register the test repository and return its id."""

    async def prepare() -> int:
        engine = create_async_engine(database_url)
        try:
            await init_database(engine)
            factory = async_sessionmaker(engine, expire_on_commit=False)
            async with factory() as session, session.begin():
                repo, _ = await RepositoryDirectory(session).register(
                    RepositoryRegistration(
                        github_repo_id=REPO_ID, full_name=REPO_FULL_NAME
                    )
                )
                return repo.id
        finally:
            await engine.dispose()

    return run_async(prepare)


def _drain(broker: StubBroker, queue_name: str) -> list[dramatiq.Message]:
    queue = broker.queues[queue_name]
    messages = []
    while not queue.empty():
        messages.append(dramatiq.Message.decode(queue.get_nowait()))
    return messages


@pytest.fixture
def worker_env(monkeypatch: pytest.MonkeyPatch, database_url: str) -> int:
    """Point the actors at a prepared database; return the repository id."""
    monkeypatch.setenv("MERGEWATCH_DATABASE_URL", database_url)
    monkeypatch.delenv("MERGEWATCH_DELIVERY_DEDUPE_SECONDS", raising=False)
    return _prepare_database(database_url)


class TestProducers:
    """Queue producers send the expected job arguments."""

    def test_webhook_queue_sends_event(self, stub_broker: StubBroker) -> None:
        """DramatiqWebhookQueue enqueues the reconciliation job."""
        from mergewatch.jobs.actors import process_github_webhook_job

        event = WebhookEvent(
            event_type="pull_request", delivery_id="d-1", payload={"a": 1}
        )

        DramatiqWebhookQueue(process_github_webhook_job).enqueue(event)

        [message] = _drain(stub_broker, _WEBHOOK_QUEUE)
        assert message.actor_name == "process_github_webhook_job"
        assert message.kwargs == event.to_job_kwargs()

    def test_notification_dispatcher_sends_identity(
        self, stub_broker: StubBroker
    ) -> None:
        """DramatiqNotificationDispatcher enqueues the team job."""
        from mergewatch.jobs.actors import update_pull_request_teams_job

        DramatiqNotificationDispatcher(update_pull_request_teams_job).dispatch(
            PullRequestIdentity(repository_id=3, number=999)
        )

        [message] = _drain(stub_broker, _TEAMS_QUEUE)
        assert message.kwargs == {"repository_id": 3, "number": 999}


class TestProcessGithubWebhookJob:
    """End-to-end runs of the reconciliation actor."""

    def test_merged_pull_request_enqueues_team_job(
        self, stub_broker: StubBroker, worker_env: int
    ) -> None:
        """A merge is stored and handed to the team notification queue."""
        from mergewatch.jobs.actors import (
            process_github_webhook_job,
            update_pull_request_teams_job,
        )

        status = process_github_webhook_job(
            event_type="pull_request",
            delivery_id="d-1",
            payload=pull_request_payload(number=999),
        )

        assert status == "created", "expected a new pull request"
        [message] = _drain(stub_broker, _TEAMS_QUEUE)
        assert message.kwargs == {"repository_id": worker_env, "number": 999}

        result = update_pull_request_teams_job(**message.kwargs)
        assert result == "owner/test-repo#999"

    @pytest.mark.usefixtures("worker_env")
    def test_push_event_is_ignored(self, stub_broker: StubBroker) -> None:
        """Non pull_request events leave the team queue empty."""
        from mergewatch.jobs.actors import process_github_webhook_job

        status = process_github_webhook_job(
            event_type="push", delivery_id="d-2", payload={"ref": "refs/heads/main"}
        )

        assert status == "ignored"
        assert _drain(stub_broker, _TEAMS_QUEUE) == []

    @pytest.mark.usefixtures("worker_env")
    def test_dedupe_window_from_environment(
        self, stub_broker: StubBroker, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """MERGEWATCH_DELIVERY_DEDUPE_SECONDS suppresses replays."""
        from mergewatch.jobs.actors import process_github_webhook_job

        monkeypatch.setenv("MERGEWATCH_DELIVERY_DEDUPE_SECONDS", "3600")
        kwargs = {
            "event_type": "pull_request",
            "delivery_id": "d-3",
            "payload": pull_request_payload(),
        }

        assert process_github_webhook_job(**kwargs) == "created"
        assert process_github_webhook_job(**kwargs) == "ignored"
        assert len(_drain(stub_broker, _TEAMS_QUEUE)) == 1

    @pytest.mark.usefixtures("stub_broker")
    def test_missing_database_url_fails(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Workers refuse to run without a database."""
        from mergewatch.jobs.actors import process_github_webhook_job

        monkeypatch.delenv("MERGEWATCH_DATABASE_URL", raising=False)

        with pytest.raises(ConfigurationError):
            process_github_webhook_job(
                event_type="pull_request", delivery_id="d-4", payload={}
            )


class TestUpdatePullRequestTeamsJob:
    """Runs of the team notification actor."""

    @pytest.mark.usefixtures("stub_broker")
    def test_unknown_pull_request_raises_for_retry(self, worker_env: int) -> None:
        """Notifications for unstored pull requests fail the message."""
        from mergewatch.jobs.actors import update_pull_request_teams_job

        with pytest.raises(PullRequestNotFoundError):
            update_pull_request_teams_job(repository_id=worker_env, number=404)
