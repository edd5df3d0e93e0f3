"""Typed views over GitHub webhook deliveries.

Payloads arrive as untyped nested mappings. They are decoded into msgspec
structs at the reconciler's entry, in two steps: a permissive envelope that
is just enough to filter on, then the full pull request once the event is
known to matter. Conversion runs with ``strict=False`` so form-encoded
deliveries (where every scalar is a string) decode like JSON ones.
"""

from __future__ import annotations

import typing as typ

import msgspec

from mergewatch.common.time import parse_github_timestamp
from mergewatch.directory.models import RepositoryIdentity
from mergewatch.pulls.models import PullRequestAttributes
from mergewatch.pulls.storage import PullRequestState
from mergewatch.webhooks.errors import PayloadShapeError

if typ.TYPE_CHECKING:
    import datetime as dt

PULL_REQUEST_EVENT = "pull_request"

Payload: typ.TypeAlias = dict[str, typ.Any]


class WebhookEvent(msgspec.Struct, frozen=True):
    """One webhook delivery as handed from the receiver to the queue.

    Header values are passed through verbatim, ``None`` when absent.
    """

    event_type: str | None
    delivery_id: str | None
    payload: Payload

    def to_job_kwargs(self) -> dict[str, typ.Any]:
        """Return the keyword arguments of the reconciliation job."""
        return {
            "event_type": self.event_type,
            "delivery_id": self.delivery_id,
            "payload": self.payload,
        }


class RepositoryRef(msgspec.Struct, frozen=True):
    """``repository`` object of a webhook payload."""

    id: int | None = None
    full_name: str | None = None


class MergeFlag(msgspec.Struct, frozen=True):
    """The part of ``pull_request`` needed to decide whether to act."""

    merged: bool | None = None
    number: int | None = None


class PullRequestEnvelope(msgspec.Struct, frozen=True):
    """Filtering view of a ``pull_request`` event."""

    pull_request: MergeFlag
    action: str | None = None
    repository: RepositoryRef | None = None

    @property
    def is_merged(self) -> bool:
        """Return True only for an explicit ``merged: true``."""
        return self.pull_request.merged is True

    @property
    def repository_identity(self) -> RepositoryIdentity:
        """Return the repository identity the payload claims."""
        if self.repository is None:
            return RepositoryIdentity()
        return RepositoryIdentity(
            github_repo_id=self.repository.id,
            full_name=self.repository.full_name,
        )


class GithubUser(msgspec.Struct, frozen=True):
    """Author of a pull request."""

    login: str


class BranchRef(msgspec.Struct, frozen=True):
    """``base`` or ``head`` of a pull request."""

    ref: str
    sha: str | None = None


class MergedPullRequest(msgspec.Struct, frozen=True):
    """Fields of ``pull_request`` copied into the store."""

    id: int | str
    number: int
    title: str
    state: PullRequestState
    user: GithubUser
    base: BranchRef
    head: BranchRef
    created_at: str
    updated_at: str
    merged: bool = False
    merged_at: str | None = None
    body: str | None = None

    def to_attributes(self) -> PullRequestAttributes:
        """Map payload fields onto store columns without recomputation."""
        return PullRequestAttributes(
            github_pr_id=str(self.id),
            title=self.title,
            body=self.body,
            state=self.state.value,
            author=self.user.login,
            base_branch=self.base.ref,
            base_sha=self.base.sha,
            head_branch=self.head.ref,
            head_sha=self.head.sha,
            created_at=_required_timestamp(self.created_at, "created_at"),
            updated_at=_required_timestamp(self.updated_at, "updated_at"),
            merged_at=_timestamp(self.merged_at, "merged_at"),
        )


class _PullRequestPayload(msgspec.Struct, frozen=True):
    pull_request: MergedPullRequest


def _timestamp(value: str | None, field: str) -> dt.datetime | None:
    try:
        return parse_github_timestamp(value)
    except ValueError as exc:
        raise PayloadShapeError.invalid_timestamp(f"pull_request.{field}") from exc


def _required_timestamp(value: str, field: str) -> dt.datetime:
    parsed = _timestamp(value, field)
    if parsed is None:  # pragma: no cover - msgspec rejects missing values
        raise PayloadShapeError.invalid_timestamp(f"pull_request.{field}")
    return parsed


StructT = typ.TypeVar("StructT", bound=msgspec.Struct)


def _convert(
    payload: Payload, model: type[StructT]
) -> StructT:
    try:
        return msgspec.convert(payload, type=model, strict=False)
    except msgspec.ValidationError as exc:
        raise PayloadShapeError.invalid_payload(str(exc)) from exc


def decode_envelope(payload: Payload) -> PullRequestEnvelope:
    """Decode the filtering view of a ``pull_request`` payload.

    Raises
    ------
    PayloadShapeError
        If ``pull_request`` is missing or not an object.

    """
    return _convert(payload, PullRequestEnvelope)


def decode_merged_pull_request(payload: Payload) -> MergedPullRequest:
    """Decode the full ``pull_request`` object of a merge event.

    Raises
    ------
    PayloadShapeError
        If any field the store needs is missing or mistyped.

    """
    return _convert(payload, _PullRequestPayload).pull_request
