"""Decode webhook request bodies into payload mappings.

GitHub delivers either ``application/json`` or
``application/x-www-form-urlencoded``; the latter wraps the JSON document
in a single ``payload`` form field. Other form bodies are nested by their
bracketed keys; everything else is parsed as a raw JSON document.
"""

from __future__ import annotations

import re
import typing as typ

import msgspec
from falcon.uri import parse_query_string

from mergewatch.api.errors import InvalidPayloadError

if typ.TYPE_CHECKING:
    from mergewatch.webhooks.models import Payload

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
GITHUB_FORM_FIELD = "payload"

_BRACKET_KEY = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])+)$")
_BRACKET_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


def _media_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def _decode_json_object(document: bytes | str, *, source: str) -> Payload:
    try:
        decoded = msgspec.json.decode(document)
    except msgspec.DecodeError as exc:
        msg = f"{source} is not valid JSON: {exc}"
        raise InvalidPayloadError(msg) from exc
    if not isinstance(decoded, dict):
        msg = f"{source} must be a JSON object, got {type(decoded).__name__}"
        raise InvalidPayloadError(msg)
    return decoded


def _decode_form(raw_body: bytes) -> dict[str, str | list[str]]:
    try:
        text = raw_body.decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = "form body is not valid UTF-8"
        raise InvalidPayloadError(msg) from exc
    return parse_query_string(text, keep_blank=True)


def _form_key_path(key: str) -> list[str]:
    """Split ``a[b][c]`` into ``["a", "b", "c"]``; other keys stay whole."""
    match = _BRACKET_KEY.match(key)
    if match is None:
        return [key]
    return [match.group(1), *_BRACKET_SEGMENT.findall(match.group(2))]


def _nest_form_params(params: dict[str, str | list[str]]) -> Payload:
    """Nest bracketed form keys the way Rack builds request parameters.

    ``pull_request[merged]=true`` becomes ``{"pull_request": {"merged":
    "true"}}`` and ``labels[]=a&labels[]=b`` becomes ``{"labels": ["a",
    "b"]}``. Scalars stay strings; payload decoding coerces them.
    """
    nested: Payload = {}
    for key, value in params.items():
        *parents, leaf = _form_key_path(key)
        if leaf == "" and parents:
            leaf = parents.pop()
            value = value if isinstance(value, list) else [value]
        node = nested
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise _form_conflict(key)
            node = child
        if leaf in node:
            raise _form_conflict(key)
        node[leaf] = value
    return nested


def _form_conflict(key: str) -> InvalidPayloadError:
    return InvalidPayloadError(f"form field {key!r} conflicts with another field")


def parse_webhook_body(raw_body: bytes, content_type: str | None) -> Payload:
    """Return the webhook payload carried by *raw_body*.

    Parameters
    ----------
    raw_body
        Request body exactly as received.
    content_type
        Value of the ``Content-Type`` header, if any.

    Returns
    -------
    dict[str, Any]
        The decoded payload. GitHub's form-wrapped JSON is unwrapped;
        other form parameters are nested by their bracketed keys.

    Raises
    ------
    InvalidPayloadError
        If the body is neither usable form data nor a JSON object.

    """
    if _media_type(content_type) == FORM_CONTENT_TYPE:
        params = _decode_form(raw_body)
        if params:
            wrapped = params.get(GITHUB_FORM_FIELD)
            if len(params) == 1 and isinstance(wrapped, str):
                return _decode_json_object(wrapped, source="payload form field")
            return _nest_form_params(params)
    return _decode_json_object(raw_body, source="request body")
