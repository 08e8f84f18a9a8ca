"""Request body stages.

``RawBodyMiddleware`` captures the Stripe webhook body byte-for-byte,
``ParsedBodyMiddleware`` decodes JSON and form bodies for everything else.
Both buffer the body, store the result in ``request.state`` and replay the
buffered bytes to the downstream app.
"""

import json
import re
from typing import Any
from urllib.parse import parse_qsl

import structlog
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from messagemind.errors import MalformedBodyError, PayloadTooLargeError

logger = structlog.get_logger(__name__)

RAW_BODY_KEY = "raw_body"
PARSED_BODY_KEY = "body"

FORM_KEY_PART_RE = re.compile(r"\[([^\[\]]*)\]")


async def read_body(scope: Scope, receive: Receive, limit: int) -> bytes:
    """Read the whole request body, failing as soon as it grows past ``limit`` bytes."""
    content_length = Headers(scope=scope).get("content-length")
    if content_length is not None and content_length.isdigit() and int(content_length) > limit:
        raise PayloadTooLargeError(limit)

    chunks: list[bytes] = []
    size = 0
    more_body = True
    while more_body:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunk = message.get("body", b"")
        size += len(chunk)
        if size > limit:
            raise PayloadTooLargeError(limit)
        chunks.append(chunk)
        more_body = message.get("more_body", False)
    return b"".join(chunks)


def replay(body: bytes, receive: Receive) -> Receive:
    """Build a receive channel that yields ``body`` once, then defers to the original."""
    sent = False

    async def receive_buffered() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return receive_buffered


def parse_body(body: bytes, content_type: str) -> Any:
    """Decode a buffered body into structured data.

    JSON must be an object or an array. Form bodies become a dict with
    bracketed keys nested, so ``a[b]=1`` gives ``{"a": {"b": "1"}}``.
    Anything else yields an empty dict.
    """
    media_type = content_type.split(";", 1)[0].strip().lower()
    if not body:
        return {}

    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            data = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedBodyError(f"Invalid JSON body: {e}") from e
        if not isinstance(data, dict | list):
            raise MalformedBodyError("JSON body must be an object or an array")
        return data

    if media_type == "application/x-www-form-urlencoded":
        try:
            pairs = parse_qsl(body.decode("utf-8"), keep_blank_values=True, strict_parsing=False)
        except UnicodeDecodeError as e:
            raise MalformedBodyError("Form body is not valid UTF-8") from e
        form: dict[str, Any] = {}
        for key, value in pairs:
            assign_form_value(form, split_form_key(key), value)
        return form

    return {}


def split_form_key(key: str) -> list[str]:
    """Split ``a[b][]`` into ``["a", "b", ""]``. Keys that are not well formed stay whole."""
    head, bracket, rest = key.partition("[")
    if not bracket or not head:
        return [key]
    tail = bracket + rest
    parts = FORM_KEY_PART_RE.findall(tail)
    if "".join(f"[{part}]" for part in parts) != tail:
        return [key]
    return [head, *parts]


def assign_form_value(target: dict[str, Any], parts: list[str], value: str) -> None:
    """Store ``value`` under a bracketed key path.

    Repeated keys and ``a[]`` collect into lists, ``a[b]`` nests a dict. A
    nested key replaces a plain value stored earlier under the same name.
    """
    key, *rest = parts
    if not rest:
        if key not in target:
            target[key] = value
        elif isinstance(target[key], list):
            target[key].append(value)
        else:
            target[key] = [target[key], value]
        return

    if rest == [""]:
        items = target.get(key)
        if isinstance(items, list):
            items.append(value)
        elif key in target and not isinstance(items, dict):
            target[key] = [items, value]
        else:
            target[key] = [value]
        return

    child = target.get(key)
    if not isinstance(child, dict):
        child = target[key] = {}
    assign_form_value(child, rest, value)


class RawBodyMiddleware:
    """Keeps the body of one exact path as unparsed bytes, whatever its content type."""

    def __init__(self, app: ASGIApp, path: str, limit: int) -> None:
        self.app = app
        self.path = path
        self.limit = limit

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] != self.path:
            await self.app(scope, receive, send)
            return

        body = await read_body(scope, receive, self.limit)
        scope.setdefault("state", {})[RAW_BODY_KEY] = body
        logger.debug("raw_body_captured", path=self.path, size=len(body))
        await self.app(scope, replay(body, receive), send)


class ParsedBodyMiddleware:
    """Decodes JSON and URL-encoded bodies into ``request.state.body``.

    Requests already captured by ``RawBodyMiddleware`` pass through untouched.
    """

    def __init__(self, app: ASGIApp, limit: int) -> None:
        self.app = app
        self.limit = limit

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or RAW_BODY_KEY in scope.get("state", {}):
            await self.app(scope, receive, send)
            return

        body = await read_body(scope, receive, self.limit)
        content_type = Headers(scope=scope).get("content-type", "")
        scope.setdefault("state", {})[PARSED_BODY_KEY] = parse_body(body, content_type)
        await self.app(scope, replay(body, receive), send)
