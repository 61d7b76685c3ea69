"""
PetReport Backend — Body Parsing & Sanitization Middleware
============================================================

What:  Parses JSON and form-encoded bodies and cookies, and strips keys that
       could be interpreted as operators by a document-store query language.
How:   Pure ASGI middleware: the body is read once, parsed, cleaned and
       re-encoded, then replayed to downstream stages through a new `receive`
       callable, so route handlers only ever see the sanitized bytes.
Who:   Third stage of the filter chain, after the CORS and header stages.

Operator keys:
    A key is removed when it starts with "$" (e.g. "$gt", "$where") or
    contains "." (e.g. "profile.role"). Removal is recursive through nested
    objects and arrays, and applies to the body and the query string.

Size limit:
    JSON and form bodies over `max_body_bytes` (100 KiB by default) are
    rejected with 413 before they are parsed. Bodies nested too deeply to
    decode are rejected with 400 like any other malformed body.

Request state set by this stage:
    request.state.body     sanitized dict/list (empty dict when there is no body)
    request.state.cookies  dict of cookie name → value
"""

import json
import logging
from typing import Any, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode

from starlette.datastructures import Headers, MutableHeaders
from starlette.requests import cookie_parser
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from petreport.exceptions import MalformedBodyError, PayloadTooLargeError, PetReportError

logger = logging.getLogger(__name__)

OPERATOR_PREFIX = "$"
OPERATOR_TOKEN = "."

JSON_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"

DEFAULT_MAX_BODY_BYTES = 100 * 1024


def is_operator_key(key: Any) -> bool:
    return isinstance(key, str) and (
        key.startswith(OPERATOR_PREFIX) or OPERATOR_TOKEN in key
    )


def strip_operator_keys(value: Any) -> Any:
    """Return a copy of `value` with every operator key removed, at any depth."""
    if isinstance(value, dict):
        return {
            key: strip_operator_keys(item)
            for key, item in value.items()
            if not is_operator_key(key)
        }
    if isinstance(value, list):
        return [strip_operator_keys(item) for item in value]
    return value


def strip_operator_pairs(pairs: List[Tuple[str, str]]) -> List[Tuple[str, str]]:
    return [(key, item) for key, item in pairs if not is_operator_key(key)]


def pairs_to_dict(pairs: List[Tuple[str, str]]) -> dict:
    """Repeated keys collapse into a list, single keys stay scalar."""
    result: dict = {}
    for key, item in pairs:
        if key in result:
            existing = result[key]
            if isinstance(existing, list):
                existing.append(item)
            else:
                result[key] = [existing, item]
        else:
            result[key] = item
    return result


def _is_json(media_type: str) -> bool:
    return media_type == JSON_MEDIA_TYPE or media_type.endswith("+json")


async def _read_body(receive: Receive, limit: int) -> Optional[bytes]:
    """Read the whole body, or return None as soon as it passes `limit` bytes."""
    chunks = []
    size = 0
    while True:
        message = await receive()
        if message["type"] != "http.request":
            break
        chunk = message.get("body", b"")
        size += len(chunk)
        if size > limit:
            return None
        chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


def _declared_length(headers: Headers) -> int:
    try:
        return int(headers.get("content-length", "0"))
    except ValueError:
        return 0


def _replay(body: bytes, receive: Receive) -> Receive:
    sent = False

    async def replay_receive() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay_receive


class SanitizeMiddleware:
    """Parses bodies and cookies, strips operator keys, replays clean bytes."""

    def __init__(self, app: ASGIApp, max_body_bytes: int = DEFAULT_MAX_BODY_BYTES):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        state = scope.setdefault("state", {})
        state["cookies"] = cookie_parser(headers.get("cookie", ""))
        state["body"] = {}

        query_string = scope.get("query_string", b"").decode("latin-1")
        if query_string:
            pairs = parse_qsl(query_string, keep_blank_values=True)
            scope["query_string"] = urlencode(strip_operator_pairs(pairs)).encode("latin-1")

        media_type = headers.get("content-type", "").split(";")[0].strip().lower()
        if not (_is_json(media_type) or media_type == FORM_MEDIA_TYPE):
            await self.app(scope, receive, send)
            return

        raw = None
        if _declared_length(headers) <= self.max_body_bytes:
            raw = await _read_body(receive, self.max_body_bytes)
        if raw is None:
            exc = PayloadTooLargeError(limit=self.max_body_bytes)
            logger.warning(
                "Rejected %s body over %d bytes on %s %s",
                media_type,
                self.max_body_bytes,
                scope.get("method"),
                scope.get("path"),
            )
            await self._reject(exc, scope, receive, send)
            return

        body = raw
        if raw:
            try:
                if _is_json(media_type):
                    parsed = json.loads(raw)
                    if not isinstance(parsed, (dict, list)):
                        raise ValueError("JSON body must be an object or an array")
                    cleaned = strip_operator_keys(parsed)
                    body = json.dumps(cleaned).encode("utf-8")
                else:
                    pairs = strip_operator_pairs(
                        parse_qsl(raw.decode("utf-8"), keep_blank_values=True)
                    )
                    cleaned = pairs_to_dict(pairs)
                    body = urlencode(pairs).encode("utf-8")
            except (ValueError, UnicodeDecodeError, RecursionError) as e:
                exc = MalformedBodyError(
                    context={"media_type": media_type, "error": type(e).__name__}
                )
                logger.warning(
                    "Rejected malformed %s body on %s %s: %s",
                    media_type,
                    scope.get("method"),
                    scope.get("path"),
                    type(e).__name__ if isinstance(e, RecursionError) else str(e),
                )
                await self._reject(exc, scope, receive, send)
                return
            state["body"] = cleaned

        MutableHeaders(scope=scope)["content-length"] = str(len(body))
        await self.app(scope, _replay(body, receive), send)

    @staticmethod
    async def _reject(exc: PetReportError, scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(status_code=exc.status_code, content=exc.to_payload())
        await response(scope, receive, send)
