"""
Request Body Parser Middleware.

Decodes JSON and URL-encoded bodies before handlers run and enforces the
request body size limit.
"""

import json
from typing import Any
from urllib.parse import parse_qs

from loguru import logger
from starlette.datastructures import Headers
from starlette.requests import ClientDisconnect
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from scravo.api.errors import MalformedPayloadError, PayloadTooLargeError

body_log = logger.bind(module="Body")

JSON_TYPE = "application/json"
FORM_TYPE = "application/x-www-form-urlencoded"


def parse_payload(content_type: str, body: bytes, charset: str = "utf-8") -> Any:
    """
    Decode a request body.

    Args:
        content_type: Media type without parameters
        body: Raw body bytes
        charset: Declared charset

    Returns:
        Parsed payload; `{}` for an empty body

    Raises:
        MalformedPayloadError: If the body cannot be decoded
    """
    if not body:
        return {}

    try:
        text = body.decode(charset)
    except (LookupError, UnicodeDecodeError) as e:
        raise MalformedPayloadError(f"Request body is not valid {charset}") from e

    if content_type == JSON_TYPE:
        try:
            return json.loads(text)
        except ValueError as e:
            raise MalformedPayloadError("Malformed JSON body") from e

    # Repeated keys keep every value, single keys are flattened
    fields = parse_qs(text, keep_blank_values=True)
    return {key: values[0] if len(values) == 1 else values for key, values in fields.items()}


def split_content_type(header: str) -> tuple[str, str]:
    """Split a Content-Type header into (media type, charset)."""
    parts = [part.strip() for part in header.split(";")]
    media_type = parts[0].lower()
    charset = "utf-8"
    for param in parts[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset" and value:
            charset = value.strip().strip('"')
    return media_type, charset


class BodyParserMiddleware:
    """Parse request payloads into `request.state.payload`."""

    def __init__(self, app: ASGIApp, limit: int):
        self.app = app
        self.limit = limit

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        declared = headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.limit:
            body_log.debug(f"Declared body of {declared} bytes over limit")
            raise PayloadTooLargeError(self.limit)

        media_type, charset = split_content_type(headers.get("content-type", ""))
        if media_type not in (JSON_TYPE, FORM_TYPE):
            await self.app(scope, self._limited(receive), send)
            return

        body = await self._read_body(receive)
        scope.setdefault("state", {})["payload"] = parse_payload(media_type, body, charset)
        await self.app(scope, self._replay(body, receive), send)

    async def _read_body(self, receive: Receive) -> bytes:
        """Read the whole body, failing once it passes the limit."""
        chunks = []
        size = 0
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                raise ClientDisconnect()
            chunk = message.get("body", b"")
            size += len(chunk)
            if size > self.limit:
                raise PayloadTooLargeError(self.limit)
            chunks.append(chunk)
            if not message.get("more_body", False):
                return b"".join(chunks)

    def _replay(self, body: bytes, receive: Receive) -> Receive:
        """Hand the already-read body to downstream handlers."""
        sent = False

        async def replay() -> Message:
            nonlocal sent
            if sent:
                return await receive()
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}

        return replay

    def _limited(self, receive: Receive) -> Receive:
        """Count streamed bytes for bodies this middleware does not parse."""
        size = 0

        async def limited() -> Message:
            nonlocal size
            message = await receive()
            if message["type"] == "http.request":
                size += len(message.get("body", b""))
                if size > self.limit:
                    raise PayloadTooLargeError(self.limit)
            return message

        return limited
