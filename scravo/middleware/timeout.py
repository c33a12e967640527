"""
Request Timeout Middleware.

Cancels handlers that have not started a response within the configured
time.
"""

import asyncio

from loguru import logger
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from scravo.api.errors import RequestTimeoutError

timeout_log = logger.bind(module="Timeout")


class RequestTimeoutMiddleware:
    """Fail slow requests with RequestTimeoutError."""

    def __init__(self, app: ASGIApp, timeout: float):
        self.app = app
        self.timeout = timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or self.timeout <= 0:
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout)
        except asyncio.TimeoutError as err:
            path = scope.get("path", "")
            if response_started:
                # Headers are out, nothing left to answer with
                timeout_log.error(f"{scope['method']} {path} timed out mid-response")
                return
            raise RequestTimeoutError(self.timeout) from err
