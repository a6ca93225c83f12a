"""
Access logging for the relay.

Event streams can stay open for minutes, so the request is logged when the
last body chunk has gone out rather than when the headers are sent.
"""

import time
import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ai_stream.shared.config import logger


class StreamAccessLogMiddleware:
    """
    Tags each request with an X-Request-ID (the caller's, if sent), adds
    X-Process-Time as time to response start, and logs status, CORS
    decision, bytes relayed and total duration once the response is over.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get("x-request-id") or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id

        start_time = time.perf_counter()
        outcome = {"status": 500, "allow_origin": None, "bytes_sent": 0}

        async def send_with_tracking(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id
                headers["X-Process-Time"] = str(time.perf_counter() - start_time)
                outcome["status"] = message["status"]
                outcome["allow_origin"] = headers.get("access-control-allow-origin")
            elif message["type"] == "http.response.body":
                outcome["bytes_sent"] += len(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, send_with_tracking)
        finally:
            logger.info(
                "Request completed",
                extra={
                    "req_id": request_id,
                    "method": scope["method"],
                    "path": scope["path"],
                    "status": outcome["status"],
                    "allow_origin": outcome["allow_origin"],
                    "bytes_sent": outcome["bytes_sent"],
                    "duration_sec": round(time.perf_counter() - start_time, 4),
                },
            )
