# ai_stream/features/stream_chat/handler.py
import json

import httpx
from fastapi import Depends, Request, Response
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from ai_stream.shared.config import RelayConfig, logger
from ai_stream.shared.cors import preflight_headers, resolve_allow_origin
from ai_stream.shared.dependencies import get_config, get_http_client
from ai_stream.shared.errors import InvalidJSONError, InvalidRequestError, RelayError
from ai_stream.shared.metrics import STREAM_REQUESTS

from .client import OpenAIResponsesClient, relay_bytes
from .command import StreamChatRequest

EVENT_STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class StreamChatHandler:
    """Relays one chat request to the Responses API and streams the reply back."""

    def __init__(
        self,
        config: RelayConfig = Depends(get_config),
        http_client: httpx.AsyncClient = Depends(get_http_client),
    ):
        self._config = config
        self._client = OpenAIResponsesClient(http_client, config.openai)

    def allow_origin(self, request: Request) -> str:
        return resolve_allow_origin(request.headers.get("origin"), self._config.cors.allow_origins)

    def preflight(self, request: Request) -> Response:
        STREAM_REQUESTS.labels(outcome="preflight").inc()
        return Response(status_code=204, headers=preflight_headers(self.allow_origin(request)))

    async def parse(self, request: Request) -> StreamChatRequest:
        try:
            payload = json.loads(await request.body())
        except (ValueError, RecursionError) as e:
            raise InvalidJSONError() from e

        if not isinstance(payload, dict):
            raise InvalidRequestError("Request body must be a JSON object")
        try:
            return StreamChatRequest.model_validate(payload)
        except ValidationError as e:
            raise InvalidRequestError(
                "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
            ) from e

    async def handle(self, request: Request) -> StreamingResponse:
        try:
            chat_request = await self.parse(request)
            upstream_input = chat_request.to_upstream_input()
            upstream_resp = await self._client.open_stream(upstream_input)
        except RelayError as e:
            STREAM_REQUESTS.labels(outcome=e.outcome).inc()
            logger.warning(
                "Stream request rejected: %s (%d)", e.error, e.status_code,
                extra={"req_id": getattr(request.state, "request_id", "N/A")},
            )
            raise

        STREAM_REQUESTS.labels(outcome="streaming").inc()
        return StreamingResponse(
            relay_bytes(upstream_resp),
            media_type="text/event-stream; charset=utf-8",
            headers={**EVENT_STREAM_HEADERS, "Access-Control-Allow-Origin": self.allow_origin(request)},
        )
