# ai_stream/features/stream_chat/client.py
import httpx
from typing import AsyncIterator, Dict, Any, List

from ai_stream.shared.config import OpenAIConfig, logger
from ai_stream.shared.errors import MissingAPIKeyError, UpstreamError
from ai_stream.shared.metrics import STREAMED_BYTES, UPSTREAM_ERRORS


async def read_error_text(response: httpx.Response) -> str:
    """Reads an upstream error body, returning "" if the read itself fails."""
    try:
        await response.aread()
        return response.text
    except (httpx.HTTPError, httpx.StreamError) as e:
        logger.warning("Could not read upstream error body: %s", e)
        return ""


def has_body(response: httpx.Response) -> bool:
    return response.status_code != 204 and response.headers.get("content-length") != "0"


class OpenAIResponsesClient:
    """Opens a single streaming call to the OpenAI Responses API. No retries."""

    def __init__(self, http_client: httpx.AsyncClient, settings: OpenAIConfig):
        self._client = http_client
        self._settings = settings

    def build_payload(self, upstream_input: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "model": self._settings.model,
            "reasoning": {"effort": self._settings.reasoning_effort},
            "stream": True,
            "input": upstream_input,
        }

    def _headers(self) -> Dict[str, str]:
        if self._settings.api_key is None or not self._settings.api_key.get_secret_value():
            raise MissingAPIKeyError()
        return {
            "Authorization": f"Bearer {self._settings.api_key.get_secret_value()}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }

    async def open_stream(self, upstream_input: List[Dict[str, Any]]) -> httpx.Response:
        """
        Sends the request and returns the upstream response with its body
        still unread. The caller owns the response and must close it.
        Raises UpstreamError for non-2xx replies, empty replies and
        transport faults.
        """
        headers = self._headers()
        upstream_req = self._client.build_request(
            "POST",
            self._settings.url,
            json=self.build_payload(upstream_input),
            headers=headers,
        )
        logger.info(
            "Calling upstream with model '%s' (%d input blocks).",
            self._settings.model, len(upstream_input),
        )

        try:
            upstream_resp = await self._client.send(upstream_req, stream=True)
        except httpx.RequestError as e:
            status = self._settings.default_error_status
            logger.error("Request error calling upstream: %s", e)
            UPSTREAM_ERRORS.labels(status=str(status)).inc()
            raise UpstreamError(status) from e

        if upstream_resp.is_success and has_body(upstream_resp):
            return upstream_resp

        try:
            detail = await read_error_text(upstream_resp)
        finally:
            await upstream_resp.aclose()
        status = upstream_resp.status_code
        if upstream_resp.is_success:
            # 2xx without a body is still a failure for an event stream
            status = self._settings.default_error_status
        logger.error("HTTP error from upstream: %s - %s", upstream_resp.status_code, detail)
        UPSTREAM_ERRORS.labels(status=str(status)).inc()
        raise UpstreamError(status or self._settings.default_error_status, detail)


async def relay_bytes(upstream_resp: httpx.Response) -> AsyncIterator[bytes]:
    """Yields the upstream body chunk by chunk and closes it afterwards."""
    try:
        async for chunk in upstream_resp.aiter_bytes():
            STREAMED_BYTES.inc(len(chunk))
            yield chunk
    except httpx.HTTPError as e:
        logger.error("Upstream stream interrupted: %s", e)
    finally:
        await upstream_resp.aclose()
