import json
from typing import Callable, List, Optional

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from ai_stream.shared.config import RelayConfig
from main import create_app

SSE_BODY = (
    b'event: response.created\ndata: {"type":"response.created"}\n\n'
    b'event: response.output_text.delta\ndata: {"type":"response.output_text.delta","delta":"Hel"}\n\n'
    b'event: response.output_text.delta\ndata: {"type":"response.output_text.delta","delta":"lo"}\n\n'
    b'event: response.completed\ndata: {"type":"response.completed"}\n\n'
)


def make_config(api_key: Optional[str] = "sk-test", allow_origins=()) -> RelayConfig:
    return RelayConfig(
        openai={"api_key": api_key},
        cors={"allow_origins": tuple(allow_origins)},
    )


class FakeUpstream:
    """Records outbound requests and answers them with a canned response."""

    def __init__(self, responder: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.requests: List[httpx.Request] = []
        self._responder = responder or (
            lambda request: httpx.Response(
                200, content=SSE_BODY, headers={"content-type": "text/event-stream"}
            )
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_client(upstream):
    """Returns a factory building an in-process client for a configured app."""

    def _make(config: Optional[RelayConfig] = None, fake: Optional[FakeUpstream] = None) -> AsyncClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake or upstream))
        app = create_app(config or make_config(), http_client=http_client)
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _make
