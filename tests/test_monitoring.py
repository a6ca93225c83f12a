import logging

import pytest

from conftest import SSE_BODY, make_config


@pytest.mark.asyncio
async def test_health_reports_configured_key(make_client):
    async with make_client() as client:
        resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "upstream_model": "gpt-5",
        "services": {"openai_api_key": "configured"},
    }


@pytest.mark.asyncio
async def test_health_reports_missing_key(make_client):
    async with make_client(make_config(api_key=None)) as client:
        resp = await client.get("/health")

    assert resp.json() == {
        "status": "error",
        "upstream_model": "gpt-5",
        "services": {"openai_api_key": "missing"},
    }


@pytest.mark.asyncio
async def test_metrics_count_stream_outcomes(make_client):
    async with make_client() as client:
        await client.options("/api/ai/stream")
        await client.post("/api/ai/stream", json={"messages": [{"role": "user", "content": "hi"}]})
        resp = await client.get("/metrics")

    assert resp.status_code == 200
    assert 'ai_stream_requests_total{outcome="preflight"}' in resp.text
    assert 'ai_stream_requests_total{outcome="streaming"}' in resp.text
    assert "ai_stream_streamed_bytes_total" in resp.text


@pytest.mark.asyncio
async def test_request_id_is_echoed(make_client):
    async with make_client() as client:
        resp = await client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert resp.headers["x-request-id"] == "abc-123"
    assert "x-process-time" in resp.headers


@pytest.mark.asyncio
async def test_access_log_covers_whole_stream(make_client, caplog):
    caplog.set_level(logging.INFO, logger="ai-stream")
    async with make_client(make_config(allow_origins=["https://app.example"])) as client:
        await client.post(
            "/api/ai/stream",
            json={"messages": [{"role": "user", "content": "hi"}]},
            headers={"Origin": "https://app.example", "X-Request-ID": "stream-1"},
        )

    record = next(r for r in caplog.records if r.getMessage() == "Request completed")
    assert record.req_id == "stream-1"
    assert record.path == "/api/ai/stream"
    assert record.status == 200
    assert record.allow_origin == "https://app.example"
    assert record.bytes_sent == len(SSE_BODY)


@pytest.mark.asyncio
async def test_access_log_records_rejected_origin(make_client, caplog):
    caplog.set_level(logging.INFO, logger="ai-stream")
    async with make_client(make_config(allow_origins=["https://app.example"])) as client:
        resp = await client.post(
            "/api/ai/stream", content=b"{", headers={"Origin": "https://evil.example"}
        )

    record = next(r for r in caplog.records if r.getMessage() == "Request completed")
    assert record.status == 400
    assert record.allow_origin == "null"
    assert record.bytes_sent == len(resp.content)
    assert "x-request-id" in resp.headers
