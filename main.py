#!/usr/bin/env python3
"""
AI Stream Relay
Proxies browser chat requests to the OpenAI Responses API and streams the
server-sent events back, keeping the API key on the server.
"""

import sys
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn

from fastapi import FastAPI

from ai_stream.shared.config import ConfigError, RelayConfig, load_config, setup_logging, logger
from ai_stream.shared.errors import register_exception_handlers
from ai_stream.shared.middleware import StreamAccessLogMiddleware
from ai_stream.features.stream_chat.endpoints import router as stream_chat_router
from ai_stream.features.health_check.endpoints import router as health_check_router
from ai_stream.features.metrics.endpoints import router as metrics_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan resources."""
    owns_client = getattr(app.state, "http_client", None) is None
    if owns_client:
        app.state.http_client = httpx.AsyncClient(timeout=app.state.config.openai.timeout)

    logger.info("Application startup complete")
    yield
    if owns_client:
        await app.state.http_client.aclose()
    logger.info("Application shutdown complete")


def create_app(
    config: Optional[RelayConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Build the application. Configuration is loaded once and never mutated."""
    config = config or load_config()
    setup_logging(config)
    if config.openai.api_key is None:
        logger.warning("OPENAI_API_KEY is not set; stream requests will fail with 500.")
    if not config.cors.allow_origins:
        logger.warning("ALLOW_ORIGINS is empty; reflecting any Origin (development mode).")

    app = FastAPI(
        title="AI Stream Relay",
        description="Relays chat requests to the OpenAI Responses API as a server-sent event stream",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.http_client = http_client

    app.include_router(stream_chat_router, prefix="/api/ai", tags=["Relay"])
    app.include_router(health_check_router, tags=["Monitoring"])
    app.include_router(metrics_router)

    register_exception_handlers(app)
    app.add_middleware(StreamAccessLogMiddleware)
    return app


if __name__ == "__main__":
    try:
        relay_config = load_config()
    except ConfigError as e:
        print(e)
        sys.exit(1)

    app = create_app(relay_config)

    host = relay_config.server.host
    port = relay_config.server.port
    logger.warning("Starting AI stream relay on %s:%s", host, port)
    logger.warning("Stream URL: http://%s:%s/api/ai/stream", host, port)

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["loggers"]["uvicorn.access"]["level"] = relay_config.server.http_log_level.upper()

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_config=log_config,
        timeout_graceful_shutdown=30,
        server_header=False
    )
