"""
Error taxonomy for the relay and the FastAPI handlers that render it as JSON.
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ai_stream.shared.config import logger
from ai_stream.shared.cors import resolve_allow_origin


class RelayError(Exception):
    """A terminal failure for one request, carried to the client as JSON."""

    outcome = "error"

    def __init__(self, status_code: int, error: str, detail: Optional[str] = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class InvalidJSONError(RelayError):
    outcome = "invalid_json"

    def __init__(self):
        super().__init__(400, "Invalid JSON")


class InvalidRequestError(RelayError):
    outcome = "invalid_request"

    def __init__(self, detail: str):
        super().__init__(400, "Invalid request", detail)


class MissingAPIKeyError(RelayError):
    outcome = "missing_api_key"

    def __init__(self):
        super().__init__(500, "Missing OPENAI_API_KEY")


class UpstreamError(RelayError):
    outcome = "upstream_error"

    def __init__(self, status_code: int, detail: str = ""):
        super().__init__(status_code, "OpenAI upstream error", detail)


def _allow_origin_for(request: Request) -> str:
    allow_origins = request.app.state.config.cors.allow_origins
    return resolve_allow_origin(request.headers.get("origin"), allow_origins)


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers={"Access-Control-Allow-Origin": _allow_origin_for(request)},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path,
        extra={"req_id": getattr(request.state, "request_id", "N/A")},
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
        headers={"Access-Control-Allow-Origin": _allow_origin_for(request)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
