from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import StreamingResponse
from .handler import StreamChatHandler

router = APIRouter()

@router.post("/stream", response_model=None)
async def stream_chat(
    request: Request,
    handler: StreamChatHandler = Depends(StreamChatHandler)
) -> StreamingResponse:
    return await handler.handle(request)

@router.options("/stream", response_model=None)
async def stream_chat_preflight(
    request: Request,
    handler: StreamChatHandler = Depends(StreamChatHandler)
) -> Response:
    return handler.preflight(request)
