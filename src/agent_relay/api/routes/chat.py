"""Chat and thread endpoints."""

import logging
from uuid import uuid4

from fastapi import APIRouter, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

router = APIRouter()

MESSAGE_REQUIRED = "Message is required."


class ChatRequest(BaseModel):
    """Request body for a chat message."""

    model_config = ConfigDict(populate_by_name=True)

    message: str | None = None
    thread_id: str | None = Field(default=None, alias="threadId")


@router.post("/chat", response_class=PlainTextResponse)
async def chat(request: Request, body: ChatRequest | None = None):
    """Send a message to the agent and return its reply as plain text.

    Session-level failures come back as a 200 whose body starts with
    "[Error]: "; only a bad message is rejected with a status code.
    """
    if body is None or not body.message or not body.message.strip():
        return PlainTextResponse(MESSAGE_REQUIRED, status_code=400)

    session = request.app.state.agent_session
    result = await session.get_response(body.message, body.thread_id)
    return PlainTextResponse(result.to_text())


async def chat_validation_error(request: Request, exc: RequestValidationError):
    """Answer an unparseable chat body the same way as a blank message.

    Other routes keep FastAPI's default 422.
    """
    if request.url.path == request.app.url_path_for("chat"):
        logger.info("Rejected chat body: %s", exc.errors())
        return PlainTextResponse(MESSAGE_REQUIRED, status_code=400)
    return await request_validation_exception_handler(request, exc)


@router.post("/thread")
async def create_thread(request: Request):
    """Create a conversation thread.

    Returns:
        ``{"threadId": ...}``, or a 500 with ``{"error": ...}`` on failure
    """
    session = request.app.state.agent_session
    result = await session.create_thread()
    if not result.ok:
        return JSONResponse(status_code=500, content={"error": result.to_text()})

    thread_id = result.value or str(uuid4())
    return {"threadId": thread_id}
