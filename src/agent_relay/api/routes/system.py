"""Health and root endpoints."""

import logging
import os

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/health")
async def health():
    """Liveness check with no side effects."""
    return {"status": "ok"}


@router.get("/", response_class=PlainTextResponse)
async def root(request: Request):
    session = request.app.state.agent_session
    logger.info("Root endpoint hit: AI Agent API is running!")
    logger.info("Environment: %s", os.environ.get("APP_ENV", "development"))
    logger.info("Agent ID: %s", session.agent_id)
    logger.info("Thread ID: %s", session.default_thread_id)
    return "AI Agent API is running!"
