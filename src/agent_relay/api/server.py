"""FastAPI server wiring the agent session into HTTP routes."""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .. import __version__
from ..agent_session import AgentSession

if TYPE_CHECKING:
    from ..config import RelayConfig

logger = logging.getLogger(__name__)


def create_app(
    config: "RelayConfig",
    session: AgentSession | None = None,
) -> FastAPI:
    """Create FastAPI app with injected dependencies.

    Args:
        config: Relay configuration (CORS origins, Azure settings)
        session: Prebuilt agent session; built from config when omitted

    Returns:
        Configured FastAPI application

    Raises:
        ConfigError: if no session is given and the config is incomplete
    """
    owns_session = session is None
    if session is None:
        try:
            session = AgentSession.from_config(config)
        except Exception:
            logger.exception("Failed to create agent session")
            raise

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_session:
            await session.close()

    app = FastAPI(
        title="Agent Relay",
        description="Relays chat messages to a hosted AI agent",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.agent_session = session

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.error("Unhandled exception caught in middleware", exc_info=exc)
        return PlainTextResponse("An internal error occurred.", status_code=500)

    from .routes import chat, system

    app.add_exception_handler(RequestValidationError, chat.chat_validation_error)

    app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
    app.include_router(system.router, tags=["system"])

    return app
