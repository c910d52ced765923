"""
FastAPI Application Entry Point.

Creates and configures the FastAPI application for the tts-gateway service:
routing, CORS, logging, and startup/shutdown handlers.

Usage:
    # Run with uvicorn
    uvicorn tts_gateway.main:app --host 0.0.0.0 --port 3000

    # Or through the CLI
    tts-gateway --serve --port 3000
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from tts_gateway import __version__
from tts_gateway.api.dependencies import close_gateway, get_settings, initialize_gateway
from tts_gateway.api.routes import invalid_body_handler, router
from tts_gateway.core.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the gateway before serving and release it on shutdown."""
    initialize_gateway()
    yield
    close_gateway()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    This factory function:
        1. Configures structured logging based on environment settings
        2. Creates a FastAPI instance with the service title
        3. Enables CORS for the configured origins (all by default)
        4. Registers the gateway router and the invalid-body handler
        5. Builds the gateway on startup and closes it on shutdown

    Returns:
        FastAPI: Configured application instance ready to serve requests.
    """
    # Initialize structured logging (reads TTS_GATEWAY_LOG_LEVEL env var)
    configure_logging()

    app = FastAPI(title="tts-gateway", version=__version__, lifespan=lifespan)

    config = get_settings().get_gateway_config()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id", "X-Provider"],
    )

    app.include_router(router)
    app.add_exception_handler(RequestValidationError, invalid_body_handler)

    return app


# Global application instance for ASGI servers (uvicorn, gunicorn, etc.)
app = create_app()
