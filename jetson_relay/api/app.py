"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
error handlers and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jetson_relay.api.chat import router as chat_router
from jetson_relay.exceptions import InputMalformed, RelayError, UpstreamUnavailable
from jetson_relay.relay.config import RelayConfig, get_relay_config
from jetson_relay.relay.service import RelayService
from jetson_relay.relay.upstream import UpstreamClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    config: RelayConfig = app.state.relay_service.config
    logger.info(
        f"Starting Jetson Chat Relay: upstream={config.upstream_url}, model={config.model_name}"
    )
    yield
    logger.info("Shutting down Jetson Chat Relay...")


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Render failures that happen before streaming starts as a single 500."""
    logger.error(f"Relay failed for {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Treat a malformed request body as InputMalformed."""
    fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
    return await relay_error_handler(
        request, InputMalformed(f"Malformed request body: {fields or 'invalid'}")
    )


def create_app(
    config: RelayConfig | None = None,
    upstream_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Relay configuration. Uses the built-in defaults if not provided.
        upstream_transport: Optional httpx transport for the upstream client.

    Returns:
        Configured FastAPI application instance.
    """
    config = config or get_relay_config()

    application = FastAPI(
        title="Jetson Chat Relay API",
        description=(
            "Streams chat completions from a locally hosted language model. "
            "Forwards the conversation to the inference server and relays its "
            "newline-delimited JSON reply as Server-Sent Events."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.state.relay_service = RelayService(
        config=config,
        upstream=UpstreamClient(config, transport=upstream_transport),
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    # Mid-stream errors are not handled here: the response has already started.
    application.add_exception_handler(InputMalformed, relay_error_handler)
    application.add_exception_handler(UpstreamUnavailable, relay_error_handler)
    application.add_exception_handler(RequestValidationError, validation_error_handler)

    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "jetson-relay"}

    return application


app = create_app()
