"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.api.routes import plans, webhooks
from app.core.config import Settings, settings
from app.core.exceptions import ConfigurationError
from app.core.logging import configure_logging
from app.observability.client import init_opik

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def validate_settings(config: Settings) -> None:
    """Refuse to serve without the secrets both endpoints depend on."""
    missing = []
    if not config.clerk_webhook_secret:
        missing.append("CLERK_WEBHOOK_SECRET")
    if not config.nvidia_api_key:
        missing.append("NVIDIA_API_KEY")
    if not missing:
        return
    if config.require_secrets_on_startup:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")
    logger.warning("Starting without %s; affected endpoints will fail", ", ".join(missing))


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(log_level=settings.log_level)
    validate_settings(settings)
    init_opik()
    logger.info("%s started", settings.app_name)
    yield


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)


@app.middleware("http")
async def attach_request_id(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error while handling %s: %s", request.url.path, exc)
    return JSONResponse(
        {"success": False, "error": "Server is not configured"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@app.get("/health", tags=["health"])
def health() -> dict:
    return {"status": "ok"}


app.include_router(webhooks.router)
app.include_router(plans.router)
