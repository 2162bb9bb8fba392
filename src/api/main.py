"""Main FastAPI application entry point."""

import asyncio
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from identity.application.cascade import ensure_store_ready
from identity.application.usage import AccessKeyUsageRecorder
from identity.dependencies.resolution import (
    get_session_token_verifier,
    record_access_key_usage,
)
from identity.ports.exceptions import ResolutionError, StoreUnavailableError
from identity.presentation import auth_router, router as identity_router
from infrastructure.database.dependencies import (
    close_database_connections,
    get_read_engine,
)
from infrastructure.logging import configure_logging
from infrastructure.readiness import StoreReadinessGate, run_startup_sequence
from infrastructure.settings import get_readiness_settings, get_settings
from infrastructure.version import __version__

logger = structlog.get_logger()


@asynccontextmanager
async def platform_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Session token verifier construction
    - Readiness gate creation and the background startup sequence
    - Draining in-flight access key touches and closing engines on shutdown
    """
    settings = get_settings()
    configure_logging(debug=settings.debug, log_format=settings.log_format)
    # Fails startup when the session token secret is not configured
    get_session_token_verifier()
    readiness = get_readiness_settings()

    gate = StoreReadinessGate()
    recorder = AccessKeyUsageRecorder(writer=record_access_key_usage)
    app.state.readiness_gate = gate
    app.state.usage_recorder = recorder

    # Requests are served (and answered 503) while the store comes up
    startup = asyncio.create_task(
        run_startup_sequence(
            gate,
            get_read_engine(),
            max_attempts=readiness.startup_retries,
            retry_delay_seconds=readiness.retry_delay_seconds,
        )
    )

    yield

    if not startup.done():
        startup.cancel()
    await asyncio.gather(startup, return_exceptions=True)
    await recorder.drain()
    await close_database_connections()


async def resolution_error_handler(
    request: Request, exc: ResolutionError
) -> JSONResponse:
    """Render a resolution failure as ``{success: false, error, code}``."""
    headers = None
    if isinstance(exc, StoreUnavailableError):
        headers = {"Retry-After": str(get_readiness_settings().retry_after_seconds)}

    if exc.status_code >= 500 and not exc.retryable:
        logger.error("request_failed", path=request.url.path, code=exc.code)

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "code": exc.code},
        headers=headers,
    )


app = FastAPI(
    title=get_settings().app_name,
    description="Tenant and identity resolution for the multi-tenant platform",
    version=__version__,
    lifespan=platform_lifespan,
)

app.add_exception_handler(ResolutionError, resolution_error_handler)

# Include identity bounded context routes
app.include_router(identity_router)
app.include_router(auth_router)


@app.get("/health")
def health():
    """Basic health check endpoint. Never gated by store readiness."""
    return {"status": "ok"}


@app.get("/health/store")
def health_store(request: Request) -> JSONResponse:
    """Report the readiness gate status.

    Returns 200 once the store is ready, 503 otherwise.
    """
    gate: StoreReadinessGate = request.app.state.readiness_gate

    try:
        ensure_store_ready(gate)
    except StoreUnavailableError as error:
        return _store_unavailable_response(error, gate)

    return JSONResponse(status_code=status.HTTP_200_OK, content={"status": gate.status})


def _store_unavailable_response(
    error: StoreUnavailableError, gate: StoreReadinessGate
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "success": False,
            "error": error.message,
            "code": error.code,
            "status": gate.status,
        },
        headers={"Retry-After": str(get_readiness_settings().retry_after_seconds)},
    )
