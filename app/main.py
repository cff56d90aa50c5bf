"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Registers API routes (webhook) and error handlers
- No business logic should be written here
- Manages application lifecycle (startup/shutdown)
"""

import asyncio
from contextlib import asynccontextmanager, suppress
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import setup_logging, get_logger
from app.db.sheets import close_sheets_client
from app.schemas.response import HealthResponse
from app.flow.dispatcher import get_conversation_service
from app.services.session_service import run_session_sweeper
from app.api import webhook

# Initialize logging first
setup_logging()
logger = get_logger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("🚀 Starting GastosBot...")

    try:
        logger.info("Validating configuration...")
        if validate_settings():
            logger.info("✅ Configuration validated")
        else:
            logger.warning("⚠️ Google Sheets is not configured; saving will fail until it is")

        service = get_conversation_service()

        if settings.has_sheets_credentials:
            is_healthy = await service.ledger.health_check()
            if not is_healthy:
                logger.warning("⚠️ Google Sheets health check failed during startup")
            else:
                logger.info("✅ Google Sheets health check passed")

        sweeper = asyncio.create_task(
            run_session_sweeper(
                service.store,
                settings.SESSION_SWEEP_INTERVAL_SECONDS,
                settings.SESSION_TIMEOUT_MINUTES,
            )
        )

        logger.info("🎉 GastosBot started successfully!")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Debug Mode: {settings.DEBUG}")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield  # Application runs here

    logger.info("🛑 Shutting down GastosBot...")

    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper

    close_sheets_client()
    logger.info("👋 GastosBot shut down successfully")


app = FastAPI(
    title="GastosBot - Gestor financiero por WhatsApp",
    description="WhatsApp bot that records salary, individual and shared expenses",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Twilio gives up on webhooks after 15 seconds
    if process_time > 5.0:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path}",
            extra={"process_time": process_time}
        )

    return response


add_exception_handlers(app)

app.include_router(webhook.router, prefix=settings.API_PREFIX, tags=["Webhook"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic info."""
    return {
        "name": "GastosBot API",
        "version": APP_VERSION,
        "description": "Gestor financiero personal por WhatsApp",
        "status": "running",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.
    Checks spreadsheet connectivity and session count.
    """
    service = get_conversation_service()
    health = HealthResponse(
        timestamp=time.time(),
        environment=settings.ENVIRONMENT,
        version=APP_VERSION,
        checks={"active_sessions": len(service.store)},
    )

    try:
        sheets_healthy = await service.ledger.health_check()
        health.checks["sheets"] = "healthy" if sheets_healthy else "unhealthy"
        if not sheets_healthy:
            health.status = "degraded"
    except Exception as e:
        logger.error(f"Sheets health check failed: {str(e)}")
        health.checks["sheets"] = "unhealthy"
        health.status = "unhealthy"

    return JSONResponse(content=health.model_dump(), status_code=health.status_code)


@app.get("/ready", tags=["Health"])
async def readiness_check():
    """
    Readiness probe - indicates if app is ready to receive traffic.
    """
    if await get_conversation_service().ledger.health_check():
        return {"status": "ready"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "reason": "sheets_unavailable"}
    )


@app.get("/live", tags=["Health"])
async def liveness_check():
    """
    Liveness probe - indicates if app is alive.
    """
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
