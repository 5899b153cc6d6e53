"""
Main FastAPI application entry point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bloom import __version__
from bloom.api.errors import (http_exception_handler,
                              validation_exception_handler)
from bloom.api.routes import (auth, coaching, coaching_progress, health, leads,
                              metrics, payments, wellness)
from bloom.core.config import get_settings
from bloom.core.logging_config import LoggingConfig
from bloom.core.middleware import LoggingContextMiddleware
from bloom.core.middleware_metrics import MetricsMiddleware
from bloom.services.nurture_scheduler import get_nurture_dispatcher

# Configure logging first
LoggingConfig.configure()

logger = LoggingConfig.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI app"""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode...")

    dispatcher = get_nurture_dispatcher()
    if settings.enable_nurture_dispatcher:
        await dispatcher.start()

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await dispatcher.stop()


_settings = get_settings()
app = FastAPI(
    title=_settings.app_name,
    description="Midlife wellness coaching: programme exercises, wellness tracking and lead nurture",
    version=__version__,
    lifespan=lifespan,
)

# Logging context first so every request carries a request id
app.add_middleware(LoggingContextMiddleware)
app.add_middleware(MetricsMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log unhandled errors and answer with a generic 500"""
    logger.error(
        "Unhandled exception",
        exc_info=True,
        extra={
            "error": str(exc),
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# Include routers
app.include_router(health.router)
app.include_router(metrics.router)
app.include_router(auth.router)
app.include_router(auth.users_router)
app.include_router(wellness.router)
app.include_router(coaching_progress.router)
app.include_router(coaching.router)
app.include_router(leads.router)
app.include_router(leads.funnel_router)
app.include_router(payments.router)


@app.get("/api")
async def root():
    """Root API endpoint"""
    settings = get_settings()
    return {
        "name": settings.app_name,
        "version": __version__,
        "status": "running",
        "environment": settings.app_env,
    }


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.app_env == "development",
    )
