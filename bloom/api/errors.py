"""
Error responses: every error body is {"message": ...}
"""
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bloom.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

# Longest prefix first so /api/coaching-progress wins over /api/coaching
VALIDATION_MESSAGES = sorted({
    "/api/health-assessments": "Invalid health assessment data",
    "/api/journal-entries": "Invalid journal entry data",
    "/api/coaching-progress": "Invalid coaching progress data",
    "/api/coaching": "Invalid coaching session data",
    "/api/goals": "Invalid goal data",
    "/api/habits": "Invalid habit data",
    "/api/mood-entries": "Invalid mood entry data",
    "/api/leads": "Invalid lead data",
    "/api/auth": "Invalid credentials data",
    "/api/create-payment-intent": "Invalid payment data",
    "/api/payment-success": "Invalid payment data",
}.items(), key=lambda item: len(item[0]), reverse=True)

DEFAULT_VALIDATION_MESSAGE = "Invalid request data"


def validation_message(path: str) -> str:
    for prefix, message in VALIDATION_MESSAGES:
        if path.startswith(prefix):
            return message
    return DEFAULT_VALIDATION_MESSAGE


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "method": request.method, "errors": str(exc.errors())},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": validation_message(request.url.path)},
    )
