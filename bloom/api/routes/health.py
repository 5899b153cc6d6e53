"""
Health check endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from bloom import __version__
from bloom.core.clock import utcnow
from bloom.core.config import get_settings
from bloom.core.database import get_db
from bloom.core.logging_config import LoggingConfig
from bloom.services.nurture_scheduler import get_nurture_dispatcher

logger = LoggingConfig.get_logger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint

    Returns:
        dict: Health status
    """
    return {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "service": get_settings().app_name,
    }


@router.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Detailed health check with component status

    Returns:
        dict: Detailed health status of all components
    """
    settings = get_settings()
    health_status = {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "service": settings.app_name,
        "version": __version__,
        "environment": settings.app_env,
        "components": {}
    }

    try:
        db.execute(text("SELECT 1"))
        db.commit()
        health_status["components"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful"
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        health_status["status"] = "unhealthy"
        health_status["components"]["database"] = {
            "status": "unhealthy",
            "message": f"Database connection failed: {str(e)}",
            "error": type(e).__name__
        }

    dispatcher = get_nurture_dispatcher()
    health_status["components"]["nurture_dispatcher"] = {
        "status": "running" if dispatcher.running else "stopped",
        "enabled": settings.enable_nurture_dispatcher,
        "poll_interval_seconds": dispatcher.poll_interval_seconds,
    }

    return health_status


@router.get("/health/liveness")
async def liveness_check():
    """Liveness check - is the service alive?"""
    return {
        "status": "alive",
        "timestamp": utcnow().isoformat()
    }
