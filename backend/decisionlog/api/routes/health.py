"""
Operational endpoints: health checks and Prometheus exposition
"""
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy import text
from sqlalchemy.orm import Session

from decisionlog import __version__
from decisionlog.core.config import get_settings
from decisionlog.core.database import get_db
from decisionlog.core.logging_config import LoggingConfig
from decisionlog.core.metrics import get_metrics, get_metrics_content_type
from decisionlog.utils.datetime_utils import utc_now_iso

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
        "timestamp": utc_now_iso(),
        "service": get_settings().app_name
    }


@router.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Detailed health check with component status

    Returns:
        dict: Health status of the service and its database
    """
    settings = get_settings()
    health_status = {
        "status": "healthy",
        "timestamp": utc_now_iso(),
        "service": settings.app_name,
        "version": __version__,
        "environment": settings.app_env,
        "components": {}
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["components"]["database"] = {"status": "healthy"}
    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        health_status["components"]["database"] = {"status": "unhealthy", "error": str(e)}
        health_status["status"] = "unhealthy"

    return health_status


@router.get("/metrics", tags=["metrics"])
async def metrics():
    """Decision lifecycle, classifier and HTTP metrics in Prometheus text format"""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())
