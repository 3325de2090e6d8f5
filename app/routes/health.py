"""
Health check endpoints.
"""
import logging
import time
from typing import Any, Dict

import psutil
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.database.session import get_session
from app.services.config_service import config_service

router = APIRouter()
logger = logging.getLogger("app.health")

SERVICE_NAME = "StoreLink"
SERVICE_VERSION = "0.1.0"


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint for Kubernetes/Docker health probes.

    Returns:
        Dict with status information
    """
    logger.info("Health check requested")

    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION
    }


@router.get("/health")
async def detailed_health(db: Session = Depends(get_session)) -> Dict[str, Any]:
    """
    Detailed health check with component status.

    Args:
        db: Database session

    Returns:
        Dict with detailed health information
    """
    logger.info("Detailed health check requested")

    database_status = await get_database_status(db)
    status = "ok" if database_status["status"] == "healthy" else "degraded"

    return {
        "status": status,
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "timestamp": config_service.now().isoformat(),
        "components": {
            "database": database_status,
        },
        "system": await get_system_metrics(),
    }


async def get_database_status(db: Session) -> Dict[str, Any]:
    """Ping the database and time the round-trip."""
    try:
        start_time = time.time()
        db.execute(text("SELECT 1"))
        response_time = round((time.time() - start_time) * 1000, 2)
        return {"status": "healthy", "response_time_ms": response_time}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}


async def get_system_metrics() -> Dict[str, Any]:
    """Get process and host metrics."""
    try:
        memory = psutil.virtual_memory()
        disk = psutil.disk_usage("/")
        process = psutil.Process()

        return {
            "cpu_percent": psutil.cpu_percent(interval=None),
            "memory_percent": memory.percent,
            "disk_percent": disk.percent,
            "process_memory_mb": round(process.memory_info().rss / (1024 * 1024), 1),
        }
    except Exception as e:
        logger.error(f"Error getting system metrics: {e}")
        return {"error": str(e)}
