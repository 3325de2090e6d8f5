"""
Achievement API routes.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.database.session import get_session
from app.services.achievement_service import ImportPerformance, achievement_service, achievement_to_dict


class PerformancePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    accuracy_percentage: float = Field(alias="accuracyPercentage", ge=0, le=100)
    valid_rows: int = Field(alias="validRows", ge=0)
    total_rows: int = Field(alias="totalRows", ge=0)
    import_duration: float = Field(alias="importDuration", ge=0)
    quality_score: float = Field(alias="qualityScore", ge=0, le=100)
    errors_detected: List[Any] = Field(default_factory=list, alias="errorsDetected")


class RecordMetricsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)
    session_id: str = Field(alias="sessionId", min_length=1)
    file_name: str = Field(alias="fileName", min_length=1)
    performance: PerformancePayload


logger = logging.getLogger("app.achievements")
router = APIRouter(prefix="/api/achievements", tags=["achievements"])


@router.post("/record")
async def record_import_metrics(request_data: RecordMetricsRequest, db: Session = Depends(get_session)) -> Dict[str, Any]:
    """
    Record one import's performance and return the updated snapshot.

    Args:
        request_data: User, session, file and performance
        db: Database session

    Returns:
        Achievement snapshot plus the achievements unlocked by this import
    """
    payload = request_data.performance
    performance = ImportPerformance(
        accuracy_percentage=payload.accuracy_percentage,
        valid_rows=payload.valid_rows,
        total_rows=payload.total_rows,
        import_duration=payload.import_duration,
        quality_score=payload.quality_score,
        errors_detected=payload.errors_detected,
    )

    try:
        unlocked = achievement_service.record_import_metrics(
            request_data.user_id, request_data.session_id, request_data.file_name, performance, db
        )
        snapshot = achievement_service.get_user_achievements(request_data.user_id, db)
        snapshot["newAchievements"] = [achievement_to_dict(achievement) for achievement in unlocked]
        return snapshot

    except Exception as e:
        logger.error(f"Error recording import metrics: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{user_id}/initialize")
async def initialize_user_progress(user_id: str, db: Session = Depends(get_session)) -> Dict[str, Any]:
    """
    Create a user's progress rows if they do not exist yet.
    """
    try:
        created = achievement_service.initialize_user_progress(user_id, db)
        return {"status": "success", "created": created}

    except Exception as e:
        logger.error(f"Error initializing progress for {user_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{user_id}")
async def get_user_achievements(user_id: str, db: Session = Depends(get_session)) -> Dict[str, Any]:
    """
    Achievements, progress, recent metrics, points and level of a user.
    """
    logger.info(f"Achievements requested for user: {user_id}")

    try:
        return achievement_service.get_user_achievements(user_id, db)

    except Exception as e:
        logger.error(f"Error fetching achievements for {user_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
