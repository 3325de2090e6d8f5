"""
Achievement service turning import performance into points, progress and badges.
"""
import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.models.achievement import ImportAccuracyMetrics, ImportAchievement, UserAchievementProgress
from app.services.achievement_definitions import (
    ACHIEVEMENT_DEFINITIONS,
    ACHIEVEMENT_TYPES,
    USER_LEVELS,
    AchievementDefinition,
    get_next_threshold,
)
from app.services.config_service import config_service

logger = logging.getLogger("app.achievements")

SUCCESSFUL_IMPORT_ACCURACY = 90
RECENT_METRICS_LIMIT = 10


@dataclass
class ImportPerformance:
    """Performance of one imported file, as consumed by the achievement engine."""

    accuracy_percentage: float
    valid_rows: int
    total_rows: int
    import_duration: float
    quality_score: float
    errors_detected: List[Any] = field(default_factory=list)

    @classmethod
    def from_counts(
        cls, total_rows: int, valid_rows: int, imported_rows: int, import_duration: float, errors_detected=None
    ) -> "ImportPerformance":
        """
        Build a performance record from raw import counts.

        Accuracy is valid/total and quality is imported/valid, both as
        percentages rounded to two decimals.
        """
        accuracy = round(valid_rows / total_rows * 100, 2) if total_rows > 0 else 0.0
        quality = round(imported_rows / valid_rows * 100, 2) if valid_rows > 0 else 0.0
        return cls(
            accuracy_percentage=accuracy,
            valid_rows=valid_rows,
            total_rows=total_rows,
            import_duration=import_duration,
            quality_score=quality,
            errors_detected=list(errors_detected or []),
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class AchievementService:
    """Service for import metrics, user progress and achievement unlocking."""

    def __init__(self):
        self.logger = logger

    def calculate_points(self, performance: ImportPerformance) -> int:
        """
        Points for one import: the sum of four independent band lookups.

        Args:
            performance: Import performance

        Returns:
            Points earned
        """
        points = 0

        # Accuracy
        if performance.accuracy_percentage >= 100:
            points += 100
        elif performance.accuracy_percentage >= 95:
            points += 75
        elif performance.accuracy_percentage >= 90:
            points += 50
        elif performance.accuracy_percentage >= 80:
            points += 25

        # Volume
        if performance.valid_rows >= 10000:
            points += 100
        elif performance.valid_rows >= 5000:
            points += 50
        elif performance.valid_rows >= 1000:
            points += 25

        # Speed
        if performance.import_duration <= 30:
            points += 50
        elif performance.import_duration <= 60:
            points += 25

        # Quality
        if performance.quality_score >= 95:
            points += 50
        elif performance.quality_score >= 90:
            points += 25

        return points

    def generate_improvement_suggestions(self, performance: ImportPerformance) -> List[Dict[str, str]]:
        suggestions = []

        if performance.accuracy_percentage < 90:
            suggestions.append(
                {
                    "type": "accuracy",
                    "message": "Review column mappings and data formats to improve accuracy",
                    "priority": "high",
                }
            )

        if performance.import_duration > 120:
            suggestions.append(
                {
                    "type": "speed",
                    "message": "Consider splitting large files into smaller batches for faster processing",
                    "priority": "medium",
                }
            )

        if performance.quality_score < 80:
            suggestions.append(
                {
                    "type": "quality",
                    "message": "Validate data before import to improve quality score",
                    "priority": "high",
                }
            )

        return suggestions

    def calculate_user_level(self, total_points: int) -> int:
        for minimum, level, _ in USER_LEVELS:
            if total_points >= minimum:
                return level
        return 1

    def get_level_name(self, level: int) -> str:
        for _, tier, name in USER_LEVELS:
            if tier == level:
                return name
        return "Bronze"

    def initialize_user_progress(self, user_id: str, db: Session) -> bool:
        """
        Create one progress row per achievement type for a new user.

        Does nothing when the user already has progress rows.

        Args:
            user_id: User ID
            db: Database session

        Returns:
            True if rows were created
        """
        existing = db.query(UserAchievementProgress).filter(UserAchievementProgress.user_id == user_id).first()
        if existing:
            return False

        for achievement_type in ACHIEVEMENT_TYPES:
            db.add(
                UserAchievementProgress(
                    user_id=user_id,
                    achievement_type=achievement_type,
                    current_progress=0,
                    target_progress=get_next_threshold(achievement_type, 1),
                    level=1,
                    total_points=0,
                )
            )
        db.commit()

        self.logger.info(f"Initialized achievement progress for user {user_id}")
        return True

    def record_import_metrics(
        self, user_id: str, session_id: str, file_name: str, performance: ImportPerformance, db: Session
    ) -> List[ImportAchievement]:
        """
        Record one import's metrics, update progress and unlock achievements.

        The metrics row, progress updates and new achievements are committed
        together; any failure rolls all of them back and propagates.

        Args:
            user_id: User ID
            session_id: Import session ID
            file_name: Imported file name
            performance: Import performance
            db: Database session

        Returns:
            Achievements unlocked by this import
        """
        self.initialize_user_progress(user_id, db)

        try:
            points_earned = self.calculate_points(performance)
            now = config_service.now()

            db.add(
                ImportAccuracyMetrics(
                    user_id=user_id,
                    session_id=session_id,
                    file_name=file_name,
                    total_rows=performance.total_rows,
                    valid_rows=performance.valid_rows,
                    error_rows=performance.total_rows - performance.valid_rows,
                    accuracy_percentage=performance.accuracy_percentage,
                    import_duration=performance.import_duration,
                    quality_score=performance.quality_score,
                    errors_detected_json=json.dumps(performance.errors_detected, default=str),
                    improvement_suggestions_json=json.dumps(self.generate_improvement_suggestions(performance)),
                    points_earned=points_earned,
                    created_at=now,
                )
            )

            progress_rows = (
                db.query(UserAchievementProgress)
                .filter(UserAchievementProgress.user_id == user_id)
                .order_by(UserAchievementProgress.id)
                .with_for_update()
                .all()
            )
            for progress in progress_rows:
                self._apply_performance(progress, performance, points_earned)
                progress.updated_at = now

            unlocked = self._unlock_achievements(user_id, progress_rows, db)
            db.commit()
        except Exception as e:
            self.logger.error(f"Failed to record import metrics for user {user_id}, session {session_id}: {e}")
            db.rollback()
            raise

        for achievement in unlocked:
            db.refresh(achievement)
            self.logger.info(
                f"Achievement unlocked user={user_id} name={achievement.achievement_name} level={achievement.level}"
            )

        self.logger.info(
            f"Recorded import metrics user={user_id} file={file_name} points={points_earned} unlocked={len(unlocked)}"
        )
        return unlocked

    def _apply_performance(
        self, progress: UserAchievementProgress, performance: ImportPerformance, points_earned: int
    ) -> None:
        previous_imports = progress.total_imports

        progress.last_import_accuracy = performance.accuracy_percentage
        progress.total_imports = previous_imports + 1
        progress.total_records_imported += performance.valid_rows
        progress.total_points += points_earned

        if performance.accuracy_percentage > (progress.best_accuracy or 0):
            progress.best_accuracy = performance.accuracy_percentage

        if performance.accuracy_percentage >= SUCCESSFUL_IMPORT_ACCURACY:
            progress.consecutive_successful_imports += 1
        else:
            progress.consecutive_successful_imports = 0

        progress.average_import_time = (
            progress.average_import_time * previous_imports + performance.import_duration
        ) / (previous_imports + 1)

        if progress.achievement_type == "accuracy":
            progress.current_progress = _round_half_up(performance.accuracy_percentage)
        elif progress.achievement_type == "volume":
            progress.current_progress = performance.valid_rows
        elif progress.achievement_type == "streak":
            progress.current_progress = progress.consecutive_successful_imports
        elif progress.achievement_type == "speed":
            progress.current_progress = performance.import_duration
        elif progress.achievement_type == "quality":
            progress.current_progress = performance.quality_score

    def _unlock_achievements(
        self, user_id: str, progress_rows: List[UserAchievementProgress], db: Session
    ) -> List[ImportAchievement]:
        existing_keys = {
            (achievement.achievement_type, achievement.level)
            for achievement in db.query(ImportAchievement).filter(ImportAchievement.user_id == user_id).all()
        }
        progress_by_type = {progress.achievement_type: progress for progress in progress_rows}

        unlocked = []
        for definition in ACHIEVEMENT_DEFINITIONS:
            progress = progress_by_type.get(definition.type)
            if progress is None or definition.key in existing_keys:
                continue
            if not self.check_criteria(progress, definition):
                continue

            achievement = ImportAchievement(
                user_id=user_id,
                achievement_type=definition.type,
                achievement_name=definition.name,
                description=definition.description,
                icon_type=definition.icon_type,
                level=definition.level,
                points_awarded=definition.points_awarded,
                criteria_json=json.dumps(definition.criteria),
                unlocked_at=config_service.now(),
            )
            db.add(achievement)
            existing_keys.add(definition.key)
            unlocked.append(achievement)

        return unlocked

    def check_criteria(self, progress: UserAchievementProgress, definition: AchievementDefinition) -> bool:
        """Whether a progress row satisfies a definition's single threshold."""
        if definition.type == "accuracy":
            return (progress.best_accuracy or 0) >= definition.threshold
        if definition.type == "volume":
            return progress.total_records_imported >= definition.threshold
        if definition.type == "streak":
            return progress.consecutive_successful_imports >= definition.threshold
        if definition.type == "speed":
            return progress.average_import_time <= definition.threshold
        if definition.type == "quality":
            return progress.current_progress >= definition.threshold
        return False

    def get_user_achievements(self, user_id: str, db: Session) -> Dict[str, Any]:
        """
        Snapshot of a user's achievements, progress and recent metrics.

        Args:
            user_id: User ID
            db: Database session

        Returns:
            Dictionary with achievements, progress, recentMetrics, totalPoints and level
        """
        achievements = (
            db.query(ImportAchievement)
            .filter(ImportAchievement.user_id == user_id)
            .order_by(ImportAchievement.unlocked_at.desc(), ImportAchievement.id.desc())
            .all()
        )
        progress = (
            db.query(UserAchievementProgress)
            .filter(UserAchievementProgress.user_id == user_id)
            .order_by(UserAchievementProgress.id)
            .all()
        )
        recent_metrics = (
            db.query(ImportAccuracyMetrics)
            .filter(ImportAccuracyMetrics.user_id == user_id)
            .order_by(ImportAccuracyMetrics.created_at.desc(), ImportAccuracyMetrics.id.desc())
            .limit(RECENT_METRICS_LIMIT)
            .all()
        )

        total_points = sum(row.total_points for row in progress)
        level = self.calculate_user_level(total_points)

        return {
            "achievements": [achievement_to_dict(achievement) for achievement in achievements],
            "progress": [progress_to_dict(row) for row in progress],
            "recentMetrics": [metrics_to_dict(row) for row in recent_metrics],
            "totalPoints": total_points,
            "level": level,
            "levelName": self.get_level_name(level),
        }


def achievement_to_dict(achievement: ImportAchievement) -> Dict[str, Any]:
    return {
        "id": achievement.id,
        "achievementType": achievement.achievement_type,
        "achievementName": achievement.achievement_name,
        "description": achievement.description,
        "iconType": achievement.icon_type,
        "level": achievement.level,
        "pointsAwarded": achievement.points_awarded,
        "criteria": json.loads(achievement.criteria_json),
        "unlockedAt": achievement.unlocked_at.isoformat() if achievement.unlocked_at else None,
    }


def progress_to_dict(progress: UserAchievementProgress) -> Dict[str, Any]:
    return {
        "achievementType": progress.achievement_type,
        "currentProgress": progress.current_progress,
        "targetProgress": progress.target_progress,
        "level": progress.level,
        "totalPoints": progress.total_points,
        "lastImportAccuracy": progress.last_import_accuracy,
        "bestAccuracy": progress.best_accuracy,
        "consecutiveSuccessfulImports": progress.consecutive_successful_imports,
        "totalImports": progress.total_imports,
        "totalRecordsImported": progress.total_records_imported,
        "averageImportTime": progress.average_import_time,
        "updatedAt": progress.updated_at.isoformat() if progress.updated_at else None,
    }


def metrics_to_dict(metrics: ImportAccuracyMetrics) -> Dict[str, Any]:
    return {
        "sessionId": metrics.session_id,
        "fileName": metrics.file_name,
        "totalRows": metrics.total_rows,
        "validRows": metrics.valid_rows,
        "errorRows": metrics.error_rows,
        "accuracyPercentage": metrics.accuracy_percentage,
        "importDuration": metrics.import_duration,
        "qualityScore": metrics.quality_score,
        "errorsDetected": json.loads(metrics.errors_detected_json or "[]"),
        "improvementSuggestions": json.loads(metrics.improvement_suggestions_json or "[]"),
        "pointsEarned": metrics.points_earned,
        "createdAt": metrics.created_at.isoformat() if metrics.created_at else None,
    }


# Global instance
achievement_service = AchievementService()
