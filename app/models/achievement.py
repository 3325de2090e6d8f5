"""
Import achievement and progress models.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class UserAchievementProgress(SQLModel, table=True):
    """
    Live progress counters for one (user, achievement type) pair.

    total_imports, total_records_imported, total_points and best_accuracy
    only ever grow.
    """

    __tablename__ = "user_achievement_progress"
    __table_args__ = (UniqueConstraint("user_id", "achievement_type", name="uq_progress_user_type"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(max_length=100, index=True)
    achievement_type: str = Field(max_length=20)  # accuracy, volume, streak, speed, quality
    current_progress: float = Field(default=0)
    target_progress: float = Field(default=0)
    level: int = Field(default=1)
    total_points: int = Field(default=0)
    last_import_accuracy: Optional[float] = Field(default=None)
    best_accuracy: float = Field(default=0)
    consecutive_successful_imports: int = Field(default=0)
    total_imports: int = Field(default=0)
    total_records_imported: int = Field(default=0)
    average_import_time: float = Field(default=0, description="Running mean import duration in seconds")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ImportAchievement(SQLModel, table=True):
    """Unlocked badge. At most one per (user, type, level)."""

    __tablename__ = "import_achievements"
    __table_args__ = (
        UniqueConstraint("user_id", "achievement_type", "level", name="uq_achievement_user_type_level"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(max_length=100, index=True)
    achievement_type: str = Field(max_length=20)
    achievement_name: str = Field(max_length=100)
    description: str = Field(max_length=500)
    icon_type: str = Field(max_length=20)  # crown, trophy, medal, gem, star
    level: int = Field()
    points_awarded: int = Field(default=0)
    criteria_json: str = Field(max_length=1000, description="Criteria snapshot that unlocked the badge")
    unlocked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ImportAccuracyMetrics(SQLModel, table=True):
    """Append-only audit record of one file's import performance."""

    __tablename__ = "import_accuracy_metrics"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(max_length=100, index=True)
    session_id: str = Field(max_length=64, index=True)
    file_name: str = Field(max_length=255)
    total_rows: int = Field(default=0)
    valid_rows: int = Field(default=0)
    error_rows: int = Field(default=0)
    accuracy_percentage: float = Field(default=0)
    import_duration: float = Field(default=0)
    quality_score: float = Field(default=0)
    errors_detected_json: str = Field(default="[]", max_length=10000)
    improvement_suggestions_json: str = Field(default="[]", max_length=2000)
    points_earned: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
