"""
Static achievement table, threshold ladders and user level tiers.
"""
from dataclasses import dataclass
from typing import Dict, Tuple

ACHIEVEMENT_TYPES: Tuple[str, ...] = ("accuracy", "volume", "streak", "speed", "quality")


@dataclass(frozen=True)
class AchievementDefinition:
    type: str
    name: str
    description: str
    icon_type: str
    level: int
    points_awarded: int
    threshold: float

    @property
    def key(self) -> Tuple[str, int]:
        return (self.type, self.level)

    @property
    def criteria(self) -> Dict[str, object]:
        return {"type": self.type, "threshold": self.threshold}


ACHIEVEMENT_DEFINITIONS: Tuple[AchievementDefinition, ...] = (
    AchievementDefinition("accuracy", "Precision Master", "Achieve 100% import accuracy", "crown", 5, 500, 100),
    AchievementDefinition("accuracy", "Data Expert", "Maintain 95%+ accuracy across 10 imports", "trophy", 4, 300, 95),
    AchievementDefinition("accuracy", "Quality Analyst", "Achieve 90%+ accuracy", "medal", 3, 150, 90),
    AchievementDefinition("volume", "Data Titan", "Import over 10,000 records in a single session", "gem", 5, 400, 10000),
    AchievementDefinition("volume", "Bulk Champion", "Import over 5,000 records", "trophy", 3, 200, 5000),
    AchievementDefinition("streak", "Consistency King", "Complete 20 consecutive successful imports", "crown", 4, 350, 20),
    AchievementDefinition("streak", "Reliability Pro", "Complete 10 consecutive successful imports", "medal", 3, 200, 10),
    AchievementDefinition("speed", "Lightning Fast", "Complete import in under 30 seconds", "star", 4, 250, 30),
    AchievementDefinition("quality", "Perfectionist", "Achieve quality score of 95+", "gem", 4, 300, 95),
)

# Per-type target for levels 1..5; speed is in seconds, lower is better
THRESHOLD_LADDERS: Dict[str, Tuple[float, ...]] = {
    "accuracy": (70, 80, 90, 95, 100),
    "volume": (100, 500, 1000, 5000, 10000),
    "streak": (3, 5, 10, 15, 20),
    "speed": (300, 180, 120, 60, 30),
    "quality": (60, 70, 80, 90, 95),
}

DEFAULT_THRESHOLD = 100

# (minimum points, level, name), highest first
USER_LEVELS: Tuple[Tuple[int, int, str], ...] = (
    (5000, 5, "Diamond"),
    (2500, 4, "Platinum"),
    (1000, 3, "Gold"),
    (500, 2, "Silver"),
    (0, 1, "Bronze"),
)


def get_next_threshold(achievement_type: str, level: int) -> float:
    """Target value for the given tier, or DEFAULT_THRESHOLD when unknown."""
    ladder = THRESHOLD_LADDERS.get(achievement_type)
    if not ladder or not 1 <= level <= len(ladder):
        return DEFAULT_THRESHOLD
    return ladder[level - 1]
