"""
Tests for the achievement engine.
"""
import pytest

from app.models.achievement import ImportAccuracyMetrics, ImportAchievement, UserAchievementProgress
from app.services.achievement_definitions import ACHIEVEMENT_DEFINITIONS, get_next_threshold
from app.services.achievement_service import AchievementService, ImportPerformance


@pytest.fixture
def service():
    return AchievementService()


def make_performance(accuracy=100.0, valid_rows=50, total_rows=50, duration=25.0, quality=98.0):
    return ImportPerformance(
        accuracy_percentage=accuracy,
        valid_rows=valid_rows,
        total_rows=total_rows,
        import_duration=duration,
        quality_score=quality,
    )


def progress_for(db, user_id, achievement_type):
    return (
        db.query(UserAchievementProgress)
        .filter(UserAchievementProgress.user_id == user_id, UserAchievementProgress.achievement_type == achievement_type)
        .one()
    )


class TestPoints:
    """Test point calculation."""

    def test_all_top_bands(self, service):
        performance = make_performance(accuracy=100, valid_rows=12000, total_rows=12000, duration=20, quality=96)

        assert service.calculate_points(performance) == 300

    def test_no_band_reached(self, service):
        performance = make_performance(accuracy=50, valid_rows=10, total_rows=20, duration=500, quality=10)

        assert service.calculate_points(performance) == 0

    @pytest.mark.parametrize(
        "accuracy,expected",
        [(100, 100), (99.99, 75), (95, 75), (90, 50), (85, 25), (80, 25), (79.9, 0)],
    )
    def test_accuracy_bands(self, service, accuracy, expected):
        performance = make_performance(accuracy=accuracy, valid_rows=0, duration=1000, quality=0)

        assert service.calculate_points(performance) == expected

    @pytest.mark.parametrize("valid_rows,expected", [(10000, 100), (5000, 50), (1000, 25), (999, 0)])
    def test_volume_bands(self, service, valid_rows, expected):
        performance = make_performance(accuracy=0, valid_rows=valid_rows, duration=1000, quality=0)

        assert service.calculate_points(performance) == expected

    @pytest.mark.parametrize("duration,expected", [(30, 50), (30.5, 25), (60, 25), (61, 0)])
    def test_speed_bands(self, service, duration, expected):
        performance = make_performance(accuracy=0, valid_rows=0, duration=duration, quality=0)

        assert service.calculate_points(performance) == expected

    @pytest.mark.parametrize("quality,expected", [(95, 50), (90, 25), (89.9, 0)])
    def test_quality_bands(self, service, quality, expected):
        performance = make_performance(accuracy=0, valid_rows=0, duration=1000, quality=quality)

        assert service.calculate_points(performance) == expected


class TestSuggestions:
    def test_poor_import_gets_all_suggestions(self, service):
        performance = make_performance(accuracy=70, duration=200, quality=50)

        types = [s["type"] for s in service.generate_improvement_suggestions(performance)]

        assert types == ["accuracy", "speed", "quality"]

    def test_good_import_gets_none(self, service):
        assert service.generate_improvement_suggestions(make_performance()) == []


class TestLevels:
    @pytest.mark.parametrize(
        "points,level,name",
        [(0, 1, "Bronze"), (499, 1, "Bronze"), (500, 2, "Silver"), (1000, 3, "Gold"), (2500, 4, "Platinum"), (5000, 5, "Diamond")],
    )
    def test_level_tiers(self, service, points, level, name):
        assert service.calculate_user_level(points) == level
        assert service.get_level_name(level) == name

    def test_unknown_level_name(self, service):
        assert service.get_level_name(9) == "Bronze"


class TestDefinitions:
    def test_nine_unique_definitions(self):
        keys = [definition.key for definition in ACHIEVEMENT_DEFINITIONS]

        assert len(keys) == 9
        assert len(set(keys)) == 9

    def test_threshold_ladders(self):
        assert get_next_threshold("accuracy", 1) == 70
        assert get_next_threshold("speed", 5) == 30
        assert get_next_threshold("volume", 6) == 100
        assert get_next_threshold("unknown", 1) == 100


class TestInitializeProgress:
    def test_creates_one_row_per_type(self, service, isolated_db_session):
        assert service.initialize_user_progress("rep-1", isolated_db_session) is True

        rows = isolated_db_session.query(UserAchievementProgress).filter(UserAchievementProgress.user_id == "rep-1").all()
        targets = {row.achievement_type: row.target_progress for row in rows}
        assert targets == {"accuracy": 70, "volume": 100, "streak": 3, "speed": 300, "quality": 60}
        assert all(row.level == 1 and row.total_points == 0 for row in rows)

    def test_is_idempotent(self, service, isolated_db_session):
        service.initialize_user_progress("rep-1", isolated_db_session)

        assert service.initialize_user_progress("rep-1", isolated_db_session) is False
        assert isolated_db_session.query(UserAchievementProgress).count() == 5


class TestRecordImportMetrics:
    """Test recording import performance."""

    def test_first_perfect_import(self, service, isolated_db_session):
        unlocked = service.record_import_metrics(
            "rep-1", "session_1", "stores.xlsx", make_performance(), isolated_db_session
        )

        names = {achievement.achievement_name for achievement in unlocked}
        assert {"Precision Master", "Data Expert", "Quality Analyst", "Lightning Fast", "Perfectionist"} == names

        metrics = isolated_db_session.query(ImportAccuracyMetrics).one()
        assert metrics.points_earned == 200
        assert metrics.error_rows == 0

        snapshot = service.get_user_achievements("rep-1", isolated_db_session)
        assert snapshot["totalPoints"] == 1000
        assert snapshot["level"] == 3
        assert snapshot["levelName"] == "Gold"
        assert len(snapshot["achievements"]) == 5
        assert len(snapshot["progress"]) == 5

    def test_repeat_import_unlocks_nothing_new(self, service, isolated_db_session):
        service.record_import_metrics("rep-1", "session_1", "a.xlsx", make_performance(), isolated_db_session)

        unlocked = service.record_import_metrics(
            "rep-1", "session_2", "b.xlsx", make_performance(), isolated_db_session
        )

        assert unlocked == []
        assert isolated_db_session.query(ImportAchievement).count() == 5

        accuracy = progress_for(isolated_db_session, "rep-1", "accuracy")
        assert accuracy.total_imports == 2
        assert accuracy.total_records_imported == 100
        assert accuracy.total_points == 400
        assert accuracy.consecutive_successful_imports == 2

    def test_progress_values_per_type(self, service, isolated_db_session):
        performance = make_performance(accuracy=92.5, valid_rows=37, total_rows=40, duration=45.0, quality=88.0)

        service.record_import_metrics("rep-1", "session_1", "a.xlsx", performance, isolated_db_session)

        assert progress_for(isolated_db_session, "rep-1", "accuracy").current_progress == 93
        assert progress_for(isolated_db_session, "rep-1", "volume").current_progress == 37
        assert progress_for(isolated_db_session, "rep-1", "streak").current_progress == 1
        assert progress_for(isolated_db_session, "rep-1", "speed").current_progress == 45.0
        assert progress_for(isolated_db_session, "rep-1", "quality").current_progress == 88.0

    def test_low_accuracy_resets_streak(self, service, isolated_db_session):
        service.record_import_metrics("rep-1", "s1", "a.xlsx", make_performance(accuracy=95), isolated_db_session)
        service.record_import_metrics("rep-1", "s2", "b.xlsx", make_performance(accuracy=95), isolated_db_session)
        service.record_import_metrics("rep-1", "s3", "c.xlsx", make_performance(accuracy=80), isolated_db_session)

        progress = progress_for(isolated_db_session, "rep-1", "streak")
        assert progress.consecutive_successful_imports == 0
        assert progress.current_progress == 0

    def test_best_accuracy_never_drops(self, service, isolated_db_session):
        service.record_import_metrics("rep-1", "s1", "a.xlsx", make_performance(accuracy=95), isolated_db_session)
        service.record_import_metrics("rep-1", "s2", "b.xlsx", make_performance(accuracy=80), isolated_db_session)

        progress = progress_for(isolated_db_session, "rep-1", "accuracy")
        assert progress.best_accuracy == 95
        assert progress.last_import_accuracy == 80

    def test_average_import_time_is_running_mean(self, service, isolated_db_session):
        service.record_import_metrics("rep-1", "s1", "a.xlsx", make_performance(duration=20), isolated_db_session)
        service.record_import_metrics("rep-1", "s2", "b.xlsx", make_performance(duration=40), isolated_db_session)

        assert progress_for(isolated_db_session, "rep-1", "speed").average_import_time == pytest.approx(30.0)

    def test_slow_import_does_not_unlock_speed(self, service, isolated_db_session):
        unlocked = service.record_import_metrics(
            "rep-1", "s1", "a.xlsx", make_performance(accuracy=50, duration=90, quality=50), isolated_db_session
        )

        assert unlocked == []

    def test_volume_achievement_uses_cumulative_records(self, service, isolated_db_session):
        performance = make_performance(accuracy=50, valid_rows=3000, total_rows=6000, duration=500, quality=50)
        service.record_import_metrics("rep-1", "s1", "a.xlsx", performance, isolated_db_session)

        unlocked = service.record_import_metrics("rep-1", "s2", "b.xlsx", performance, isolated_db_session)

        assert [achievement.achievement_name for achievement in unlocked] == ["Bulk Champion"]

    def test_failure_rolls_back_everything(self, service, isolated_db_session, monkeypatch):
        service.initialize_user_progress("rep-1", isolated_db_session)

        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(service, "_unlock_achievements", explode)

        with pytest.raises(RuntimeError):
            service.record_import_metrics("rep-1", "s1", "a.xlsx", make_performance(), isolated_db_session)

        assert isolated_db_session.query(ImportAccuracyMetrics).count() == 0
        assert isolated_db_session.query(ImportAchievement).count() == 0
        assert progress_for(isolated_db_session, "rep-1", "accuracy").total_imports == 0


class TestUserAchievements:
    def test_unknown_user(self, service, isolated_db_session):
        snapshot = service.get_user_achievements("nobody", isolated_db_session)

        assert snapshot == {
            "achievements": [],
            "progress": [],
            "recentMetrics": [],
            "totalPoints": 0,
            "level": 1,
            "levelName": "Bronze",
        }

    def test_recent_metrics_are_capped_newest_first(self, service, isolated_db_session):
        performance = make_performance(accuracy=50, duration=500, quality=50)
        for index in range(12):
            service.record_import_metrics("rep-1", f"s{index}", f"file{index}.xlsx", performance, isolated_db_session)

        recent = service.get_user_achievements("rep-1", isolated_db_session)["recentMetrics"]

        assert len(recent) == 10
        assert recent[0]["fileName"] == "file11.xlsx"
        assert recent[-1]["fileName"] == "file2.xlsx"

    def test_total_points_sum_every_progress_row(self, service, isolated_db_session):
        performance = make_performance(accuracy=85, duration=45, quality=50)
        for index in range(2):
            service.record_import_metrics("rep-1", f"s{index}", "a.xlsx", performance, isolated_db_session)

        snapshot = service.get_user_achievements("rep-1", isolated_db_session)

        assert [row["totalPoints"] for row in snapshot["progress"]] == [100] * 5
        assert snapshot["totalPoints"] == 500
        assert snapshot["level"] == 2
        assert snapshot["levelName"] == "Silver"
