"""Tests for fitengine.analytics.race -- personal bests and race predictions."""

import pytest

from fitengine.analytics.race import (
    riegel,
    detect_personal_bests,
    predict_races,
    prediction_confidence,
    format_duration,
    format_pace,
    LONGEST_RUN,
)

from tests.conftest import NOW, make_activity


def _by_name(bests):
    return {pb.distance_name: pb for pb in bests}


class TestRiegel:
    def test_same_distance_returns_source_time(self):
        assert riegel(1500.0, 5.0, 5.0) == 1500.0

    def test_longer_is_slower_per_km(self):
        t10 = riegel(1500.0, 5.0, 10.0)
        assert t10 > 3000.0
        assert t10 == pytest.approx(1500.0 * 2 ** 1.06)

    def test_shorter_distance(self):
        assert riegel(3000.0, 10.0, 5.0) < 1500.0

    @pytest.mark.parametrize("t,d", [(0.0, 5.0), (1500.0, 0.0), (-1.0, 5.0)])
    def test_degenerate_inputs(self, t, d):
        assert riegel(t, d, 10.0) == 0.0


class TestFormatting:
    def test_minutes(self):
        assert format_duration(1500) == "25:00"

    def test_hours(self):
        assert format_duration(3725) == "1:02:05"

    def test_pace(self):
        assert format_pace(300) == "5:00/km"

    def test_zero_pace(self):
        assert format_pace(0) == "--:--/km"


class TestDetectPersonalBests:
    def test_no_runs(self):
        assert detect_personal_bests([]) == []

    def test_fastest_within_tolerance_is_actual_pb(self):
        runs = [
            make_activity(days_ago=3, distance_km=5.0, duration_min=25),
            make_activity(days_ago=5, distance_km=5.3, duration_min=26),
            make_activity(days_ago=7, distance_km=4.4, duration_min=20),  # outside +/-10 %
        ]
        pb = _by_name(detect_personal_bests(runs))["5K"]
        assert not pb.is_estimated
        assert pb.time_sec == 25 * 60
        assert pb.actual_distance_km == 5.0
        assert pb.date == runs[0].start

    def test_estimated_from_longer_run(self):
        runs = [make_activity(distance_km=12.0, duration_min=60)]
        bests = _by_name(detect_personal_bests(runs))
        pb = bests["10K"]
        assert pb.is_estimated
        assert pb.time_sec == pytest.approx(riegel(3600.0, 12.0, 10.0))
        assert pb.pace == pytest.approx(pb.time_sec / 10.0)
        assert pb.actual_distance_km == 12.0
        assert "Half Marathon" not in bests
        assert "Marathon" not in bests

    def test_estimate_uses_best_pace_longer_run(self):
        runs = [
            make_activity(days_ago=2, distance_km=15.0, duration_min=90),  # 6:00/km
            make_activity(days_ago=4, distance_km=12.0, duration_min=60),  # 5:00/km
        ]
        pb = _by_name(detect_personal_bests(runs))["1K"]
        assert pb.is_estimated
        assert pb.actual_distance_km == 12.0

    def test_near_half_marathon(self):
        runs = [make_activity(distance_km=20.0, duration_min=110)]
        pb = _by_name(detect_personal_bests(runs))["Half Marathon"]
        assert not pb.is_estimated

    def test_longest_run_entry(self):
        runs = [
            make_activity(days_ago=1, distance_km=5.0, duration_min=25),
            make_activity(days_ago=2, distance_km=14.0, duration_min=80),
        ]
        longest = _by_name(detect_personal_bests(runs))[LONGEST_RUN]
        assert longest.distance_km == 14.0
        assert not longest.is_estimated

    def test_other_activity_types_ignored(self):
        rides = [make_activity(distance_km=40.0, duration_min=80, activity_type="cycling")]
        assert detect_personal_bests(rides) == []

    def test_zero_distance_ignored(self):
        assert detect_personal_bests([make_activity(distance_km=0.0)]) == []


class TestPredictRaces:
    def test_needs_five_km(self):
        assert predict_races([make_activity(distance_km=4.0)], NOW) is None

    def test_predictions_from_best_pace(self):
        runs = [
            make_activity(days_ago=2, distance_km=10.0, duration_min=50),  # 5:00/km
            make_activity(days_ago=4, distance_km=6.0, duration_min=36),   # 6:00/km
        ]
        races = predict_races(runs, NOW)
        assert races.base_distance_km == 10.0
        ten = races.get("10K")
        assert ten.time_sec == 3000.0
        assert not ten.is_estimated
        marathon = races.get("Marathon")
        assert marathon.is_estimated
        assert marathon.time_sec == pytest.approx(riegel(3000.0, 10.0, 42.195))
        assert [p.distance_name for p in races.predictions] == [
            "1K", "5K", "10K", "Half Marathon", "Marathon",
        ]

    def test_confidence_scales_with_recent_runs(self):
        runs = [make_activity(days_ago=d, distance_km=5.0) for d in range(1, 6)]
        races = predict_races(runs, NOW)
        assert races.confidence == 25.0

    def test_confidence_capped(self):
        runs = [make_activity(days_ago=d, distance_km=5.0) for d in range(1, 31)]
        assert prediction_confidence(runs, NOW) == 100.0

    def test_old_runs_do_not_add_confidence(self):
        runs = [make_activity(days_ago=120, distance_km=10.0, duration_min=50)]
        races = predict_races(runs, NOW)
        assert races is not None
        assert races.confidence == 0.0
