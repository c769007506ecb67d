"""Tests for fitengine.analytics.context -- plain-text summary block."""

import asyncio

import pytest

from fitengine.analytics.context import build_context
from fitengine.analytics.pipeline import EngineInputs, compute_snapshot, gather_inputs
from fitengine.history import parse_history

from tests.conftest import NOW, sample_history


@pytest.fixture
def full_text() -> str:
    inputs = asyncio.run(gather_inputs(parse_history(sample_history()), NOW))
    return build_context(compute_snapshot(inputs, NOW))


class TestBuildContext:
    def test_sections_in_order(self, full_text):
        headers = [
            "USER PROFILE:",
            "TODAY'S READINESS:",
            "TRAINING LOAD:",
            "RUNNING THIS WEEK:",
            "RUNNING THIS MONTH:",
            "RUNNER PROFILE:",
            "LAST NIGHT'S SLEEP:",
            "MUSCLE RECOVERY STATUS:",
            "RECOMMENDED WORKOUT:",
            "PERSONAL BESTS:",
            "RACE PREDICTIONS:",
        ]
        positions = [full_text.index(h) for h in headers]
        assert positions == sorted(positions)

    def test_profile_and_zones(self, full_text):
        assert "- Age: 30" in full_text
        assert "- Max HR: 187 bpm, Resting HR: 60 bpm" in full_text
        assert "Recovery 60-123, Easy 123-136" in full_text

    def test_readiness(self, full_text):
        assert "TODAY'S READINESS: 87/100" in full_text
        assert "h sleep, 10/10 quality" in full_text
        assert "- Training Load: 1 workouts this week" in full_text
        assert "- Nutrition: 80% of protein goal" in full_text

    def test_load_notes_cold_start(self, full_text):
        assert "limited history" in full_text

    def test_sleep(self, full_text):
        assert "- Quality: 10/10" in full_text
        assert "- Efficiency: 91%" in full_text

    def test_muscles(self, full_text):
        assert "- Chest: 80% (ready)" in full_text
        assert "- Back: 100% (ready)" in full_text

    def test_running(self, full_text):
        assert "- Runs: 1, Distance: 5.0 km (17% of 30 km goal)" in full_text
        assert "- Avg Pace: 6:00/km, Longest: 5.0 km" in full_text
        assert "- Avg HR: 160 bpm" in full_text
        assert "- Efforts: tempo 1" in full_text
        assert "- Runs: 2, Distance: 15.2 km" in full_text
        assert "- Trend vs last month: +0%" in full_text
        assert "- Consistency: 40/100" in full_text
        assert "- Level: Beginner, Running age: 35" in full_text
        assert "- Strengths: none yet" in full_text

    def test_workout(self, full_text):
        assert "- Full Body, High Intensity, 75 min" in full_text
        assert "- Shoulders, Back, Lats fully recovered" in full_text
        assert "- Great sleep recovery (25.0/25)" in full_text
        assert "- Protein intake on track for gains" in full_text

    def test_bests_and_predictions(self, full_text):
        assert "- 5K: 30:00 @ 6:00/km" in full_text
        assert "- Based on 10.20 km in 1:00:00, confidence 10%" in full_text

    def test_ends_with_newline(self, full_text):
        assert full_text.endswith("\n")
        assert not full_text.endswith("\n\n")

    def test_empty_snapshot(self):
        text = build_context(compute_snapshot(EngineInputs(), NOW))
        assert "- Age: unknown" in text
        assert "LAST NIGHT'S SLEEP:\n- No data" in text
        assert "- None recorded" in text
        assert "- Not enough data" in text
        assert "No sleep data" in text
        assert "RUNNING THIS WEEK:\n- No runs" in text
        assert "RUNNING THIS MONTH:\n- No runs" in text
        assert "RUNNER PROFILE:" not in text
        assert "- Full Body, Active Recovery, 45 min" in text
