"""Tests for fitengine.analytics.workout -- split and intensity recommendation."""

import pytest

from fitengine.analytics.muscle import muscle_recovery, muscle_recovery_map, MuscleGroup
from fitengine.analytics.readiness import ReadinessScore
from fitengine.analytics.workout import (
    choose_split,
    intensity_for,
    recommend_workout,
    IntensityLevel,
    MuscleCategory,
    MUSCLE_CATEGORIES,
    SPLIT_MUSCLES,
    WorkoutSplit,
)
from fitengine.records import NutritionProgress

from tests.conftest import NOW, make_session


def _all_sore(**fresh):
    """Every muscle trained today, except those given as (days, volume)."""
    muscles = {m: muscle_recovery(m, 0, 1000) for m in MuscleGroup}
    for name, (days, volume) in fresh.items():
        muscle = MuscleGroup[name]
        muscles[muscle] = muscle_recovery(muscle, days, volume)
    return muscles


def _readiness(total: int = 87, sleep: float = 25.0) -> ReadinessScore:
    return ReadinessScore(
        total=total,
        sleep_score=sleep,
        recovery_score=20.0,
        training_load_score=20.0,
        nutrition_score=22.0,
        recommendation="",
    )


class TestCategories:
    def test_every_muscle_has_a_category(self):
        assert set(MUSCLE_CATEGORIES) == set(MuscleGroup)

    def test_full_body_skips_core(self):
        targets = SPLIT_MUSCLES[WorkoutSplit.FULL_BODY]
        assert MuscleGroup.ABS not in targets
        assert MuscleGroup.CHEST in targets
        assert all(MUSCLE_CATEGORIES[m] != MuscleCategory.CORE for m in targets)


class TestChooseSplit:
    def test_optimal_chest_is_push(self):
        assert choose_split(_all_sore(CHEST=(5, 1000), BACK=(5, 1000))) == WorkoutSplit.PUSH

    def test_optimal_back_is_pull(self):
        assert choose_split(_all_sore(BACK=(5, 1000), QUADS=(5, 1000))) == WorkoutSplit.PULL

    def test_optimal_quads_is_legs(self):
        assert choose_split(_all_sore(QUADS=(5, 1000))) == WorkoutSplit.LEGS

    def test_two_ready_categories_is_full_body(self):
        # 80 % is ready but not optimal, so no anchor wins
        assert choose_split(_all_sore(CHEST=(2, 1000), LATS=(2, 1000))) == WorkoutSplit.FULL_BODY

    def test_never_trained_is_full_body(self):
        assert choose_split(muscle_recovery_map([], NOW)) == WorkoutSplit.FULL_BODY

    def test_only_push_ready(self):
        assert choose_split(_all_sore(SHOULDERS=(2, 1000))) == WorkoutSplit.PUSH

    def test_only_pull_ready(self):
        assert choose_split(_all_sore(BICEPS=(2, 1000))) == WorkoutSplit.PULL

    def test_nothing_ready_defaults_to_legs(self):
        assert choose_split(_all_sore()) == WorkoutSplit.LEGS


class TestIntensity:
    @pytest.mark.parametrize(
        "total,level,minutes",
        [
            (100, IntensityLevel.HIGH, 75),
            (80, IntensityLevel.HIGH, 75),
            (79, IntensityLevel.MODERATE, 60),
            (60, IntensityLevel.MODERATE, 60),
            (59, IntensityLevel.LIGHT, 45),
            (40, IntensityLevel.LIGHT, 45),
            (39, IntensityLevel.RECOVERY, 45),
            (0, IntensityLevel.RECOVERY, 45),
        ],
    )
    def test_tiers(self, total, level, minutes):
        assert intensity_for(total) == (level, minutes)


class TestRecommendWorkout:
    def test_after_chest_day(self):
        muscles = muscle_recovery_map(
            [make_session(2, ("Chest", "Triceps"), weight_kg=80, reps=8)], NOW
        )
        nutrition = NutritionProgress(protein_g=120, protein_target_g=150)
        rec = recommend_workout(muscles, _readiness(), nutrition)

        assert rec.split == WorkoutSplit.FULL_BODY
        assert rec.intensity == IntensityLevel.HIGH
        assert rec.duration_min == 75
        assert rec.target_muscles == SPLIT_MUSCLES[WorkoutSplit.FULL_BODY]
        assert rec.reasons == (
            "Great sleep recovery (25.0/25)",
            "Shoulders, Back, Lats fully recovered",
            "Protein intake on track for gains",
        )

    def test_most_recovered_muscles_listed_first(self):
        muscles = _all_sore(
            ABS=(3, 1000), GLUTES=(None, 0), CALVES=(2, 1000), FOREARMS=(2, 1000),
        )
        rec = recommend_workout(muscles, _readiness())
        assert "Abs, Glutes, Calves fully recovered" in rec.reasons

    def test_poor_sleep_and_low_protein(self):
        rec = recommend_workout(_all_sore(), _readiness(total=35, sleep=5.0))
        assert rec.split == WorkoutSplit.LEGS
        assert rec.intensity == IntensityLevel.RECOVERY
        assert rec.reasons == (
            "Sleep could be better - adjust intensity",
            "Consider more protein post-workout",
        )

    def test_middling_sleep_not_mentioned(self):
        rec = recommend_workout(_all_sore(), _readiness(sleep=17.0))
        assert not any("leep" in reason for reason in rec.reasons)

    def test_repr(self):
        rec = recommend_workout(_all_sore(QUADS=(5, 1000)), _readiness(total=65))
        assert repr(rec) == "WorkoutRecommendation(Legs, Moderate, 60min)"
