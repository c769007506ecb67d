"""Today's recommended strength workout.

The split comes from the muscle recovery map: a push, pull or legs day
when that group's anchor muscle (chest, back, quads) is fully recovered,
otherwise full body when at least two muscle categories are ready.  The
intensity and session length come from the readiness total.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from fitengine.analytics.muscle import MuscleGroup, MuscleGroupState, RecoveryLevel
from fitengine.analytics.readiness import ReadinessScore
from fitengine.records import NutritionProgress


class MuscleCategory(str, Enum):
    PUSH = "Push"
    PULL = "Pull"
    LEGS = "Legs"
    CORE = "Core"


MUSCLE_CATEGORIES: dict[MuscleGroup, MuscleCategory] = {
    MuscleGroup.CHEST: MuscleCategory.PUSH,
    MuscleGroup.SHOULDERS: MuscleCategory.PUSH,
    MuscleGroup.TRICEPS: MuscleCategory.PUSH,
    MuscleGroup.BACK: MuscleCategory.PULL,
    MuscleGroup.LATS: MuscleCategory.PULL,
    MuscleGroup.BICEPS: MuscleCategory.PULL,
    MuscleGroup.REAR_DELTS: MuscleCategory.PULL,
    MuscleGroup.TRAPS: MuscleCategory.PULL,
    MuscleGroup.FOREARMS: MuscleCategory.PULL,
    MuscleGroup.QUADS: MuscleCategory.LEGS,
    MuscleGroup.HAMSTRINGS: MuscleCategory.LEGS,
    MuscleGroup.GLUTES: MuscleCategory.LEGS,
    MuscleGroup.CALVES: MuscleCategory.LEGS,
    MuscleGroup.HIP_FLEXORS: MuscleCategory.LEGS,
    MuscleGroup.ADDUCTORS: MuscleCategory.LEGS,
    MuscleGroup.ABS: MuscleCategory.CORE,
    MuscleGroup.OBLIQUES: MuscleCategory.CORE,
    MuscleGroup.LOWER_BACK: MuscleCategory.CORE,
}


class WorkoutSplit(str, Enum):
    PUSH = "Push"
    PULL = "Pull"
    LEGS = "Legs"
    FULL_BODY = "Full Body"


SPLIT_MUSCLES: dict[WorkoutSplit, tuple[MuscleGroup, ...]] = {
    WorkoutSplit.PUSH: (MuscleGroup.CHEST, MuscleGroup.SHOULDERS, MuscleGroup.TRICEPS),
    WorkoutSplit.PULL: (
        MuscleGroup.BACK, MuscleGroup.LATS, MuscleGroup.BICEPS, MuscleGroup.REAR_DELTS,
    ),
    WorkoutSplit.LEGS: (
        MuscleGroup.QUADS, MuscleGroup.HAMSTRINGS, MuscleGroup.GLUTES, MuscleGroup.CALVES,
    ),
    WorkoutSplit.FULL_BODY: tuple(
        m for m in MuscleGroup if MUSCLE_CATEGORIES[m] != MuscleCategory.CORE
    ),
}

# Checked in order: a split wins outright when its anchor muscle is optimal
ANCHOR_MUSCLES = [
    (WorkoutSplit.PUSH, MuscleGroup.CHEST),
    (WorkoutSplit.PULL, MuscleGroup.BACK),
    (WorkoutSplit.LEGS, MuscleGroup.QUADS),
]


class IntensityLevel(str, Enum):
    HIGH = "High Intensity"
    MODERATE = "Moderate"
    LIGHT = "Light"
    RECOVERY = "Active Recovery"


# (minimum readiness total, intensity, minutes), checked top-down
INTENSITY_TIERS = [
    (80, IntensityLevel.HIGH, 75),
    (60, IntensityLevel.MODERATE, 60),
    (40, IntensityLevel.LIGHT, 45),
]
RECOVERY_MINUTES = 45

GOOD_SLEEP_POINTS = 20.0
POOR_SLEEP_POINTS = 15.0
PROTEIN_ON_TRACK = 0.8
REASON_MUSCLES = 3

_READY = (RecoveryLevel.READY, RecoveryLevel.OPTIMAL)


@dataclass(frozen=True)
class WorkoutRecommendation:
    split: WorkoutSplit
    intensity: IntensityLevel
    duration_min: int
    target_muscles: tuple[MuscleGroup, ...]
    reasons: tuple[str, ...]

    def __repr__(self) -> str:
        return (
            f"WorkoutRecommendation({self.split.value}, {self.intensity.value}, "
            f"{self.duration_min}min)"
        )


def ready_muscles(muscles: Mapping[MuscleGroup, MuscleGroupState]) -> list[MuscleGroupState]:
    """Ready or optimal muscles, most recovered first."""
    ready = [s for s in muscles.values() if s.status in _READY]
    return sorted(ready, key=lambda s: -s.recovery_percent)


def choose_split(muscles: Mapping[MuscleGroup, MuscleGroupState]) -> WorkoutSplit:
    for split, anchor in ANCHOR_MUSCLES:
        state = muscles.get(anchor)
        if state is not None and state.status == RecoveryLevel.OPTIMAL:
            return split

    categories = {MUSCLE_CATEGORIES[s.muscle] for s in ready_muscles(muscles)}
    if len(categories) >= 2:
        return WorkoutSplit.FULL_BODY
    if MuscleCategory.PUSH in categories:
        return WorkoutSplit.PUSH
    if MuscleCategory.PULL in categories:
        return WorkoutSplit.PULL
    return WorkoutSplit.LEGS


def intensity_for(readiness_total: int) -> tuple[IntensityLevel, int]:
    """Intensity and session length in minutes for a readiness total."""
    for threshold, level, minutes in INTENSITY_TIERS:
        if readiness_total >= threshold:
            return level, minutes
    return IntensityLevel.RECOVERY, RECOVERY_MINUTES


def recommend_workout(
    muscles: Mapping[MuscleGroup, MuscleGroupState],
    readiness: ReadinessScore,
    nutrition: NutritionProgress | None = None,
) -> WorkoutRecommendation:
    """Pick today's split, intensity and the reasons behind them.

    Args:
        muscles: Recovery state per muscle group.
        readiness: Today's readiness score.
        nutrition: Today's nutrition progress (None -> no protein logged).
    """
    split = choose_split(muscles)
    intensity, minutes = intensity_for(readiness.total)

    reasons = []
    if readiness.sleep_score >= GOOD_SLEEP_POINTS:
        reasons.append(f"Great sleep recovery ({readiness.sleep_score:.1f}/25)")
    elif readiness.sleep_score < POOR_SLEEP_POINTS:
        reasons.append("Sleep could be better - adjust intensity")

    names = [s.muscle.value for s in ready_muscles(muscles)[:REASON_MUSCLES]]
    if names:
        reasons.append(f"{', '.join(names)} fully recovered")

    protein = (nutrition or NutritionProgress()).protein_progress
    if protein >= PROTEIN_ON_TRACK:
        reasons.append("Protein intake on track for gains")
    else:
        reasons.append("Consider more protein post-workout")

    return WorkoutRecommendation(
        split=split,
        intensity=intensity,
        duration_min=minutes,
        target_muscles=SPLIT_MUSCLES[split],
        reasons=tuple(reasons),
    )
