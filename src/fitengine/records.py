"""Immutable input records consumed by the analytics engine.

These mirror what the external health data source hands us: heart-rate
samples, finished workouts, sleep-stage samples, the latest body metrics,
strength sessions and the day's nutrition progress.  Once built they are
never mutated; the engine recomputes everything from them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


@dataclass(frozen=True)
class HeartRateSample:
    """A single heart-rate reading."""

    timestamp: datetime
    bpm: float


@dataclass(frozen=True)
class ActivityRecord:
    """A completed workout."""

    id: str
    start: datetime
    duration_sec: float
    distance_km: float = 0.0
    activity_type: str = "running"
    avg_hr: float | None = None
    min_hr: float | None = None
    max_hr: float | None = None
    cadence: float | None = None  # steps per minute
    power: float | None = None  # watts

    @property
    def pace(self) -> float:
        """Seconds per km, 0 when no distance was covered."""
        if self.distance_km <= 0:
            return 0.0
        return self.duration_sec / self.distance_km

    def __repr__(self) -> str:
        return (
            f"ActivityRecord({self.id}: {self.activity_type}, "
            f"{self.distance_km:.2f}km in {self.duration_sec / 60:.0f}min)"
        )


class SleepStage(str, Enum):
    """Sleep-stage sample category."""

    IN_BED = "in_bed"
    AWAKE = "awake"
    CORE = "core"
    DEEP = "deep"
    REM = "rem"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class SleepStageSample:
    """One contiguous span of a single sleep stage."""

    stage: SleepStage
    start: datetime
    end: datetime

    @property
    def hours(self) -> float:
        return max((self.end - self.start).total_seconds(), 0.0) / 3600.0


@dataclass(frozen=True)
class BodyMetrics:
    """Most-recent body metric values reported by the sensor source.

    Any field may be missing.
    """

    age: int | None = None
    date_of_birth: date | None = None
    resting_heart_rate: float | None = None
    hrv_ms: float | None = None
    vo2_max: float | None = None
    weight_kg: float | None = None
    height_cm: float | None = None


@dataclass(frozen=True)
class ExerciseSet:
    weight_kg: float
    reps: int

    @property
    def volume(self) -> float:
        return self.weight_kg * self.reps


@dataclass(frozen=True)
class ExerciseEntry:
    """One exercise performed during a strength session."""

    name: str
    primary_muscles: tuple[str, ...]
    sets: tuple[ExerciseSet, ...] = ()

    @property
    def total_volume(self) -> float:
        return sum(s.volume for s in self.sets)


@dataclass(frozen=True)
class StrengthSession:
    """A logged strength workout."""

    id: str
    start: datetime
    exercises: tuple[ExerciseEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class NutritionProgress:
    """Today's intake against targets."""

    protein_g: float = 0.0
    protein_target_g: float = 0.0
    calories: float = 0.0
    calorie_target: float = 0.0

    @property
    def protein_progress(self) -> float:
        """Fraction of the protein target eaten, capped at 1 (0 if unknown)."""
        return min(_progress(self.protein_g, self.protein_target_g), 1.0)

    @property
    def calorie_progress(self) -> float:
        return _progress(self.calories, self.calorie_target)


def _progress(value: float, target: float) -> float:
    if not target > 0:
        return 0.0
    ratio = value / target
    return ratio if math.isfinite(ratio) else 0.0
