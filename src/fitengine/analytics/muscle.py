"""Per-muscle-group recovery from strength session history.

Recovery climbs linearly with days since the muscle was last a primary
target, at a rate set by that session's volume (weight x reps):

    volume < 5 000   -> 40 %/day
    volume < 10 000  -> 30 %/day
    volume < 20 000  -> 25 %/day
    otherwise        -> 20 %/day

A muscle that was never trained is reported as fully recovered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Sequence

from fitengine.records import StrengthSession

logger = logging.getLogger(__name__)


class MuscleGroup(str, Enum):
    CHEST = "Chest"
    SHOULDERS = "Shoulders"
    TRICEPS = "Triceps"
    BACK = "Back"
    LATS = "Lats"
    BICEPS = "Biceps"
    REAR_DELTS = "Rear Delts"
    TRAPS = "Traps"
    ABS = "Abs"
    OBLIQUES = "Obliques"
    LOWER_BACK = "Lower Back"
    QUADS = "Quads"
    HAMSTRINGS = "Hamstrings"
    GLUTES = "Glutes"
    CALVES = "Calves"
    HIP_FLEXORS = "Hip Flexors"
    ADDUCTORS = "Adductors"
    FOREARMS = "Forearms"

    @classmethod
    def parse(cls, name: str) -> "MuscleGroup | None":
        """Match by display value or enum name, ignoring case and separators."""
        key = name.strip().lower().replace("_", " ")
        for muscle in cls:
            if key in (muscle.value.lower(), muscle.name.lower().replace("_", " ")):
                return muscle
        return None


class RecoveryLevel(str, Enum):
    RECOVERING = "recovering"
    PARTIAL = "partial"
    READY = "ready"
    OPTIMAL = "optimal"


# (volume upper bound, percent per day)
RECOVERY_RATE_TIERS = [(5000.0, 40.0), (10000.0, 30.0), (20000.0, 25.0)]
RECOVERY_RATE_FLOOR = 20.0

RECOVERING_BELOW = 40.0
PARTIAL_BELOW = 70.0
FULL_RECOVERY = 100.0

RECOMMENDATIONS = {
    RecoveryLevel.RECOVERING: "Still recovering - consider rest or light work",
    RecoveryLevel.PARTIAL: "Partially recovered - moderate volume OK",
    RecoveryLevel.READY: "Ready for training",
    RecoveryLevel.OPTIMAL: "Fully recovered - great time to push!",
}
NEVER_TRAINED = "No recent training - ready for work!"


@dataclass(frozen=True)
class MuscleGroupState:
    """Recovery status of one muscle group."""

    muscle: MuscleGroup
    days_since_trained: int | None
    last_volume: float
    recovery_percent: float  # 0-100
    status: RecoveryLevel
    recommendation: str

    def __repr__(self) -> str:
        return (
            f"MuscleGroupState({self.muscle.value}: "
            f"{self.recovery_percent:.0f}%, {self.status.value})"
        )


def recovery_rate(volume: float) -> float:
    """Percent recovered per day for a session of *volume* kg."""
    for upper, rate in RECOVERY_RATE_TIERS:
        if volume < upper:
            return rate
    return RECOVERY_RATE_FLOOR


def muscle_recovery(
    muscle: MuscleGroup,
    days_since: int | None,
    last_volume: float = 0.0,
) -> MuscleGroupState:
    """Recovery state from days since training and last session volume.

    ``days_since`` of None means the muscle has no recorded training.
    """
    if days_since is None:
        return MuscleGroupState(
            muscle=muscle,
            days_since_trained=None,
            last_volume=0.0,
            recovery_percent=FULL_RECOVERY,
            status=RecoveryLevel.READY,
            recommendation=NEVER_TRAINED,
        )

    days = max(0, days_since)
    volume = max(0.0, last_volume)
    raw = days * recovery_rate(volume)
    percent = min(raw, FULL_RECOVERY)

    if percent < RECOVERING_BELOW:
        status = RecoveryLevel.RECOVERING
    elif percent < PARTIAL_BELOW:
        status = RecoveryLevel.PARTIAL
    elif raw <= FULL_RECOVERY:
        status = RecoveryLevel.READY
    else:
        status = RecoveryLevel.OPTIMAL

    return MuscleGroupState(
        muscle=muscle,
        days_since_trained=days,
        last_volume=volume,
        recovery_percent=percent,
        status=status,
        recommendation=RECOMMENDATIONS[status],
    )


def _targets(primary_muscles: Sequence[str], muscle: MuscleGroup) -> bool:
    return any(MuscleGroup.parse(name) is muscle for name in primary_muscles)


def muscle_recovery_map(
    sessions: Sequence[StrengthSession],
    now: datetime,
) -> dict[MuscleGroup, MuscleGroupState]:
    """Evaluate every muscle group against the session history.

    For each muscle the most recent session (not after *now*) with an
    exercise targeting it supplies the days elapsed and the volume, summed
    over that session's exercises for the muscle.
    """
    history = sorted((s for s in sessions if s.start <= now), key=lambda s: s.start, reverse=True)

    unknown = {
        name
        for s in history
        for ex in s.exercises
        for name in ex.primary_muscles
        if MuscleGroup.parse(name) is None
    }
    if unknown:
        logger.warning("Ignoring unknown muscle names: %s", ", ".join(sorted(unknown)))

    result: dict[MuscleGroup, MuscleGroupState] = {}
    for muscle in MuscleGroup:
        days: int | None = None
        volume = 0.0
        for session in history:
            hits = [ex for ex in session.exercises if _targets(ex.primary_muscles, muscle)]
            if hits:
                days = (now - session.start).days
                volume = sum(ex.total_volume for ex in hits)
                break
        result[muscle] = muscle_recovery(muscle, days, volume)
    return result
