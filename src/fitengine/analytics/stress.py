"""Per-activity training stress (TSS-like, heart-rate based).

Intensity is the fraction of heart-rate reserve used on average:

    IF = clamp((avg_hr - resting) / (max_hr - resting), 0, 1)
    stress = duration_hours * IF^2 * 100          (capped at 300)

An hour right at max HR therefore scores 100.  Effort is classified
separately from the avg_hr / max_hr ratio.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from fitengine.analytics.profile import PhysiologicalProfile
from fitengine.analytics.zones import ZoneDistribution
from fitengine.records import ActivityRecord


STRESS_MAX = 300.0


class EffortLevel(str, Enum):
    """Six-level effort classification."""

    RECOVERY = "recovery"
    EASY = "easy"
    MODERATE = "moderate"
    TEMPO = "tempo"
    THRESHOLD = "threshold"
    MAX_EFFORT = "max-effort"


# (upper bound of avg_hr / max_hr, level); anything above the last bound is max effort
EFFORT_THRESHOLDS = [
    (0.60, EffortLevel.RECOVERY),
    (0.70, EffortLevel.EASY),
    (0.80, EffortLevel.MODERATE),
    (0.90, EffortLevel.TEMPO),
    (0.95, EffortLevel.THRESHOLD),
]

TRAINING_EFFECT_MAX = 5.0


@dataclass(frozen=True)
class TrainingStressRecord:
    """Stress score and effort for one activity."""

    activity_id: str
    start: datetime
    stress: float  # 0-300
    effort: EffortLevel
    aerobic_effect: float = 1.0  # 1.0-5.0
    anaerobic_effect: float = 1.0  # 1.0-5.0

    def __repr__(self) -> str:
        return (
            f"TrainingStressRecord({self.activity_id}: "
            f"stress={self.stress:.1f}, effort={self.effort.value})"
        )


def _positive(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def intensity_factor(avg_hr: float, profile: PhysiologicalProfile) -> float:
    """Fraction of HR reserve used, clamped to [0, 1]."""
    reserve = profile.max_heart_rate - profile.resting_heart_rate
    if reserve <= 0:
        return 0.0
    raw = (avg_hr - profile.resting_heart_rate) / reserve
    if not math.isfinite(raw):
        return 0.0
    return max(0.0, min(1.0, raw))


def classify_effort(avg_hr: float | None, max_hr: float) -> EffortLevel:
    """Effort level from the avg_hr / max_hr ratio."""
    if not _positive(avg_hr) or not _positive(max_hr):
        return EffortLevel.RECOVERY
    ratio = avg_hr / max_hr
    for upper, level in EFFORT_THRESHOLDS:
        if ratio < upper:
            return level
    return EffortLevel.MAX_EFFORT


def aerobic_effect(duration_sec: float, avg_hr: float | None, max_hr: float) -> float:
    """Aerobic training effect on a 1.0-5.0 scale.

    Long sessions earn up to +1.5; time in the 65-85 % max-HR band earns
    +1.5 (+1.0 above it, since that work is no longer purely aerobic).
    """
    effect = 1.0
    minutes = duration_sec / 60.0
    if minutes >= 30:
        effect += min(1.5, minutes / 60.0)

    if _positive(avg_hr) and max_hr > 0:
        pct = avg_hr / max_hr
        if 0.65 <= pct <= 0.85:
            effect += 1.5
        elif pct > 0.85:
            effect += 1.0

    return round(min(TRAINING_EFFECT_MAX, effect), 1)


def anaerobic_effect(distribution: ZoneDistribution | None) -> float:
    """Anaerobic training effect from the share of time in zones 4-5."""
    if distribution is None or distribution.total_sec <= 0:
        return 1.0
    pct = distribution.percentages
    hard = pct.get(4, 0.0) + pct.get(5, 0.0)
    if hard < 5:
        return 1.0
    if hard < 15:
        return 2.0
    if hard < 25:
        return 3.0
    if hard < 40:
        return 4.0
    return 5.0


def score_activity(
    activity: ActivityRecord,
    profile: PhysiologicalProfile,
    zones: ZoneDistribution | None = None,
) -> TrainingStressRecord:
    """Compute the training stress record for one completed activity.

    Never raises: a zero or non-finite duration, or a missing or non-finite
    average HR, yields stress 0 and effort ``recovery``.

    Args:
        activity: The completed workout.
        profile: Resolved physiological profile.
        zones: Optional zone distribution for the anaerobic effect.
    """
    avg_hr = activity.avg_hr
    if not _positive(activity.duration_sec) or not _positive(avg_hr):
        return TrainingStressRecord(
            activity_id=activity.id,
            start=activity.start,
            stress=0.0,
            effort=EffortLevel.RECOVERY,
        )

    intensity = intensity_factor(avg_hr, profile)
    hours = activity.duration_sec / 3600.0
    stress = min(hours * intensity ** 2 * 100.0, STRESS_MAX)

    return TrainingStressRecord(
        activity_id=activity.id,
        start=activity.start,
        stress=round(stress, 2),
        effort=classify_effort(avg_hr, profile.max_heart_rate),
        aerobic_effect=aerobic_effect(activity.duration_sec, avg_hr, profile.max_heart_rate),
        anaerobic_effect=anaerobic_effect(zones),
    )
