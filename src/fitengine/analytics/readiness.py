"""Daily readiness score (0-100).

Four sub-scores of up to 25 points each:

    sleep      -- last night's duration and quality
    recovery   -- HRV and resting heart rate
    training   -- number of sessions so far this week
    nutrition  -- protein and calorie progress against targets

Missing inputs fall back to neutral values rather than raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from fitengine.analytics.sleep import SleepQualityScore
from fitengine.records import NutritionProgress


SUBSCORE_MAX = 25.0
TOTAL_MAX = 100

SLEEP_MISSING = 5.0
HRV_MISSING = 5.0
RESTING_HR_MISSING = 0.0

# (minimum HRV ms, points), checked top-down
HRV_POINTS = [(60.0, 15.0), (45.0, 12.0), (30.0, 8.0)]
HRV_FLOOR = 5.0

# (maximum resting HR bpm, points), checked top-down
RESTING_HR_POINTS = [(55.0, 10.0), (65.0, 8.0), (75.0, 5.0)]
RESTING_HR_FLOOR = 2.0

PROTEIN_POINTS = 15.0
# (max deviation of calories/target from 1.0, points)
CALORIE_POINTS = [(0.2, 10.0), (0.4, 6.0)]
CALORIE_FLOOR = 3.0

# (minimum score, recommendation), checked top-down
RECOMMENDATIONS = [
    (85, "You're at peak performance. Push hard today!"),
    (70, "Good readiness. Normal training is perfect."),
    (55, "Moderate readiness. Consider lighter intensity."),
    (40, "Recovery needed. Light workout or active rest."),
]
REST_DAY = "Take a rest day. Focus on sleep and nutrition."


@dataclass(frozen=True)
class ReadinessScore:
    """Readiness total, its four components and human-readable details."""

    total: int  # 0-100
    sleep_score: float  # 0-25
    recovery_score: float  # 0-25
    training_load_score: float  # 0-25
    nutrition_score: float  # 0-25
    recommendation: str
    details: dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"ReadinessScore(total={self.total}, "
            f"sleep={self.sleep_score:.1f}, "
            f"recovery={self.recovery_score:.1f}, "
            f"training={self.training_load_score:.1f}, "
            f"nutrition={self.nutrition_score:.1f})"
        )


def _clamp(value: float) -> float:
    return max(0.0, min(SUBSCORE_MAX, value))


def _reading(value: float | None) -> float | None:
    """A vital that is missing, non-positive or non-finite counts as absent."""
    if value is None or not math.isfinite(value) or value <= 0:
        return None
    return value


# ---------------------------------------------------------------------------
# Component scores
# ---------------------------------------------------------------------------


def sleep_component(sleep: SleepQualityScore | None) -> float:
    if sleep is None or not sleep.has_data:
        return SLEEP_MISSING
    hours = sleep.record.total_hours
    quality = sleep.score / 10.0
    if 7.0 <= hours <= 9.0:
        return min(15.0 + quality * 10.0, 25.0)
    if hours >= 6.0:
        return min(10.0 + quality * 8.0, 20.0)
    return max(5.0, hours * 2.0)


def recovery_component(hrv_ms: float | None, resting_hr: float | None) -> float:
    hrv_ms, resting_hr = _reading(hrv_ms), _reading(resting_hr)
    hrv_points = HRV_MISSING
    if hrv_ms is not None:
        hrv_points = next((p for lo, p in HRV_POINTS if hrv_ms >= lo), HRV_FLOOR)

    rhr_points = RESTING_HR_MISSING
    if resting_hr is not None:
        rhr_points = next(
            (p for hi, p in RESTING_HR_POINTS if resting_hr <= hi), RESTING_HR_FLOOR
        )
    return hrv_points + rhr_points


def training_component(sessions_this_week: int) -> float:
    if sessions_this_week <= 0:
        return 15.0
    if sessions_this_week <= 2:
        return 20.0
    if sessions_this_week <= 4:
        return 25.0
    if sessions_this_week == 5:
        return 20.0
    return 12.0


def nutrition_component(nutrition: NutritionProgress | None) -> float:
    nutrition = nutrition or NutritionProgress()
    protein = nutrition.protein_progress * PROTEIN_POINTS
    deviation = abs(nutrition.calorie_progress - 1.0)
    calories = next((p for tol, p in CALORIE_POINTS if deviation <= tol), CALORIE_FLOOR)
    return protein + calories


def recommendation_for(total: int) -> str:
    for threshold, text in RECOMMENDATIONS:
        if total >= threshold:
            return text
    return REST_DAY


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def score_readiness(
    sleep: SleepQualityScore | None,
    hrv_ms: float | None,
    resting_hr: float | None,
    sessions_this_week: int,
    nutrition: NutritionProgress | None = None,
) -> ReadinessScore:
    """Combine sleep, vitals, weekly training count and nutrition.

    Args:
        sleep: Last night's sleep score (None or score 0 -> no data).
        hrv_ms: Latest HRV in ms (None or non-finite -> missing).
        resting_hr: Resolved resting HR in bpm (None or non-finite -> missing).
        sessions_this_week: Completed sessions in the current week.
        nutrition: Today's nutrition progress (None -> no progress).

    Returns:
        ReadinessScore with a 0-100 total.
    """
    hrv_ms, resting_hr = _reading(hrv_ms), _reading(resting_hr)
    sleep_pts = _clamp(sleep_component(sleep))
    recovery_pts = _clamp(recovery_component(hrv_ms, resting_hr))
    training_pts = _clamp(training_component(sessions_this_week))
    nutrition_pts = _clamp(nutrition_component(nutrition))

    total = int(sleep_pts + recovery_pts + training_pts + nutrition_pts)
    total = max(0, min(TOTAL_MAX, total))

    if sleep is not None and sleep.has_data:
        sleep_detail = f"{sleep.record.total_hours:.1f}h sleep, {sleep.score}/10 quality"
    else:
        sleep_detail = "No sleep data"
    hrv_text = f"{int(hrv_ms)}ms" if hrv_ms is not None else "n/a"
    rhr_text = f"{int(resting_hr)}bpm" if resting_hr is not None else "n/a"
    protein_pct = int((nutrition or NutritionProgress()).protein_progress * 100)

    details = {
        "sleep": sleep_detail,
        "recovery": f"HRV: {hrv_text}, Resting HR: {rhr_text}",
        "training": f"{sessions_this_week} workouts this week",
        "nutrition": f"{protein_pct}% of protein goal",
    }

    return ReadinessScore(
        total=total,
        sleep_score=round(sleep_pts, 1),
        recovery_score=round(recovery_pts, 1),
        training_load_score=round(training_pts, 1),
        nutrition_score=round(nutrition_pts, 1),
        recommendation=recommendation_for(total),
        details=details,
    )
