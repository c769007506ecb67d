"""Personal-best detection and race-time prediction.

Personal bests come from actual efforts within +/-10 % of a standard
distance.  When there is no such effort, the best-paced longer run is
scaled down with Riegel's formula and flagged as estimated:

    T2 = T1 * (D2 / D1) ** 1.06
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Sequence

from fitengine.records import ActivityRecord

logger = logging.getLogger(__name__)


RIEGEL_EXPONENT = 1.06
PB_TOLERANCE = 0.10

# (name, km) for personal-best detection
PB_DISTANCES = [
    ("1K", 1.0),
    ("2K", 2.0),
    ("5K", 5.0),
    ("10K", 10.0),
    ("Half Marathon", 21.0975),
    ("Marathon", 42.195),
]
LONGEST_RUN = "Longest Run"

# (name, km) for forward-looking race predictions
RACE_DISTANCES = [
    ("1K", 1.0),
    ("5K", 5.0),
    ("10K", 10.0),
    ("Half Marathon", 21.0975),
    ("Marathon", 42.195),
]
PREDICTION_MIN_BASE_KM = 5.0
CONFIDENCE_WINDOW_DAYS = 90
CONFIDENCE_FULL_RUNS = 20


@dataclass(frozen=True)
class PersonalBest:
    """Best time at a target distance, actual or estimated."""

    distance_km: float
    distance_name: str
    time_sec: float
    pace: float  # sec/km
    date: datetime
    actual_distance_km: float
    heart_rate: float | None = None
    is_estimated: bool = False

    def __repr__(self) -> str:
        flag = " (est)" if self.is_estimated else ""
        return f"PersonalBest({self.distance_name}: {format_duration(self.time_sec)}{flag})"


@dataclass(frozen=True)
class RacePrediction:
    distance_km: float
    distance_name: str
    time_sec: float
    pace: float  # sec/km
    is_estimated: bool = True


@dataclass(frozen=True)
class RacePredictionSet:
    """Predicted race times from a single base run."""

    predictions: list[RacePrediction] = field(default_factory=list)
    base_distance_km: float = 0.0
    base_time_sec: float = 0.0
    base_date: datetime | None = None
    confidence: float = 0.0  # 0-100

    def get(self, name: str) -> RacePrediction | None:
        return next((p for p in self.predictions if p.distance_name == name), None)

    def __repr__(self) -> str:
        times = ", ".join(
            f"{p.distance_name}={format_duration(p.time_sec)}" for p in self.predictions
        )
        return f"RacePredictionSet({times}, confidence={self.confidence:.0f}%)"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def riegel(base_time: float, base_distance: float, target_distance: float) -> float:
    """Riegel extrapolation; 0 when the base time or distance is not positive."""
    if base_time <= 0 or base_distance <= 0 or target_distance <= 0:
        return 0.0
    return base_time * (target_distance / base_distance) ** RIEGEL_EXPONENT


def format_duration(seconds: float) -> str:
    """``H:MM:SS`` or ``M:SS``."""
    total = int(round(max(seconds, 0.0)))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_pace(sec_per_km: float) -> str:
    if sec_per_km <= 0:
        return "--:--/km"
    minutes, secs = divmod(int(round(sec_per_km)), 60)
    return f"{minutes}:{secs:02d}/km"


def running_activities(
    activities: Sequence[ActivityRecord],
    activity_type: str = "running",
) -> list[ActivityRecord]:
    """Activities of *activity_type* with a finite, positive distance and duration."""
    wanted = activity_type.lower()
    return [
        a for a in activities
        if a.activity_type.lower() == wanted
        and math.isfinite(a.distance_km) and a.distance_km > 0
        and math.isfinite(a.duration_sec) and a.duration_sec > 0
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def detect_personal_bests(
    activities: Sequence[ActivityRecord],
    activity_type: str = "running",
) -> list[PersonalBest]:
    """Personal bests for each standard distance plus the longest run.

    Distances with neither a near-distance effort nor a longer run are
    omitted.
    """
    runs = running_activities(activities, activity_type)
    bests: list[PersonalBest] = []

    for name, target in PB_DISTANCES:
        lo, hi = target * (1 - PB_TOLERANCE), target * (1 + PB_TOLERANCE)
        near = [r for r in runs if lo <= r.distance_km <= hi]
        if near:
            fastest = min(near, key=lambda r: r.duration_sec)
            bests.append(PersonalBest(
                distance_km=target,
                distance_name=name,
                time_sec=fastest.duration_sec,
                pace=fastest.pace,
                date=fastest.start,
                actual_distance_km=fastest.distance_km,
                heart_rate=fastest.avg_hr,
            ))
            continue

        longer = [r for r in runs if r.distance_km >= target]
        if not longer:
            continue
        base = min(longer, key=lambda r: r.pace)
        estimate = riegel(base.duration_sec, base.distance_km, target)
        bests.append(PersonalBest(
            distance_km=target,
            distance_name=name,
            time_sec=estimate,
            pace=estimate / target,
            date=base.start,
            actual_distance_km=base.distance_km,
            heart_rate=base.avg_hr,
            is_estimated=True,
        ))

    if runs:
        longest = max(runs, key=lambda r: r.distance_km)
        bests.append(PersonalBest(
            distance_km=longest.distance_km,
            distance_name=LONGEST_RUN,
            time_sec=longest.duration_sec,
            pace=longest.pace,
            date=longest.start,
            actual_distance_km=longest.distance_km,
            heart_rate=longest.avg_hr,
        ))

    logger.debug("Detected %d personal bests from %d runs", len(bests), len(runs))
    return bests


def prediction_confidence(activities: Sequence[ActivityRecord], now: datetime,
                          activity_type: str = "running") -> float:
    """Percent confidence from the count of recent runs (20 runs -> 100 %)."""
    cutoff = now - timedelta(days=CONFIDENCE_WINDOW_DAYS)
    recent = [r for r in running_activities(activities, activity_type) if cutoff <= r.start <= now]
    return min(len(recent), CONFIDENCE_FULL_RUNS) / CONFIDENCE_FULL_RUNS * 100.0


def predict_races(
    activities: Sequence[ActivityRecord],
    now: datetime,
    activity_type: str = "running",
) -> RacePredictionSet | None:
    """Predict standard race times from the best-paced run of at least 5 km.

    Returns None when no run is long enough to base a prediction on.
    """
    candidates = [
        r for r in running_activities(activities, activity_type)
        if r.distance_km >= PREDICTION_MIN_BASE_KM and r.start <= now
    ]
    if not candidates:
        return None

    base = min(candidates, key=lambda r: r.pace)
    predictions = []
    for name, target in RACE_DISTANCES:
        time_sec = riegel(base.duration_sec, base.distance_km, target)
        predictions.append(RacePrediction(
            distance_km=target,
            distance_name=name,
            time_sec=time_sec,
            pace=time_sec / target,
            is_estimated=not math.isclose(target, base.distance_km),
        ))

    return RacePredictionSet(
        predictions=predictions,
        base_distance_km=base.distance_km,
        base_time_sec=base.duration_sec,
        base_date=base.start,
        confidence=prediction_confidence(activities, now, activity_type),
    )
