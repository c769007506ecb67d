"""Weekly and monthly running summaries and a runner fitness profile.

Weeks start on Monday and months are calendar months, both taken in the
time zone of the evaluation time.  Only finished runs (see
:func:`fitengine.analytics.race.running_activities`) at or before ``now``
are counted.
"""

from __future__ import annotations

import calendar
import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Sequence

import numpy as np

from fitengine.analytics.race import running_activities
from fitengine.analytics.stress import EffortLevel, TrainingStressRecord
from fitengine.records import ActivityRecord

logger = logging.getLogger(__name__)


DEFAULT_WEEKLY_GOAL_KM = 30.0
WEEKS_PER_MONTH = 5

# Run days per week -> consistency score; 4-5 days a week is ideal
CONSISTENCY_IDEAL = (4.0, 5.0, 100.0)
CONSISTENCY_GOOD = (3.0, 6.0, 80.0)
CONSISTENCY_FAIR_MIN_DAYS = 2.0
CONSISTENCY_FAIR = 60.0
CONSISTENCY_LOW = 40.0

# (best 5 km+ pace upper bound in sec/km, running age)
RUNNING_AGE_TIERS = [(240.0, 25), (300.0, 30), (360.0, 35), (420.0, 40), (480.0, 45)]
RUNNING_AGE_FLOOR = 50

ENDURANCE_AVG_KM = 10.0
SPEED_PACE = 300.0
CADENCE_SPM = 175.0
PROFILE_MIN_BASE_KM = 5.0


class FitnessLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    COMPETITIVE = "Competitive"
    ELITE = "Elite"


# (weekly km upper bound, level); anything above the last bound is elite
FITNESS_LEVEL_TIERS = [
    (10.0, FitnessLevel.BEGINNER),
    (25.0, FitnessLevel.INTERMEDIATE),
    (50.0, FitnessLevel.ADVANCED),
    (80.0, FitnessLevel.COMPETITIVE),
]


class RunnerStrength(str, Enum):
    ENDURANCE = "Endurance"
    SPEED = "Speed"
    CADENCE = "Cadence"


@dataclass(frozen=True)
class WeeklyRunningSummary:
    """Totals for the current Monday-to-Sunday week."""

    week_start: date
    total_runs: int
    total_distance_km: float
    total_duration_sec: float
    average_pace: float  # sec/km
    average_hr: float | None
    longest_run_km: float
    fastest_pace: float  # sec/km
    total_stress: float
    daily_distances: tuple[float, ...]  # Monday first
    effort_distribution: dict[EffortLevel, int] = field(default_factory=dict)
    goal_km: float = DEFAULT_WEEKLY_GOAL_KM

    @property
    def goal_progress(self) -> float:
        if self.goal_km <= 0:
            return 0.0
        return self.total_distance_km / self.goal_km

    def __repr__(self) -> str:
        return (
            f"WeeklyRunningSummary({self.week_start}: {self.total_runs} runs, "
            f"{self.total_distance_km:.1f}km)"
        )


@dataclass(frozen=True)
class MonthlyRunningSummary:
    """Totals for the current calendar month."""

    month_start: date
    total_runs: int
    total_distance_km: float
    total_duration_sec: float
    average_pace: float  # sec/km
    weekly_totals: tuple[float, ...]  # days 1-7, 8-14, 15-21, 22-28, 29+
    distance_trend: float  # % change against the previous month, 0 if none
    consistency: float  # 40-100

    def __repr__(self) -> str:
        return (
            f"MonthlyRunningSummary({self.month_start:%Y-%m}: {self.total_runs} runs, "
            f"{self.total_distance_km:.1f}km, consistency={self.consistency:.0f})"
        )


@dataclass(frozen=True)
class RunnerFitnessProfile:
    vo2_max: float
    running_age: int | None  # None without a run of 5 km or more
    fitness_level: FitnessLevel
    strengths: tuple[RunnerStrength, ...]
    weekly_distance_km: float
    longest_run_km: float


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _local_date(ts: datetime, now: datetime) -> date:
    return ts.astimezone(now.tzinfo).date()


def _finished_runs(activities: Sequence[ActivityRecord], now: datetime) -> list[ActivityRecord]:
    return [r for r in running_activities(activities) if r.start <= now]


def _mean_of_present(values: Sequence[float | None]) -> float | None:
    present = [v for v in values if v is not None and math.isfinite(v) and v > 0]
    if not present:
        return None
    return float(np.mean(present))


def consistency_score(run_days: int, days_in_period: int) -> float:
    """Score how evenly runs are spread: 100 for 4-5 run days a week."""
    if days_in_period <= 0:
        return CONSISTENCY_LOW
    per_week = run_days / days_in_period * 7.0
    lo, hi, score = CONSISTENCY_IDEAL
    if lo <= per_week <= hi:
        return score
    lo, hi, score = CONSISTENCY_GOOD
    if lo <= per_week <= hi:
        return score
    if per_week >= CONSISTENCY_FAIR_MIN_DAYS:
        return CONSISTENCY_FAIR
    return CONSISTENCY_LOW


def fitness_level(weekly_distance_km: float) -> FitnessLevel:
    for upper, level in FITNESS_LEVEL_TIERS:
        if weekly_distance_km < upper:
            return level
    return FitnessLevel.ELITE


def running_age(best_pace: float) -> int:
    """Rough "running age" from the best pace (sec/km) over 5 km or more."""
    for upper, age in RUNNING_AGE_TIERS:
        if best_pace < upper:
            return age
    return RUNNING_AGE_FLOOR


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def weekly_running_summary(
    activities: Sequence[ActivityRecord],
    now: datetime,
    stress_records: Sequence[TrainingStressRecord] = (),
    goal_km: float = DEFAULT_WEEKLY_GOAL_KM,
) -> WeeklyRunningSummary | None:
    """Summarize this week's runs; None when there are none.

    Args:
        activities: Activity history, any order and any type.
        now: Evaluation time; its date and time zone pick the week.
        stress_records: Stress records for the same activities, matched by
            id for the stress total and effort distribution.
        goal_km: Weekly distance goal.
    """
    today = now.date()
    week_start = today - timedelta(days=today.weekday())
    runs = [r for r in _finished_runs(activities, now) if _local_date(r.start, now) >= week_start]
    if not runs:
        return None

    stress_by_id = {s.activity_id: s for s in stress_records}
    daily = [0.0] * 7
    for run in runs:
        daily[(_local_date(run.start, now) - week_start).days] += run.distance_km

    distance = float(np.sum([r.distance_km for r in runs]))
    duration = float(np.sum([r.duration_sec for r in runs]))
    matched = [stress_by_id[r.id] for r in runs if r.id in stress_by_id]

    summary = WeeklyRunningSummary(
        week_start=week_start,
        total_runs=len(runs),
        total_distance_km=round(distance, 2),
        total_duration_sec=duration,
        average_pace=duration / distance,
        average_hr=_mean_of_present([r.avg_hr for r in runs]),
        longest_run_km=max(r.distance_km for r in runs),
        fastest_pace=min(r.pace for r in runs),
        total_stress=round(float(np.sum([s.stress for s in matched])), 1) if matched else 0.0,
        daily_distances=tuple(round(d, 2) for d in daily),
        effort_distribution=dict(Counter(s.effort for s in matched)),
        goal_km=goal_km,
    )
    logger.debug("Weekly running: %r", summary)
    return summary


def monthly_running_summary(
    activities: Sequence[ActivityRecord],
    now: datetime,
) -> MonthlyRunningSummary | None:
    """Summarize this calendar month's runs; None when there are none."""
    today = now.date()
    month_start = today.replace(day=1)
    previous_start = (month_start - timedelta(days=1)).replace(day=1)

    runs = _finished_runs(activities, now)
    month_runs = [r for r in runs if _local_date(r.start, now) >= month_start]
    if not month_runs:
        return None
    previous = [r for r in runs if previous_start <= _local_date(r.start, now) < month_start]

    weekly = [0.0] * WEEKS_PER_MONTH
    for run in month_runs:
        weekly[(_local_date(run.start, now).day - 1) // 7] += run.distance_km

    distance = float(np.sum([r.distance_km for r in month_runs]))
    duration = float(np.sum([r.duration_sec for r in month_runs]))
    previous_distance = float(np.sum([r.distance_km for r in previous])) if previous else 0.0
    trend = (distance - previous_distance) / previous_distance * 100.0 if previous_distance > 0 else 0.0

    run_days = len({_local_date(r.start, now) for r in month_runs})
    days_in_month = calendar.monthrange(today.year, today.month)[1]

    return MonthlyRunningSummary(
        month_start=month_start,
        total_runs=len(month_runs),
        total_distance_km=round(distance, 2),
        total_duration_sec=duration,
        average_pace=duration / distance,
        weekly_totals=tuple(round(w, 2) for w in weekly),
        distance_trend=round(trend, 1),
        consistency=consistency_score(run_days, days_in_month),
    )


def runner_fitness_profile(
    activities: Sequence[ActivityRecord],
    now: datetime,
    vo2_max: float,
    weekly: WeeklyRunningSummary | None = None,
) -> RunnerFitnessProfile | None:
    """Fitness level, running age and strengths; None without any runs.

    The fitness level comes from this week's distance (*weekly*); strengths
    and running age come from the whole run history passed in.
    """
    runs = _finished_runs(activities, now)
    if not runs:
        return None

    base_runs = [r for r in runs if r.distance_km >= PROFILE_MIN_BASE_KM]
    best_pace = min((r.pace for r in base_runs), default=None)

    strengths = []
    if float(np.mean([r.distance_km for r in runs])) >= ENDURANCE_AVG_KM:
        strengths.append(RunnerStrength.ENDURANCE)
    if best_pace is not None and best_pace < SPEED_PACE:
        strengths.append(RunnerStrength.SPEED)
    cadence = _mean_of_present([r.cadence for r in runs])
    if cadence is not None and cadence >= CADENCE_SPM:
        strengths.append(RunnerStrength.CADENCE)

    weekly_km = weekly.total_distance_km if weekly is not None else 0.0
    return RunnerFitnessProfile(
        vo2_max=vo2_max,
        running_age=running_age(best_pace) if best_pace is not None else None,
        fitness_level=fitness_level(weekly_km),
        strengths=tuple(strengths),
        weekly_distance_km=weekly_km,
        longest_run_km=max(r.distance_km for r in runs),
    )
