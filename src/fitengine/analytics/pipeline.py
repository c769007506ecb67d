"""Analytics pipeline: fetch history from a data source and run every scorer.

:func:`compute_snapshot` is the pure batch recomputation.  The async side
(:func:`gather_inputs`, :func:`compute_snapshot_async` and
:class:`SnapshotPublisher`) adds bounded data-source queries, a concurrent
fan-out of the independent scorers and last-write-wins publishing.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any

from fitengine.analytics.load import TrainingLoadState, aggregate_load
from fitengine.analytics.muscle import MuscleGroup, MuscleGroupState, muscle_recovery_map
from fitengine.analytics.profile import SOURCE_DEFAULT, PhysiologicalProfile, resolve_profile
from fitengine.analytics.race import (
    PersonalBest,
    RacePredictionSet,
    detect_personal_bests,
    predict_races,
)
from fitengine.analytics.readiness import ReadinessScore, score_readiness
from fitengine.analytics.running import (
    MonthlyRunningSummary,
    RunnerFitnessProfile,
    WeeklyRunningSummary,
    monthly_running_summary,
    runner_fitness_profile,
    weekly_running_summary,
)
from fitengine.analytics.sleep import SleepQualityScore, score_sleep, sleep_record_from_stages
from fitengine.analytics.stress import TrainingStressRecord, score_activity
from fitengine.analytics.workout import WorkoutRecommendation, recommend_workout
from fitengine.analytics.zones import (
    HeartRateZoneBoundaries,
    ZoneDistribution,
    zone_boundaries,
    zone_durations,
)
from fitengine.config import Config
from fitengine.records import (
    ActivityRecord,
    BodyMetrics,
    HeartRateSample,
    NutritionProgress,
    SleepStageSample,
    StrengthSession,
)
from fitengine.sources import HealthDataSource, OverrideStore, ProfileField

logger = logging.getLogger(__name__)


SLEEP_WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class EngineInputs:
    """Immutable bundle of everything fetched from the data source."""

    heart_rate: tuple[HeartRateSample, ...] = ()
    activities: tuple[ActivityRecord, ...] = ()
    sleep_stages: tuple[SleepStageSample, ...] = ()
    metrics: BodyMetrics | None = None
    strength_sessions: tuple[StrengthSession, ...] = ()
    nutrition: NutritionProgress | None = None


@dataclass(frozen=True)
class EngineSnapshot:
    """Every derived score for one evaluation time."""

    generation: int
    computed_at: datetime
    profile: PhysiologicalProfile
    zones: HeartRateZoneBoundaries
    stress_records: tuple[TrainingStressRecord, ...]
    load: TrainingLoadState
    sleep: SleepQualityScore
    readiness: ReadinessScore
    muscles: dict[MuscleGroup, MuscleGroupState]
    personal_bests: list[PersonalBest]
    race_predictions: RacePredictionSet | None
    zone_distributions: dict[str, ZoneDistribution] = field(default_factory=dict)
    nutrition: NutritionProgress | None = None
    weekly_running: WeeklyRunningSummary | None = None
    monthly_running: MonthlyRunningSummary | None = None
    runner_profile: RunnerFitnessProfile | None = None
    workout: WorkoutRecommendation | None = None

    def __repr__(self) -> str:
        return (
            f"EngineSnapshot(gen={self.generation}, "
            f"readiness={self.readiness.total}, "
            f"load={self.load.status.value}, "
            f"sleep={self.sleep.score}/10)"
        )


# ---------------------------------------------------------------------------
# Pure recomputation
# ---------------------------------------------------------------------------


def _activity_samples(
    activity: ActivityRecord,
    samples: tuple[HeartRateSample, ...],
) -> list[HeartRateSample]:
    end = activity.start + timedelta(seconds=activity.duration_sec)
    return [s for s in samples if activity.start <= s.timestamp <= end]


def _usable_target(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _with_targets(
    nutrition: NutritionProgress | None,
    protein_target_g: float,
    calorie_target: float,
) -> NutritionProgress | None:
    """Fill in configured targets where the source reported none."""
    if nutrition is None:
        return None
    if not _usable_target(nutrition.protein_target_g):
        nutrition = replace(nutrition, protein_target_g=protein_target_g)
    if not _usable_target(nutrition.calorie_target):
        nutrition = replace(nutrition, calorie_target=calorie_target)
    return nutrition


def _resolved_resting_hr(profile: PhysiologicalProfile) -> float | None:
    """Resting HR from an override or an in-range sensor value, else None."""
    if profile.sources.get(ProfileField.RESTING_HEART_RATE.value) == SOURCE_DEFAULT:
        return None
    return float(profile.resting_heart_rate)


def _score_last_night(stages: tuple[SleepStageSample, ...]) -> SleepQualityScore:
    return score_sleep(sleep_record_from_stages(stages))


def _assemble(
    inputs: EngineInputs,
    now: datetime,
    generation: int,
    profile: PhysiologicalProfile,
    sleep: SleepQualityScore,
    muscles: dict[MuscleGroup, MuscleGroupState],
    bests: list[PersonalBest],
    races: RacePredictionSet | None,
) -> EngineSnapshot:
    """Profile-dependent stages plus the final reduction."""
    zones = zone_boundaries(profile)

    distributions: dict[str, ZoneDistribution] = {}
    stress_records = []
    for activity in inputs.activities:
        samples = _activity_samples(activity, inputs.heart_rate)
        dist = None
        if samples:
            dist = zone_durations(samples, zones, tail_sec=Config.HR_TAIL_SEC)
            distributions[activity.id] = dist
        stress_records.append(score_activity(activity, profile, dist))

    load = aggregate_load(stress_records, now)

    nutrition = _with_targets(inputs.nutrition, Config.PROTEIN_TARGET_G, Config.CALORIE_TARGET)
    metrics = inputs.metrics or BodyMetrics()
    readiness = score_readiness(
        sleep,
        hrv_ms=metrics.hrv_ms,
        resting_hr=_resolved_resting_hr(profile),
        sessions_this_week=load.sessions_last_7_days,
        nutrition=nutrition,
    )

    weekly = weekly_running_summary(
        inputs.activities, now, stress_records, goal_km=Config.WEEKLY_GOAL_KM
    )

    snapshot = EngineSnapshot(
        generation=generation,
        computed_at=now,
        profile=profile,
        zones=zones,
        stress_records=tuple(stress_records),
        load=load,
        sleep=sleep,
        readiness=readiness,
        muscles=muscles,
        personal_bests=bests,
        race_predictions=races,
        zone_distributions=distributions,
        nutrition=nutrition,
        weekly_running=weekly,
        monthly_running=monthly_running_summary(inputs.activities, now),
        runner_profile=runner_fitness_profile(inputs.activities, now, profile.vo2_max, weekly),
        workout=recommend_workout(muscles, readiness, nutrition),
    )
    logger.info("Computed %r", snapshot)
    return snapshot


def compute_snapshot(
    inputs: EngineInputs,
    now: datetime,
    overrides: OverrideStore | None = None,
    generation: int = 0,
) -> EngineSnapshot:
    """Run every scorer over *inputs* sequentially.

    Args:
        inputs: Fetched history.
        now: Evaluation time; all windows trail it.
        overrides: Manual profile overrides.
        generation: Generation number stamped on the snapshot.

    Returns:
        A fully populated EngineSnapshot.
    """
    return _assemble(
        inputs,
        now,
        generation,
        profile=resolve_profile(inputs.metrics, overrides, now.date()),
        sleep=_score_last_night(inputs.sleep_stages),
        muscles=muscle_recovery_map(inputs.strength_sessions, now),
        bests=detect_personal_bests(inputs.activities),
        races=predict_races(inputs.activities, now),
    )


async def compute_snapshot_async(
    inputs: EngineInputs,
    now: datetime,
    overrides: OverrideStore | None = None,
    generation: int = 0,
) -> EngineSnapshot:
    """Same as :func:`compute_snapshot`, with the independent scorers run
    concurrently in worker threads over the shared immutable inputs."""
    profile, sleep, muscles, bests, races = await asyncio.gather(
        asyncio.to_thread(resolve_profile, inputs.metrics, overrides, now.date()),
        asyncio.to_thread(_score_last_night, inputs.sleep_stages),
        asyncio.to_thread(muscle_recovery_map, inputs.strength_sessions, now),
        asyncio.to_thread(detect_personal_bests, inputs.activities),
        asyncio.to_thread(predict_races, inputs.activities, now),
    )
    return _assemble(inputs, now, generation, profile, sleep, muscles, bests, races)


# ---------------------------------------------------------------------------
# Data-source access
# ---------------------------------------------------------------------------


async def _bounded(name: str, query: Any, default: Any, timeout: float) -> Any:
    """Await one source query; timeouts and source errors become *default*."""
    try:
        return await asyncio.wait_for(query, timeout)
    except asyncio.TimeoutError:
        logger.warning("Source query %s timed out after %.1fs; using empty window", name, timeout)
    except Exception as exc:
        logger.warning("Source query %s failed (%s); using empty window", name, exc)
    return default


async def gather_inputs(
    source: HealthDataSource,
    now: datetime,
    timeout: float | None = None,
) -> EngineInputs:
    """Fetch every input window concurrently, each bounded by *timeout*."""
    timeout = Config.SOURCE_TIMEOUT if timeout is None else timeout
    load_start = now - timedelta(days=Config.LOAD_WINDOW_DAYS)
    race_start = now - timedelta(days=Config.RACE_WINDOW_DAYS)
    strength_start = now - timedelta(days=Config.STRENGTH_WINDOW_DAYS)

    hr, activities, stages, metrics, sessions, nutrition = await asyncio.gather(
        _bounded("heart_rate_samples", source.heart_rate_samples(load_start, now), (), timeout),
        _bounded("activities", source.activities(race_start, now), (), timeout),
        _bounded("sleep_stage_samples", source.sleep_stage_samples(now - SLEEP_WINDOW, now), (), timeout),
        _bounded("body_metrics", source.body_metrics(), None, timeout),
        _bounded("strength_sessions", source.strength_sessions(strength_start, now), (), timeout),
        _bounded("nutrition", source.nutrition(now.date()), None, timeout),
    )
    return EngineInputs(
        heart_rate=tuple(hr),
        activities=tuple(activities),
        sleep_stages=tuple(stages),
        metrics=metrics,
        strength_sessions=tuple(sessions),
        nutrition=nutrition,
    )


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------


class SnapshotPublisher:
    """Holds the current snapshot; newer generations always win.

    Each refresh takes a generation number up front.  A finished snapshot is
    swapped in only if nothing newer has been published, so a slow refresh
    that completes after a faster, later one is discarded.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._generation = 0
        self._current: EngineSnapshot | None = None

    @property
    def current(self) -> EngineSnapshot | None:
        return self._current

    def begin(self) -> int:
        """Reserve the next generation number."""
        self._generation += 1
        return self._generation

    async def publish(self, snapshot: EngineSnapshot) -> bool:
        """Publish *snapshot* unless a newer one is already current."""
        async with self._lock:
            current = self._current
            if current is not None and current.generation >= snapshot.generation:
                logger.info(
                    "Discarding stale snapshot gen %d (current gen %d)",
                    snapshot.generation, current.generation,
                )
                return False
            self._current = snapshot
            return True

    async def refresh(
        self,
        source: HealthDataSource,
        overrides: OverrideStore | None = None,
        now: datetime | None = None,
        timeout: float | None = None,
    ) -> EngineSnapshot | None:
        """Fetch, recompute and publish; returns whatever is current afterwards."""
        generation = self.begin()
        now = now or datetime.now(timezone.utc)
        # Freeze the overrides for the duration of this refresh
        frozen = OverrideStore.from_dict(overrides.to_dict()) if overrides else None
        inputs = await gather_inputs(source, now, timeout)
        snapshot = await compute_snapshot_async(inputs, now, frozen, generation)
        await self.publish(snapshot)
        return self._current
