"""Analytics engine for turning health history into training scores.

Modules:
    profile    -- Physiological profile resolution (overrides, sensor, defaults)
    zones      -- Karvonen heart-rate zones and time-in-zone
    stress     -- Per-activity training stress and effort
    load       -- Acute:chronic training load with cold-start handling
    readiness  -- Daily 0-100 readiness score
    sleep      -- Sleep quality (1-10) from stage durations
    muscle     -- Per-muscle-group recovery
    race       -- Personal bests and Riegel race predictions
    running    -- Weekly/monthly running summaries and runner fitness profile
    workout    -- Recommended strength split and intensity
    pipeline   -- Batch recomputation and snapshot publishing
    context    -- Plain-text snapshot summary
"""

from fitengine.analytics.profile import (
    resolve_profile,
    estimate_max_hr,
    PhysiologicalProfile,
)
from fitengine.analytics.zones import (
    zone_boundaries,
    zone_for,
    zone_durations,
    HeartRateZoneBoundaries,
    ZoneDistribution,
)
from fitengine.analytics.stress import score_activity, TrainingStressRecord, EffortLevel
from fitengine.analytics.load import aggregate_load, TrainingLoadState, TrainingStatus
from fitengine.analytics.readiness import score_readiness, ReadinessScore
from fitengine.analytics.sleep import (
    score_sleep,
    sleep_record_from_stages,
    SleepRecord,
    SleepQualityScore,
)
from fitengine.analytics.muscle import (
    muscle_recovery,
    muscle_recovery_map,
    MuscleGroup,
    MuscleGroupState,
    RecoveryLevel,
)
from fitengine.analytics.race import (
    riegel,
    detect_personal_bests,
    predict_races,
    PersonalBest,
    RacePrediction,
    RacePredictionSet,
)
from fitengine.analytics.running import (
    weekly_running_summary,
    monthly_running_summary,
    runner_fitness_profile,
    WeeklyRunningSummary,
    MonthlyRunningSummary,
    RunnerFitnessProfile,
    FitnessLevel,
)
from fitengine.analytics.workout import (
    recommend_workout,
    WorkoutRecommendation,
    WorkoutSplit,
    IntensityLevel,
)
from fitengine.analytics.pipeline import (
    compute_snapshot,
    compute_snapshot_async,
    gather_inputs,
    EngineInputs,
    EngineSnapshot,
    SnapshotPublisher,
)
from fitengine.analytics.context import build_context

__all__ = [
    # profile
    "resolve_profile",
    "estimate_max_hr",
    "PhysiologicalProfile",
    # zones
    "zone_boundaries",
    "zone_for",
    "zone_durations",
    "HeartRateZoneBoundaries",
    "ZoneDistribution",
    # stress
    "score_activity",
    "TrainingStressRecord",
    "EffortLevel",
    # load
    "aggregate_load",
    "TrainingLoadState",
    "TrainingStatus",
    # readiness
    "score_readiness",
    "ReadinessScore",
    # sleep
    "score_sleep",
    "sleep_record_from_stages",
    "SleepRecord",
    "SleepQualityScore",
    # muscle
    "muscle_recovery",
    "muscle_recovery_map",
    "MuscleGroup",
    "MuscleGroupState",
    "RecoveryLevel",
    # race
    "riegel",
    "detect_personal_bests",
    "predict_races",
    "PersonalBest",
    "RacePrediction",
    "RacePredictionSet",
    # running
    "weekly_running_summary",
    "monthly_running_summary",
    "runner_fitness_profile",
    "WeeklyRunningSummary",
    "MonthlyRunningSummary",
    "RunnerFitnessProfile",
    "FitnessLevel",
    # workout
    "recommend_workout",
    "WorkoutRecommendation",
    "WorkoutSplit",
    "IntensityLevel",
    # pipeline
    "compute_snapshot",
    "compute_snapshot_async",
    "gather_inputs",
    "EngineInputs",
    "EngineSnapshot",
    "SnapshotPublisher",
    # context
    "build_context",
]
