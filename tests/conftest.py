"""Shared fixtures and helpers for the fitengine test suite."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from fitengine.analytics.profile import PhysiologicalProfile
from fitengine.analytics.stress import EffortLevel, TrainingStressRecord
from fitengine.records import (
    ActivityRecord,
    ExerciseEntry,
    ExerciseSet,
    HeartRateSample,
    SleepStage,
    SleepStageSample,
    StrengthSession,
)


NOW = datetime(2026, 2, 13, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------


def make_profile(
    max_hr: int = 187,
    resting_hr: int = 60,
    age: int | None = 30,
) -> PhysiologicalProfile:
    """A resolved profile without going through the resolver."""
    return PhysiologicalProfile(
        age=age,
        max_heart_rate=max_hr,
        resting_heart_rate=resting_hr,
        vo2_max=45.0,
        weight_kg=70.0,
        height_cm=175.0,
    )


def make_activity(
    days_ago: float = 1.0,
    duration_min: float = 30.0,
    distance_km: float = 5.0,
    avg_hr: float | None = 150.0,
    activity_type: str = "running",
    activity_id: str | None = None,
    now: datetime = NOW,
) -> ActivityRecord:
    start = now - timedelta(days=days_ago)
    return ActivityRecord(
        id=activity_id or f"act-{start:%Y%m%d%H%M}-{distance_km}",
        start=start,
        duration_sec=duration_min * 60.0,
        distance_km=distance_km,
        activity_type=activity_type,
        avg_hr=avg_hr,
    )


def make_stress(
    days_ago: float,
    stress: float,
    now: datetime = NOW,
) -> TrainingStressRecord:
    start = now - timedelta(days=days_ago)
    return TrainingStressRecord(
        activity_id=f"s-{days_ago}",
        start=start,
        stress=stress,
        effort=EffortLevel.MODERATE,
    )


def make_hr_series(
    start: datetime,
    bpms: list[float],
    interval_sec: float = 1.0,
) -> list[HeartRateSample]:
    """Evenly spaced HR samples starting at *start*."""
    return [
        HeartRateSample(timestamp=start + timedelta(seconds=i * interval_sec), bpm=bpm)
        for i, bpm in enumerate(bpms)
    ]


def make_night(
    end: datetime = NOW - timedelta(hours=5),
    core_h: float = 4.0,
    deep_h: float = 1.5,
    rem_h: float = 1.75,
    awake_h: float = 0.25,
    in_bed_h: float | None = 8.0,
) -> list[SleepStageSample]:
    """Back-to-back stage samples ending at *end*, plus an in-bed span."""
    samples = []
    cursor = end - timedelta(hours=core_h + deep_h + rem_h + awake_h)
    for stage, hours in (
        (SleepStage.CORE, core_h),
        (SleepStage.DEEP, deep_h),
        (SleepStage.REM, rem_h),
        (SleepStage.AWAKE, awake_h),
    ):
        if hours <= 0:
            continue
        samples.append(SleepStageSample(stage, cursor, cursor + timedelta(hours=hours)))
        cursor += timedelta(hours=hours)
    if in_bed_h:
        samples.append(SleepStageSample(SleepStage.IN_BED, end - timedelta(hours=in_bed_h), end))
    return samples


def make_session(
    days_ago: float,
    muscles: tuple[str, ...] = ("Chest",),
    weight_kg: float = 100.0,
    reps: int = 10,
    sets: int = 3,
    name: str = "Bench Press",
    now: datetime = NOW,
) -> StrengthSession:
    exercise = ExerciseEntry(
        name=name,
        primary_muscles=muscles,
        sets=tuple(ExerciseSet(weight_kg=weight_kg, reps=reps) for _ in range(sets)),
    )
    return StrengthSession(
        id=f"str-{days_ago}-{name}",
        start=now - timedelta(days=days_ago),
        exercises=(exercise,),
    )


# ---------------------------------------------------------------------------
# History files
# ---------------------------------------------------------------------------


def sample_history(now: datetime = NOW) -> dict:
    """A small but complete history export relative to *now*."""

    def iso(dt: datetime) -> str:
        return dt.isoformat()

    run_start = now - timedelta(days=1)
    return {
        "body_metrics": {
            "date_of_birth": "1995-06-01",
            "resting_heart_rate": 60,
            "hrv_ms": 55,
            "vo2_max": 48.0,
            "weight_kg": 72.0,
            "height_cm": 180.0,
        },
        "heart_rate": [
            {"timestamp": iso(run_start + timedelta(seconds=i * 60)), "bpm": 160}
            for i in range(30)
        ],
        "activities": [
            {
                "id": "run-1",
                "type": "running",
                "start": iso(run_start),
                "duration_sec": 1800,
                "distance_km": 5.0,
                "avg_hr": 160,
            },
            {
                "id": "run-2",
                "type": "running",
                "start": iso(now - timedelta(days=10)),
                "duration_sec": 3600,
                "distance_km": 10.2,
                "avg_hr": 150,
            },
        ],
        "sleep_stages": [
            {"stage": "in_bed", "start": iso(now - timedelta(hours=13)), "end": iso(now - timedelta(hours=5))},
            {"stage": "core", "start": iso(now - timedelta(hours=12.75)), "end": iso(now - timedelta(hours=8.75))},
            {"stage": "deep", "start": iso(now - timedelta(hours=8.75)), "end": iso(now - timedelta(hours=7.25))},
            {"stage": "rem", "start": iso(now - timedelta(hours=7.25)), "end": iso(now - timedelta(hours=5.5))},
            {"stage": "awake", "start": iso(now - timedelta(hours=5.5)), "end": iso(now - timedelta(hours=5.25))},
        ],
        "strength_sessions": [
            {
                "id": "lift-1",
                "start": iso(now - timedelta(days=2)),
                "exercises": [
                    {
                        "name": "Bench Press",
                        "primary_muscles": ["Chest", "Triceps"],
                        "sets": [{"weight_kg": 80, "reps": 8}] * 3,
                    }
                ],
            }
        ],
        "nutrition": {
            now.date().isoformat(): {
                "protein_g": 120,
                "protein_target_g": 150,
                "calories": 2400,
                "calorie_target": 2500,
            }
        },
    }


def write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def history_file(tmp_path: Path) -> Path:
    return write_json(tmp_path / "history.json", sample_history())
