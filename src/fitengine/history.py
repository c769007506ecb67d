"""Load a JSON health-history export into an in-memory data source.

Expected layout (every top-level key optional)::

    {
      "body_metrics": {"date_of_birth": "1995-04-02", "resting_heart_rate": 58, ...},
      "heart_rate": [{"timestamp": "...", "bpm": 142}, ...],
      "activities": [{"id": "...", "type": "running", "start": "...",
                      "duration_sec": 1800, "distance_km": 5.0, "avg_hr": 152}, ...],
      "sleep_stages": [{"stage": "deep", "start": "...", "end": "..."}, ...],
      "strength_sessions": [{"id": "...", "start": "...", "exercises": [
          {"name": "Bench Press", "primary_muscles": ["Chest"],
           "sets": [{"weight_kg": 80, "reps": 8}]}]}],
      "nutrition": {"2026-02-13": {"protein_g": 120, "calories": 2100, ...}}
    }

Timestamps are ISO 8601; naive ones are taken as UTC.  Malformed entries
(including NaN or Infinity in a required number) are skipped with a warning;
a non-finite optional number is treated as missing.  A file that cannot be
read or is not a JSON object raises :class:`HistoryError`.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, TypeVar

from fitengine.records import (
    ActivityRecord,
    BodyMetrics,
    ExerciseEntry,
    ExerciseSet,
    HeartRateSample,
    NutritionProgress,
    SleepStage,
    SleepStageSample,
    StrengthSession,
)
from fitengine.sources import InMemoryDataSource, OverrideStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HistoryError(Exception):
    """The history file is missing, unreadable or not a JSON object."""


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------


def parse_timestamp(value: str) -> datetime:
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _float(value: Any) -> float:
    """float() that also rejects the NaN and Infinity literals json accepts."""
    result = float(value)
    if not math.isfinite(result):
        raise ValueError(f"non-finite value {value!r}")
    return result


def _opt_float(entry: dict, key: str) -> float | None:
    """Optional field; missing or non-finite values become None."""
    value = entry.get(key)
    if value is None:
        return None
    result = float(value)
    return result if math.isfinite(result) else None


def _parse_heart_rate(entry: dict) -> HeartRateSample:
    return HeartRateSample(
        timestamp=parse_timestamp(entry["timestamp"]),
        bpm=_float(entry["bpm"]),
    )


def _parse_activity(entry: dict) -> ActivityRecord:
    return ActivityRecord(
        id=str(entry["id"]),
        start=parse_timestamp(entry["start"]),
        duration_sec=_float(entry["duration_sec"]),
        distance_km=_float(entry.get("distance_km", 0.0)),
        activity_type=str(entry.get("type", "running")),
        avg_hr=_opt_float(entry, "avg_hr"),
        min_hr=_opt_float(entry, "min_hr"),
        max_hr=_opt_float(entry, "max_hr"),
        cadence=_opt_float(entry, "cadence"),
        power=_opt_float(entry, "power"),
    )


def _parse_sleep_stage(entry: dict) -> SleepStageSample:
    return SleepStageSample(
        stage=SleepStage(entry["stage"]),
        start=parse_timestamp(entry["start"]),
        end=parse_timestamp(entry["end"]),
    )


def _parse_exercise(entry: dict) -> ExerciseEntry:
    muscles = entry.get("primary_muscles", [])
    if isinstance(muscles, str):
        muscles = [muscles]
    return ExerciseEntry(
        name=str(entry["name"]),
        primary_muscles=tuple(str(m) for m in muscles),
        sets=tuple(
            ExerciseSet(weight_kg=_float(s["weight_kg"]), reps=int(s["reps"]))
            for s in entry.get("sets", [])
        ),
    )


def _parse_strength_session(entry: dict) -> StrengthSession:
    return StrengthSession(
        id=str(entry["id"]),
        start=parse_timestamp(entry["start"]),
        exercises=tuple(_parse_exercise(e) for e in entry.get("exercises", [])),
    )


def _parse_nutrition(entry: dict) -> NutritionProgress:
    return NutritionProgress(
        protein_g=_float(entry.get("protein_g", 0.0)),
        protein_target_g=_float(entry.get("protein_target_g", 0.0)),
        calories=_float(entry.get("calories", 0.0)),
        calorie_target=_float(entry.get("calorie_target", 0.0)),
    )


def _parse_body_metrics(entry: dict) -> BodyMetrics:
    dob = entry.get("date_of_birth")
    age = _opt_float(entry, "age")
    return BodyMetrics(
        age=None if age is None else int(age),
        date_of_birth=None if dob is None else date.fromisoformat(dob),
        resting_heart_rate=_opt_float(entry, "resting_heart_rate"),
        hrv_ms=_opt_float(entry, "hrv_ms"),
        vo2_max=_opt_float(entry, "vo2_max"),
        weight_kg=_opt_float(entry, "weight_kg"),
        height_cm=_opt_float(entry, "height_cm"),
    )


def _parse_list(data: dict, key: str, parse: Callable[[dict], T]) -> list[T]:
    """Parse ``data[key]`` entry by entry, skipping malformed ones."""
    raw = data.get(key) or []
    if not isinstance(raw, list):
        logger.warning("Expected a list for %r, got %s; ignoring", key, type(raw).__name__)
        return []
    parsed: list[T] = []
    for index, entry in enumerate(raw):
        try:
            parsed.append(parse(entry))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed %s[%d]: %s", key, index, exc)
    return parsed


def _parse_nutrition_map(raw: Any) -> dict[date, NutritionProgress]:
    if not raw:
        return {}
    if not isinstance(raw, dict):
        logger.warning("Expected an object for 'nutrition'; ignoring")
        return {}
    result: dict[date, NutritionProgress] = {}
    for day, entry in raw.items():
        try:
            result[date.fromisoformat(day)] = _parse_nutrition(entry)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed nutrition[%s]: %s", day, exc)
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _read_json(path: str | Path) -> dict:
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as exc:
        raise HistoryError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise HistoryError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise HistoryError(f"{path}: expected a JSON object at top level")
    return data


def parse_history(data: dict) -> InMemoryDataSource:
    """Build an in-memory source from an already-decoded history dict."""
    metrics = None
    if data.get("body_metrics"):
        try:
            metrics = _parse_body_metrics(data["body_metrics"])
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Ignoring malformed body_metrics: %s", exc)

    source = InMemoryDataSource(
        heart_rate=_parse_list(data, "heart_rate", _parse_heart_rate),
        activity_records=_parse_list(data, "activities", _parse_activity),
        sleep_stages=_parse_list(data, "sleep_stages", _parse_sleep_stage),
        metrics=metrics,
        sessions=_parse_list(data, "strength_sessions", _parse_strength_session),
        nutrition_by_day=_parse_nutrition_map(data.get("nutrition")),
    )
    logger.info(
        "Loaded history: %d HR samples, %d activities, %d sleep stages, %d strength sessions",
        len(source.heart_rate), len(source.activity_records),
        len(source.sleep_stages), len(source.sessions),
    )
    return source


def load_history(path: str | Path) -> InMemoryDataSource:
    """Read a JSON history export from *path*.

    Raises:
        HistoryError: if the file is missing, unreadable or not a JSON object.
    """
    return parse_history(_read_json(path))


def load_overrides(path: str | Path) -> OverrideStore:
    """Read a flat ``{"field": value}`` JSON file of manual overrides."""
    return OverrideStore.from_dict(_read_json(path))
