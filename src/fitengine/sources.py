"""Data-source and manual-override interfaces.

The engine never owns stored history.  It reads from a
:class:`HealthDataSource` (async, since real sources sit behind I/O) and
consults an :class:`OverrideStore` for values the user typed in by hand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Protocol, Sequence

from fitengine.records import (
    ActivityRecord,
    BodyMetrics,
    HeartRateSample,
    NutritionProgress,
    SleepStageSample,
    StrengthSession,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Manual overrides
# ---------------------------------------------------------------------------


class ProfileField(str, Enum):
    """Profile fields that can be manually overridden."""

    AGE = "age"
    MAX_HEART_RATE = "max_heart_rate"
    RESTING_HEART_RATE = "resting_heart_rate"
    VO2_MAX = "vo2_max"
    WEIGHT_KG = "weight_kg"
    HEIGHT_CM = "height_cm"


class OverrideStore:
    """Small typed key-value store for manual profile overrides.

    Setting a field marks it overridden; it stays that way until
    :meth:`clear` (or :meth:`clear_all`) is called.  Persisting the store is
    the caller's job -- see :meth:`to_dict` / :meth:`from_dict`.
    """

    def __init__(self, values: dict[ProfileField, float] | None = None) -> None:
        self._values: dict[ProfileField, float] = dict(values or {})

    def get(self, name: ProfileField | str) -> float | None:
        return self._values.get(ProfileField(name))

    def set(self, name: ProfileField | str, value: float) -> None:
        key = ProfileField(name)
        self._values[key] = float(value)
        logger.debug("Override set: %s=%s", key.value, value)

    def clear(self, name: ProfileField | str) -> None:
        self._values.pop(ProfileField(name), None)

    def clear_all(self) -> None:
        self._values.clear()

    def is_overridden(self, name: ProfileField | str) -> bool:
        return ProfileField(name) in self._values

    def overridden_fields(self) -> frozenset[str]:
        return frozenset(k.value for k in self._values)

    def to_dict(self) -> dict[str, float]:
        return {k.value: v for k, v in self._values.items()}

    @classmethod
    def from_dict(cls, data: dict) -> "OverrideStore":
        """Build a store from a plain dict, skipping unknown or non-numeric keys."""
        store = cls()
        for key, value in data.items():
            try:
                store.set(key, float(value))
            except (ValueError, TypeError):
                logger.warning("Ignoring override %r=%r", key, value)
        return store

    def __repr__(self) -> str:
        return f"OverrideStore({self.to_dict()})"


# ---------------------------------------------------------------------------
# Health data source
# ---------------------------------------------------------------------------


class HealthDataSource(Protocol):
    """Read-only view of the user's stored health history."""

    async def heart_rate_samples(
        self, start: datetime, end: datetime
    ) -> Sequence[HeartRateSample]: ...

    async def activities(
        self, start: datetime, end: datetime
    ) -> Sequence[ActivityRecord]: ...

    async def sleep_stage_samples(
        self, start: datetime, end: datetime
    ) -> Sequence[SleepStageSample]: ...

    async def body_metrics(self) -> BodyMetrics | None: ...

    async def strength_sessions(
        self, start: datetime, end: datetime
    ) -> Sequence[StrengthSession]: ...

    async def nutrition(self, day: date) -> NutritionProgress | None: ...


@dataclass
class InMemoryDataSource:
    """A :class:`HealthDataSource` backed by plain lists.

    Used by the CLI (via :func:`fitengine.history.load_history`) and tests.
    """

    heart_rate: list[HeartRateSample] = field(default_factory=list)
    activity_records: list[ActivityRecord] = field(default_factory=list)
    sleep_stages: list[SleepStageSample] = field(default_factory=list)
    metrics: BodyMetrics | None = None
    sessions: list[StrengthSession] = field(default_factory=list)
    nutrition_by_day: dict[date, NutritionProgress] = field(default_factory=dict)

    async def heart_rate_samples(
        self, start: datetime, end: datetime
    ) -> list[HeartRateSample]:
        return sorted(
            (s for s in self.heart_rate if start <= s.timestamp <= end),
            key=lambda s: s.timestamp,
        )

    async def activities(self, start: datetime, end: datetime) -> list[ActivityRecord]:
        return sorted(
            (a for a in self.activity_records if start <= a.start <= end),
            key=lambda a: a.start,
        )

    async def sleep_stage_samples(
        self, start: datetime, end: datetime
    ) -> list[SleepStageSample]:
        # Overlap, not containment: a night straddles the window edge
        return sorted(
            (s for s in self.sleep_stages if s.end > start and s.start < end),
            key=lambda s: s.start,
        )

    async def body_metrics(self) -> BodyMetrics | None:
        return self.metrics

    async def strength_sessions(
        self, start: datetime, end: datetime
    ) -> list[StrengthSession]:
        return sorted(
            (s for s in self.sessions if start <= s.start <= end),
            key=lambda s: s.start,
        )

    async def nutrition(self, day: date) -> NutritionProgress | None:
        return self.nutrition_by_day.get(day)
