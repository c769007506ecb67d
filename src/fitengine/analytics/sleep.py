"""Sleep quality scoring (1-10) from a night's stage totals.

The score is a sum of graduated bands:

    duration     0-4     (7-9 h is optimal)
    efficiency   0-3     (asleep / in bed)
    core %       0.4-1.5
    deep %       0.4-1.5
    REM %        0.25-1.0
    continuity   0.2-1.0 (awake share of time in bed)

The raw 0-10.5 sum is clamped to [1, 10] and truncated.  A night with no
recorded sleep scores 0, which callers treat as "no data".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from fitengine.records import SleepStage, SleepStageSample

logger = logging.getLogger(__name__)


SLEEP_NO_DATA = 0
SLEEP_SCORE_MIN = 1
SLEEP_SCORE_MAX = 10

# Each table: optimal (lo, hi, points) with a closed upper bound, then
# half-open [lo, hi) bands, then the fallback points.
_Band = tuple[float, float, float]

DURATION_OPTIMAL: _Band = (7.0, 9.0, 4.0)
DURATION_BANDS: list[_Band] = [
    (6.5, 7.0, 3.0), (9.0, 10.0, 3.0),
    (6.0, 6.5, 2.0), (10.0, 11.0, 2.0),
    (5.0, 6.0, 1.0), (11.0, 12.0, 1.0),
]
DURATION_FALLBACK = 0.0

EFFICIENCY_OPTIMAL: _Band = (0.85, 1.0, 3.0)
EFFICIENCY_BANDS: list[_Band] = [(0.75, 0.85, 2.0), (0.65, 0.75, 1.0)]
EFFICIENCY_FALLBACK = 0.0
EFFICIENCY_UNKNOWN = 2.0

CORE_OPTIMAL: _Band = (0.45, 0.60, 1.5)
CORE_BANDS: list[_Band] = [
    (0.35, 0.45, 1.2), (0.60, 0.70, 1.2),
    (0.25, 0.35, 0.8), (0.70, 0.80, 0.8),
]
CORE_FALLBACK = 0.4

DEEP_OPTIMAL: _Band = (0.15, 0.25, 1.5)
DEEP_BANDS: list[_Band] = [
    (0.10, 0.15, 1.2), (0.25, 0.30, 1.2),
    (0.05, 0.10, 0.8), (0.30, 0.35, 0.8),
]
DEEP_FALLBACK = 0.4

REM_OPTIMAL: _Band = (0.20, 0.30, 1.0)
REM_BANDS: list[_Band] = [
    (0.15, 0.20, 0.75), (0.30, 0.35, 0.75),
    (0.10, 0.15, 0.5), (0.35, 0.40, 0.5),
]
REM_FALLBACK = 0.25

CONTINUITY_OPTIMAL: _Band = (0.0, 0.05, 1.0)
CONTINUITY_BANDS: list[_Band] = [(0.05, 0.10, 0.8), (0.10, 0.15, 0.6), (0.15, 0.20, 0.4)]
CONTINUITY_FALLBACK = 0.2
CONTINUITY_UNKNOWN = 0.6


@dataclass(frozen=True)
class SleepRecord:
    """Stage totals for one night, in hours.  ``time_in_bed`` 0 means unknown."""

    total_hours: float
    rem_hours: float = 0.0
    deep_hours: float = 0.0
    core_hours: float = 0.0
    time_in_bed: float = 0.0
    awake_hours: float = 0.0

    @property
    def efficiency(self) -> float | None:
        if self.time_in_bed <= 0:
            return None
        # Stages can overrun a short in-bed span; capped at 1.0, which scores the full 3 points
        return min(self.total_hours / self.time_in_bed, 1.0)

    def __repr__(self) -> str:
        return (
            f"SleepRecord(total={self.total_hours:.1f}h, "
            f"deep={self.deep_hours:.1f}h, rem={self.rem_hours:.1f}h, "
            f"in_bed={self.time_in_bed:.1f}h)"
        )


@dataclass(frozen=True)
class SleepQualityScore:
    """Integer sleep quality plus the points each component earned."""

    score: int  # 1-10, or 0 for no data
    record: SleepRecord
    components: dict[str, float] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        return self.score != SLEEP_NO_DATA

    def __repr__(self) -> str:
        return f"SleepQualityScore(score={self.score}/10, {self.record!r})"


def _banded(value: float, optimal: _Band, bands: list[_Band], fallback: float) -> float:
    lo, hi, points = optimal
    if lo <= value <= hi:
        return points
    for lo, hi, points in bands:
        if lo <= value < hi:
            return points
    return fallback


def score_sleep(record: SleepRecord | None) -> SleepQualityScore:
    """Score one night of sleep.

    Args:
        record: Stage totals for the night (None is treated as no sleep).

    Returns:
        SleepQualityScore; score 0 when no sleep was recorded.
    """
    record = record or SleepRecord(total_hours=0.0)
    total = record.total_hours
    if total <= 0:
        return SleepQualityScore(score=SLEEP_NO_DATA, record=record)

    components: dict[str, float] = {}
    components["duration"] = _banded(total, DURATION_OPTIMAL, DURATION_BANDS, DURATION_FALLBACK)

    efficiency = record.efficiency
    if efficiency is None:
        components["efficiency"] = EFFICIENCY_UNKNOWN
    else:
        components["efficiency"] = _banded(
            efficiency, EFFICIENCY_OPTIMAL, EFFICIENCY_BANDS, EFFICIENCY_FALLBACK
        )

    components["core"] = _banded(record.core_hours / total, CORE_OPTIMAL, CORE_BANDS, CORE_FALLBACK)
    components["deep"] = _banded(record.deep_hours / total, DEEP_OPTIMAL, DEEP_BANDS, DEEP_FALLBACK)
    components["rem"] = _banded(record.rem_hours / total, REM_OPTIMAL, REM_BANDS, REM_FALLBACK)

    if record.time_in_bed > 0:
        awake_share = record.awake_hours / record.time_in_bed
        components["continuity"] = _banded(
            awake_share, CONTINUITY_OPTIMAL, CONTINUITY_BANDS, CONTINUITY_FALLBACK
        )
    else:
        components["continuity"] = CONTINUITY_UNKNOWN

    raw = sum(components.values())
    score = int(max(float(SLEEP_SCORE_MIN), min(float(SLEEP_SCORE_MAX), raw)))
    logger.debug("Sleep raw=%.2f components=%s", raw, components)
    return SleepQualityScore(score=score, record=record, components=components)


def sleep_record_from_stages(samples: Sequence[SleepStageSample]) -> SleepRecord | None:
    """Aggregate stage samples into nightly totals.

    Unspecified sleep counts toward the total but toward no stage.  Returns
    None when the samples contain no sleep at all.
    """
    totals = {stage: 0.0 for stage in SleepStage}
    for sample in samples:
        totals[sample.stage] += sample.hours

    asleep = (
        totals[SleepStage.CORE]
        + totals[SleepStage.DEEP]
        + totals[SleepStage.REM]
        + totals[SleepStage.UNSPECIFIED]
    )
    if asleep <= 0:
        return None

    return SleepRecord(
        total_hours=asleep,
        rem_hours=totals[SleepStage.REM],
        deep_hours=totals[SleepStage.DEEP],
        core_hours=totals[SleepStage.CORE],
        time_in_bed=totals[SleepStage.IN_BED],
        awake_hours=totals[SleepStage.AWAKE],
    )
