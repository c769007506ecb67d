"""Heart-rate training zones (Karvonen / heart-rate-reserve method).

Zone boundaries sit at fixed fractions of the heart-rate reserve above
resting HR.  Given a series of HR samples for one activity, time between
consecutive samples is attributed to the earlier sample's zone.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from fitengine.analytics.profile import MIN_HR_RESERVE, PhysiologicalProfile
from fitengine.records import HeartRateSample

logger = logging.getLogger(__name__)


# Fractions of HR reserve for zone 1..5 upper bounds
RESERVE_FRACTIONS = [0.50, 0.60, 0.70, 0.80, 0.90]
ZONE_NAMES = ["Recovery", "Easy", "Aerobic", "Threshold", "VO2 Max"]

# Duration credited to the final sample when it has no successor
DEFAULT_TAIL_SEC = 5.0


@dataclass(frozen=True)
class HeartRateZoneBoundaries:
    """Upper bound (bpm) of each zone plus max HR."""

    zone1_max: int
    zone2_max: int
    zone3_max: int
    zone4_max: int
    zone5_max: int
    max_hr: int

    def as_list(self) -> list[int]:
        return [self.zone1_max, self.zone2_max, self.zone3_max, self.zone4_max, self.zone5_max]

    def zone_for(self, heart_rate: float) -> int:
        """Zone index 1-5 for a heart rate, clamped at both ends."""
        return zone_for(self, heart_rate)

    @staticmethod
    def zone_name(zone: int) -> str:
        if 1 <= zone <= 5:
            return ZONE_NAMES[zone - 1]
        return "Unknown"

    def __repr__(self) -> str:
        return f"HeartRateZoneBoundaries({self.as_list()}, max={self.max_hr})"


@dataclass(frozen=True)
class ZoneDistribution:
    """Time spent in each zone during one activity."""

    seconds: dict[int, float] = field(default_factory=lambda: {z: 0.0 for z in range(1, 6)})

    @property
    def total_sec(self) -> float:
        return float(sum(self.seconds.values()))

    @property
    def percentages(self) -> dict[int, float]:
        total = self.total_sec
        if total <= 0:
            return {z: 0.0 for z in self.seconds}
        return {z: round(s / total * 100.0, 1) for z, s in self.seconds.items()}

    def __repr__(self) -> str:
        mins = ", ".join(f"Z{z}={s / 60:.1f}m" for z, s in self.seconds.items())
        return f"ZoneDistribution({mins})"


def _round_half_down(value: float) -> int:
    """Nearest integer; exact .5 ties go down."""
    return math.ceil(value - 0.5)


def zone_boundaries(profile: PhysiologicalProfile) -> HeartRateZoneBoundaries:
    """Compute Karvonen zone boundaries for a resolved profile.

    Boundary k = resting + reserve * fraction_k, to the nearest bpm with
    ties rounding toward resting HR.  A reserve below ``MIN_HR_RESERVE``
    (only possible for a hand-built profile) is widened by lowering the
    resting HR so the five boundaries stay strictly increasing.
    """
    max_hr = profile.max_heart_rate
    resting = profile.resting_heart_rate
    if max_hr - resting < MIN_HR_RESERVE:
        logger.warning(
            "HR reserve %d below %d bpm; using resting HR %d for zones",
            max_hr - resting, MIN_HR_RESERVE, max_hr - MIN_HR_RESERVE,
        )
        resting = max_hr - MIN_HR_RESERVE
    reserve = max_hr - resting

    bounds = [_round_half_down(resting + reserve * f) for f in RESERVE_FRACTIONS]
    return HeartRateZoneBoundaries(*bounds, max_hr=max_hr)


def zone_for(boundaries: HeartRateZoneBoundaries, heart_rate: float) -> int:
    """Return the zone (1-5) for *heart_rate*.

    Anything under zone1_max is zone 1; anything at or above zone4_max is
    zone 5.
    """
    edges = boundaries.as_list()[:4]
    return int(np.searchsorted(edges, heart_rate, side="right")) + 1


def zone_durations(
    samples: Sequence[HeartRateSample],
    boundaries: HeartRateZoneBoundaries,
    tail_sec: float = DEFAULT_TAIL_SEC,
) -> ZoneDistribution:
    """Bucket time-weighted duration of an HR series into zones.

    Args:
        samples: HR samples for one activity (any order).  Non-finite
            readings are dropped.
        boundaries: Zone boundaries from :func:`zone_boundaries`.
        tail_sec: Duration assumed for the last sample.

    Returns:
        ZoneDistribution with seconds per zone (all zero for no usable samples).
    """
    seconds = {z: 0.0 for z in range(1, 6)}
    ordered = sorted(
        (s for s in samples if math.isfinite(s.bpm)), key=lambda s: s.timestamp
    )
    if not ordered:
        return ZoneDistribution(seconds=seconds)

    ts = np.asarray([s.timestamp.timestamp() for s in ordered], dtype=np.float64)
    hr = np.asarray([s.bpm for s in ordered], dtype=np.float64)

    durations = np.append(np.diff(ts), max(tail_sec, 0.0))
    zones = np.searchsorted(boundaries.as_list()[:4], hr, side="right") + 1

    for zone, dur in zip(zones, durations):
        seconds[int(zone)] += float(dur)

    return ZoneDistribution(seconds={z: round(s, 1) for z, s in seconds.items()})
