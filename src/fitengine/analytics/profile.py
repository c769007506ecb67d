"""Physiological profile resolution.

Every profile field is resolved in priority order:

    1. manual override (if set and within a sane range)
    2. most recent sensor value (if present and within a sane range)
    3. a safe default

Max heart rate is derived from age with the Tanaka formula unless it was
overridden; heart-rate reserve and BMI are derived from the resolved values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from fitengine.records import BodyMetrics
from fitengine.sources import OverrideStore, ProfileField

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Defaults and sane ranges
# ---------------------------------------------------------------------------

DEFAULT_MAX_HR = 190
DEFAULT_RESTING_HR = 60
DEFAULT_VO2_MAX = 45.0
DEFAULT_WEIGHT_KG = 70.0
DEFAULT_HEIGHT_CM = 175.0

MAX_HR_FLOOR = 150
MAX_HR_CEILING = 220

# A resting HR closer than this to max HR cannot produce five distinct zones
MIN_HR_RESERVE = 10

SANE_RANGES: dict[ProfileField, tuple[float, float]] = {
    ProfileField.AGE: (10, 100),
    ProfileField.MAX_HEART_RATE: (100, 230),
    ProfileField.RESTING_HEART_RATE: (30, 120),
    ProfileField.VO2_MAX: (10.0, 95.0),
    ProfileField.WEIGHT_KG: (20.0, 350.0),
    ProfileField.HEIGHT_CM: (100.0, 250.0),
}

SOURCE_OVERRIDE = "override"
SOURCE_SENSOR = "sensor"
SOURCE_DERIVED = "derived"
SOURCE_DEFAULT = "default"


@dataclass(frozen=True)
class PhysiologicalProfile:
    """Fully resolved user profile."""

    age: int | None
    max_heart_rate: int
    resting_heart_rate: int
    vo2_max: float
    weight_kg: float
    height_cm: float
    overrides: frozenset[str] = frozenset()
    sources: dict[str, str] = field(default_factory=dict)

    @property
    def heart_rate_reserve(self) -> int:
        return self.max_heart_rate - self.resting_heart_rate

    @property
    def bmi(self) -> float | None:
        if self.height_cm <= 0:
            return None
        meters = self.height_cm / 100.0
        return round(self.weight_kg / (meters * meters), 1)

    @property
    def bmi_category(self) -> str:
        bmi = self.bmi
        if bmi is None:
            return "Unknown"
        if bmi < 18.5:
            return "Underweight"
        if bmi < 25:
            return "Normal"
        if bmi < 30:
            return "Overweight"
        return "Obese"

    def is_overridden(self, name: ProfileField | str) -> bool:
        return ProfileField(name).value in self.overrides

    def __repr__(self) -> str:
        return (
            f"PhysiologicalProfile(age={self.age}, "
            f"max_hr={self.max_heart_rate}, "
            f"rhr={self.resting_heart_rate}, "
            f"vo2max={self.vo2_max:.1f})"
        )


# ---------------------------------------------------------------------------
# Derivations
# ---------------------------------------------------------------------------


def estimate_max_hr(age: int) -> int:
    """Tanaka max HR: 208 - 0.7 * age, clamped to [150, 220].

    Integer arithmetic keeps ``0.7 * age`` from truncating a float like
    27.999999 down a beat.
    """
    max_hr = 208 - (7 * age) // 10
    return max(MAX_HR_FLOOR, min(MAX_HR_CEILING, max_hr))


def age_from_birth_date(born: date, today: date) -> int:
    """Whole years between *born* and *today*."""
    years = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        years -= 1
    return years


def _in_range(name: ProfileField, value: float | None) -> bool:
    if value is None:
        return False
    lo, hi = SANE_RANGES[name]
    return lo <= value <= hi


def _resolve(
    name: ProfileField,
    overrides: OverrideStore,
    sensor_value: float | None,
    default: float,
) -> tuple[float, str]:
    """Walk the override -> sensor -> default chain for one field."""
    manual = overrides.get(name)
    if manual is not None:
        if _in_range(name, manual):
            return manual, SOURCE_OVERRIDE
        logger.warning("Ignoring out-of-range override %s=%s", name.value, manual)
    if _in_range(name, sensor_value):
        return sensor_value, SOURCE_SENSOR  # type: ignore[return-value]
    return default, SOURCE_DEFAULT


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_profile(
    metrics: BodyMetrics | None = None,
    overrides: OverrideStore | None = None,
    today: date | None = None,
) -> PhysiologicalProfile:
    """Resolve a complete profile from sensor metrics and manual overrides.

    Args:
        metrics: Latest body metrics from the data source (may be None).
        overrides: Manual override store (may be None).
        today: Reference date for age-from-birth-date (default: today).

    Returns:
        A PhysiologicalProfile with every field populated.
    """
    metrics = metrics or BodyMetrics()
    overrides = overrides or OverrideStore()
    today = today or date.today()
    sources: dict[str, str] = {}

    # --- Age ---
    sensor_age: float | None = metrics.age
    if sensor_age is None and metrics.date_of_birth is not None:
        sensor_age = age_from_birth_date(metrics.date_of_birth, today)
    age_value, age_source = _resolve(ProfileField.AGE, overrides, sensor_age, -1)
    age = int(age_value) if age_source != SOURCE_DEFAULT else None
    sources[ProfileField.AGE.value] = age_source

    # --- Max HR ---
    manual_max = overrides.get(ProfileField.MAX_HEART_RATE)
    if manual_max is not None and _in_range(ProfileField.MAX_HEART_RATE, manual_max):
        max_hr = int(round(manual_max))
        sources[ProfileField.MAX_HEART_RATE.value] = SOURCE_OVERRIDE
    else:
        if manual_max is not None:
            logger.warning("Ignoring out-of-range override max_heart_rate=%s", manual_max)
        if age is not None:
            max_hr = estimate_max_hr(age)
            sources[ProfileField.MAX_HEART_RATE.value] = SOURCE_DERIVED
        else:
            max_hr = DEFAULT_MAX_HR
            sources[ProfileField.MAX_HEART_RATE.value] = SOURCE_DEFAULT

    # --- Resting HR (must leave a usable reserve under max HR) ---
    resting_hr = DEFAULT_RESTING_HR
    sources[ProfileField.RESTING_HEART_RATE.value] = SOURCE_DEFAULT
    candidates = [
        (overrides.get(ProfileField.RESTING_HEART_RATE), SOURCE_OVERRIDE),
        (metrics.resting_heart_rate, SOURCE_SENSOR),
    ]
    for value, source in candidates:
        if value is None:
            continue
        if not _in_range(ProfileField.RESTING_HEART_RATE, value):
            logger.warning("Ignoring out-of-range %s resting HR %s", source, value)
            continue
        if max_hr - value < MIN_HR_RESERVE:
            logger.warning(
                "Ignoring %s resting HR %s: leaves under %d bpm reserve below max HR %d",
                source, value, MIN_HR_RESERVE, max_hr,
            )
            continue
        resting_hr = int(round(value))
        sources[ProfileField.RESTING_HEART_RATE.value] = source
        break

    # --- Remaining scalar fields ---
    vo2, sources[ProfileField.VO2_MAX.value] = _resolve(
        ProfileField.VO2_MAX, overrides, metrics.vo2_max, DEFAULT_VO2_MAX
    )
    weight, sources[ProfileField.WEIGHT_KG.value] = _resolve(
        ProfileField.WEIGHT_KG, overrides, metrics.weight_kg, DEFAULT_WEIGHT_KG
    )
    height, sources[ProfileField.HEIGHT_CM.value] = _resolve(
        ProfileField.HEIGHT_CM, overrides, metrics.height_cm, DEFAULT_HEIGHT_CM
    )

    profile = PhysiologicalProfile(
        age=age,
        max_heart_rate=max_hr,
        resting_heart_rate=resting_hr,
        vo2_max=float(vo2),
        weight_kg=float(weight),
        height_cm=float(height),
        overrides=frozenset(k for k, v in sources.items() if v == SOURCE_OVERRIDE),
        sources=sources,
    )
    logger.debug("Resolved %r (sources=%s)", profile, sources)
    return profile
