"""Training load aggregation (acute:chronic workload ratio).

Acute load is the stress accumulated over the trailing 7 days.  Chronic
load is the weekly average over the trailing 28 days, where "weekly" is
measured against the history actually available so that a user with ten
days of data is not divided by four weeks.

New users get a conservative policy: a single early workout must never look
like overtraining.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Sequence

import numpy as np

from fitengine.analytics.stress import TrainingStressRecord

logger = logging.getLogger(__name__)


ACUTE_DAYS = 7
CHRONIC_DAYS = 28
MAX_EFFECTIVE_WEEKS = 4.0

# Chronic load under this is too sparse for a meaningful ratio
SPARSE_CHRONIC_LOAD = 5.0
SPARSE_RATIO_CAP = 2.0
SPARSE_MAX_QUIET_SESSIONS = 2

# Below this many weeks of history the user is in the cold-start regime
COLD_START_WEEKS = 2.0
# Recent sessions needed to corroborate an overtraining verdict during cold start
COLD_START_OVERTRAINING_SESSIONS = 4

RATIO_UNDERTRAINING = 0.8
RATIO_OVERREACHING = 1.3
RATIO_OVERTRAINING = 1.5


class TrainingStatus(str, Enum):
    UNDERTRAINING = "undertraining"
    OPTIMAL = "optimal"
    OVERREACHING = "overreaching"
    OVERTRAINING = "overtraining"


RECOMMENDATIONS = {
    TrainingStatus.UNDERTRAINING: (
        "Your training load is low. Consider increasing intensity or volume "
        "gradually to maintain fitness gains."
    ),
    TrainingStatus.OPTIMAL: (
        "Great job! Your training load is in the optimal zone. "
        "Keep up the balanced approach."
    ),
    TrainingStatus.OVERREACHING: (
        "You're training hard! Consider adding recovery days to prevent overtraining."
    ),
    TrainingStatus.OVERTRAINING: (
        "Warning: High injury risk. Reduce training intensity and prioritize "
        "rest and recovery."
    ),
}

COLD_START_RECOMMENDATIONS = {
    TrainingStatus.UNDERTRAINING: (
        "Getting started! Keep building consistency with regular sessions to "
        "establish your baseline."
    ),
    TrainingStatus.OPTIMAL: (
        "Great start! Keep up the consistent training as you build your fitness base."
    ),
    TrainingStatus.OVERREACHING: (
        "Good effort! Consider spacing out your sessions as you build endurance."
    ),
    TrainingStatus.OVERTRAINING: (
        "Take it easy as you're just getting started. Build up gradually to "
        "prevent injury."
    ),
}


@dataclass(frozen=True)
class TrainingLoadState:
    """Acute/chronic load snapshot."""

    acute_load: float
    chronic_load: float
    ratio: float
    status: TrainingStatus
    recommendation: str
    sessions_last_7_days: int = 0
    weeks_of_data: float = 0.0
    cold_start: bool = True

    @property
    def training_balance(self) -> float:
        """Fitness minus fatigue (chronic - acute)."""
        return round(self.chronic_load - self.acute_load, 1)

    def __repr__(self) -> str:
        return (
            f"TrainingLoadState(acute={self.acute_load:.1f}, "
            f"chronic={self.chronic_load:.1f}, "
            f"ratio={self.ratio:.2f}, status={self.status.value})"
        )


def classify_ratio(ratio: float) -> TrainingStatus:
    """Standard ACWR thresholds."""
    if ratio < RATIO_UNDERTRAINING:
        return TrainingStatus.UNDERTRAINING
    if ratio < RATIO_OVERREACHING:
        return TrainingStatus.OPTIMAL
    if ratio < RATIO_OVERTRAINING:
        return TrainingStatus.OVERREACHING
    return TrainingStatus.OVERTRAINING


def recommendation_for(status: TrainingStatus, cold_start: bool) -> str:
    table = COLD_START_RECOMMENDATIONS if cold_start else RECOMMENDATIONS
    return table[status]


def aggregate_load(
    records: Sequence[TrainingStressRecord],
    now: datetime,
) -> TrainingLoadState:
    """Reduce stress records to the current training load state.

    Records outside the trailing 28 days (or in the future) are ignored.

    Args:
        records: Stress records, any order.
        now: Evaluation time.

    Returns:
        A freshly computed TrainingLoadState.
    """
    chronic_start = now - timedelta(days=CHRONIC_DAYS)
    acute_start = now - timedelta(days=ACUTE_DAYS)

    window = [r for r in records if chronic_start <= r.start <= now]
    if not window:
        return TrainingLoadState(
            acute_load=0.0,
            chronic_load=0.0,
            ratio=0.0,
            status=TrainingStatus.UNDERTRAINING,
            recommendation=recommendation_for(TrainingStatus.UNDERTRAINING, True),
            sessions_last_7_days=0,
            weeks_of_data=0.0,
            cold_start=True,
        )

    recent = [r for r in window if r.start >= acute_start]
    acute = float(np.sum([r.stress for r in recent])) if recent else 0.0
    total = float(np.sum([r.stress for r in window]))

    oldest = min(r.start for r in window)
    days_with_data = max(1, (now - oldest).days)
    weeks = max(1.0, days_with_data / 7.0)
    effective_weeks = min(MAX_EFFECTIVE_WEEKS, weeks)
    chronic = total / effective_weeks
    sessions = len(recent)
    cold_start = weeks < COLD_START_WEEKS

    if chronic < SPARSE_CHRONIC_LOAD:
        ratio = min(acute / chronic, SPARSE_RATIO_CAP) if chronic > 0 else 1.0
        if sessions <= SPARSE_MAX_QUIET_SESSIONS:
            status = TrainingStatus.OPTIMAL
        elif ratio > RATIO_OVERTRAINING:
            status = TrainingStatus.OVERREACHING
        else:
            status = TrainingStatus.OPTIMAL
    elif cold_start:
        ratio = acute / chronic
        status = classify_ratio(ratio)
        if (
            status == TrainingStatus.OVERTRAINING
            and sessions < COLD_START_OVERTRAINING_SESSIONS
        ):
            status = TrainingStatus.OVERREACHING
    else:
        ratio = acute / chronic
        status = classify_ratio(ratio)

    state = TrainingLoadState(
        acute_load=round(acute, 1),
        chronic_load=round(chronic, 1),
        ratio=round(ratio, 2),
        status=status,
        recommendation=recommendation_for(status, cold_start),
        sessions_last_7_days=sessions,
        weeks_of_data=round(weeks, 2),
        cold_start=cold_start,
    )
    logger.debug("Training load: %r", state)
    return state
