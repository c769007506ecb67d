"""Plain-text context block describing the current snapshot.

This is what a downstream coaching / chat service reads; it is the only
interface between the analytics core and that feature, so the layout is
kept stable and free of markup.
"""

from __future__ import annotations

from fitengine.analytics.pipeline import EngineSnapshot
from fitengine.analytics.race import format_duration, format_pace
from fitengine.analytics.zones import ZONE_NAMES


def _profile_lines(snapshot: EngineSnapshot) -> list[str]:
    p = snapshot.profile
    age = str(p.age) if p.age is not None else "unknown"
    lines = [
        "USER PROFILE:",
        f"- Age: {age}",
        f"- Max HR: {p.max_heart_rate} bpm, Resting HR: {p.resting_heart_rate} bpm",
        f"- VO2 Max: {p.vo2_max:.1f}",
        f"- Weight: {p.weight_kg:.1f} kg, Height: {p.height_cm:.0f} cm",
    ]
    if p.bmi is not None:
        lines.append(f"- BMI: {p.bmi:.1f} ({p.bmi_category})")
    bounds = snapshot.zones.as_list()
    lo = p.resting_heart_rate
    zone_text = []
    for name, hi in zip(ZONE_NAMES, bounds):
        zone_text.append(f"{name} {lo}-{hi}")
        lo = hi
    lines.append(f"- HR Zones: {', '.join(zone_text)}")
    return lines


def _readiness_lines(snapshot: EngineSnapshot) -> list[str]:
    r = snapshot.readiness
    return [
        f"TODAY'S READINESS: {r.total}/100",
        f"- Sleep: {r.details.get('sleep', 'No data')}",
        f"- Recovery: {r.details.get('recovery', 'No data')}",
        f"- Training Load: {r.details.get('training', 'No data')}",
        f"- Nutrition: {r.details.get('nutrition', 'No data')}",
        f"- Recommendation: {r.recommendation}",
    ]


def _load_lines(snapshot: EngineSnapshot) -> list[str]:
    load = snapshot.load
    lines = [
        "TRAINING LOAD:",
        f"- Acute (7d): {load.acute_load:.1f}",
        f"- Chronic (28d): {load.chronic_load:.1f}",
        f"- Ratio: {load.ratio:.2f} ({load.status.value})",
        f"- Balance: {load.training_balance:+.1f}",
    ]
    if load.cold_start:
        lines.append("- Note: limited history, conservative assessment")
    lines.append(f"- {load.recommendation}")
    return lines


def _running_lines(snapshot: EngineSnapshot) -> list[str]:
    week = snapshot.weekly_running
    lines = ["RUNNING THIS WEEK:"]
    if week is None:
        lines.append("- No runs")
    else:
        lines += [
            f"- Runs: {week.total_runs}, Distance: {week.total_distance_km:.1f} km "
            f"({week.goal_progress:.0%} of {week.goal_km:.0f} km goal)",
            f"- Avg Pace: {format_pace(week.average_pace)}, Longest: {week.longest_run_km:.1f} km",
        ]
        if week.average_hr is not None:
            lines.append(f"- Avg HR: {week.average_hr:.0f} bpm")
        if week.effort_distribution:
            efforts = ", ".join(
                f"{effort.value} {count}" for effort, count in week.effort_distribution.items()
            )
            lines.append(f"- Efforts: {efforts}")

    month = snapshot.monthly_running
    lines += ["", "RUNNING THIS MONTH:"]
    if month is None:
        lines.append("- No runs")
    else:
        lines += [
            f"- Runs: {month.total_runs}, Distance: {month.total_distance_km:.1f} km",
            f"- Avg Pace: {format_pace(month.average_pace)}",
            f"- Trend vs last month: {month.distance_trend:+.0f}%",
            f"- Consistency: {month.consistency:.0f}/100",
        ]

    runner = snapshot.runner_profile
    if runner is not None:
        strengths = ", ".join(s.value for s in runner.strengths) or "none yet"
        age = f"{runner.running_age}" if runner.running_age is not None else "unknown"
        lines += [
            "",
            "RUNNER PROFILE:",
            f"- Level: {runner.fitness_level.value}, Running age: {age}",
            f"- Strengths: {strengths}",
        ]
    return lines


def _sleep_lines(snapshot: EngineSnapshot) -> list[str]:
    sleep = snapshot.sleep
    if not sleep.has_data:
        return ["LAST NIGHT'S SLEEP:", "- No data"]
    rec = sleep.record
    lines = [
        "LAST NIGHT'S SLEEP:",
        f"- Quality: {sleep.score}/10",
        f"- Duration: {rec.total_hours:.1f}h "
        f"(deep {rec.deep_hours:.1f}h, REM {rec.rem_hours:.1f}h, core {rec.core_hours:.1f}h)",
    ]
    if rec.efficiency is not None:
        lines.append(f"- Efficiency: {rec.efficiency:.0%}")
    return lines


def _muscle_lines(snapshot: EngineSnapshot) -> list[str]:
    lines = ["MUSCLE RECOVERY STATUS:"]
    for muscle, state in snapshot.muscles.items():
        lines.append(f"- {muscle.value}: {int(state.recovery_percent)}% ({state.status.value})")
    return lines


def _workout_lines(snapshot: EngineSnapshot) -> list[str]:
    workout = snapshot.workout
    if workout is None:
        return ["RECOMMENDED WORKOUT:", "- No recommendation"]
    lines = [
        "RECOMMENDED WORKOUT:",
        f"- {workout.split.value}, {workout.intensity.value}, {workout.duration_min} min",
        f"- Targets: {', '.join(m.value for m in workout.target_muscles)}",
    ]
    lines += [f"- {reason}" for reason in workout.reasons]
    return lines


def _race_lines(snapshot: EngineSnapshot) -> list[str]:
    lines = ["PERSONAL BESTS:"]
    if not snapshot.personal_bests:
        lines.append("- None recorded")
    for pb in snapshot.personal_bests:
        flag = " (estimated)" if pb.is_estimated else ""
        lines.append(
            f"- {pb.distance_name}: {format_duration(pb.time_sec)} "
            f"@ {format_pace(pb.pace)}{flag}"
        )

    races = snapshot.race_predictions
    lines.append("")
    lines.append("RACE PREDICTIONS:")
    if races is None:
        lines.append("- Not enough data (needs a run of 5 km or more)")
        return lines
    for pred in races.predictions:
        lines.append(f"- {pred.distance_name}: {format_duration(pred.time_sec)}")
    lines.append(
        f"- Based on {races.base_distance_km:.2f} km in "
        f"{format_duration(races.base_time_sec)}, confidence {races.confidence:.0f}%"
    )
    return lines


def build_context(snapshot: EngineSnapshot) -> str:
    """Serialize *snapshot* into a human-readable summary block."""
    sections = [
        _profile_lines(snapshot),
        _readiness_lines(snapshot),
        _load_lines(snapshot),
        _running_lines(snapshot),
        _sleep_lines(snapshot),
        _muscle_lines(snapshot),
        _workout_lines(snapshot),
        _race_lines(snapshot),
    ]
    return "\n\n".join("\n".join(section) for section in sections) + "\n"
