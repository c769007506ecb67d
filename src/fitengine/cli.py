"""CLI for the fitengine training analytics engine."""

import asyncio
import json
import logging
from datetime import datetime, timezone

import click

from fitengine.config import Config


def _parse_now(value: str | None) -> datetime:
    from fitengine.history import parse_timestamp

    if value is None:
        return datetime.now(timezone.utc)
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        raise click.BadParameter(f"not an ISO 8601 timestamp: {value}") from exc


def _snapshot(history: str, overrides: str | None, now: str | None):
    """Load files and run one refresh through a publisher."""
    from fitengine.analytics.pipeline import SnapshotPublisher
    from fitengine.history import HistoryError, load_history, load_overrides

    try:
        source = load_history(history)
        store = load_overrides(overrides) if overrides else None
    except HistoryError as exc:
        raise click.ClickException(str(exc)) from exc

    publisher = SnapshotPublisher()
    return asyncio.run(publisher.refresh(source, store, now=_parse_now(now)))


_history_arg = click.argument("history", type=click.Path(exists=True, dir_okay=False))
_overrides_opt = click.option(
    "--overrides", "-O", default=None, type=click.Path(exists=True, dir_okay=False),
    help="JSON file of manual profile overrides.",
)
_now_opt = click.option("--now", default=None, help="Evaluation time (ISO 8601, default: now).")


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL.")
def main(log_level: str | None) -> None:
    """fitengine -- training load, readiness, sleep and race analytics."""
    if log_level:
        Config.LOG_LEVEL = log_level
    logging.basicConfig(
        level=Config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command("analyze")
@_history_arg
@_overrides_opt
@_now_opt
@click.option("--output", "-o", default=None, help="Write the summary JSON to a file.")
def analyze_cmd(history: str, overrides: str | None, now: str | None, output: str | None) -> None:
    """Run every scorer over a history export and print a summary."""
    snap = _snapshot(history, overrides, now)
    load, readiness, sleep = snap.load, snap.readiness, snap.sleep

    click.echo(f"\n{'=' * 60}")
    click.echo(f"  Snapshot: {snap.computed_at.isoformat()}")
    click.echo(f"{'=' * 60}")
    click.echo(f"  Readiness:  {readiness.total}/100 -- {readiness.recommendation}")
    click.echo(f"  Load:       acute {load.acute_load:.1f}, chronic {load.chronic_load:.1f}, "
               f"ratio {load.ratio:.2f} ({load.status.value})")
    click.echo(f"  Sleep:      {sleep.score}/10" if sleep.has_data else "  Sleep:      no data")
    click.echo(f"  Max HR:     {snap.profile.max_heart_rate} bpm "
               f"(resting {snap.profile.resting_heart_rate})")
    click.echo(f"  Activities: {len(snap.stress_records)}")
    week = snap.weekly_running
    if week is not None:
        click.echo(f"  This week:  {week.total_runs} runs, {week.total_distance_km:.1f}/{week.goal_km:.0f} km")
    if snap.workout is not None:
        click.echo(f"  Workout:    {snap.workout.split.value}, {snap.workout.intensity.value}, "
                   f"{snap.workout.duration_min} min")
    click.echo(f"{'=' * 60}")
    click.echo(f"  {load.recommendation}")

    if output:
        summary = {
            "computed_at": snap.computed_at.isoformat(),
            "readiness": readiness.total,
            "sleep_score": sleep.score,
            "load": {
                "acute": load.acute_load,
                "chronic": load.chronic_load,
                "ratio": load.ratio,
                "status": load.status.value,
                "cold_start": load.cold_start,
            },
            "muscles": {m.value: s.recovery_percent for m, s in snap.muscles.items()},
            "weekly_running_km": week.total_distance_km if week is not None else 0.0,
        }
        with open(output, "w") as f:
            json.dump(summary, f, indent=2)
        click.echo(f"\nSummary written to {output}")


@main.command("zones")
@_history_arg
@_overrides_opt
@_now_opt
def zones_cmd(history: str, overrides: str | None, now: str | None) -> None:
    """Print heart-rate zone boundaries for the resolved profile."""
    from fitengine.analytics.zones import ZONE_NAMES

    snap = _snapshot(history, overrides, now)
    lo = snap.profile.resting_heart_rate
    for zone, (name, hi) in enumerate(zip(ZONE_NAMES, snap.zones.as_list()), 1):
        click.echo(f"  Zone {zone} ({name:<9}): {lo:>3}-{hi:<3} bpm")
        lo = hi
    click.echo(f"  Max HR: {snap.zones.max_hr} bpm")


@main.command("predict")
@_history_arg
@_now_opt
def predict_cmd(history: str, now: str | None) -> None:
    """Print personal bests and race predictions."""
    from fitengine.analytics.race import format_duration, format_pace

    snap = _snapshot(history, None, now)
    if not snap.personal_bests:
        click.echo("No runs found.")
    for pb in snap.personal_bests:
        flag = " (est)" if pb.is_estimated else ""
        click.echo(f"  {pb.distance_name:<14} {format_duration(pb.time_sec):>8}  "
                   f"{format_pace(pb.pace)}{flag}")

    races = snap.race_predictions
    if races is None:
        click.echo("\nNo run of 5 km or more to predict from.")
        return
    click.echo(f"\nPredictions (confidence {races.confidence:.0f}%):")
    for pred in races.predictions:
        click.echo(f"  {pred.distance_name:<14} {format_duration(pred.time_sec):>8}")


@main.command("context")
@_history_arg
@_overrides_opt
@_now_opt
def context_cmd(history: str, overrides: str | None, now: str | None) -> None:
    """Print the plain-text context block for a coaching service."""
    from fitengine.analytics.context import build_context

    click.echo(build_context(_snapshot(history, overrides, now)), nl=False)


if __name__ == "__main__":
    main()
