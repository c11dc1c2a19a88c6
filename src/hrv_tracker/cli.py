#!/usr/bin/env python3
"""Command-line interface for the HRV tracker."""
from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .benchmarks import get_benchmark
from .config import Settings, load_settings
from .goals import calculate_goal_progress
from .parsers import parse_whoop_csv, validate_whoop_csv
from .percentile import get_ordinal_suffix, get_percentile, get_percentile_description
from .repository import ReadingRepository
from .reporting import plot_hrv_trend
from .schema import HrvReading, UserProfile
from .statistics import calculate_statistics
from .stores import JsonFileStore
from .telemetry import log_run


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--store",
        default=None,
        help="Directory holding the JSON reading store (defaults to settings storage.dir)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HRV tracker CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser(
        "import",
        help="Import a WHOOP physiological cycles CSV export",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    import_parser.add_argument("--path", required=True, help="Path to the WHOOP CSV export")
    _add_common(import_parser)

    add_parser = subparsers.add_parser(
        "add",
        help="Record a manual HRV reading",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    add_parser.add_argument("--date", required=True, help="Calendar day, YYYY-MM-DD")
    add_parser.add_argument("--hrv", type=float, required=True, help="HRV in milliseconds")
    add_parser.add_argument("--resting-hr", dest="resting_hr", type=float, default=0, help="Resting heart rate (bpm)")
    add_parser.add_argument("--recovery", type=float, default=None, help="Recovery score 0-100")
    _add_common(add_parser)

    stats_parser = subparsers.add_parser(
        "stats",
        help="Show statistics, percentile rank and goal progress",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    stats_parser.add_argument("--age", type=int, default=None, help="Age in years")
    stats_parser.add_argument("--gender", choices=["male", "female", "other"], default=None)
    stats_parser.add_argument("--target", type=float, default=None, help="Target percentile (1-99)")
    stats_parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    _add_common(stats_parser)

    chart_parser = subparsers.add_parser(
        "chart",
        help="Render the HRV trend chart",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    chart_parser.add_argument("--window", type=int, default=None, help="Rolling window in readings")
    chart_parser.add_argument("--out", default=None, help="Directory for the PNG chart")
    _add_common(chart_parser)

    clear_parser = subparsers.add_parser("clear", help="Delete every stored reading")
    _add_common(clear_parser)

    return parser


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def open_repository(args: argparse.Namespace, settings: Settings) -> ReadingRepository:
    store_dir = Path(args.store) if args.store else settings.storage_dir
    repository = ReadingRepository(JsonFileStore(store_dir))
    repository.load()
    return repository


def resolve_profile(args: argparse.Namespace, settings: Settings) -> Optional[UserProfile]:
    configured = settings.profile or {}
    age = args.age if args.age is not None else configured.get("age")
    gender = args.gender or configured.get("gender")
    if age is None or gender is None:
        return None
    target = args.target if args.target is not None else configured.get("target_percentile")
    return UserProfile(age=age, gender=gender, target_percentile=target)


def run_import(args: argparse.Namespace, settings: Settings) -> int:
    start = time.time()
    path = Path(args.path)
    content = path.read_text(encoding="utf-8-sig")

    validation = validate_whoop_csv(content)
    if not validation.valid:
        logging.error("%s", validation.error)
        log_run(
            "import",
            start_time=start,
            status="error",
            error=validation.error,
            metadata={"path": str(path)},
            output_dir=settings.telemetry_dir,
        )
        return 1

    logging.info("Parsing WHOOP export from %s", path)
    result = parse_whoop_csv(content)
    for message in result.errors:
        logging.warning("%s", message)

    repository = open_repository(args, settings)
    added = repository.import_readings(result.readings)
    repository.save()
    logging.info(
        "Imported %d readings (%d new days, %d rows skipped)",
        len(result.readings),
        added,
        result.skipped_rows,
    )
    log_run(
        "import",
        start_time=start,
        readings_imported=len(result.readings),
        skipped_rows=result.skipped_rows,
        metadata={"path": str(path), "new_days": added, "errors": len(result.errors)},
        output_dir=settings.telemetry_dir,
    )
    return 0


def run_add(args: argparse.Namespace, settings: Settings) -> int:
    reading = HrvReading.manual(
        date=args.date,
        hrv_ms=args.hrv,
        resting_hr=args.resting_hr,
        recovery_score=args.recovery,
    )
    repository = open_repository(args, settings)
    added = repository.import_readings([reading])
    repository.save()
    logging.info("%s reading for %s", "Added" if added else "Replaced", reading.date)
    return 0


def build_summary(repository: ReadingRepository, profile: Optional[UserProfile], settings: Settings) -> dict:
    readings = repository.readings
    stats = calculate_statistics(readings, threshold_pct=settings.trend_threshold_pct)
    summary: dict = {"readings": len(readings), "statistics": stats.to_dict()}
    if profile is not None and stats.current is not None:
        summary["percentile"] = asdict(get_percentile(stats.current, profile.age, profile.gender))
        goal = calculate_goal_progress(readings, profile, threshold_pct=settings.trend_threshold_pct)
        summary["goal"] = asdict(goal) if goal is not None else None
    return summary


def _print_summary(summary: dict) -> None:
    stats = summary["statistics"]
    print(f"Readings: {summary['readings']}")
    for label, key in [
        ("Current", "current"),
        ("7-day average", "average_7_day"),
        ("30-day average", "average_30_day"),
        ("Min", "min"),
        ("Max", "max"),
        ("Trend", "trend"),
    ]:
        value = stats[key]
        print(f"{label}: {'-' if value is None else value}")
    percentile = summary.get("percentile")
    if percentile:
        rank = percentile["percentile"]
        print(
            f"Percentile: {get_ordinal_suffix(rank)} ({get_percentile_description(rank)}), "
            f"{percentile['comparison']} the {percentile['bracket']} median of {percentile['benchmark_p50']:g} ms"
        )
    goal = summary.get("goal")
    if goal:
        print(
            f"Goal: {goal['current_hrv']}/{goal['target_hrv']} ms ({goal['progress']}%), "
            f"{goal['days_at_goal']} days at goal, {goal['trend']}"
        )


def run_stats(args: argparse.Namespace, settings: Settings) -> int:
    repository = open_repository(args, settings)
    summary = build_summary(repository, resolve_profile(args, settings), settings)
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        _print_summary(summary)
    return 0


def run_chart(args: argparse.Namespace, settings: Settings) -> int:
    repository = open_repository(args, settings)
    window = args.window or settings.rolling_window_days
    output_dir = Path(args.out) if args.out else settings.charts_output_dir
    configured = settings.profile
    p50 = get_benchmark(configured["age"], configured["gender"]).p50 if configured else None
    path = plot_hrv_trend(repository.readings, output_dir, window_days=window, benchmark_p50=p50)
    if path is not None:
        print(path)
    return 0


def run_clear(args: argparse.Namespace, settings: Settings) -> int:
    repository = open_repository(args, settings)
    removed = len(repository)
    repository.clear_readings()
    repository.save()
    logging.info("Removed %d readings", removed)
    return 0


COMMANDS = {
    "import": run_import,
    "add": run_add,
    "stats": run_stats,
    "chart": run_chart,
    "clear": run_clear,
}


def main(args: Optional[list[str]] = None) -> int:
    namespace = build_parser().parse_args(args=args if args is not None else sys.argv[1:])
    configure_logging(namespace.verbose)
    settings = load_settings()
    start = time.time()
    try:
        return COMMANDS[namespace.command](namespace, settings)
    except (OSError, ValueError, TypeError, RuntimeError, ValidationError) as exc:
        logging.error("%s failed: %s", namespace.command, exc)
        log_run(
            namespace.command,
            start_time=start,
            status="error",
            error=str(exc),
            output_dir=settings.telemetry_dir,
        )
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
