"""CLI entrypoint for the travel map core."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from .atlas import CountryAtlas
from .config import AppConfig, load_config
from .descriptions import load_descriptions
from .goals import GoalBook, goal_progress, load_goal_book, save_goal_book
from .models import CountryStatus, Goal, GoalKind
from .projection import MapProjection
from .search import OTHER_CONTINENT, search_countries
from .statuses import StatusBook, load_status_book, save_status_book
from .style import StatusPalette
from .stats import compute_stats, format_stats_lines
from .util import ensure_directories, setup_logging
from .validate import Validator, format_report_lines
from .widgets import (
    GOALS_SNAPSHOT_FILE,
    STATS_SNAPSHOT_FILE,
    build_goals_snapshot,
    build_stats_snapshot,
    write_widget_snapshot,
)

LOGGER = logging.getLogger("travelmap.cli")


@dataclass(slots=True)
class _Session:
    cfg: AppConfig
    atlas: CountryAtlas
    book: StatusBook
    goals: GoalBook


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="travelmap",
        description="Visited-countries map core: boundaries, hit testing, stats and goals.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default="config.yaml", help="Path to YAML config.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    validate_p = subparsers.add_parser("validate", help="Validate config, dataset and saved state.")
    add_common(validate_p)
    validate_p.add_argument(
        "--strict",
        action="store_true",
        help="Treat a missing or empty boundary dataset as an error.",
    )
    validate_p.add_argument(
        "--skip-geometry",
        action="store_true",
        help="Skip polygon validity checks.",
    )

    hit_p = subparsers.add_parser("hit-test", help="Resolve the country under a map point.")
    add_common(hit_p)
    hit_p.add_argument("--lon", type=float, help="Longitude in degrees.")
    hit_p.add_argument("--lat", type=float, help="Latitude in degrees.")
    hit_p.add_argument("--x", type=float, help="Projected map x coordinate.")
    hit_p.add_argument("--y", type=float, help="Projected map y coordinate.")

    mark_p = subparsers.add_parser("mark", help="Set a country's status.")
    add_common(mark_p)
    mark_p.add_argument("country_id", help="Country id (usually ISO3).")
    mark_p.add_argument("status", help="none, visited or wantToVisit.")

    stats_p = subparsers.add_parser("stats", help="Print travel statistics.")
    add_common(stats_p)

    search_p = subparsers.add_parser("search", help="Search countries by name, id or continent.")
    add_common(search_p)
    search_p.add_argument("query", nargs="?", default="", help="Search text.")

    describe_p = subparsers.add_parser("describe", help="Show one country's details.")
    add_common(describe_p)
    describe_p.add_argument("country_id")

    want_p = subparsers.add_parser("want-list", help="List want-to-visit countries in priority order.")
    add_common(want_p)
    want_p.add_argument(
        "--reorder",
        nargs="+",
        default=None,
        metavar="COUNTRY_ID",
        help="Replace the priority order with these ids.",
    )

    goals_p = subparsers.add_parser("goals", help="Manage travel goals.")
    add_common(goals_p)
    goals_sub = goals_p.add_subparsers(dest="goals_command", required=True)
    goals_sub.add_parser("list", help="List goals with progress.")
    add_p = goals_sub.add_parser("add", help="Add a goal.")
    target = add_p.add_mutually_exclusive_group(required=True)
    target.add_argument("--countries", type=int, help="Visit N countries.")
    target.add_argument("--percentage", type=float, help="Reach P%% of the world.")
    target.add_argument(
        "--country",
        action="append",
        dest="specific",
        help="Visit this specific country. Can be repeated.",
    )
    add_p.add_argument("--title", default=None, help="Custom goal title.")
    add_p.add_argument("--target-date", default=None, help="ISO date, e.g. 2027-06-01.")
    remove_p = goals_sub.add_parser("remove", help="Remove a goal by id (or id prefix).")
    remove_p.add_argument("goal_id")

    export_p = subparsers.add_parser("export-widgets", help="Write widget snapshot files.")
    add_common(export_p)

    return parser


def _load_session(args: argparse.Namespace) -> _Session:
    cfg = load_config(args.config)
    setup_logging(cfg.paths.logs_dir / "travelmap.log", verbose=args.verbose)
    ensure_directories(cfg.paths.state_directories)
    atlas = CountryAtlas(MapProjection(cfg.projection.crs))
    atlas.load_file(cfg.paths.boundaries)
    return _Session(
        cfg=cfg,
        atlas=atlas,
        book=load_status_book(cfg.paths.statuses_file),
        goals=load_goal_book(cfg.paths.goals_file),
    )


def _export_widgets(session: _Session) -> None:
    stats = compute_stats(session.atlas.directory, session.book)
    widget_dir = session.cfg.paths.widget_dir
    write_widget_snapshot(widget_dir / STATS_SNAPSHOT_FILE, build_stats_snapshot(stats))
    write_widget_snapshot(
        widget_dir / GOALS_SNAPSHOT_FILE,
        build_goals_snapshot(session.goals.goals, stats, session.book),
    )


def _run_validate(cfg: AppConfig, *, strict: bool, check_geometry: bool) -> int:
    report = Validator(cfg, check_geometry=check_geometry).run(strict=strict)
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_hit_test(session: _Session, args: argparse.Namespace) -> int:
    if args.x is not None and args.y is not None:
        country_id = session.atlas.hit_test((args.x, args.y))
    elif args.lon is not None and args.lat is not None:
        country_id = session.atlas.hit_test_lon_lat(args.lon, args.lat)
    else:
        LOGGER.error("Provide either --lon/--lat or --x/--y.")
        return 2
    if country_id is None:
        print("No country at that point.")
        return 1
    directory = session.atlas.directory
    print(f"{country_id}\t{directory.display_name(country_id)}\t{session.book.status(country_id).title}")
    return 0


def _run_mark(session: _Session, country_id: str, status_raw: str) -> int:
    try:
        status = CountryStatus.parse(status_raw)
    except ValueError as exc:
        LOGGER.error("%s", exc)
        return 2
    if country_id not in session.atlas.directory:
        LOGGER.warning("Country id %s is not in the loaded boundary dataset.", country_id)
    session.book.update_status(status, country_id)
    save_status_book(session.book, session.cfg.paths.statuses_file)
    _export_widgets(session)
    LOGGER.info(
        "%s (%s) -> %s",
        session.atlas.directory.display_name(country_id),
        country_id,
        status.title,
    )
    return 0


def _run_stats(session: _Session) -> int:
    for line in format_stats_lines(compute_stats(session.atlas.directory, session.book)):
        print(line)
    return 0


def _run_search(session: _Session, query: str) -> int:
    groups = search_countries(session.atlas.directory, query)
    if not groups:
        print(f"No countries match '{query}'.")
        return 1
    directory = session.atlas.directory
    for group in groups:
        print(f"{group.continent}:")
        for entry in group.countries:
            flag = directory.flag_emoji(entry.country_id)
            print(f"  {flag or '  '} {entry.name} ({entry.country_id})")
    return 0


def _run_describe(session: _Session, country_id: str) -> int:
    directory = session.atlas.directory
    if country_id not in directory:
        LOGGER.error("Unknown country id: %s", country_id)
        return 1
    print(f"{directory.flag_emoji(country_id)} {directory.display_name(country_id)} ({country_id})")
    print(f"Continent: {directory.continent(country_id) or OTHER_CONTINENT}")
    status = session.book.status(country_id)
    palette = StatusPalette(session.cfg.style.color_scheme)
    print(f"Status: {status.title}")
    print(f"Fill: rgba{palette.fill(status)}  Stroke: rgba{palette.stroke(status)}")
    description = load_descriptions(session.cfg.paths.descriptions).get(country_id)
    if description is not None:
        print(f"Overview: {description.overview}")
        print(f"Known for: {description.known_for}")
        print(f"Quick history: {description.quick_history}")
    return 0


def _run_want_list(session: _Session, reorder: Sequence[str] | None) -> int:
    if reorder is not None:
        session.book.reorder_want_to_visit(reorder)
        save_status_book(session.book, session.cfg.paths.statuses_file)
        _export_widgets(session)
    directory = session.atlas.directory
    for idx, country_id in enumerate(session.book.want_to_visit_ids(directory), start=1):
        print(f"{idx}. {directory.display_name(country_id)} ({country_id})")
    return 0


def _run_goals(session: _Session, args: argparse.Namespace) -> int:
    command = str(args.goals_command)
    if command == "add":
        if args.countries is not None:
            kind = GoalKind(countries=args.countries)
        elif args.percentage is not None:
            kind = GoalKind(percentage=args.percentage)
        else:
            kind = GoalKind(specific_countries=tuple(args.specific))
        target_date = None
        if args.target_date:
            try:
                target_date = datetime.fromisoformat(args.target_date)
            except ValueError:
                LOGGER.error(
                    "Invalid --target-date '%s'; expected an ISO date such as 2027-06-01.",
                    args.target_date,
                )
                return 2
            if target_date.tzinfo is None:
                target_date = target_date.replace(tzinfo=timezone.utc)
        goal = Goal(kind=kind, title=args.title, target_date=target_date)
        session.goals.add(goal)
        LOGGER.info("Added goal %s: %s", goal.id, kind.label)
    elif command == "remove":
        goal = session.goals.find(args.goal_id)
        if goal is None or not session.goals.remove(goal.id):
            LOGGER.error("No goal with id %s", args.goal_id)
            return 1
        LOGGER.info("Removed goal %s", goal.id)
    elif command != "list":
        raise ValueError(f"Unknown goals command: {command}")

    if command != "list":
        save_goal_book(session.goals, session.cfg.paths.goals_file)
        _export_widgets(session)

    stats = compute_stats(session.atlas.directory, session.book)
    for goal in session.goals.goals:
        progress = goal_progress(goal, stats, session.book)
        marker = "x" if progress.is_complete else " "
        title = f" ({goal.title})" if goal.title else ""
        print(f"[{marker}] {goal.id[:8]} {goal.kind.label}{title}: {progress.description}")
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    command = str(args.command)
    if command == "validate":
        cfg = load_config(args.config)
        setup_logging(cfg.paths.logs_dir / "travelmap.log", verbose=args.verbose)
        return _run_validate(cfg, strict=bool(args.strict), check_geometry=not args.skip_geometry)

    try:
        session = _load_session(args)
    except ValueError as exc:
        LOGGER.error("Failed loading saved state: %s", exc)
        return 1
    if command == "hit-test":
        return _run_hit_test(session, args)
    if command == "mark":
        return _run_mark(session, str(args.country_id), str(args.status))
    if command == "stats":
        return _run_stats(session)
    if command == "search":
        return _run_search(session, str(args.query))
    if command == "describe":
        return _run_describe(session, str(args.country_id))
    if command == "want-list":
        return _run_want_list(session, args.reorder)
    if command == "goals":
        return _run_goals(session, args)
    if command == "export-widgets":
        _export_widgets(session)
        LOGGER.info("Widget snapshots written to %s", session.cfg.paths.widget_dir)
        return 0
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
