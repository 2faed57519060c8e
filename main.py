"""CLI entry point for the household-services matching engine."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError as ConfigError

from househelp.core.config import Settings
from househelp.core.errors import MatchingError
from househelp.core.schemas import GeoPoint, MatchResult, SearchCriteria, ServiceType
from househelp.pipeline.engine import MatchingEngine
from househelp.stores.sqlite import (
    SQLiteCandidateStore,
    SQLiteHistoryStore,
    init_db,
    seed_from_dict,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="HouseHelp matching engine - rank service providers for a household",
    )
    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- seed subcommand ---
    seed_parser = subparsers.add_parser("seed", help="Load providers and households from YAML")
    seed_parser.add_argument("--data", required=True, help="Path to fixture YAML file")

    # --- match subcommand ---
    match_parser = subparsers.add_parser("match", help="Rank providers for explicit criteria")
    match_parser.add_argument(
        "--services",
        required=True,
        help="Comma-separated service types (e.g. cleaning,cooking)",
    )
    match_parser.add_argument("--lat", type=float, required=True, help="Latitude in degrees")
    match_parser.add_argument("--lng", type=float, required=True, help="Longitude in degrees")
    match_parser.add_argument("--radius", type=float, default=20.0, help="Radius in km (default: 20)")
    match_parser.add_argument("--min-rating", type=float, help="Minimum provider rating (0-5)")
    match_parser.add_argument("--languages", default="", help="Comma-separated languages")
    match_parser.add_argument("--max-rate", type=float, help="Maximum hourly rate")
    match_parser.add_argument(
        "--prioritize",
        action="append",
        choices=["rating", "experience", "price"],
        default=[],
        help="Give a signal extra weight (repeatable)",
    )
    match_parser.add_argument("--limit", type=int, help="Maximum number of matches")
    match_parser.add_argument("--export", choices=["json"], help="Export results to format (json)")

    # --- recommend subcommand ---
    rec_parser = subparsers.add_parser("recommend", help="Recommend providers for a household")
    rec_parser.add_argument("--user", required=True, help="Household id")
    rec_parser.add_argument("--limit", type=int, help="Maximum number of recommendations")
    rec_parser.add_argument("--export", choices=["json"], help="Export results to format (json)")

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_criteria(args: argparse.Namespace) -> SearchCriteria:
    services = frozenset(ServiceType(s.strip().lower()) for s in args.services.split(",") if s.strip())
    languages = frozenset(lang.strip() for lang in args.languages.split(",") if lang.strip())
    return SearchCriteria(
        services=services,
        location=GeoPoint(latitude=args.lat, longitude=args.lng),
        radius_km=args.radius,
        min_rating=args.min_rating,
        languages=languages,
        max_hourly_rate=args.max_rate,
        prioritize_rating="rating" in args.prioritize,
        prioritize_experience="experience" in args.prioritize,
        prioritize_price="price" in args.prioritize,
    )


def export_results_json(results: list[MatchResult]) -> str:
    """Export match results as a JSON string."""
    data = []
    for r in results:
        p = r.provider
        data.append({
            "id": p.id,
            "full_name": p.full_name,
            "services": sorted(s.value for s in p.services),
            "rating": p.rating,
            "hourly_rate": p.hourly_rate,
            "experience_years": p.experience_years,
            "compatibility_score": round(r.compatibility_score, 2),
            "distance_km": None if r.distance_km is None else round(r.distance_km, 2),
        })
    return json.dumps(data, indent=2)


def print_results(results: list[MatchResult], export_format: str | None) -> None:
    if export_format == "json":
        print(export_results_json(results))
        return
    if not results:
        print("No matches found.")
        return
    for i, r in enumerate(results, start=1):
        distance = "n/a" if r.distance_km is None else f"{r.distance_km:.1f} km"
        print(f"  {i}. {r.provider.full_name or r.provider.id}: "
              f"score {r.compatibility_score:.1f}, rating {r.provider.rating:.1f}, {distance}")


def cmd_seed(args: argparse.Namespace, settings: Settings) -> None:
    """Handle seed subcommand."""
    path = Path(args.data)
    if not path.exists():
        msg = f"Fixture file not found: {path}"
        raise FileNotFoundError(msg)
    data = yaml.safe_load(path.read_text()) or {}

    conn = init_db(settings.database.path)
    providers, households, bookings = seed_from_dict(conn, data)
    conn.close()
    print(f"Seeded {providers} providers, {households} households, "
          f"{bookings} bookings into {settings.database.path}")


async def run_match(args: argparse.Namespace, settings: Settings) -> list[MatchResult]:
    conn = init_db(settings.database.path)
    try:
        engine = MatchingEngine(
            SQLiteCandidateStore(conn),
            SQLiteHistoryStore(conn),
            settings.matching,
            settings.scoring,
        )
        if args.command == "recommend":
            return await engine.get_recommended_matches(args.user, args.limit)
        return await engine.find_matches(build_criteria(args), args.limit)
    finally:
        conn.close()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ConfigError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "seed":
        try:
            cmd_seed(args, settings)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        return

    try:
        results = asyncio.run(run_match(args, settings))
    except (MatchingError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print_results(results, args.export)


if __name__ == "__main__":
    main()
