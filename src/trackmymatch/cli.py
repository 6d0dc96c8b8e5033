import argparse
import json
from typing import List, Optional

from .config import LOG_LEVELS, resolve_store_config
from .logging_setup import setup_logging
from .persistence import load_snapshot
from .queries import league_summary, leagues_by_name
from .reports import export_league_tables, season_stats_frame, standings_frame


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trackmymatch", description="Inspect a stored TrackMyMatch league document.")
    parser.add_argument("--data-dir", default=None, help="Directory holding the store document")
    parser.add_argument("--log-level", default="WARNING", choices=LOG_LEVELS, help="Log level for diagnostics on stderr")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("leagues", help="List leagues with team and fixture counts")

    standings_cmd = sub.add_parser("standings", help="Print the standings table for a league")
    standings_cmd.add_argument("league_id")

    season_cmd = sub.add_parser("season-stats", help="Print season player totals for a league")
    season_cmd.add_argument("league_id")

    export_cmd = sub.add_parser("export", help="Write standings and season stats tables for a league")
    export_cmd.add_argument("league_id")
    export_cmd.add_argument("--output-dir", default="reports/league_tables", help="Output directory for tables")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    config = resolve_store_config(
        {
            "data_dir": args.data_dir,
            "log_level": args.log_level,
            "autosave": False,
        }
    )
    setup_logging(config.log_level, config.log_file)
    snapshot = load_snapshot(config)

    if args.command == "leagues":
        for league in leagues_by_name(snapshot):
            summary = league_summary(snapshot, league.id)
            print(
                f"{league.id}\t{league.name}\t{league.sport}\t"
                f"teams={summary['teams']} upcoming={summary['upcoming']} completed={summary['completed']}"
            )
        return 0

    if args.league_id not in snapshot.leagues:
        print(f"Unknown league: {args.league_id}")
        return 1

    if args.command == "standings":
        print(standings_frame(snapshot, args.league_id).to_string(index=False))
    elif args.command == "season-stats":
        frame = season_stats_frame(snapshot, args.league_id)
        print("No recorded player stats." if frame.empty else frame.to_string(index=False))
    elif args.command == "export":
        result = export_league_tables(snapshot, args.league_id, args.output_dir)
        print(json.dumps(result, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
