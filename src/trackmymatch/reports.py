import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from .analytics import season_player_stats, standings
from .match_types import StoreSnapshot
from .stat_schema import stat_keys_for

STANDINGS_COLUMNS = [
    "position",
    "team_id",
    "team_name",
    "played",
    "won",
    "drawn",
    "lost",
    "goals_for",
    "goals_against",
    "diff",
    "points",
]


def standings_frame(snapshot: StoreSnapshot, league_id: str) -> pd.DataFrame:
    rows = [asdict(row) for row in standings(snapshot, league_id)]
    for position, row in enumerate(rows, start=1):
        row["position"] = position
    return pd.DataFrame(rows, columns=STANDINGS_COLUMNS)


def season_stats_frame(snapshot: StoreSnapshot, league_id: str) -> pd.DataFrame:
    league = snapshot.leagues.get(league_id)
    stat_columns = list(stat_keys_for(league.sport)) if league is not None else []
    rows: List[Dict[str, Any]] = []
    for entry in season_player_stats(snapshot, league_id):
        team = snapshot.teams.get(entry.team_id)
        rows.append(
            {
                "player_id": entry.player_id,
                "name": entry.name,
                "position": entry.position,
                "team_id": entry.team_id,
                "team_name": team.name if team is not None else "",
                **entry.totals,
            }
        )
    return pd.DataFrame(rows, columns=["player_id", "name", "position", "team_id", "team_name", *stat_columns])


def _write_table(table_path: Path, frame: pd.DataFrame, warnings: List[str]) -> int:
    table_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        frame.to_parquet(table_path, index=False)
    except Exception as exc:
        fallback = table_path.with_suffix(".json")
        fallback.write_text(frame.to_json(orient="records", indent=2))
        warnings.append(f"table_fallback_json:{table_path.name}:{exc}")
    return int(len(frame))


def read_table(table_path: Path) -> pd.DataFrame:
    if table_path.exists():
        return pd.read_parquet(table_path)
    fallback = table_path.with_suffix(".json")
    if fallback.exists():
        return pd.DataFrame(json.loads(fallback.read_text()))
    return pd.DataFrame()


def export_league_tables(snapshot: StoreSnapshot, league_id: str, output_dir: str) -> Dict[str, Any]:
    root = Path(output_dir) / league_id
    warnings: List[str] = []
    counts = {
        "standings": _write_table(root / "standings.parquet", standings_frame(snapshot, league_id), warnings),
        "season_stats": _write_table(root / "season_stats.parquet", season_stats_frame(snapshot, league_id), warnings),
    }
    return {
        "output_root": str(root),
        "record_counts": counts,
        "warnings": warnings,
    }
