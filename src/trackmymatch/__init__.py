from .analytics import (
    accumulate_player_stats,
    fixture_stat_scaffold,
    merge_player_totals,
    rank_standings,
    season_player_stats,
    standings,
)
from .config import resolve_store_config
from .logging_setup import setup_logging
from .match_types import (
    SPORTS,
    STORAGE_KEY,
    Fixture,
    FixtureResult,
    League,
    Player,
    SeasonPlayerStats,
    StandingsRow,
    StatField,
    StoreConfig,
    StoreSnapshot,
    Team,
)
from .persistence import load_snapshot, save_snapshot, snapshot_from_document, snapshot_to_document
from .result_entry import build_result_form, result_payload_from_form
from .stat_schema import STAT_FIELDS, stat_fields_for
from .store import LeagueStore

__all__ = [
    "LeagueStore",
    "StoreSnapshot",
    "StoreConfig",
    "League",
    "Team",
    "Player",
    "Fixture",
    "FixtureResult",
    "StandingsRow",
    "SeasonPlayerStats",
    "StatField",
    "SPORTS",
    "STAT_FIELDS",
    "STORAGE_KEY",
    "stat_fields_for",
    "standings",
    "rank_standings",
    "season_player_stats",
    "accumulate_player_stats",
    "merge_player_totals",
    "fixture_stat_scaffold",
    "build_result_form",
    "result_payload_from_form",
    "load_snapshot",
    "save_snapshot",
    "snapshot_to_document",
    "snapshot_from_document",
    "resolve_store_config",
    "setup_logging",
]
