import tempfile
from pathlib import Path
from unittest import TestCase

from trackmymatch.reports import (
    STANDINGS_COLUMNS,
    export_league_tables,
    read_table,
    season_stats_frame,
    standings_frame,
)

from builders import league_with_teams, play


def played_league():
    store = league_with_teams(["A", "B", "C"])
    play(store, "team-2", "team-1", 2, 0, {"team-2": {"player-3": {"goals": 2}}})
    play(store, "team-3", "team-1", 1, 1, {"team-1": {"player-1": {"goals": 1, "yellowCards": 1}}})
    return store


class ReportsTest(TestCase):
    def test_standings_frame_has_positions(self):
        frame = standings_frame(played_league().snapshot, "lg-1")

        self.assertEqual(list(frame.columns), STANDINGS_COLUMNS)
        self.assertEqual(frame["position"].tolist(), [1, 2, 3])
        self.assertEqual(frame["team_id"].tolist(), ["team-2", "team-3", "team-1"])
        self.assertEqual(frame["points"].tolist(), [3, 1, 1])

    def test_season_stats_frame_uses_schema_columns(self):
        frame = season_stats_frame(played_league().snapshot, "lg-1")

        self.assertEqual(
            list(frame.columns),
            ["player_id", "name", "position", "team_id", "team_name", "goals", "assists", "yellowCards", "redCards"],
        )
        by_player = frame.set_index("player_id")
        self.assertEqual(int(by_player.loc["player-3", "goals"]), 2)
        self.assertEqual(by_player.loc["player-1", "team_name"], "A")
        self.assertEqual(int(by_player.loc["player-1", "yellowCards"]), 1)

    def test_empty_league_frames(self):
        store = league_with_teams([])
        self.assertTrue(standings_frame(store.snapshot, "lg-1").empty)
        self.assertTrue(season_stats_frame(store.snapshot, "lg-1").empty)

    def test_export_writes_readable_tables(self):
        store = played_league()
        with tempfile.TemporaryDirectory() as temp_dir:
            result = export_league_tables(store.snapshot, "lg-1", temp_dir)

            self.assertEqual(result["record_counts"], {"standings": 3, "season_stats": 2})
            root = Path(result["output_root"])
            standings = read_table(root / "standings.parquet")
            self.assertEqual(standings["team_id"].tolist(), ["team-2", "team-3", "team-1"])
            self.assertEqual(len(read_table(root / "season_stats.parquet")), 2)

    def test_read_missing_table_is_empty(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            self.assertTrue(read_table(Path(temp_dir) / "nothing.parquet").empty)
