import random
from unittest import TestCase

from trackmymatch.analytics import (
    accumulate_player_stats,
    fixture_stat_scaffold,
    merge_player_totals,
    rank_standings,
    season_player_stats,
    standings,
)
from trackmymatch.match_types import StandingsRow, StoreSnapshot

from builders import league_with_teams, make_store, play


def row_for(rows, team_id):
    return next(row for row in rows if row.team_id == team_id)


class StandingsTest(TestCase):
    def test_home_win_scenario(self):
        store, _ = make_store()
        store.add_league({"name": "L", "sport": "football"})
        store.add_team("lg-1", {"name": "T1"})
        store.add_team("lg-1", {"name": "T2"})
        store.add_fixture({"leagueId": "lg-1", "homeTeamId": "team-1", "awayTeamId": "team-2"})
        self.assertEqual([row.points for row in store.standings("lg-1")], [0, 0])

        store.record_result("fixture-1", {"score": {"home": 3, "away": 1}, "playerStats": {}})
        rows = store.standings("lg-1")

        self.assertEqual([row.team_id for row in rows], ["team-1", "team-2"])
        first, second = rows
        self.assertEqual((first.played, first.won, first.points, first.diff), (1, 1, 3, 2))
        self.assertEqual((second.played, second.lost, second.points, second.diff), (1, 1, 0, -2))

    def test_away_win_and_draw_points(self):
        store = league_with_teams(["A", "B"])
        play(store, "team-1", "team-2", 0, 2)
        rows = store.standings("lg-1")
        self.assertEqual((row_for(rows, "team-2").won, row_for(rows, "team-2").points), (1, 3))
        self.assertEqual((row_for(rows, "team-1").lost, row_for(rows, "team-1").points), (1, 0))

        play(store, "team-1", "team-2", 1, 1)
        rows = store.standings("lg-1")
        self.assertEqual((row_for(rows, "team-1").drawn, row_for(rows, "team-1").points), (1, 1))
        self.assertEqual((row_for(rows, "team-2").drawn, row_for(rows, "team-2").points), (1, 4))

    def test_teams_without_fixtures_have_zero_rows(self):
        store = league_with_teams(["A", "B", "C"])
        play(store, "team-1", "team-2", 2, 0)
        idle = row_for(store.standings("lg-1"), "team-3")
        self.assertEqual(
            (idle.played, idle.won, idle.drawn, idle.lost, idle.points, idle.goals_for, idle.goals_against, idle.diff),
            (0, 0, 0, 0, 0, 0, 0, 0),
        )

    def test_upcoming_and_other_league_fixtures_ignored(self):
        store = league_with_teams(["A", "B"])
        store.add_fixture({"leagueId": "lg-1", "homeTeamId": "team-1", "awayTeamId": "team-2"})
        store.add_league({"name": "Other", "sport": "football"})
        store.add_team("lg-2", {"name": "X"})
        store.add_team("lg-2", {"name": "Y"})
        store.add_fixture({"leagueId": "lg-2", "homeTeamId": "team-3", "awayTeamId": "team-4"})
        store.record_result("fixture-2", {"score": {"home": 5, "away": 0}, "playerStats": {}})

        for row in store.standings("lg-1"):
            self.assertEqual(row.played, 0)
        self.assertEqual([row.team_id for row in store.standings("lg-2")], ["team-3", "team-4"])

    def test_stale_team_ids_are_skipped(self):
        store = league_with_teams(["A", "B", "C"])
        play(store, "team-1", "team-2", 1, 0)
        snapshot = store.snapshot
        # Drop team-2 from the collection without the cascade to leave a dangling fixture.
        teams = {key: team for key, team in snapshot.teams.items() if key != "team-2"}
        stale = StoreSnapshot(
            leagues=snapshot.leagues,
            teams=teams,
            players=snapshot.players,
            fixtures=snapshot.fixtures,
        )
        rows = standings(stale, "lg-1")
        self.assertEqual(len(rows), 2)
        self.assertTrue(all(row.played == 0 for row in rows))

    def test_tie_break_cascade(self):
        rows = [
            StandingsRow("a", "A", points=6, diff=2, goals_for=5),
            StandingsRow("b", "B", points=6, diff=4, goals_for=4),
            StandingsRow("c", "C", points=6, diff=4, goals_for=7),
            StandingsRow("d", "D", points=9, diff=-1, goals_for=1),
            StandingsRow("e", "E", points=6, diff=2, goals_for=5),
        ]
        ranked = rank_standings(rows)
        self.assertEqual([row.team_id for row in ranked], ["d", "c", "b", "a", "e"])
        self.assertEqual([row.team_id for row in rank_standings(ranked)], ["d", "c", "b", "a", "e"])

    def test_random_fixture_sets_hold_table_invariants(self):
        rng = random.Random(7)
        for _ in range(20):
            store = league_with_teams(["A", "B", "C", "D"])
            expected_points = {team_id: 0 for team_id in store.snapshot.teams}
            for _ in range(rng.randint(0, 12)):
                home, away = rng.sample(sorted(store.snapshot.teams), 2)
                home_goals, away_goals = rng.randint(0, 4), rng.randint(0, 4)
                play(store, home, away, home_goals, away_goals)
                if home_goals > away_goals:
                    expected_points[home] += 3
                elif home_goals < away_goals:
                    expected_points[away] += 3
                else:
                    expected_points[home] += 1
                    expected_points[away] += 1

            rows = store.standings("lg-1")
            self.assertEqual(rank_standings(rows), rows)
            for row in rows:
                self.assertEqual(row.played, row.won + row.drawn + row.lost)
                self.assertEqual(row.diff, row.goals_for - row.goals_against)
                self.assertEqual(row.points, expected_points[row.team_id])
            self.assertEqual(sum(row.goals_for for row in rows), sum(row.goals_against for row in rows))


class SeasonPlayerStatsTest(TestCase):
    def test_totals_sum_across_fixtures_and_follow_schema(self):
        store = league_with_teams(["A", "B"])
        play(
            store,
            "team-1",
            "team-2",
            2,
            1,
            {
                "team-1": {"player-1": {"goals": 2, "assists": 1, "tackles": 9}},
                "team-2": {"player-3": {"goals": 1}},
            },
        )
        play(store, "team-2", "team-1", 0, 1, {"team-1": {"player-1": {"goals": "1", "assists": "x"}}})

        rows = {row.player_id: row for row in store.season_player_stats("lg-1")}
        self.assertEqual(set(rows), {"player-1", "player-3"})

        top = rows["player-1"]
        self.assertEqual(top.totals, {"goals": 3, "assists": 1, "yellowCards": 0, "redCards": 0})
        self.assertEqual(top.team_id, "team-1")
        self.assertEqual(top.name, "A One")
        self.assertEqual(
            top.formatted[0],
            {"key": "goals", "label": "Goals", "value": 3},
        )
        self.assertNotIn("tackles", top.totals)

    def test_upcoming_fixtures_and_deleted_players_are_ignored(self):
        store = league_with_teams(["A", "B"])
        play(store, "team-1", "team-2", 1, 0, {"team-1": {"player-1": {"goals": 1}, "player-2": {"goals": 0}}})
        store.add_fixture({"leagueId": "lg-1", "homeTeamId": "team-1", "awayTeamId": "team-2"})
        store.delete_player("team-1", "player-2")

        rows = store.season_player_stats("lg-1")
        self.assertEqual([row.player_id for row in rows], ["player-1"])

    def test_player_with_empty_stat_maps_is_omitted(self):
        store = league_with_teams(["A", "B"])
        play(store, "team-1", "team-2", 0, 0, {"team-1": {"player-1": {}}})
        self.assertEqual(store.season_player_stats("lg-1"), [])

    def test_aggregation_is_additive(self):
        store = league_with_teams(["A", "B"])
        first = play(store, "team-1", "team-2", 1, 0, {"team-1": {"player-1": {"goals": 1, "assists": 2}}})
        second = play(
            store,
            "team-2",
            "team-1",
            2,
            2,
            {"team-1": {"player-1": {"goals": 2}}, "team-2": {"player-3": {"goals": 2}}},
        )
        fixtures = store.snapshot.fixtures

        together = accumulate_player_stats([fixtures[first], fixtures[second]])
        separate = merge_player_totals(
            accumulate_player_stats([fixtures[first]]),
            accumulate_player_stats([fixtures[second]]),
        )
        chained = accumulate_player_stats([fixtures[second]], accumulate_player_stats([fixtures[first]]))

        self.assertEqual(together, separate)
        self.assertEqual(together, chained)
        self.assertEqual(together["player-1"]["totals"], {"goals": 3, "assists": 2})

    def test_accumulate_does_not_mutate_input_totals(self):
        store = league_with_teams(["A", "B"])
        fixture_id = play(store, "team-1", "team-2", 1, 0, {"team-1": {"player-1": {"goals": 1}}})
        base = {"player-1": {"team_id": "team-1", "totals": {"goals": 4}}}
        accumulate_player_stats([store.snapshot.fixtures[fixture_id]], base)
        self.assertEqual(base["player-1"]["totals"], {"goals": 4})

    def test_darts_schema(self):
        store = league_with_teams(["A", "B"], sport="darts")
        play(store, "team-1", "team-2", 3, 2, {"team-1": {"player-1": {"oneEighties": 2, "average": 61.5}}})
        row = store.season_player_stats("lg-1")[0]
        self.assertEqual([item["key"] for item in row.formatted], ["legsWon", "oneEighties", "highestCheckout", "average"])
        self.assertEqual(row.totals["average"], 61.5)
        self.assertEqual(row.totals["legsWon"], 0)

    def test_unknown_league_is_empty(self):
        store = league_with_teams(["A", "B"])
        self.assertEqual(season_player_stats(store.snapshot, "lg-x"), [])


class FixtureStatScaffoldTest(TestCase):
    def test_defaults_to_zero_strings(self):
        store = league_with_teams(["A", "B"])
        snapshot = store.snapshot
        players = [snapshot.players["player-1"], snapshot.players["player-2"]]

        entries = fixture_stat_scaffold(snapshot.fixtures.get("fixture-1"), "team-1", players, "football")

        self.assertEqual([entry["player"].id for entry in entries], ["player-1", "player-2"])
        self.assertEqual([stat["value"] for stat in entries[0]["stats"]], ["0", "0", "0", "0"])
        self.assertEqual(entries[0]["stats"][0]["label"], "Goals")

    def test_surfaces_recorded_values_as_strings(self):
        store = league_with_teams(["A", "B"])
        fixture_id = play(store, "team-1", "team-2", 1, 0, {"team-1": {"player-1": {"goals": 1, "assists": 2.5}}})
        snapshot = store.snapshot
        players = [snapshot.players["player-1"], snapshot.players["player-2"]]

        entries = fixture_stat_scaffold(snapshot.fixtures[fixture_id], "team-1", players, "football")

        self.assertEqual([stat["value"] for stat in entries[0]["stats"]], ["1", "2.5", "0", "0"])
        self.assertEqual([stat["value"] for stat in entries[1]["stats"]], ["0", "0", "0", "0"])

    def test_unknown_sport_gives_empty_stat_rows(self):
        store = league_with_teams(["A", "B"])
        players = [store.snapshot.players["player-1"]]
        entries = fixture_stat_scaffold(None, "team-1", players, "curling")
        self.assertEqual(entries[0]["stats"], [])


class ReadOnlyTest(TestCase):
    def test_analytics_do_not_change_snapshot(self):
        store = league_with_teams(["A", "B"])
        play(store, "team-1", "team-2", 1, 0, {"team-1": {"player-1": {"goals": 1}}})
        snapshot = store.snapshot
        version = snapshot.version

        standings(snapshot, "lg-1")
        season_player_stats(snapshot, "lg-1")

        self.assertIs(store.snapshot, snapshot)
        self.assertEqual(snapshot.version, version)
