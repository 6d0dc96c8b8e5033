from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .coercion import Number, coerce_number
from .match_types import Fixture, FixtureResult, Player, SeasonPlayerStats, StandingsRow, StoreSnapshot
from .queries import fixtures_for_league, teams_for_league
from .stat_schema import stat_fields_for

WIN_POINTS = 3
DRAW_POINTS = 1

# player_id -> {"team_id": str, "totals": {stat_key: number}}
PlayerTotals = Dict[str, Dict[str, Any]]


def _apply_result(home: StandingsRow, away: StandingsRow, result: FixtureResult) -> None:
    home.played += 1
    away.played += 1
    home.goals_for += result.home
    home.goals_against += result.away
    away.goals_for += result.away
    away.goals_against += result.home

    if result.home > result.away:
        home.won += 1
        away.lost += 1
        home.points += WIN_POINTS
    elif result.home < result.away:
        away.won += 1
        home.lost += 1
        away.points += WIN_POINTS
    else:
        home.drawn += 1
        away.drawn += 1
        home.points += DRAW_POINTS
        away.points += DRAW_POINTS


def rank_standings(rows: Iterable[StandingsRow]) -> List[StandingsRow]:
    # sorted() is stable under reverse=True, so full ties keep team order.
    return sorted(rows, key=lambda row: (row.points, row.diff, row.goals_for), reverse=True)


def standings(snapshot: StoreSnapshot, league_id: str) -> List[StandingsRow]:
    table = {team.id: StandingsRow(team_id=team.id, team_name=team.name) for team in teams_for_league(snapshot, league_id)}

    for fixture in snapshot.fixtures.values():
        if fixture.league_id != league_id or not fixture.is_completed:
            continue
        home = table.get(fixture.home_team_id)
        away = table.get(fixture.away_team_id)
        if home is None or away is None:
            continue
        _apply_result(home, away, fixture.result)

    for row in table.values():
        row.diff = row.goals_for - row.goals_against

    return rank_standings(table.values())


def accumulate_player_stats(fixtures: Iterable[Fixture], totals: Optional[PlayerTotals] = None) -> PlayerTotals:
    """Add the stat maps of completed fixtures onto a running per-player total.

    Never mutates ``totals``. A player is keyed by id alone; the team id kept is
    the first one seen, with no attempt to reconcile transfers.
    """
    running: PlayerTotals = {
        player_id: {"team_id": entry["team_id"], "totals": dict(entry["totals"])}
        for player_id, entry in (totals or {}).items()
    }
    for fixture in fixtures:
        if not fixture.is_completed:
            continue
        for team_id, group in fixture.player_stats.items():
            for player_id, stats in group.items():
                entry = running.setdefault(player_id, {"team_id": team_id, "totals": {}})
                bucket = entry["totals"]
                for key, value in stats.items():
                    bucket[key] = bucket.get(key, 0) + coerce_number(value)
    return running


def merge_player_totals(*batches: PlayerTotals) -> PlayerTotals:
    merged: PlayerTotals = {}
    for batch in batches:
        for player_id, entry in batch.items():
            target = merged.setdefault(player_id, {"team_id": entry["team_id"], "totals": {}})
            bucket = target["totals"]
            for key, value in entry["totals"].items():
                bucket[key] = bucket.get(key, 0) + value
    return merged


def season_player_stats(snapshot: StoreSnapshot, league_id: str) -> List[SeasonPlayerStats]:
    league = snapshot.leagues.get(league_id)
    if league is None:
        return []
    schema = stat_fields_for(league.sport)
    running = accumulate_player_stats(fixtures_for_league(snapshot, league_id))

    rows: List[SeasonPlayerStats] = []
    for player_id, entry in running.items():
        player = snapshot.players.get(player_id)
        if player is None or not entry["totals"]:
            continue
        projected: Dict[str, Number] = {field.key: entry["totals"].get(field.key, 0) for field in schema}
        rows.append(
            SeasonPlayerStats(
                player_id=player_id,
                name=player.name,
                team_id=entry["team_id"],
                sport=league.sport,
                position=player.position,
                totals=projected,
                formatted=[{"key": field.key, "label": field.label, "value": projected[field.key]} for field in schema],
            )
        )
    return rows


def _stat_text(value: Any) -> str:
    if value is None or value == "":
        return "0"
    return str(value)


def fixture_stat_scaffold(
    fixture: Optional[Fixture],
    team_id: str,
    players: Sequence[Player],
    sport: str,
) -> List[Dict[str, Any]]:
    schema = stat_fields_for(sport)
    recorded: Mapping[str, Mapping[str, Any]] = {}
    if fixture is not None:
        recorded = fixture.player_stats.get(team_id) or {}

    entries: List[Dict[str, Any]] = []
    for player in players:
        stats = recorded.get(player.id) or {}
        entries.append(
            {
                "player": player,
                "stats": [
                    {"key": field.key, "label": field.label, "value": _stat_text(stats.get(field.key))}
                    for field in schema
                ],
            }
        )
    return entries
