"""Editable result-form state for a fixture, and its conversion back to a
``record_result`` payload.

Form fields are strings bound to text inputs; anything that does not parse
as a finite number is treated as 0 rather than rejected.
"""

from typing import Any, Dict, List, Optional

from .analytics import fixture_stat_scaffold
from .coercion import coerce_number, coerce_score
from .match_types import StoreSnapshot
from .queries import players_for_team


def build_result_form(snapshot: StoreSnapshot, fixture_id: str) -> Optional[Dict[str, Any]]:
    fixture = snapshot.fixtures.get(fixture_id)
    if fixture is None:
        return None
    league = snapshot.leagues.get(fixture.league_id)
    sport = league.sport if league is not None else ""

    result = fixture.result
    form: Dict[str, Any] = {
        "fixture_id": fixture.id,
        "score": {
            "home": str(result.home) if result is not None else "0",
            "away": str(result.away) if result is not None else "0",
        },
        "team_order": [fixture.home_team_id, fixture.away_team_id],
        "player_stats": {},
    }
    for team_id in form["team_order"]:
        players = players_for_team(snapshot, team_id)
        form["player_stats"][team_id] = fixture_stat_scaffold(fixture, team_id, players, sport)
    return form


def result_payload_from_form(form: Dict[str, Any]) -> Dict[str, Any]:
    score = form.get("score") or {}
    player_stats: Dict[str, Dict[str, Dict[str, float]]] = {}
    for team_id, entries in (form.get("player_stats") or {}).items():
        team_stats: Dict[str, Dict[str, float]] = {}
        for entry in entries or []:
            player = entry.get("player")
            player_id = getattr(player, "id", None) if player is not None else None
            if player_id is None and isinstance(player, dict):
                player_id = player.get("id")
            if not player_id:
                continue
            stats: List[Dict[str, Any]] = entry.get("stats") or []
            team_stats[player_id] = {stat["key"]: coerce_number(stat.get("value")) for stat in stats if "key" in stat}
        player_stats[team_id] = team_stats

    return {
        "score": {
            "home": coerce_score(score.get("home")),
            "away": coerce_score(score.get("away")),
        },
        "playerStats": player_stats,
    }
