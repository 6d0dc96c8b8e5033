from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .match_types import STATUS_COMPLETED, STATUS_UPCOMING, Fixture, League, Player, StoreSnapshot, Team


def _parse_iso_utc(value: Any) -> Optional[datetime]:
    text = str(value or "").strip()
    if not text:
        return None
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        # Offsets near datetime.min/max overflow on conversion.
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def teams_for_league(snapshot: StoreSnapshot, league_id: str) -> List[Team]:
    return [team for team in snapshot.teams.values() if team.league_id == league_id]


def fixtures_for_league(snapshot: StoreSnapshot, league_id: str) -> List[Fixture]:
    fixtures = [fixture for fixture in snapshot.fixtures.values() if fixture.league_id == league_id]
    far_future = datetime.max.replace(tzinfo=timezone.utc)
    # Stable sort: unparseable dates keep insertion order after the dated ones.
    return sorted(fixtures, key=lambda fixture: _parse_iso_utc(fixture.date) or far_future)


def players_for_team(snapshot: StoreSnapshot, team_id: str) -> List[Player]:
    team = snapshot.teams.get(team_id)
    if team is None:
        return []
    return [snapshot.players[player_id] for player_id in team.players if player_id in snapshot.players]


def leagues_by_name(snapshot: StoreSnapshot) -> List[League]:
    return sorted(snapshot.leagues.values(), key=lambda league: league.name.casefold())


def league_summary(snapshot: StoreSnapshot, league_id: str) -> Dict[str, Any]:
    league = snapshot.leagues.get(league_id)
    if league is None:
        return {}
    fixtures = fixtures_for_league(snapshot, league_id)
    return {
        "league_id": league.id,
        "name": league.name,
        "sport": league.sport,
        "teams": len(teams_for_league(snapshot, league_id)),
        "upcoming": sum(1 for fixture in fixtures if fixture.status == STATUS_UPCOMING),
        "completed": sum(1 for fixture in fixtures if fixture.status == STATUS_COMPLETED),
    }
