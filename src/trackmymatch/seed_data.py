import copy
from typing import Any, Dict

SEED_DOCUMENT: Dict[str, Any] = {
    "leagues": [
        {
            "id": "lg-sunday5s",
            "name": "Sunday Five-a-Side",
            "sport": "football",
            "color": "#FF6B6B",
            "description": "Casual small-sided league at the community pitches.",
        },
        {
            "id": "lg-oche",
            "name": "Thursday Oche Club",
            "sport": "darts",
            "color": "#9D4EDD",
            "description": "Pub darts, best of five legs.",
        },
    ],
    "teams": {
        "team-rovers": {
            "id": "team-rovers",
            "leagueId": "lg-sunday5s",
            "name": "Riverside Rovers",
            "badgeColor": "#5ED3F3",
            "players": ["player-ade", "player-bo"],
        },
        "team-united": {
            "id": "team-united",
            "leagueId": "lg-sunday5s",
            "name": "Hilltop United",
            "badgeColor": "#F7B801",
            "players": ["player-cal", "player-dee"],
        },
        "team-arrows": {
            "id": "team-arrows",
            "leagueId": "lg-oche",
            "name": "Red Lion Arrows",
            "badgeColor": "#FF9DE2",
            "players": ["player-eli"],
        },
        "team-flights": {
            "id": "team-flights",
            "leagueId": "lg-oche",
            "name": "Crown Flights",
            "badgeColor": "#9BFF6B",
            "players": ["player-fen"],
        },
    },
    "players": {
        "player-ade": {"id": "player-ade", "name": "Ade Okafor", "position": "Forward", "sport": "football", "teamId": "team-rovers"},
        "player-bo": {"id": "player-bo", "name": "Bo Lindqvist", "position": "Keeper", "sport": "football", "teamId": "team-rovers"},
        "player-cal": {"id": "player-cal", "name": "Cal Murray", "position": "Midfield", "sport": "football", "teamId": "team-united"},
        "player-dee": {"id": "player-dee", "name": "Dee Patel", "position": "Defence", "sport": "football", "teamId": "team-united"},
        "player-eli": {"id": "player-eli", "name": "Eli Hart", "position": "", "sport": "darts", "teamId": "team-arrows"},
        "player-fen": {"id": "player-fen", "name": "Fen Walsh", "position": "", "sport": "darts", "teamId": "team-flights"},
    },
    "fixtures": {
        "fixture-opener": {
            "id": "fixture-opener",
            "leagueId": "lg-sunday5s",
            "homeTeamId": "team-rovers",
            "awayTeamId": "team-united",
            "date": "2024-09-01T10:00:00+00:00",
            "venue": "Riverside Park",
            "status": "completed",
            "result": {"home": 3, "away": 2},
            "playerStats": {
                "team-rovers": {
                    "player-ade": {"goals": 2, "assists": 0, "yellowCards": 0, "redCards": 0},
                    "player-bo": {"goals": 1, "assists": 1, "yellowCards": 0, "redCards": 0},
                },
                "team-united": {
                    "player-cal": {"goals": 2, "assists": 0, "yellowCards": 1, "redCards": 0},
                    "player-dee": {"goals": 0, "assists": 1, "yellowCards": 0, "redCards": 0},
                },
            },
        },
        "fixture-return": {
            "id": "fixture-return",
            "leagueId": "lg-sunday5s",
            "homeTeamId": "team-united",
            "awayTeamId": "team-rovers",
            "date": "2024-09-08T10:00:00+00:00",
            "venue": "Hilltop Rec",
            "status": "upcoming",
            "result": None,
            "playerStats": {},
        },
        "fixture-darts-1": {
            "id": "fixture-darts-1",
            "leagueId": "lg-oche",
            "homeTeamId": "team-arrows",
            "awayTeamId": "team-flights",
            "date": "2024-09-05T19:30:00+00:00",
            "venue": "The Red Lion",
            "status": "upcoming",
            "result": None,
            "playerStats": {},
        },
    },
}


def seed_document() -> Dict[str, Any]:
    return copy.deepcopy(SEED_DOCUMENT)
