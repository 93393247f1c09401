"""Unit tests for draw and daily schedule ingestion."""

import asyncio
from datetime import date

import pytest

from fantasy_tennis.db.models import Match, Tournament
from fantasy_tennis.errors import InputValidationError
from fantasy_tennis.services.draw_sync import sync_draws, upcoming_tournament_ids
from fantasy_tennis.services.schedule_sync import parse_schedule_date, sync_daily_schedule

TODAY = date(2025, 5, 1)
ROME = "sr:season:118283"


def _draw(*matches):
    return {"tournament": {"id": ROME}, "draw": {"matches": list(matches)}}


FULL_MATCH = {
    "id": "sr:match:1",
    "round": "round_of_64",
    "scheduled": "2025-05-08T09:00:00+00:00",
    "status": "not_started",
    "competitors": [
        {"id": "sr:competitor:1", "name": "Sinner, Jannik"},
        {"id": "sr:competitor:2", "name": "Navone, Mariano"},
    ],
}
HALF_SEEDED = {
    "id": "sr:match:2",
    "round": "round_of_32",
    "competitors": [{"id": "sr:competitor:1", "name": "Sinner, Jannik"}, None],
}
NO_ID = {"round": "round_of_32", "competitors": []}

INFO = {"tournament": {"id": ROME, "name": "Rome", "surface": "red_clay", "start_date": "2025-05-07", "end_date": "2025-05-18"}}


def _seed_tournament(db_session):
    tournament = Tournament(
        sportradar_season_id=ROME,
        sportradar_competition_id="sr:competition:2555",
        name="ATP Rome",
        category="atp_1000",
        surface="clay",
        year=2025,
        status="upcoming",
    )
    db_session.add(tournament)
    db_session.flush()
    return tournament


class TestSyncDraws:

    def test_single_tournament(self, db_session, sportradar):
        tournament = _seed_tournament(db_session)
        client, _ = sportradar({
            f"/tournaments/{ROME}/info.json": INFO,
            f"/tournaments/{ROME}/draw.json": _draw(FULL_MATCH, HALF_SEEDED, NO_ID),
        })

        result = asyncio.run(sync_draws(db_session, client, tournament_id=ROME, today=TODAY))

        assert result["tournaments_processed"] == 1
        assert result["total_matches"] == 2
        assert result["inserted"] == 2
        assert result["tournaments"][0]["surface"] == "red_clay"

        half = db_session.get(Match, "sr:match:2")
        assert half.player1_id == "sr:competitor:1"
        assert half.player2_id is None
        assert half.player2_name is None
        assert half.tournament_id == tournament.id
        assert half.surface == "clay"

        full = db_session.get(Match, "sr:match:1")
        assert full.status == "scheduled"
        assert full.player2_name == "Navone, Mariano"

    def test_second_run_skips(self, db_session, sportradar):
        client, _ = sportradar({
            f"/tournaments/{ROME}/info.json": INFO,
            f"/tournaments/{ROME}/draw.json": _draw(FULL_MATCH, HALF_SEEDED),
        })
        asyncio.run(sync_draws(db_session, client, tournament_id=ROME, today=TODAY))
        db_session.commit()

        result = asyncio.run(sync_draws(db_session, client, tournament_id=ROME, today=TODAY))
        assert result["skipped"] == 2
        assert result["inserted"] == 0

    def test_filled_slot_updates_match(self, db_session, sportradar):
        client, _ = sportradar({
            f"/tournaments/{ROME}/info.json": INFO,
            f"/tournaments/{ROME}/draw.json": _draw(HALF_SEEDED),
        })
        asyncio.run(sync_draws(db_session, client, tournament_id=ROME, today=TODAY))

        filled = dict(HALF_SEEDED, competitors=[
            {"id": "sr:competitor:1", "name": "Sinner, Jannik"},
            {"id": "sr:competitor:8", "name": "Tien, Learner"},
        ])
        client, _ = sportradar({
            f"/tournaments/{ROME}/info.json": INFO,
            f"/tournaments/{ROME}/draw.json": _draw(filled),
        })
        result = asyncio.run(sync_draws(db_session, client, tournament_id=ROME, today=TODAY))

        assert result["updated"] == 1
        assert db_session.get(Match, "sr:match:2").player2_name == "Tien, Learner"

    def test_unlinked_match_keeps_provider_id(self, db_session, sportradar):
        client, _ = sportradar({
            f"/tournaments/{ROME}/info.json": INFO,
            f"/tournaments/{ROME}/draw.json": _draw(FULL_MATCH),
        })
        asyncio.run(sync_draws(db_session, client, tournament_id=ROME, today=TODAY))

        match = db_session.get(Match, "sr:match:1")
        assert match.tournament_id is None
        assert match.sportradar_tournament_id == ROME

    def test_upcoming_tournaments(self, db_session, sportradar):
        other = "sr:season:2"
        client, api = sportradar({
            "/tournaments.json": {"tournaments": [
                {"id": "sr:season:old", "start_date": "2025-04-01", "status": "closed"},
                {"id": other, "start_date": "2025-05-20"},
                {"id": ROME, "start_date": "2025-05-07", "status": "not_started"},
            ]},
            f"/tournaments/{ROME}/info.json": INFO,
            f"/tournaments/{ROME}/draw.json": _draw(FULL_MATCH),
            f"/tournaments/{other}/info.json": {"tournament": {"id": other}},
            f"/tournaments/{other}/draw.json": 404,
        })

        result = asyncio.run(sync_draws(db_session, client, limit=5, today=TODAY))

        assert result["tournaments_processed"] == 1
        assert result["errorCount"] == 1
        assert api.requests[1] == f"/tournaments/{ROME}/info.json"

    def test_upcoming_ids_limit_and_order(self):
        payload = {"tournaments": [
            {"id": "c", "start_date": "2025-06-01"},
            {"id": "a", "start_date": "2025-05-01"},
            {"id": "b", "start_date": "2025-05-15", "status": "scheduled"},
            {"id": "live", "start_date": "2025-05-02", "status": "live"},
        ]}
        assert upcoming_tournament_ids(payload, TODAY, 2) == ["a", "b"]

    def test_invalid_limit(self, db_session, sportradar):
        client, _ = sportradar({})
        with pytest.raises(InputValidationError):
            asyncio.run(sync_draws(db_session, client, limit=0, today=TODAY))


SUMMARIES = {
    "summaries": [
        {
            "sport_event": {
                "id": "sr:match:10",
                "start_time": "2025-05-10T11:00:00+00:00",
                "sport_event_context": {
                    "competition": {"id": "sr:competition:2555"},
                    "season": {"id": ROME},
                    "round": {"name": "round_of_32"},
                },
                "competitors": [
                    {"id": "sr:competitor:1", "name": "Sinner, Jannik"},
                    {"id": "sr:competitor:7", "name": "De Jong, Jesper"},
                ],
            },
            "sport_event_status": {"status": "closed", "winner_id": "sr:competitor:1", "score": "6-4 6-2"},
        },
        {
            "sport_event": {
                "id": "sr:match:11",
                "sport_event_context": {"competition": {"id": "sr:competition:2555"}},
                "competitors": [],
            },
            "sport_event_status": {"status": "not_started"},
        },
    ]
}


class TestDailySchedule:

    def test_upserts_matches(self, db_session, sportradar):
        tournament = _seed_tournament(db_session)
        client, api = sportradar({"/schedules/2025-05-10/summaries.json": SUMMARIES})

        result = asyncio.run(sync_daily_schedule(db_session, client, day="2025-05-10"))

        assert result["date"] == "2025-05-10"
        assert result["total_matches"] == 2
        assert result["inserted"] == 2
        assert api.requests == ["/schedules/2025-05-10/summaries.json"]

        played = db_session.get(Match, "sr:match:10")
        assert played.status == "completed"
        assert played.winner_id == "sr:competitor:1"
        assert played.score == "6-4 6-2"
        assert played.tournament_id == tournament.id

        # Linked through the competition id when no season is given
        assert db_session.get(Match, "sr:match:11").tournament_id == tournament.id

    def test_bad_date(self, db_session, sportradar):
        client, api = sportradar({})
        with pytest.raises(InputValidationError):
            asyncio.run(sync_daily_schedule(db_session, client, day="10/05/2025"))
        assert api.requests == []

    def test_parse_schedule_date(self):
        assert parse_schedule_date("2025-05-10") == date(2025, 5, 10)
        assert parse_schedule_date(date(2025, 1, 1)) == date(2025, 1, 1)
        assert parse_schedule_date(None) == date.today()
