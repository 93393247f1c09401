"""Unit tests for entry list ingestion into player_schedules."""

import asyncio
from datetime import date

import pytest

from fantasy_tennis.db.models import Player, PlayerSchedule, Tournament
from fantasy_tennis.errors import InputValidationError
from fantasy_tennis.services.entry_list_sync import sync_entry_list

TODAY = date(2025, 5, 1)
COMPETITION = "sr:competition:2555"
SEASON = "sr:season:118283"

SEASONS = {
    "competition": {
        "id": COMPETITION,
        "name": "ATP Rome, Italy Men Singles",
        "gender": "men",
        "level": "atp_1000",
        "category": {"id": "sr:category:3", "name": "ATP"},
    },
    "seasons": [
        {"id": "sr:season:106011", "name": "Rome 2024", "year": "2024", "start_date": "2024-05-08", "end_date": "2024-05-19"},
        {"id": SEASON, "name": "Rome 2025", "year": "2025", "start_date": "2025-05-07", "end_date": "2025-05-18"},
    ],
}

COMPETITORS = {
    "competitors": [
        {"id": "sr:competitor:1", "name": "Sinner, Jannik", "country_code": "ITA", "seed": 1, "ranking": 1},
        {"id": "sr:competitor:2", "name": "Alcaraz, Carlos", "country_code": "ESP", "seed": 2},
        {"id": "sr:competitor:3", "name": "Qualifier, Some", "country_code": "ARG", "qualifier_type": "Q"},
        {"id": "sr:competitor:4", "name": "Team / Pair", "type": "team"},
    ]
}


def _routes(**overrides):
    routes = {
        f"/competitions/{COMPETITION}/seasons.json": SEASONS,
        f"/seasons/{SEASON}/competitors.json": COMPETITORS,
    }
    routes.update(overrides)
    return routes


class TestSyncEntryList:

    def test_creates_tournament_players_and_schedules(self, db_session, sportradar):
        client, _ = sportradar(_routes())
        result = asyncio.run(sync_entry_list(db_session, client, tournament_id=COMPETITION, year=2025, today=TODAY))
        db_session.commit()

        assert result["tournament"]["created"] is True
        assert result["season"]["id"] == SEASON
        assert result["players_found"] == 3
        assert result["players_created"] == 3
        assert result["inserted"] == 3

        tournament = db_session.query(Tournament).one()
        assert tournament.sportradar_season_id == SEASON
        assert tournament.category == "atp_1000"
        assert tournament.status == "upcoming"

        schedules = {s.player.sportradar_competitor_id: s for s in db_session.query(PlayerSchedule).all()}
        assert schedules["sr:competitor:1"].seed_number == 1
        assert schedules["sr:competitor:1"].entry_type == "main_draw"
        assert schedules["sr:competitor:3"].entry_type == "qualifying"
        assert all(s.status == "confirmed" for s in schedules.values())

        sinner = db_session.query(Player).filter_by(sportradar_competitor_id="sr:competitor:1").one()
        assert sinner.ranking == 1
        assert sinner.price == 17

    def test_rerun_is_idempotent(self, db_session, sportradar):
        client, _ = sportradar(_routes())
        asyncio.run(sync_entry_list(db_session, client, tournament_id=COMPETITION, year=2025, today=TODAY))
        db_session.commit()

        result = asyncio.run(sync_entry_list(db_session, client, tournament_id=COMPETITION, year=2025, today=TODAY))

        assert result["tournament"]["created"] is False
        assert result["players_created"] == 0
        assert result["skipped"] == 3
        assert db_session.query(PlayerSchedule).count() == 3
        assert db_session.query(Player).count() == 3

    def test_existing_ranked_player_is_not_reranked(self, db_session, sportradar):
        db_session.add(Player(
            sportradar_competitor_id="sr:competitor:2",
            name="Alcaraz, Carlos",
            country="ESP",
            ranking=2,
            live_ranking=2,
            points=8850,
            price=16,
        ))
        db_session.flush()
        client, _ = sportradar(_routes())

        result = asyncio.run(sync_entry_list(db_session, client, tournament_id=COMPETITION, year=2025, today=TODAY))

        assert result["players_created"] == 2
        alcaraz = db_session.query(Player).filter_by(sportradar_competitor_id="sr:competitor:2").one()
        assert alcaraz.ranking == 2
        assert alcaraz.points == 8850

    def test_uses_existing_tournament(self, db_session, sportradar):
        db_session.add(Tournament(
            sportradar_season_id=SEASON,
            sportradar_competition_id=COMPETITION,
            name="Internazionali BNL d'Italia",
            category="atp_1000",
            surface="clay",
            status="upcoming",
        ))
        db_session.flush()
        client, _ = sportradar(_routes())

        result = asyncio.run(sync_entry_list(db_session, client, tournament_id=COMPETITION, year=2025, today=TODAY))

        assert result["tournament"]["created"] is False
        assert result["tournament"]["name"] == "Internazionali BNL d'Italia"
        assert db_session.query(Tournament).count() == 1


class TestValidation:

    def test_missing_tournament_id(self, db_session, sportradar):
        client, api = sportradar({})
        with pytest.raises(InputValidationError):
            asyncio.run(sync_entry_list(db_session, client, tournament_id=None, today=TODAY))
        assert api.requests == []

    def test_no_season_for_year(self, db_session, sportradar):
        client, _ = sportradar(_routes())
        with pytest.raises(InputValidationError) as exc_info:
            asyncio.run(sync_entry_list(db_session, client, tournament_id=COMPETITION, year=2023, today=TODAY))
        assert "2024, 2025" in exc_info.value.message

    def test_no_seasons(self, db_session, sportradar):
        client, _ = sportradar(_routes(**{f"/competitions/{COMPETITION}/seasons.json": {"seasons": []}}))
        with pytest.raises(InputValidationError):
            asyncio.run(sync_entry_list(db_session, client, tournament_id=COMPETITION, year=2025, today=TODAY))
