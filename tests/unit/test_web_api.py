"""
Tests for the HTTP layer.

Every external seam is replaced through FastAPI dependency overrides: the
database session comes from the in-memory SQLite fixture, Sportradar from a
mocked transport, and token verification from a dictionary of known users.
"""

import runpy
from datetime import date

import pytest
import uvicorn
from fastapi.testclient import TestClient

from fantasy_tennis.config import settings
from fantasy_tennis.db.models import Player, Tournament
from fantasy_tennis.db.session import get_db
from fantasy_tennis.errors import UpstreamError
from fantasy_tennis.web.auth import AuthorizationGate, AuthUser, BootstrapPolicy
from fantasy_tennis.web.main import (
    app,
    get_authorization_gate,
    get_rankings_fallback,
    get_sportradar_client,
)

ADMIN = {"Authorization": "Bearer admin-token"}
PLAYER = {"Authorization": "Bearer user-token"}

RANKINGS = {
    "rankings": [{
        "name": "ATP",
        "competitor_rankings": [
            {"rank": 1, "points": 9930, "competitor": {"id": "sr:competitor:1", "name": "Sinner, Jannik", "country_code": "ITA"}},
            {"rank": 2, "points": 8850, "competitor": {"id": "sr:competitor:2", "name": "Alcaraz, Carlos", "country_code": "ESP"}},
        ],
    }]
}


class DictVerifier:
    users = {
        "admin-token": AuthUser(id="u1", email="admin@example.com"),
        "user-token": AuthUser(id="u2", email="player@example.com"),
    }

    async def verify(self, token):
        return self.users.get(token)


@pytest.fixture
def api(db_session, sportradar):
    """
    Wire the app to test doubles.

    Usage:
        client, sportradar_api = api({"/rankings.json": payload})
    """
    def _make(routes=None, setup_token=None):
        client, fake_api = sportradar(routes or {})

        def override_db():
            yield db_session

        async def override_client():
            yield client

        async def override_fallback():
            yield None

        gate = AuthorizationGate(DictVerifier(), ["admin@example.com"], BootstrapPolicy(setup_token))
        app.dependency_overrides[get_db] = override_db
        app.dependency_overrides[get_sportradar_client] = override_client
        app.dependency_overrides[get_rankings_fallback] = override_fallback
        app.dependency_overrides[get_authorization_gate] = lambda: gate
        return TestClient(app), fake_api

    yield _make
    app.dependency_overrides.clear()


class TestAuthorization:

    def test_missing_token(self, api):
        client, fake_api = api({"/rankings.json": RANKINGS})
        response = client.post("/functions/v1/fetch-rankings")

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}
        assert fake_api.requests == []

    def test_unknown_token(self, api):
        client, _ = api()
        response = client.post("/functions/v1/fetch-daily-schedule", headers={"Authorization": "Bearer forged"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid authentication token"}

    def test_auth_outage_is_a_server_error(self, api):
        class DownVerifier:
            async def verify(self, token):
                raise UpstreamError("Authentication service unavailable")

        client, fake_api = api({"/rankings.json": RANKINGS})
        app.dependency_overrides[get_authorization_gate] = lambda: AuthorizationGate(DownVerifier(), ["admin@example.com"])

        response = client.post("/functions/v1/fetch-rankings", headers=ADMIN)
        assert response.status_code == 500
        assert response.json() == {"error": "Authentication service unavailable"}
        assert fake_api.requests == []

    def test_non_admin(self, api):
        client, fake_api = api({"/rankings.json": RANKINGS})
        response = client.post("/functions/v1/fetch-rankings", headers=PLAYER)

        assert response.status_code == 403
        assert response.json() == {"error": "Admin access required"}
        assert fake_api.requests == []

    def test_bootstrap_seeds_empty_players_table(self, api, db_session):
        client, _ = api({"/rankings.json": RANKINGS}, setup_token="s3cret")
        response = client.post(
            "/functions/v1/fetch-rankings",
            headers={**PLAYER, "X-Setup-Token": "s3cret"},
        )

        assert response.status_code == 200
        assert db_session.query(Player).count() == 2

    def test_bootstrap_refused_once_players_exist(self, api, db_session):
        db_session.add(Player(name="Sinner, Jannik", country="ITA", ranking=1, live_ranking=1, points=9930, price=17))
        db_session.commit()
        client, _ = api({"/rankings.json": RANKINGS}, setup_token="s3cret")

        response = client.post(
            "/functions/v1/fetch-rankings",
            headers={**PLAYER, "X-Setup-Token": "s3cret"},
        )
        assert response.status_code == 403


class TestIngestionEndpoints:

    def test_fetch_rankings(self, api, db_session):
        client, _ = api({"/rankings.json": RANKINGS})
        response = client.post("/functions/v1/fetch-rankings", headers=ADMIN)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["inserted"] == 2
        assert db_session.query(Player).count() == 2

    def test_rate_limit_reaches_caller(self, api):
        client, fake_api = api({"/rankings.json": 429})
        response = client.post("/functions/v1/fetch-rankings", headers=ADMIN)

        assert response.status_code == 429
        assert "rate limit" in response.json()["error"]
        assert fake_api.count("/rankings.json") == 3

    def test_invalid_year(self, api):
        client, fake_api = api()
        response = client.post("/functions/v1/sync-tournaments", headers=ADMIN, json={"year": 1800})

        assert response.status_code == 400
        assert "error" in response.json()
        assert fake_api.requests == []

    def test_malformed_body_field(self, api):
        client, _ = api()
        response = client.post("/functions/v1/sync-tournaments", headers=ADMIN, json={"year": "next"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("year:")

    def test_missing_tournament_id(self, api):
        client, _ = api()
        response = client.post("/functions/v1/fetch-tournament-players", headers=ADMIN, json={})
        assert response.status_code == 400

    def test_daily_schedule_date_alias(self, api):
        client, fake_api = api({"/schedules/2025-05-10/summaries.json": {"summaries": []}})
        response = client.post("/functions/v1/fetch-daily-schedule", headers=ADMIN, json={"date": "2025-05-10"})

        assert response.status_code == 200
        assert response.json()["date"] == "2025-05-10"
        assert fake_api.requests == ["/schedules/2025-05-10/summaries.json"]

    def test_preflight(self, api):
        client, _ = api()
        response = client.options("/functions/v1/fetch-rankings")
        assert response.status_code == 200
        assert response.text == "ok"


class TestReadApi:

    def test_health(self, api):
        client, _ = api()
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_players_ordered_by_ranking(self, api, db_session):
        db_session.add_all([
            Player(name="Unranked, Player", country="FRA", ranking=None, live_ranking=None, points=0, price=2),
            Player(name="Alcaraz, Carlos", country="ESP", ranking=2, live_ranking=2, points=8850, price=16),
            Player(name="Sinner, Jannik", country="ITA", ranking=1, live_ranking=1, points=9930, price=17),
        ])
        db_session.commit()
        client, _ = api()

        response = client.get("/api/players")
        assert [p["name"] for p in response.json()] == ["Sinner, Jannik", "Alcaraz, Carlos", "Unranked, Player"]

        response = client.get("/api/players", params={"limit": 1})
        assert len(response.json()) == 1

    def test_players_limit_bounds(self, api):
        client, _ = api()
        assert client.get("/api/players", params={"limit": 0}).status_code == 400

    def test_tournaments_refresh_stale_status(self, api, db_session):
        db_session.add_all([
            Tournament(
                sportradar_season_id="sr:season:1",
                name="Old Open",
                category="atp_250",
                surface="hard",
                start_date=date(2020, 1, 1),
                end_date=date(2020, 1, 7),
                year=2020,
                status="upcoming",
            ),
            Tournament(
                sportradar_season_id="sr:season:2",
                name="Future Open",
                category="atp_500",
                surface="grass",
                start_date=date(2999, 6, 1),
                end_date=date(2999, 6, 7),
                year=2999,
                status="upcoming",
            ),
        ])
        db_session.commit()
        client, _ = api()

        response = client.get("/api/tournaments")
        assert [(t["name"], t["status"]) for t in response.json()] == [
            ("Old Open", "completed"),
            ("Future Open", "upcoming"),
        ]

        response = client.get("/api/tournaments", params={"status": "upcoming"})
        assert [t["name"] for t in response.json()] == ["Future Open"]


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
def test_module_launcher_binds_configured_address(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))
    monkeypatch.setattr(settings, "api_host", "127.0.0.1")
    monkeypatch.setattr(settings, "api_port", 9001)

    runpy.run_module("fantasy_tennis.web.main", run_name="__main__")

    assert calls == [("fantasy_tennis.web.main:app", {"host": "127.0.0.1", "port": 9001})]
