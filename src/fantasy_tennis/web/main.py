"""
HTTP surface for the ingestion orchestrators.

The five ``/functions/v1/*`` endpoints are admin-only writes; ``/api/*`` are
read-only views used by the fantasy frontend. Each write endpoint runs one
orchestrator and commits once at the end, so a failed invocation leaves the
database as it was.

Run with:
    uvicorn fantasy_tennis.web.main:app --reload

or bind to API_HOST and API_PORT from settings with:
    python -m fantasy_tennis.web.main
"""

import logging
from contextlib import asynccontextmanager
from datetime import date
from functools import lru_cache
from typing import Any, AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from fantasy_tennis import __version__
from fantasy_tennis.config import settings
from fantasy_tennis.db.models import Player, Tournament
from fantasy_tennis.db.session import get_db
from fantasy_tennis.errors import IngestionError
from fantasy_tennis.services import (
    refresh_tournament_statuses,
    sync_daily_schedule,
    sync_draws,
    sync_entry_list,
    sync_rankings,
    sync_tournaments,
)
from fantasy_tennis.services.rankings_sync import RankingsSource
from fantasy_tennis.sportradar.atp_site import AtpRankingsSource
from fantasy_tennis.sportradar.client import SportradarClient
from fantasy_tennis.web.auth import AuthorizationGate, AuthUser, BootstrapPolicy, SupabaseTokenVerifier

logger = logging.getLogger(__name__)

SETUP_TOKEN_HEADER = "X-Setup-Token"
CORS_HEADERS = ["authorization", "x-client-info", "apikey", "content-type", "x-setup-token"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Fantasy tennis ingestion API %s starting", __version__)
    yield


app = FastAPI(title="Fantasy Tennis Ingestion", version=__version__, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=CORS_HEADERS,
)


class SyncRequest(BaseModel):
    """Request body shared by the ingestion endpoints; every field is optional."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tournament_id: Optional[str] = None
    day: Optional[str] = Field(default=None, alias="date")
    year: Optional[int] = None
    batch_size: Optional[int] = None
    offset: Optional[int] = None
    max_batches: Optional[int] = None
    limit: Optional[int] = None
    resume_from: Optional[str] = Field(default=None, alias="resumeFrom")


# ============================================================================
# Dependencies (overridden in tests)
# ============================================================================

async def get_sportradar_client() -> AsyncGenerator[SportradarClient, None]:
    client = SportradarClient.from_settings()
    try:
        yield client
    finally:
        await client.close()


async def get_rankings_fallback() -> AsyncGenerator[Optional[RankingsSource], None]:
    if not settings.atp_site_fallback:
        yield None
        return
    source = AtpRankingsSource()
    try:
        yield source
    finally:
        await source.close()


@lru_cache
def get_authorization_gate() -> AuthorizationGate:
    verifier = SupabaseTokenVerifier(settings.supabase_url, settings.supabase_anon_key)
    return AuthorizationGate(
        verifier,
        settings.admin_email_list,
        BootstrapPolicy(settings.bootstrap_setup_token),
    )


def _table_is_empty(db: Session, model: type) -> bool:
    return db.execute(select(model.id).limit(1)).first() is None


def require_admin(bootstrap_model: Optional[type] = None):
    """
    Dependency factory guarding an ingestion endpoint.

    ``bootstrap_model`` names the table a non-admin may seed with the setup
    token while it is still empty.

    Usage:
        @app.post("/functions/v1/fetch-rankings")
        async def fetch_rankings(user: AuthUser = Depends(require_admin(Player))): ...
    """
    async def check_admin(
        request: Request,
        db: Session = Depends(get_db),
        gate: AuthorizationGate = Depends(get_authorization_gate),
    ) -> AuthUser:
        setup_token = request.headers.get(SETUP_TOKEN_HEADER)
        table_empty = False
        # Only look at the table when a bootstrap grant is actually possible
        if bootstrap_model is not None and setup_token and gate.bootstrap_policy.enabled:
            table_empty = _table_is_empty(db, bootstrap_model)
        user = await gate.authorize(
            request.headers.get("Authorization"),
            target_table_empty=table_empty,
            setup_token=setup_token,
        )
        logger.info("%s %s authorized for %s", request.method, request.url.path, user.email)
        return user

    return check_admin


# ============================================================================
# Error handlers
# ============================================================================

@app.exception_handler(IngestionError)
async def ingestion_error_handler(request: Request, exc: IngestionError):
    if exc.status_code >= 500:
        logger.error("%s failed: %s", request.url.path, exc.message)
    else:
        logger.warning("%s rejected (%d): %s", request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ============================================================================
# Ingestion endpoints
# ============================================================================

@app.options("/functions/v1/{function_name}")
async def functions_preflight(function_name: str):
    return PlainTextResponse("ok")


@app.post("/functions/v1/fetch-rankings")
async def fetch_rankings(
    user: AuthUser = Depends(require_admin(Player)),
    db: Session = Depends(get_db),
    client: SportradarClient = Depends(get_sportradar_client),
    fallback: Optional[RankingsSource] = Depends(get_rankings_fallback),
) -> dict[str, Any]:
    result = await sync_rankings(db, client, fallback_source=fallback)
    db.commit()
    return result


@app.post("/functions/v1/sync-tournaments")
async def sync_tournaments_endpoint(
    body: Optional[SyncRequest] = None,
    user: AuthUser = Depends(require_admin(Tournament)),
    db: Session = Depends(get_db),
    client: SportradarClient = Depends(get_sportradar_client),
) -> dict[str, Any]:
    body = body or SyncRequest()
    result = await sync_tournaments(
        db,
        client,
        year=body.year,
        batch_size=body.batch_size,
        resume_from=body.resume_from,
        offset=body.offset,
        max_batches=body.max_batches,
    )
    db.commit()
    return result


@app.post("/functions/v1/fetch-tournament-draws")
async def fetch_tournament_draws(
    body: Optional[SyncRequest] = None,
    user: AuthUser = Depends(require_admin()),
    db: Session = Depends(get_db),
    client: SportradarClient = Depends(get_sportradar_client),
) -> dict[str, Any]:
    body = body or SyncRequest()
    result = await sync_draws(db, client, tournament_id=body.tournament_id, limit=body.limit)
    db.commit()
    return result


@app.post("/functions/v1/fetch-daily-schedule")
async def fetch_daily_schedule(
    body: Optional[SyncRequest] = None,
    user: AuthUser = Depends(require_admin()),
    db: Session = Depends(get_db),
    client: SportradarClient = Depends(get_sportradar_client),
) -> dict[str, Any]:
    body = body or SyncRequest()
    result = await sync_daily_schedule(db, client, day=body.day)
    db.commit()
    return result


@app.post("/functions/v1/fetch-tournament-players")
async def fetch_tournament_players(
    body: Optional[SyncRequest] = None,
    user: AuthUser = Depends(require_admin()),
    db: Session = Depends(get_db),
    client: SportradarClient = Depends(get_sportradar_client),
) -> dict[str, Any]:
    body = body or SyncRequest()
    result = await sync_entry_list(db, client, tournament_id=body.tournament_id, year=body.year)
    db.commit()
    return result


# ============================================================================
# Read API
# ============================================================================

def _tournament_json(tournament: Tournament) -> dict[str, Any]:
    return {
        "id": tournament.id,
        "sportradar_season_id": tournament.sportradar_season_id,
        "sportradar_competition_id": tournament.sportradar_competition_id,
        "name": tournament.name,
        "category": tournament.category,
        "surface": tournament.surface,
        "location": tournament.location,
        "start_date": tournament.start_date.isoformat() if tournament.start_date else None,
        "end_date": tournament.end_date.isoformat() if tournament.end_date else None,
        "year": tournament.year,
        "status": tournament.status,
        "prize_money": tournament.prize_money,
        "prize_currency": tournament.prize_currency,
    }


@app.get("/api/tournaments")
def list_tournaments(
    year: Optional[int] = Query(default=None),
    status: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    """Tournaments ordered by start date, with statuses brought up to date first."""
    if refresh_tournament_statuses(db, date.today()):
        db.commit()

    query = select(Tournament)
    if year is not None:
        query = query.where(Tournament.year == year)
    if status:
        query = query.where(Tournament.status == status)
    query = query.order_by(Tournament.start_date.is_(None), Tournament.start_date, Tournament.id)
    return [_tournament_json(t) for t in db.execute(query).scalars()]


@app.get("/api/players")
def list_players(
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    query = (
        select(Player)
        .order_by(Player.ranking.is_(None), Player.ranking, Player.name)
        .limit(limit)
    )
    return [
        {
            "id": p.id,
            "name": p.name,
            "country": p.country,
            "ranking": p.ranking,
            "live_ranking": p.live_ranking,
            "points": p.points,
            "price": p.price,
        }
        for p in db.execute(query).scalars()
    ]


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fantasy_tennis.web.main:app", host=settings.api_host, port=settings.api_port)
