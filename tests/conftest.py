"""
Pytest configuration and fixtures.

This file is automatically loaded by pytest and provides shared fixtures
for all tests:
- db_session: SQLite in-memory session with working SAVEPOINTs
- sportradar: factory for a SportradarClient backed by httpx.MockTransport
"""

from typing import Any, Callable

import httpx
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fantasy_tennis.db.models import Base
from fantasy_tennis.sportradar.client import FixedIntervalLimiter, SportradarClient

SPORTRADAR_BASE = "https://sportradar.test/tennis/trial/v3/en"


@pytest.fixture
def test_engine():
    """
    In-memory SQLite engine shared across connections.

    pysqlite's own transaction handling breaks SAVEPOINT, which every
    orchestrator uses per entity; the event hooks hand BEGIN back to
    SQLAlchemy.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(bind=test_engine, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    """A session per test; the database is thrown away afterwards."""
    session = session_factory()
    yield session
    session.close()


class FakeSportradar:
    """
    Route table for a mocked Sportradar API.

    Routes map an endpoint path (as passed to SportradarClient.get_json /
    get_xml) to a dict or list (JSON body), str or bytes (raw body), an int
    (empty response with that status), an httpx.Response, or a callable
    taking the request.
    """

    def __init__(self, routes: dict[str, Any]):
        self.routes = dict(routes)
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        prefix = httpx.URL(SPORTRADAR_BASE).path
        endpoint = path[len(prefix):] if path.startswith(prefix) else path
        self.requests.append(endpoint)

        route = self.routes.get(endpoint)
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        if isinstance(route, int):
            return httpx.Response(route)
        if isinstance(route, (bytes, str)):
            return httpx.Response(200, content=route)
        return httpx.Response(200, json=route)

    def count(self, endpoint: str) -> int:
        return self.requests.count(endpoint)


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def sportradar(fake_sleep) -> Callable[..., tuple[SportradarClient, FakeSportradar]]:
    """
    Build a client over a route table.

    Usage:
        client, api = sportradar({"/rankings.json": payload})
    """
    def _make(routes: dict[str, Any], **kwargs: Any) -> tuple[SportradarClient, FakeSportradar]:
        api = FakeSportradar(routes)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(api))
        client = SportradarClient(
            "test-key",
            base_url=SPORTRADAR_BASE,
            limiter=FixedIntervalLimiter(0, sleep=fake_sleep),
            http_client=http_client,
            **kwargs,
        )
        return client, api

    return _make
