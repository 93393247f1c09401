"""Unit tests for engine construction."""

from fantasy_tennis.db.session import get_engine, normalize_database_url


def test_supabase_scheme_is_rewritten():
    assert normalize_database_url("postgres://u:p@db.example.co:5432/postgres") == (
        "postgresql://u:p@db.example.co:5432/postgres"
    )


def test_other_urls_untouched():
    assert normalize_database_url("postgresql+psycopg2://u@h/db") == "postgresql+psycopg2://u@h/db"
    assert normalize_database_url("sqlite://") == "sqlite://"


def test_sqlite_engine_skips_pool_options():
    engine = get_engine("sqlite://")
    try:
        assert engine.dialect.name == "sqlite"
    finally:
        engine.dispose()
