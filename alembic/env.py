"""
Alembic migration environment for the fantasy tennis schema.

The database URL comes from DATABASE_URL (via fantasy_tennis.config), never
from alembic.ini. Autogenerate compares against fantasy_tennis.db.models.

The hosted database also carries tables owned by the web application
(profiles, fantasy teams, ...). Only tables present in our metadata are
considered by autogenerate, so it never proposes dropping theirs.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

# Models must be imported before Base.metadata is read
from fantasy_tennis.config import settings
from fantasy_tennis.db.models import Base
from fantasy_tennis.db.session import normalize_database_url

config = context.config
# configparser treats % as interpolation; URL-encoded passwords contain it
config.set_main_option("sqlalchemy.url", normalize_database_url(settings.database_url).replace("%", "%%"))

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def include_object(object, name, type_, reflected, compare_to):
    """Ignore reflected tables we do not model."""
    if type_ == "table" and reflected and compare_to is None:
        return False
    return True


def process_revision_directives(context, revision, directives):
    """Skip writing a revision file when autogenerate finds nothing."""
    if getattr(config.cmd_opts, "autogenerate", False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []


def run_migrations_offline() -> None:
    """
    Emit SQL instead of connecting.

    Usage:
        alembic upgrade head --sql > migration.sql
    """
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            include_object=include_object,
            process_revision_directives=process_revision_directives,
            # SQLite needs batch mode for ALTER TABLE
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
