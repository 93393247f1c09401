"""Initial schema: players, tournaments, matches, schedules, sync state

Revision ID: 3c1e9a7d5b20
Revises:
Create Date: 2026-10-01 12:00:00.000000+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# Revision identifiers, used by Alembic
revision: str = '3c1e9a7d5b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        'players',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sportradar_competitor_id', sa.String(length=50), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('country', sa.String(length=3), nullable=False),
        sa.Column('ranking', sa.Integer(), nullable=True),
        sa.Column('live_ranking', sa.Integer(), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('sportradar_competitor_id'),
    )
    op.create_index('idx_players_ranking', 'players', ['ranking'])
    op.create_index('idx_players_name_country', 'players', ['name', 'country'])

    op.create_table(
        'tournaments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sportradar_season_id', sa.String(length=50), nullable=True),
        sa.Column('sportradar_competition_id', sa.String(length=50), nullable=True),
        sa.Column('parent_competition_id', sa.String(length=50), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('surface', sa.String(length=10), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('venue', sa.String(length=255), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('prize_money', sa.BigInteger(), nullable=True),
        sa.Column('prize_currency', sa.String(length=3), nullable=True),
        sa.Column('number_of_competitors', sa.Integer(), nullable=True),
        sa.Column('number_of_qualified_competitors', sa.Integer(), nullable=True),
        sa.Column('number_of_scheduled_matches', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('sportradar_season_id'),
        sa.CheckConstraint(
            "category IN ('grand_slam', 'atp_1000', 'atp_500', 'atp_250', 'finals', 'challenger')",
            name='ck_tournaments_category',
        ),
        sa.CheckConstraint(
            "surface IN ('hard', 'clay', 'grass', 'carpet')",
            name='ck_tournaments_surface',
        ),
        sa.CheckConstraint(
            "status IN ('upcoming', 'ongoing', 'completed')",
            name='ck_tournaments_status',
        ),
    )
    op.create_index('idx_tournaments_start_date', 'tournaments', ['start_date'])
    op.create_index('idx_tournaments_competition', 'tournaments', ['sportradar_competition_id'])

    op.create_table(
        'tournament_matches',
        sa.Column('id', sa.String(length=50), primary_key=True),
        sa.Column(
            'tournament_id',
            sa.Integer(),
            sa.ForeignKey('tournaments.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('sportradar_tournament_id', sa.String(length=50), nullable=True),
        sa.Column('round', sa.String(length=50), nullable=True),
        sa.Column('player1_id', sa.String(length=50), nullable=True),
        sa.Column('player1_name', sa.String(length=255), nullable=True),
        sa.Column('player2_id', sa.String(length=50), nullable=True),
        sa.Column('player2_name', sa.String(length=255), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('winner_id', sa.String(length=50), nullable=True),
        sa.Column('score', sa.String(length=100), nullable=True),
        sa.Column('surface', sa.String(length=10), nullable=True),
        sa.Column('best_of', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "status IN ('scheduled', 'in_progress', 'completed', 'cancelled')",
            name='ck_tournament_matches_status',
        ),
    )
    op.create_index('idx_tournament_matches_tournament', 'tournament_matches', ['tournament_id'])
    op.create_index('idx_tournament_matches_scheduled', 'tournament_matches', ['scheduled_at'])

    op.create_table(
        'player_schedules',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'player_id',
            sa.Integer(),
            sa.ForeignKey('players.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'tournament_id',
            sa.Integer(),
            sa.ForeignKey('tournaments.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('entry_type', sa.String(length=20), nullable=False),
        sa.Column('seed_number', sa.Integer(), nullable=True),
        sa.Column('eliminated_round', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('player_id', 'tournament_id', name='uq_player_schedules_player_tournament'),
    )

    op.create_table(
        'sportradar_sync_state',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('last_competition_id', sa.String(length=50), nullable=True),
        sa.Column('last_sync_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('sportradar_sync_state')
    op.drop_table('player_schedules')
    op.drop_index('idx_tournament_matches_scheduled', table_name='tournament_matches')
    op.drop_index('idx_tournament_matches_tournament', table_name='tournament_matches')
    op.drop_table('tournament_matches')
    op.drop_index('idx_tournaments_competition', table_name='tournaments')
    op.drop_index('idx_tournaments_start_date', table_name='tournaments')
    op.drop_table('tournaments')
    op.drop_index('idx_players_name_country', table_name='players')
    op.drop_index('idx_players_ranking', table_name='players')
    op.drop_table('players')
