"""initial tournament schema

Revision ID: 4b7e21c9d0a3
Revises:
Create Date: 2026-05-02 10:14:31.402177

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b7e21c9d0a3'
down_revision = None
branch_labels = None
depends_on = None


stage_enum = sa.Enum('GROUP', 'R32', 'R16', 'QF', 'SF', 'F', name='stage')


def upgrade():
    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('fifa_code', sa.String(length=3), nullable=False),
        sa.Column('group_letter', sa.String(length=1), nullable=True),
        sa.Column('group_position', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('fifa_code'),
    )

    op.create_table(
        'matches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('match_number', sa.Integer(), nullable=False),
        sa.Column('stage', stage_enum, nullable=False),
        sa.Column('team1_code', sa.String(length=16), nullable=False),
        sa.Column('team2_code', sa.String(length=16), nullable=False),
        sa.Column('team1_id', sa.Integer(), nullable=True),
        sa.Column('team2_id', sa.Integer(), nullable=True),
        sa.Column('team1_score', sa.Integer(), nullable=True),
        sa.Column('team2_score', sa.Integer(), nullable=True),
        sa.Column('winner_id', sa.Integer(), nullable=True),
        sa.Column('is_finished', sa.Boolean(), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(), nullable=True),
        sa.Column('venue', sa.String(length=200), nullable=True),
        sa.Column('played_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['team1_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['team2_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['winner_id'], ['teams.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('match_number'),
    )

    op.create_table(
        'group_standings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('group_letter', sa.String(length=1), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=True),
        sa.Column('played', sa.Integer(), nullable=False),
        sa.Column('wins', sa.Integer(), nullable=False),
        sa.Column('draws', sa.Integer(), nullable=False),
        sa.Column('losses', sa.Integer(), nullable=False),
        sa.Column('goals_for', sa.Integer(), nullable=False),
        sa.Column('goals_against', sa.Integer(), nullable=False),
        sa.Column('goal_diff', sa.Integer(), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('group_letter', 'position', name='uq_group_standing_position'),
    )

    op.create_table(
        'third_place_rankings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('group_letter', sa.String(length=1), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=True),
        sa.Column('rank', sa.Integer(), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('goal_diff', sa.Integer(), nullable=False),
        sa.Column('goals_for', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('group_letter'),
    )

    op.create_table(
        'forms',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('nickname', sa.String(length=100), nullable=False),
        sa.Column('is_final', sa.Boolean(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('total_points', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id'),
    )

    op.create_table(
        'match_picks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('form_id', sa.Integer(), nullable=False),
        sa.Column('match_id', sa.Integer(), nullable=False),
        sa.Column('pred_score1', sa.Integer(), nullable=False),
        sa.Column('pred_score2', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id']),
        sa.ForeignKeyConstraint(['match_id'], ['matches.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('form_id', 'match_id', name='uq_match_pick_form_match'),
    )

    op.create_table(
        'advance_picks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('form_id', sa.Integer(), nullable=False),
        sa.Column('stage', stage_enum, nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id']),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('form_id', 'stage', 'team_id', name='uq_advance_pick_form_stage_team'),
    )

    op.create_table(
        'top_scorer_picks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('form_id', sa.Integer(), nullable=False),
        sa.Column('player_name', sa.String(length=120), nullable=False),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('form_id'),
    )

    op.create_table(
        'scoring_runs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('form_id', sa.Integer(), nullable=False),
        sa.Column('delta', sa.Integer(), nullable=False),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'leagues',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('join_code', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('join_code'),
    )

    op.create_table(
        'league_members',
        sa.Column('league_id', sa.Integer(), nullable=False),
        sa.Column('form_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id']),
        sa.ForeignKeyConstraint(['league_id'], ['leagues.id']),
        sa.PrimaryKeyConstraint('league_id', 'form_id'),
    )

    op.create_table(
        'tournament_settings',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('actual_top_scorer', sa.String(length=120), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('tournament_settings')
    op.drop_table('league_members')
    op.drop_table('leagues')
    op.drop_table('scoring_runs')
    op.drop_table('top_scorer_picks')
    op.drop_table('advance_picks')
    op.drop_table('match_picks')
    op.drop_table('forms')
    op.drop_table('third_place_rankings')
    op.drop_table('group_standings')
    op.drop_table('matches')
    op.drop_table('teams')

    stage_enum.drop(op.get_bind(), checkfirst=True)
