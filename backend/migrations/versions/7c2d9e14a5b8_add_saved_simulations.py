"""add saved simulations

Revision ID: 7c2d9e14a5b8
Revises: 4b7e21c9d0a3
Create Date: 2026-06-20 18:42:07.915304

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '7c2d9e14a5b8'
down_revision = '4b7e21c9d0a3'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'saved_simulations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('form_id', sa.Integer(), nullable=False),
        sa.Column('results', sa.JSON(), nullable=False),
        sa.Column('top_scorer', sa.String(length=120), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('form_id'),
    )


def downgrade():
    op.drop_table('saved_simulations')
