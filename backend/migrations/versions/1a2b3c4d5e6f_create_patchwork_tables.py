"""create piece, game and purchased_piece tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    # Databases created by create_all() already have the tables
    if 'piece' not in existing_tables:
        op.create_table(
            'piece',
            sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
            sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('data', sa.Text(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
    if 'game' not in existing_tables:
        op.create_table(
            'game',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('next_id', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('yellow_buttons', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('green_buttons', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('bonus_winner', sa.String(length=16), nullable=False, server_default='none'),
            sa.Column('schema_version', sa.Integer(), nullable=False, server_default='0'),
            sa.PrimaryKeyConstraint('id'),
        )
    if 'purchased_piece' not in existing_tables:
        op.create_table(
            'purchased_piece',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('game_id', sa.Integer(), nullable=False),
            sa.Column('piece_id', sa.Integer(), nullable=False),
            sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('data', sa.Text(), nullable=False),
            sa.ForeignKeyConstraint(['game_id'], ['game.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_purchased_piece_game_id', 'purchased_piece', ['game_id'])


def downgrade():
    op.drop_index('ix_purchased_piece_game_id', table_name='purchased_piece')
    op.drop_table('purchased_piece')
    op.drop_table('game')
    op.drop_table('piece')
