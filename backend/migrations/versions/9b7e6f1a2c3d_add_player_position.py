"""add player_position table

Revision ID: 9b7e6f1a2c3d
Revises: 5c0a1d2e3f41
Create Date: 2026-10-02 14:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '9b7e6f1a2c3d'
down_revision = '5c0a1d2e3f41'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'player_position' in set(insp.get_table_names()):
        return

    op.create_table(
        'player_position',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_name', sa.String(length=64), nullable=False),
        sa.Column('display_name', sa.String(length=64), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('last_updated', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_player_position_user_name', 'player_position', ['user_name'], unique=True)
    op.create_index('ix_player_position_last_updated', 'player_position', ['last_updated'])
    op.create_index('idx_player_position_location', 'player_position', ['latitude', 'longitude'])


def downgrade():
    op.drop_index('idx_player_position_location', table_name='player_position')
    op.drop_index('ix_player_position_last_updated', table_name='player_position')
    op.drop_index('ix_player_position_user_name', table_name='player_position')
    op.drop_table('player_position')
