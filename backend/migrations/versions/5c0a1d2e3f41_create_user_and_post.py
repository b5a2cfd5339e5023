"""create user and post tables

Revision ID: 5c0a1d2e3f41
Revises:
Create Date: 2026-09-28 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c0a1d2e3f41'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='user'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'post',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('task_text', sa.Text(), nullable=False),
        sa.Column('is_url_task', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('task_solution', sa.Text(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_post_location', 'post', ['latitude', 'longitude'])


def downgrade():
    op.drop_index('idx_post_location', table_name='post')
    op.drop_table('post')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
