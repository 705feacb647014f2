"""create user, canvas_cell, placement, pixel_cooldown and canvas_snapshot

Revision ID: 4c2d9e7a1b3f
Revises:
Create Date: 2025-09-14 10:12:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2d9e7a1b3f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'canvas_cell' not in existing_tables:
        op.create_table(
            'canvas_cell',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('x', sa.Integer(), nullable=False),
            sa.Column('y', sa.Integer(), nullable=False),
            sa.Column('color', sa.String(length=7), nullable=False),
            sa.Column('placed_by', sa.String(length=64), nullable=False),
            sa.Column('placed_by_name', sa.String(length=64), nullable=False),
            sa.Column('placed_at', sa.Float(), nullable=False),
            sa.UniqueConstraint('x', 'y', name='uq_canvas_cell_xy'),
        )

    if 'placement' not in existing_tables:
        op.create_table(
            'placement',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('x', sa.Integer(), nullable=False),
            sa.Column('y', sa.Integer(), nullable=False),
            sa.Column('color', sa.String(length=7), nullable=False),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('timestamp', sa.Float(), nullable=False),
        )
        op.create_index('ix_placement_user_id', 'placement', ['user_id'])
        op.create_index('ix_placement_timestamp', 'placement', ['timestamp'])

    if 'pixel_cooldown' not in existing_tables:
        op.create_table(
            'pixel_cooldown',
            sa.Column('user_id', sa.String(length=64), primary_key=True),
            sa.Column('last_placement_at', sa.Float(), nullable=False),
        )

    if 'canvas_snapshot' not in existing_tables:
        op.create_table(
            'canvas_snapshot',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('period_id', sa.String(length=16), nullable=False),
            sa.Column('taken_at', sa.Float(), nullable=False),
            sa.Column('width', sa.Integer(), nullable=False),
            sa.Column('height', sa.Integer(), nullable=False),
            sa.Column('grid', sa.Text(), nullable=False),
            sa.Column('image_svg', sa.Text(), nullable=False),
            sa.Column('total_pixels', sa.Integer(), nullable=False),
            sa.Column('unique_users', sa.Integer(), nullable=False),
        )
        op.create_index('ix_canvas_snapshot_period_id', 'canvas_snapshot', ['period_id'], unique=True)


def downgrade():
    op.drop_index('ix_canvas_snapshot_period_id', table_name='canvas_snapshot')
    op.drop_table('canvas_snapshot')
    op.drop_table('pixel_cooldown')
    op.drop_index('ix_placement_timestamp', table_name='placement')
    op.drop_index('ix_placement_user_id', table_name='placement')
    op.drop_table('placement')
    op.drop_table('canvas_cell')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
