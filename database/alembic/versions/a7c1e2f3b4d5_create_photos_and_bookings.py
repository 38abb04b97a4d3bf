"""create photos and bookings tables

Revision ID: a7c1e2f3b4d5
Revises:
Create Date: 2025-10-20

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a7c1e2f3b4d5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()

    # shifts belongs to the scheduling system; only create it for standalone databases
    if not sa.inspect(bind).has_table('shifts'):
        op.create_table(
            'shifts',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )

    op.create_table(
        'photos',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('s3_key', sa.String(1024), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('s3_key', name='uq_photos_s3_key'),
    )

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('shift_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(3), nullable=False),
        sa.Column('lat', sa.Float(), nullable=True),
        sa.Column('lng', sa.Float(), nullable=True),
        sa.Column('photo_id', sa.Integer(), nullable=True),
        sa.Column('captured_at', sa.TIMESTAMP(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id'], name='fk_bookings_shift_id'),
        sa.ForeignKeyConstraint(['photo_id'], ['photos.id'], name='fk_bookings_photo_id'),
        sa.UniqueConstraint('photo_id', name='uq_bookings_photo_id'),
        sa.CheckConstraint("type IN ('on', 'off')", name='check_booking_type'),
    )

    op.create_index('ix_bookings_shift_id', 'bookings', ['shift_id'])


def downgrade() -> None:
    op.drop_index('ix_bookings_shift_id', table_name='bookings')
    op.drop_table('bookings')
    op.drop_table('photos')
    # shifts is left in place: it may be owned by the scheduling system
