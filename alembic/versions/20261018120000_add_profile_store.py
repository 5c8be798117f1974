"""add profile store

Revision ID: 20261018120000
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261018120000'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create profiles and profile_blobs tables."""
    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index(op.f('ix_profiles_id'), 'profiles', ['id'], unique=False)

    op.create_table(
        'profile_blobs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile', sa.String(length=255), nullable=False),
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('profile', 'key', name='uq_profile_key'),
    )
    op.create_index(op.f('ix_profile_blobs_id'), 'profile_blobs', ['id'], unique=False)
    op.create_index(op.f('ix_profile_blobs_profile'), 'profile_blobs', ['profile'], unique=False)


def downgrade() -> None:
    """Drop profile store tables."""
    op.drop_index(op.f('ix_profile_blobs_profile'), table_name='profile_blobs')
    op.drop_index(op.f('ix_profile_blobs_id'), table_name='profile_blobs')
    op.drop_table('profile_blobs')
    op.drop_index(op.f('ix_profiles_id'), table_name='profiles')
    op.drop_table('profiles')
