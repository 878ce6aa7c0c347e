"""Create translation_records table.

Revision ID: create_translation_records
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_translation_records'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('translation_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('source_text', sa.Text(), nullable=False),
        sa.Column('source_hash', sa.String(length=32), nullable=False),
        sa.Column('translation_key', sa.Text(), nullable=False),
        sa.Column('locale_id', sa.String(length=12), nullable=False),
        sa.Column('category', sa.String(length=255), nullable=False, server_default='messages'),
        sa.Column('translated_text', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('usage_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('last_seen_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('source_hash', 'locale_id', name='unique_source_locale')
    )

    # Indexes for lookups and usage checks
    op.create_index(op.f('ix_translation_records_source_hash'), 'translation_records', ['source_hash'], unique=False)
    op.create_index(op.f('ix_translation_records_locale_id'), 'translation_records', ['locale_id'], unique=False)
    op.create_index(op.f('ix_translation_records_category'), 'translation_records', ['category'], unique=False)
    op.create_index(op.f('ix_translation_records_status'), 'translation_records', ['status'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_translation_records_status'), table_name='translation_records')
    op.drop_index(op.f('ix_translation_records_category'), table_name='translation_records')
    op.drop_index(op.f('ix_translation_records_locale_id'), table_name='translation_records')
    op.drop_index(op.f('ix_translation_records_source_hash'), table_name='translation_records')
    op.drop_table('translation_records')
