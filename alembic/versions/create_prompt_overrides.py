"""Create prompt block and modifier override tables

Revision ID: create_prompt_overrides
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


revision = 'create_prompt_overrides'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'prompt_block_overrides',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('block_id', sa.String(100), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('variants', sa.JSON(), nullable=True),
        sa.Column('updated_by', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_prompt_block_overrides_id', 'prompt_block_overrides', ['id'])
    op.create_index('ix_prompt_block_overrides_block_id', 'prompt_block_overrides', ['block_id'], unique=True)

    op.create_table(
        'prompt_modifier_overrides',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('modifier_id', sa.String(100), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('updated_by', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_prompt_modifier_overrides_id', 'prompt_modifier_overrides', ['id'])
    op.create_index('ix_prompt_modifier_overrides_modifier_id', 'prompt_modifier_overrides', ['modifier_id'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_prompt_modifier_overrides_modifier_id', table_name='prompt_modifier_overrides')
    op.drop_index('ix_prompt_modifier_overrides_id', table_name='prompt_modifier_overrides')
    op.drop_table('prompt_modifier_overrides')
    op.drop_index('ix_prompt_block_overrides_block_id', table_name='prompt_block_overrides')
    op.drop_index('ix_prompt_block_overrides_id', table_name='prompt_block_overrides')
    op.drop_table('prompt_block_overrides')
