# alembic/versions/001_initial.py

"""Initial schema: fund holdings

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('fund',
        sa.Column('pk', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('fund_id', sa.String(length=64), nullable=False),
        sa.Column('scheme_code', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('units', sa.Float(), nullable=False),
        sa.Column('nav', sa.Float(), nullable=False),
        sa.Column('nav_date', sa.String(length=10), nullable=True),
        sa.Column('current_value', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('pk'),
        sa.UniqueConstraint('user_id', 'fund_id', name='uq_fund_user_fund_id'),
        sa.UniqueConstraint('user_id', 'scheme_code', name='uq_fund_user_scheme_code'),
    )
    op.create_index('ix_fund_user_id', 'fund', ['user_id'])


def downgrade():
    op.drop_index('ix_fund_user_id', table_name='fund')
    op.drop_table('fund')
