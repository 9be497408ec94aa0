"""add revenue distribution tables

Revision ID: l2m3n4o5p6q7
Revises: k1l2m3n4o5p6
Create Date: 2026-09-21 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'l2m3n4o5p6q7'
down_revision: Union[str, None] = 'k1l2m3n4o5p6'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'revenue_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('platform_fee_percentage', sa.Numeric(5, 2), server_default='30.00', nullable=False),
        sa.Column('minimum_payout_amount', sa.BigInteger(), server_default='1000', nullable=False),
        sa.Column('payout_schedule', sa.String(10), server_default='monthly', nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'developer_earnings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('developers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('website_id', sa.Integer(), sa.ForeignKey('websites.id', ondelete='CASCADE'), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('total_time', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('premium_time', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('earnings', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('calculated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('developer_id', 'website_id', 'month', name='unique_developer_website_month'),
    )
    op.create_index('ix_developer_earnings_developer_id', 'developer_earnings', ['developer_id'])
    op.create_index('ix_developer_earnings_month', 'developer_earnings', ['month'])

    op.create_table(
        'revenue',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('developers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('amount', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('calculated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('developer_id', 'month', name='unique_developer_month'),
    )
    op.create_index('ix_revenue_developer_id', 'revenue', ['developer_id'])
    op.create_index('ix_revenue_month', 'revenue', ['month'])

    op.create_table(
        'payouts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('developers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=False),
        sa.Column('month', sa.String(7), nullable=True),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_payouts_developer_id', 'payouts', ['developer_id'])
    op.create_index('ix_payouts_month_status', 'payouts', ['month', 'status'])

    op.create_table(
        'revenue_distribution_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('total_revenue', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('total_distributed', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('platform_fee', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('developer_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', sa.String(20), server_default='completed', nullable=False),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(
        'ix_revenue_distribution_logs_month', 'revenue_distribution_logs', ['month'], unique=True,
    )


def downgrade() -> None:
    op.drop_index('ix_revenue_distribution_logs_month', 'revenue_distribution_logs')
    op.drop_table('revenue_distribution_logs')
    op.drop_index('ix_payouts_month_status', 'payouts')
    op.drop_index('ix_payouts_developer_id', 'payouts')
    op.drop_table('payouts')
    op.drop_index('ix_revenue_month', 'revenue')
    op.drop_index('ix_revenue_developer_id', 'revenue')
    op.drop_table('revenue')
    op.drop_index('ix_developer_earnings_month', 'developer_earnings')
    op.drop_index('ix_developer_earnings_developer_id', 'developer_earnings')
    op.drop_table('developer_earnings')
    op.drop_table('revenue_settings')
