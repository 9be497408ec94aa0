"""create users, developers, api_keys, websites, time_tracking

Revision ID: k1l2m3n4o5p6
Revises:
Create Date: 2026-09-14 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'k1l2m3n4o5p6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('is_subscribed', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('subscription_type', sa.String(20), server_default='free', nullable=False),
        sa.Column('is_admin', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'developers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_name', sa.String(200), nullable=True),
        sa.Column('website', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_developers_user_id', 'developers', ['user_id'], unique=True)

    op.create_table(
        'api_keys',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('developers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('key', sa.String(64), nullable=False, unique=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_api_keys_developer_id', 'api_keys', ['developer_id'])

    op.create_table(
        'websites',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('api_key_id', sa.Integer(), sa.ForeignKey('api_keys.id', ondelete='CASCADE'), nullable=False),
        sa.Column('url', sa.String(500), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_websites_api_key_id', 'websites', ['api_key_id'])

    op.create_table(
        'time_tracking',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('website_id', sa.Integer(), sa.ForeignKey('websites.id', ondelete='CASCADE'), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('date', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_time_tracking_date', 'time_tracking', ['date'])
    op.create_index('ix_time_tracking_website_date', 'time_tracking', ['website_id', 'date'])


def downgrade() -> None:
    op.drop_index('ix_time_tracking_website_date', 'time_tracking')
    op.drop_index('ix_time_tracking_date', 'time_tracking')
    op.drop_table('time_tracking')
    op.drop_index('ix_websites_api_key_id', 'websites')
    op.drop_table('websites')
    op.drop_index('ix_api_keys_developer_id', 'api_keys')
    op.drop_table('api_keys')
    op.drop_index('ix_developers_user_id', 'developers')
    op.drop_table('developers')
    op.drop_index('ix_users_username', 'users')
    op.drop_table('users')
