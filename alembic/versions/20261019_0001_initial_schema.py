"""Initial schema - sites, forums, posts, members, grants

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), nullable=False, default='member'),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Refresh tokens table
    op.create_table(
        'refresh_tokens',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('token_hash', sa.String(255), unique=True, nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked', sa.Boolean(), nullable=False, default=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Sites table
    op.create_table(
        'sites',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), unique=True, nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Categories table
    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('site_id', sa.Uuid(), sa.ForeignKey('sites.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False, default=0),
        sa.Column('status', sa.String(50), nullable=False, default='published'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Forums table
    op.create_table(
        'forums',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, default=0),
        sa.Column('status', sa.String(50), nullable=False, default='published'),
        sa.Column('topics_count', sa.Integer(), nullable=False, default=0),
        sa.Column('replies_count', sa.Integer(), nullable=False, default=0),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_forums_category_slug', 'forums', ['category_id', 'slug'])

    # Members table
    op.create_table(
        'members',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=False),
        sa.Column('topics_count', sa.Integer(), nullable=False, default=0),
        sa.Column('replies_count', sa.Integer(), nullable=False, default=0),
        sa.Column('status', sa.String(50), nullable=False, default='published'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Posts table (topics and replies)
    op.create_table(
        'posts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('forum_id', sa.Uuid(), sa.ForeignKey('forums.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('topic_id', sa.Uuid(), sa.ForeignKey('posts.id'), nullable=True, index=True),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id'), nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('slug', sa.String(255), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, default='published'),
        sa.Column('pinned', sa.Boolean(), nullable=False, default=False),
        sa.Column('locked', sa.Boolean(), nullable=False, default=False),
        sa.Column('has_answer', sa.Boolean(), nullable=False, default=False),
        sa.Column('replies_count', sa.Integer(), nullable=False, default=0),
        sa.Column('last_reply_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_answer', sa.Boolean(), nullable=False, default=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_posts_forum_slug', 'posts', ['forum_id', 'slug'])
    op.create_index('ix_posts_topic_status', 'posts', ['topic_id', 'status'])

    # Event logs table (append-only)
    op.create_table(
        'event_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_type', sa.String(100), nullable=False, index=True),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=False),
        sa.Column('site_id', sa.Uuid(), nullable=True),
        sa.Column('actor_id', sa.Uuid(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_event_logs_entity', 'event_logs', ['entity_type', 'entity_id'])

    # Permission grants table
    op.create_table(
        'permissions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('site_id', sa.Uuid(), sa.ForeignKey('sites.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('forum_id', sa.Uuid(), sa.ForeignKey('forums.id', ondelete='CASCADE'), nullable=True),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=True),
        sa.Column('permission_type', sa.String(50), nullable=False),
        sa.Column('role', sa.String(50), nullable=True),
        sa.Column('member_id', sa.Uuid(), sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('forum_id IS NOT NULL OR category_id IS NOT NULL', name='ck_permissions_target'),
        sa.CheckConstraint('role IS NOT NULL OR member_id IS NOT NULL', name='ck_permissions_subject'),
    )
    op.create_index('ix_permissions_site_forum', 'permissions', ['site_id', 'forum_id'])
    op.create_index('ix_permissions_site_category', 'permissions', ['site_id', 'category_id'])


def downgrade() -> None:
    op.drop_table('permissions')
    op.drop_table('event_logs')
    op.drop_table('posts')
    op.drop_table('members')
    op.drop_table('forums')
    op.drop_table('categories')
    op.drop_table('sites')
    op.drop_table('refresh_tokens')
    op.drop_table('users')
