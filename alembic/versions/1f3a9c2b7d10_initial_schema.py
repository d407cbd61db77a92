"""Initial schema

Revision ID: 1f3a9c2b7d10
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '1f3a9c2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('firebase_uid', sa.String(128), nullable=True, unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_by_email', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_teams_id', 'teams', ['id'])

    op.create_table(
        'team_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('joined_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('team_id', 'user_id', name='uq_team_member'),
    )
    op.create_index('ix_team_members_id', 'team_members', ['id'])
    op.create_index('ix_team_members_team_id', 'team_members', ['team_id'])
    op.create_index('ix_team_members_user_id', 'team_members', ['user_id'])

    op.create_table(
        'features',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='backlog'),
        sa.Column('priority', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('type', sa.String(20), nullable=False, server_default='task'),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_by_email', sa.String(255), nullable=True),
        sa.Column('assigned_to', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('votes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('impact', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('effort', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('category', sa.String(50), nullable=True),
        sa.Column('target_release', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('features.id', ondelete='CASCADE'), nullable=True),
    )
    op.create_index('ix_features_id', 'features', ['id'])
    op.create_index('ix_features_team_id', 'features', ['team_id'])
    op.create_index('ix_features_parent_id', 'features', ['parent_id'])
    op.create_index('ix_features_team_type', 'features', ['team_id', 'type'])
    op.create_index('ix_features_team_parent', 'features', ['team_id', 'parent_id'])

    op.create_table(
        'feature_dependencies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('source_feature_id', sa.Integer(), sa.ForeignKey('features.id', ondelete='CASCADE'), nullable=False),
        sa.Column('target_feature_id', sa.Integer(), sa.ForeignKey('features.id', ondelete='CASCADE'), nullable=False),
        sa.Column('dependency_type', sa.String(20), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint(
            'source_feature_id', 'target_feature_id', 'dependency_type',
            name='unique_dependency_relationship'
        ),
        sa.CheckConstraint('source_feature_id <> target_feature_id', name='ck_dependency_not_self'),
    )
    op.create_index('ix_feature_dependencies_id', 'feature_dependencies', ['id'])
    op.create_index('ix_feature_dependencies_source_feature_id', 'feature_dependencies', ['source_feature_id'])
    op.create_index('ix_feature_dependencies_target_feature_id', 'feature_dependencies', ['target_feature_id'])
    op.create_index('ix_dependency_source_type', 'feature_dependencies', ['source_feature_id', 'dependency_type'])
    op.create_index('ix_dependency_target_type', 'feature_dependencies', ['target_feature_id', 'dependency_type'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('feature_id', sa.Integer(), sa.ForeignKey('features.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('comments.id', ondelete='CASCADE'), nullable=True),
        sa.Column('mentions', sa.JSON(), nullable=True),
        sa.Column('is_edited', sa.Boolean(), nullable=True),
        sa.Column('edited_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_comments_id', 'comments', ['id'])
    op.create_index('ix_comments_feature_id', 'comments', ['feature_id'])
    op.create_index('ix_comments_user_id', 'comments', ['user_id'])
    op.create_index('ix_comments_parent_id', 'comments', ['parent_id'])
    op.create_index('ix_comments_created_at', 'comments', ['created_at'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('related_id', sa.Integer(), nullable=False),
        sa.Column('related_type', sa.String(20), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=True),
        sa.Column('triggered_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_notifications_id', 'notifications', ['id'])
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_type', 'notifications', ['type'])
    op.create_index('ix_notifications_is_read', 'notifications', ['is_read'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('notifications')
    op.drop_table('comments')
    op.drop_table('feature_dependencies')
    op.drop_table('features')
    op.drop_table('team_members')
    op.drop_table('teams')
    op.drop_table('users')
