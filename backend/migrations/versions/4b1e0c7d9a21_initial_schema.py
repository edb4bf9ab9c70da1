"""initial schema: accounts, repositories, numbering counters, issues, pull requests

Revision ID: 4b1e0c7d9a21
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '4b1e0c7d9a21'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'accounts',
        sa.Column('id', sa.String(length=40), nullable=False),
        sa.Column('username', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('website_url', sa.String(length=500), nullable=True),
        sa.Column('location', sa.String(length=100), nullable=True),
        sa.Column('company', sa.String(length=100), nullable=True),
        sa.Column('is_admin', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_accounts')),
        sa.UniqueConstraint('username', name='uq_accounts_username'),
        sa.UniqueConstraint('email', name='uq_accounts_email'),
    )

    op.create_table(
        'repositories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=40), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_private', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_archived', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_fork', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('default_branch', sa.String(length=100), server_default='main', nullable=False),
        sa.Column('language', sa.String(length=50), nullable=True),
        sa.Column('star_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('fork_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('watch_count', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['owner_id'], ['accounts.id'],
            name=op.f('fk_repositories_owner_id_accounts'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_repositories')),
        sa.UniqueConstraint('owner_id', 'name', name='uq_repositories_owner_name'),
    )
    op.create_index('ix_repositories_owner_id', 'repositories', ['owner_id'], unique=False)

    op.create_table(
        'repository_sequences',
        sa.Column('repository_id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('last_number', sa.Integer(), server_default='0', nullable=False),
        sa.ForeignKeyConstraint(
            ['repository_id'], ['repositories.id'],
            name=op.f('fk_repository_sequences_repository_id_repositories'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('repository_id', 'kind', name=op.f('pk_repository_sequences')),
    )

    op.create_table(
        'issues',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('repository_id', sa.Integer(), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('OPEN', 'CLOSED', name='issue_status', native_enum=False, create_constraint=True),
            nullable=False,
        ),
        sa.Column('author_id', sa.String(length=40), nullable=False),
        sa.Column('assignee_id', sa.String(length=40), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['repository_id'], ['repositories.id'],
            name=op.f('fk_issues_repository_id_repositories'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['author_id'], ['accounts.id'],
            name=op.f('fk_issues_author_id_accounts'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['assignee_id'], ['accounts.id'],
            name=op.f('fk_issues_assignee_id_accounts'), ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_issues')),
        sa.UniqueConstraint('repository_id', 'number', name='uq_issues_repository_number'),
    )
    op.create_index('ix_issues_repository_id', 'issues', ['repository_id'], unique=False)

    op.create_table(
        'pull_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('repository_id', sa.Integer(), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column(
            'status',
            sa.Enum(
                'open', 'closed', 'merged',
                name='pull_request_status', native_enum=False, create_constraint=True,
            ),
            nullable=False,
        ),
        sa.Column('author_id', sa.String(length=40), nullable=False),
        sa.Column('base_branch', sa.String(length=255), nullable=False),
        sa.Column('head_branch', sa.String(length=255), nullable=False),
        sa.Column('is_merged', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('merged_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['repository_id'], ['repositories.id'],
            name=op.f('fk_pull_requests_repository_id_repositories'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['author_id'], ['accounts.id'],
            name=op.f('fk_pull_requests_author_id_accounts'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_pull_requests')),
        sa.UniqueConstraint('repository_id', 'number', name='uq_pull_requests_repository_number'),
    )
    op.create_index('ix_pull_requests_repository_id', 'pull_requests', ['repository_id'], unique=False)


def downgrade():
    op.drop_index('ix_pull_requests_repository_id', table_name='pull_requests')
    op.drop_table('pull_requests')
    op.drop_index('ix_issues_repository_id', table_name='issues')
    op.drop_table('issues')
    op.drop_table('repository_sequences')
    op.drop_index('ix_repositories_owner_id', table_name='repositories')
    op.drop_table('repositories')
    op.drop_table('accounts')
