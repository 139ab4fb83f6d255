"""
Initial schema: users, projects, project team, tasks, assignees, subtasks, comments

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the TaskHub tables."""

    op.create_table(
        'users',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('display_name', sa.String(200), nullable=True),
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    op.create_table(
        'projects',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('status', sa.Enum('To Do', 'In Progress', 'Completed', 'On Hold', name='projectstatus'), nullable=False, default='To Do'),
        sa.Column('progress', sa.Integer, nullable=False, default=0),
        sa.Column('deadline', sa.Date, nullable=True),
        sa.Column('owner_id', sa.String(15), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('owner_name', sa.String(200), nullable=False),
        sa.Column('owner_email', sa.String(255), nullable=False),
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    op.create_table(
        'project_members',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('project_id', sa.String(15), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, index=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('position', sa.Integer, nullable=False, default=0),
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.UniqueConstraint('project_id', 'email', name='uq_project_members_project_email'),
    )

    # project_id is a plain reference: deleting a project keeps its tasks
    op.create_table(
        'tasks',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('project_id', sa.String(15), nullable=True, index=True),
        sa.Column('status', sa.Enum('To Do', 'Planning', 'In Progress', 'Completed', 'On Hold', name='taskstatus'), nullable=False, default='To Do', index=True),
        sa.Column('priority', sa.Enum('Low', 'Medium', 'High', 'Critical', name='taskpriority'), nullable=False, default='Medium'),
        sa.Column('due_date', sa.Date, nullable=True),
        sa.Column('owner_id', sa.String(15), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    op.create_table(
        'task_assignees',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('task_id', sa.String(15), sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=False, index=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('position', sa.Integer, nullable=False, default=0),
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.UniqueConstraint('task_id', 'email', name='uq_task_assignees_task_email'),
    )

    op.create_table(
        'subtasks',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('task_id', sa.String(15), sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('completed', sa.Boolean, nullable=False, default=False),
        sa.Column('position', sa.Integer, nullable=False, default=0),
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    op.create_table(
        'comments',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('task_id', sa.String(15), sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.String(15), nullable=False),
        sa.Column('user_display_name', sa.String(200), nullable=False),
        sa.Column('user_email', sa.String(255), nullable=True),
        sa.Column('text', sa.Text, nullable=False),
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
    )


def downgrade() -> None:
    """Drop the TaskHub tables."""
    op.drop_table('comments')
    op.drop_table('subtasks')
    op.drop_table('task_assignees')
    op.drop_table('tasks')
    op.drop_table('project_members')
    op.drop_table('projects')
    op.drop_table('users')

    # Drop enum types
    op.execute('DROP TYPE IF EXISTS taskpriority')
    op.execute('DROP TYPE IF EXISTS taskstatus')
    op.execute('DROP TYPE IF EXISTS projectstatus')
