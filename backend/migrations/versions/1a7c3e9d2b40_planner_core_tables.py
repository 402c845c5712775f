"""Planner core tables: users, tasks, events, user_preferences.

Revision ID: 1a7c3e9d2b40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "1a7c3e9d2b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = inspector.get_table_names()

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("external_id", sa.String(), nullable=False),
            sa.Column("email", sa.String(), nullable=True),
            sa.Column("name", sa.String(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_users_external_id", "users", ["external_id"], unique=True)
        op.create_index("ix_users_email", "users", ["email"])

    if "tasks" not in existing_tables:
        op.create_table(
            "tasks",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("user_id", sa.Uuid(), nullable=False),
            sa.Column("title", sa.String(), nullable=False),
            sa.Column("description", sa.String(), nullable=True),
            sa.Column("domain", sa.String(), nullable=False),
            sa.Column("priority", sa.String(), nullable=False),
            sa.Column("estimated_hours", sa.Float(), nullable=False),
            sa.Column("actual_hours", sa.Float(), nullable=True),
            sa.Column("xp_reward", sa.Integer(), nullable=False),
            sa.Column("eu_reward", sa.Integer(), nullable=False),
            sa.Column("is_completed", sa.Boolean(), nullable=False),
            sa.Column("completed_at", sa.DateTime(), nullable=True),
            sa.Column("due_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_tasks_user_id", "tasks", ["user_id"])
        op.create_index("ix_tasks_domain", "tasks", ["domain"])
        op.create_index("ix_tasks_priority", "tasks", ["priority"])
        op.create_index("ix_tasks_is_completed", "tasks", ["is_completed"])
        op.create_index("ix_tasks_due_at", "tasks", ["due_at"])

    if "events" not in existing_tables:
        op.create_table(
            "events",
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("user_id", sa.Uuid(), nullable=False),
            sa.Column("title", sa.String(), nullable=False),
            sa.Column("description", sa.String(), nullable=True),
            sa.Column("category", sa.String(), nullable=False),
            sa.Column("start_time", sa.DateTime(), nullable=False),
            sa.Column("end_time", sa.DateTime(), nullable=False),
            sa.Column("all_day", sa.Boolean(), nullable=False),
            sa.Column("recurrence", sa.String(), nullable=False),
            sa.Column("recurrence_end", sa.DateTime(), nullable=True),
            sa.Column("task_id", sa.Uuid(), nullable=True),
            sa.Column("location", sa.String(), nullable=True),
            sa.Column("priority", sa.String(), nullable=False),
            sa.Column("is_completed", sa.Boolean(), nullable=False),
            sa.Column("completed_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
            sa.ForeignKeyConstraint(["task_id"], ["tasks.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_events_user_id", "events", ["user_id"])
        op.create_index("ix_events_category", "events", ["category"])
        op.create_index("ix_events_start_time", "events", ["start_time"])
        op.create_index("ix_events_task_id", "events", ["task_id"])

    if "user_preferences" not in existing_tables:
        op.create_table(
            "user_preferences",
            sa.Column("user_id", sa.Uuid(), nullable=False),
            sa.Column("theme", sa.String(), nullable=False),
            sa.Column("font", sa.String(), nullable=False),
            sa.Column("gamification_type", sa.String(), nullable=False),
            sa.Column("academic_multiplier", sa.Float(), nullable=False),
            sa.Column("fitness_multiplier", sa.Float(), nullable=False),
            sa.Column("creative_multiplier", sa.Float(), nullable=False),
            sa.Column("social_multiplier", sa.Float(), nullable=False),
            sa.Column("maintenance_multiplier", sa.Float(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
            sa.PrimaryKeyConstraint("user_id"),
        )


def downgrade() -> None:
    op.drop_table("user_preferences")
    op.drop_table("events")
    op.drop_table("tasks")
    op.drop_table("users")
