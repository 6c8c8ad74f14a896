"""Create dashboard tables

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Creates the tables owned by the dashboard:
- users: owners of tasks
- tasks: todo items (FK to users)
- models: model registry
- data_ingestion_jobs: ingestion jobs and their lifecycle status
- events: append-only audit log
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

JOB_STATUSES = ("pending", "in_progress", "completed", "failed")

EVENT_TYPES = (
    "Model Added",
    "Data Ingestion Job Added",
    "Data Ingestion Job Started",
    "Data Ingestion Job Completed",
    "Data Ingestion Job Failed",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
    )

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer,
            sa.ForeignKey("users.id", name="fk_tasks_user_id_users"),
            nullable=True,
        ),
        sa.Column("entity_ref", sa.String(length=255), nullable=True),
        sa.Column("completion_time", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_tasks_user_id", "tasks", ["user_id"])

    op.create_table(
        "models",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("version", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("model_uri", sa.String(length=1024), nullable=False),
        sa.Column(
            "registered_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("registered_by", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_models_name_version", "models", ["name", "version"])

    op.create_table(
        "data_ingestion_jobs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("data_source_uri", sa.String(length=1024), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*JOB_STATUSES, name="job_status", create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_data_ingestion_jobs_status", "data_ingestion_jobs", ["status"]
    )

    op.create_table(
        "events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "event_type",
            sa.Enum(*EVENT_TYPES, name="event_type", create_constraint=True),
            nullable=False,
        ),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("reference_id", sa.Integer, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_events_event_type", "events", ["event_type"])
    op.create_index("ix_events_reference_id", "events", ["reference_id"])
    op.create_index(
        "ix_events_type_reference", "events", ["event_type", "reference_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_events_type_reference", table_name="events")
    op.drop_index("ix_events_reference_id", table_name="events")
    op.drop_index("ix_events_event_type", table_name="events")
    op.drop_table("events")

    op.drop_index("ix_data_ingestion_jobs_status", table_name="data_ingestion_jobs")
    op.drop_table("data_ingestion_jobs")

    op.drop_index("ix_models_name_version", table_name="models")
    op.drop_table("models")

    op.drop_index("ix_tasks_user_id", table_name="tasks")
    op.drop_table("tasks")
    op.drop_table("users")

    # Drop PostgreSQL enum types (no-op for SQLite)
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS event_type")
        op.execute("DROP TYPE IF EXISTS job_status")
