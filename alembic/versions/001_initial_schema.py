"""Initial schema — agents, dimensions, profiles and assignments.

Revision ID: 001
Revises: None
Create Date: 2025-03-02
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _dimension_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), unique=True, nullable=False),
    )


def upgrade() -> None:
    # Dimensions
    _dimension_table("locations")
    _dimension_table("groups")
    _dimension_table("roles")

    # Agents
    op.create_table(
        "agents",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("birthdate", sa.Date, nullable=True),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("contact", sa.String(200), nullable=True),
        sa.Column("email", sa.String(200), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column(
            "created_at", sa.DateTime, nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("idx_agents_name", "agents", ["name"])

    # Profiles (caller permission level)
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="consulta"),
    )

    # Assignments
    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "agent_id",
            sa.Integer,
            sa.ForeignKey("agents.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "location_id", sa.Integer, sa.ForeignKey("locations.id"), nullable=False
        ),
        sa.Column("group_id", sa.Integer, sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("role_id", sa.Integer, sa.ForeignKey("roles.id"), nullable=False),
        sa.Column("entry_date", sa.Date, nullable=False),
        sa.Column("exit_date", sa.Date, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column(
            "created_at", sa.DateTime, nullable=False, server_default=sa.func.now()
        ),
        sa.CheckConstraint(
            "exit_date IS NULL OR exit_date >= entry_date",
            name="ck_assignments_exit_after_entry",
        ),
    )
    op.create_index(
        "uq_assignments_active_agent",
        "assignments",
        ["agent_id"],
        unique=True,
        postgresql_where=sa.text("exit_date IS NULL"),
        sqlite_where=sa.text("exit_date IS NULL"),
    )
    op.create_index("idx_assignments_agent", "assignments", ["agent_id"])
    op.create_index("idx_assignments_entry_date", "assignments", ["entry_date"])
    op.create_index("idx_assignments_exit_date", "assignments", ["exit_date"])


def downgrade() -> None:
    op.drop_table("assignments")
    op.drop_table("profiles")
    op.drop_table("agents")
    op.drop_table("roles")
    op.drop_table("groups")
    op.drop_table("locations")
