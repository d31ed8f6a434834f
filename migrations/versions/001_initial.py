"""Create collector, component, scope and user account tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

COLLECTOR_TYPES = ("AgileTool", "Build", "SCM", "Deployment", "CodeQuality", "Test")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    collector_type = postgresql.ENUM(*COLLECTOR_TYPES, name="collectortype")
    collector_type.create(op.get_bind())
    collector_type_column = postgresql.ENUM(name="collectortype", create_type=False)

    op.create_table(
        "collectors",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("collector_type", collector_type_column, nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("online", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("last_executed", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "collector_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "collector_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("collectors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("description", sa.String(255), nullable=True),
    )
    op.create_index(
        "ix_collector_items_collector_id", "collector_items", ["collector_id"]
    )

    op.create_table(
        "components",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "component_collector_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "component_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("components.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("collector_type", collector_type_column, nullable=False),
        sa.Column(
            "collector_item_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("collector_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint(
            "component_id",
            "collector_type",
            "collector_item_id",
            name="uq_component_collector_items_item",
        ),
    )
    op.create_index(
        "ix_component_collector_items_component_id",
        "component_collector_items",
        ["component_id"],
    )

    op.create_table(
        "scopes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("scope_id", sa.String(255), nullable=False),
        sa.Column(
            "collector_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("collectors.id"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("project_path", sa.String(1024), nullable=True),
        sa.Column("begin_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("change_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("asset_state", sa.String(50), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default="false"),
        *_timestamps(),
    )
    op.create_index("ix_scopes_scope_id", "scopes", ["scope_id"])
    op.create_index("ix_scopes_collector_id", "scopes", ["collector_id"])

    op.create_table(
        "user_accounts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_user_accounts_username", "user_accounts", ["username"], unique=True
    )


def downgrade() -> None:
    op.drop_index("ix_user_accounts_username")
    op.drop_table("user_accounts")
    op.drop_index("ix_scopes_collector_id")
    op.drop_index("ix_scopes_scope_id")
    op.drop_table("scopes")
    op.drop_index("ix_component_collector_items_component_id")
    op.drop_table("component_collector_items")
    op.drop_table("components")
    op.drop_index("ix_collector_items_collector_id")
    op.drop_table("collector_items")
    op.drop_table("collectors")
    op.execute("DROP TYPE IF EXISTS collectortype")
