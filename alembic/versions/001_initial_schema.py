"""Initial schema - permission catalog, roles, contexts, users and per-user permission state.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "permission",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(255), nullable=False, server_default=""),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("resource", sa.String(50), nullable=False),
        sa.Column("actions", postgresql.ARRAY(sa.String(50)), nullable=False, server_default="{}"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("requires_mfa", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_permission_name", "permission", ["name"], unique=True)
    op.create_index("ix_permission_category", "permission", ["category"])

    op.create_table(
        "role",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(255), nullable=False, server_default=""),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_system", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("max_users", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("requires_mfa", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("requires_approval", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_role_name", "role", ["name"], unique=True)

    op.create_table(
        "role_permission",
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "permission_id",
            sa.UUID(),
            sa.ForeignKey("permission.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "permission_context",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("description", sa.String(255), nullable=False, server_default=""),
        sa.Column("resource_type", sa.String(50), nullable=False),
        sa.Column("condition", postgresql.JSONB(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_permission_context_name", "permission_context", ["name"], unique=True)

    op.create_table(
        "context_permission",
        sa.Column(
            "context_id",
            sa.UUID(),
            sa.ForeignKey("permission_context.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "permission_id",
            sa.UUID(),
            sa.ForeignKey("permission.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "app_user",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id", ondelete="SET NULL"), nullable=True),
        sa.Column("mfa_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("attributes", postgresql.JSONB(), nullable=False, server_default="{}"),
        sa.Column("permissions_updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_app_user_role_id", "app_user", ["role_id"])

    op.create_table(
        "user_custom_permission",
        sa.Column("user_id", sa.String(255), sa.ForeignKey("app_user.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "permission_id",
            sa.UUID(),
            sa.ForeignKey("permission.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("effect", sa.String(10), primary_key=True),
        sa.CheckConstraint("effect IN ('grant', 'deny')", name="ck_user_custom_permission_effect"),
    )

    op.create_table(
        "user_temporary_grant",
        sa.Column("user_id", sa.String(255), sa.ForeignKey("app_user.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "permission_id",
            sa.UUID(),
            sa.ForeignKey("permission.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("granted_by", sa.String(255), nullable=True),
        sa.Column("reason", sa.String(255), nullable=True),
    )
    op.create_index("ix_user_temporary_grant_expires_at", "user_temporary_grant", ["expires_at"])

    op.create_table(
        "user_context",
        sa.Column("user_id", sa.String(255), sa.ForeignKey("app_user.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "context_id",
            sa.UUID(),
            sa.ForeignKey("permission_context.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("assigned_by", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "user_resource_override",
        sa.Column("user_id", sa.String(255), sa.ForeignKey("app_user.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("resource_type", sa.String(50), primary_key=True),
        sa.Column("resource_id", sa.String(255), primary_key=True),
        sa.Column("granted", postgresql.ARRAY(sa.UUID()), nullable=False, server_default="{}"),
        sa.Column("denied", postgresql.ARRAY(sa.UUID()), nullable=False, server_default="{}"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("assigned_by", sa.String(255), nullable=True),
    )
    op.create_index(
        "ix_user_resource_override_expires_at", "user_resource_override", ["expires_at"]
    )


def downgrade() -> None:
    op.drop_table("user_resource_override")
    op.drop_table("user_context")
    op.drop_table("user_temporary_grant")
    op.drop_table("user_custom_permission")
    op.drop_table("app_user")
    op.drop_table("context_permission")
    op.drop_table("permission_context")
    op.drop_table("role_permission")
    op.drop_table("role")
    op.drop_table("permission")
