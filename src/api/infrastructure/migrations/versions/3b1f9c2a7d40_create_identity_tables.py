"""create identity tables

Revision ID: 3b1f9c2a7d40
Revises:
Create Date: 2026-10-18

Creates the tables read by tenant and identity resolution: tenants,
users, user_access_keys and tenant_api_keys.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3b1f9c2a7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            )
        )
    return columns


def upgrade() -> None:
    """Create identity tables with constraints and lookup indexes."""
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=True, unique=True),
        sa.Column("theme_id", sa.String(255), nullable=True),
        *_timestamps(),
    )
    # Theme binding lists tenants by theme, newest first
    op.create_index(
        "ix_tenants_theme_id_created_at", "tenants", ["theme_id", "created_at"]
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", sa.String(50), nullable=False, server_default="user"),
        sa.Column(
            "tenant_id",
            sa.String(255),
            sa.ForeignKey("tenants.id", ondelete="RESTRICT"),
            nullable=True,
            index=True,
        ),
        sa.Column(
            "is_super_admin", sa.Boolean, nullable=False, server_default="false"
        ),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        *_timestamps(),
        sa.CheckConstraint(
            "is_super_admin OR tenant_id IS NOT NULL",
            name="ck_users_tenant_required_unless_super_admin",
        ),
    )

    op.create_table(
        "user_access_keys",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("access_key", sa.String(255), nullable=False, unique=True),
        sa.Column("key_name", sa.String(255), nullable=False),
        sa.Column(
            "is_active", sa.Boolean, nullable=False, server_default="true", index=True
        ),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "tenant_api_keys",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "tenant_id",
            sa.String(255),
            sa.ForeignKey("tenants.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("api_key", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
    )


def downgrade() -> None:
    """Drop identity tables in dependency order."""
    op.drop_table("tenant_api_keys")
    op.drop_table("user_access_keys")
    op.drop_table("users")
    op.drop_index("ix_tenants_theme_id_created_at", table_name="tenants")
    op.drop_table("tenants")
