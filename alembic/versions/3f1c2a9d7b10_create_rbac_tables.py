"""create_rbac_tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-17 09:12:41.508113

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

role_scope = sa.Enum("ORG", "SITE", name="rolescope")
role_type = sa.Enum("SYSTEM", "CUSTOM", name="roletype")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    # Site directory mirror, written by tenant management
    op.create_table(
        "sites",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sites_organization_id", "sites", ["organization_id"])

    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("scope", role_scope, nullable=False),
        sa.Column("type", role_type, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "organization_id", "name", "scope", name="_role_org_name_scope_uc"
        ),
    )
    op.create_index("ix_roles_organization_id", "roles", ["organization_id"])

    op.create_table(
        "role_capabilities",
        sa.Column("role_id", sa.Uuid(), nullable=False),
        sa.Column("capability_key", sa.String(100), nullable=False),
        sa.PrimaryKeyConstraint("role_id", "capability_key"),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "user_role_assignments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role_id", sa.Uuid(), nullable=False),
        sa.Column("site_id", sa.Uuid(), nullable=True),
        sa.Column("assigned_by_id", sa.Uuid(), nullable=True),
        sa.Column(
            "assigned_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["site_id"], ["sites.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_user_role_assignments_organization_id",
        "user_role_assignments",
        ["organization_id"],
    )
    op.create_index(
        "ix_user_role_assignments_user_id",
        "user_role_assignments",
        ["user_id"],
    )
    op.create_index(
        "uq_user_role_assignments_org",
        "user_role_assignments",
        ["organization_id", "user_id", "role_id"],
        unique=True,
        sqlite_where=sa.text("site_id IS NULL"),
        postgresql_where=sa.text("site_id IS NULL"),
    )
    op.create_index(
        "uq_user_role_assignments_site",
        "user_role_assignments",
        ["organization_id", "user_id", "role_id", "site_id"],
        unique=True,
        sqlite_where=sa.text("site_id IS NOT NULL"),
        postgresql_where=sa.text("site_id IS NOT NULL"),
    )

    op.create_table(
        "org_policies",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("capability_key", sa.String(100), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("updated_by_id", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "organization_id", "capability_key", name="_org_policy_key_uc"
        ),
    )
    op.create_index(
        "ix_org_policies_organization_id", "org_policies", ["organization_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_org_policies_organization_id", table_name="org_policies")
    op.drop_table("org_policies")
    op.drop_index(
        "uq_user_role_assignments_site", table_name="user_role_assignments"
    )
    op.drop_index(
        "uq_user_role_assignments_org", table_name="user_role_assignments"
    )
    op.drop_index(
        "ix_user_role_assignments_user_id", table_name="user_role_assignments"
    )
    op.drop_index(
        "ix_user_role_assignments_organization_id",
        table_name="user_role_assignments",
    )
    op.drop_table("user_role_assignments")
    op.drop_table("role_capabilities")
    op.drop_index("ix_roles_organization_id", table_name="roles")
    op.drop_table("roles")
    op.drop_index("ix_sites_organization_id", table_name="sites")
    op.drop_table("sites")
    role_type.drop(op.get_bind(), checkfirst=True)
    role_scope.drop(op.get_bind(), checkfirst=True)
