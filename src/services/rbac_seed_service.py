# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Provisioning of system roles for an organization."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.models import Role, RoleCapability, RoleType
from src.rbac import registry
from src.rbac.cache import invalidate_organization
from src.rbac.errors import DuplicateRoleError
from src.rbac.locks import org_lock
from src.rbac.roles import SYSTEM_ROLES

logger = logging.getLogger(__name__)


def seed_system_roles(db: Session, organization_id: uuid.UUID) -> list[Role]:
    """Create the platform's system roles for an organization.

    This function is idempotent: roles that already exist are left as they
    are, since system roles are immutable once created. Missing roles are
    created in one transaction, so a failure leaves nothing half-provisioned.
    @param db: SQLAlchemy Session object
    @param organization_id: Organization being provisioned
    @raises DuplicateRoleError: if a CUSTOM role already uses a system role name
    """
    with org_lock(organization_id):
        existing = {
            (role.name, role.scope): role
            for role in db.scalars(
                select(Role).where(Role.organization_id == organization_id)
            ).all()
        }

        roles = []
        missing = []
        for role_data in SYSTEM_ROLES:
            role = existing.get((role_data["name"], role_data["scope"]))
            if role is not None and not role.is_system:
                logger.warning(
                    f"Cannot seed org {organization_id}: custom role "
                    f"'{role.name}' ({role.scope.value}) blocks a system role"
                )
                raise DuplicateRoleError(role.name, role.scope.value)
            if role is None:
                registry.validate_keys(role_data["capabilities"])
                role = Role(
                    organization_id=organization_id,
                    name=role_data["name"],
                    description=role_data["description"],
                    scope=role_data["scope"],
                    type=RoleType.SYSTEM,
                    capabilities=[
                        RoleCapability(capability_key=key)
                        for key in dict.fromkeys(role_data["capabilities"])
                    ],
                )
                missing.append(role)
            roles.append(role)

        if not missing:
            return roles

        try:
            db.add_all(missing)
            db.commit()
        except Exception:
            db.rollback()
            raise
        for role in missing:
            db.refresh(role)
        invalidate_organization(organization_id)

    logger.info(f"Seeded {len(missing)} system roles for org {organization_id}")
    return roles


def get_system_role(db: Session, organization_id: uuid.UUID, name: str) -> Role | None:
    """Get one of an organization's system roles by name."""
    return db.scalars(
        select(Role).where(
            Role.organization_id == organization_id,
            Role.type == RoleType.SYSTEM,
            Role.name == name,
        )
    ).first()
