# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Role store: create, update, delete and list roles."""

import logging
import uuid
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from src.models import Role, RoleCapability, RoleScope, RoleType, UserRoleAssignment
from src.rbac import registry
from src.rbac.cache import invalidate_organization
from src.rbac.errors import (
    BlockedCapabilityError,
    ConflictError,
    DuplicateRoleError,
    ImmutableRoleError,
    RoleInUseError,
    RoleNotFoundError,
    ValidationError,
)
from src.rbac.locks import org_lock

logger = logging.getLogger(__name__)


def _validate_capabilities(role_type: RoleType, capability_keys: list[str]) -> None:
    """Run the registry and custom-role checks shared by create and update."""
    registry.validate_keys(capability_keys)
    if role_type == RoleType.CUSTOM:
        blocked = registry.find_blocked_keys(capability_keys)
        if blocked:
            raise BlockedCapabilityError(blocked)


def _find_by_name(
    db: Session, organization_id: uuid.UUID, name: str, scope: RoleScope
) -> Role | None:
    return db.scalars(
        select(Role).where(
            Role.organization_id == organization_id,
            Role.name == name,
            Role.scope == scope,
        )
    ).first()


def _raise_if_duplicate(
    db: Session,
    organization_id: uuid.UUID,
    name: str,
    scope: RoleScope,
    error: IntegrityError,
) -> None:
    """Report a name clash committed by another worker as DuplicateRoleError."""
    if _find_by_name(db, organization_id, name, scope) is not None:
        logger.warning(
            f"Rejected role '{name}' in org {organization_id}: created concurrently"
        )
        raise DuplicateRoleError(name, scope.value) from error


def get_role(
    db: Session, role_id: uuid.UUID, organization_id: uuid.UUID | None = None
) -> Role:
    """Get a role by ID, optionally requiring it to belong to an organization.

    Raises:
        RoleNotFoundError: If the role does not exist or is in another org.
    """
    role = db.get(Role, role_id)
    if role is None or (
        organization_id is not None and role.organization_id != organization_id
    ):
        raise RoleNotFoundError(role_id)
    return role


def list_roles(
    db: Session, organization_id: uuid.UUID, scope: RoleScope | None = None
) -> list[Role]:
    """List an organization's roles, SYSTEM roles first, then by name."""
    query = (
        select(Role)
        .where(Role.organization_id == organization_id)
        .options(selectinload(Role.capabilities))
    )
    if scope is not None:
        query = query.where(Role.scope == scope)
    roles = db.scalars(query).all()
    return sorted(roles, key=lambda r: (r.type != RoleType.SYSTEM, r.name))


def create_role(
    db: Session,
    organization_id: uuid.UUID,
    name: str,
    scope: RoleScope,
    role_type: RoleType,
    capability_keys: Iterable[str],
    description: str | None = None,
) -> Role:
    """Create a role granting ``capability_keys``.

    Raises:
        InvalidCapabilityError: If any key is not registered.
        BlockedCapabilityError: If a CUSTOM role asks for a blocked key.
        DuplicateRoleError: If (organization, name, scope) is taken.
    """
    keys = list(dict.fromkeys(capability_keys))
    with org_lock(organization_id):
        try:
            _validate_capabilities(role_type, keys)
            if _find_by_name(db, organization_id, name, scope) is not None:
                raise DuplicateRoleError(name, scope.value)
        except (ValidationError, ConflictError) as e:
            logger.warning(f"Rejected role '{name}' in org {organization_id}: {e}")
            raise

        role = Role(
            organization_id=organization_id,
            name=name,
            description=description,
            scope=scope,
            type=role_type,
            capabilities=[RoleCapability(capability_key=key) for key in keys],
        )
        try:
            db.add(role)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            _raise_if_duplicate(db, organization_id, name, scope, e)
            raise
        except Exception:
            db.rollback()
            raise
        db.refresh(role)
        invalidate_organization(organization_id)

    logger.info(
        f"Created {role_type.value} role '{name}' ({scope.value}) "
        f"with {len(keys)} capabilities in org {organization_id}"
    )
    return role


def _replace_capabilities(role: Role, keys: list[str]) -> None:
    current = {rc.capability_key: rc for rc in role.capabilities}
    for key, role_capability in current.items():
        if key not in keys:
            role.capabilities.remove(role_capability)
    for key in keys:
        if key not in current:
            role.capabilities.append(RoleCapability(capability_key=key))


def update_role_capabilities(
    db: Session, role_id: uuid.UUID, capability_keys: Iterable[str]
) -> Role:
    """Replace the capability set of a CUSTOM role.

    Raises:
        RoleNotFoundError: If the role does not exist.
        ImmutableRoleError: If the role is a SYSTEM role.
        InvalidCapabilityError: If any key is not registered.
        BlockedCapabilityError: If any key is blocked for custom roles.
    """
    return update_role(db, role_id, capability_keys=capability_keys)


def update_role(
    db: Session,
    role_id: uuid.UUID,
    name: str | None = None,
    description: str | None = None,
    capability_keys: Iterable[str] | None = None,
    organization_id: uuid.UUID | None = None,
) -> Role:
    """Update a CUSTOM role's name, description and/or capabilities.

    Fields left as None are unchanged. The update is applied atomically.
    """
    role = get_role(db, role_id, organization_id)
    keys = list(dict.fromkeys(capability_keys)) if capability_keys is not None else None

    with org_lock(role.organization_id):
        # Re-read under the lock so the checks see committed state
        db.refresh(role)
        if role.is_system:
            logger.warning(f"Rejected update of system role {role.id}")
            raise ImmutableRoleError(role.id)

        try:
            if keys is not None:
                _validate_capabilities(role.type, keys)
            if name is not None and name != role.name:
                existing = _find_by_name(db, role.organization_id, name, role.scope)
                if existing is not None:
                    raise DuplicateRoleError(name, role.scope.value)
        except (ValidationError, ConflictError) as e:
            logger.warning(f"Rejected update of role {role.id}: {e}")
            raise

        try:
            if name is not None:
                role.name = name
            if description is not None:
                role.description = description
            if keys is not None:
                _replace_capabilities(role, keys)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if name is not None:
                _raise_if_duplicate(db, role.organization_id, name, role.scope, e)
            raise
        except Exception:
            db.rollback()
            raise
        db.refresh(role)
        invalidate_organization(role.organization_id)

    logger.info(f"Updated role {role.id} in org {role.organization_id}")
    return role


def count_assignments(db: Session, role_id: uuid.UUID) -> int:
    """Count assignments referencing a role."""
    return db.scalar(
        select(func.count())
        .select_from(UserRoleAssignment)
        .where(UserRoleAssignment.role_id == role_id)
    ) or 0


def delete_role(
    db: Session, role_id: uuid.UUID, organization_id: uuid.UUID | None = None
) -> None:
    """Delete a CUSTOM role that has no assignments.

    Raises:
        RoleNotFoundError: If the role does not exist.
        ImmutableRoleError: If the role is a SYSTEM role.
        RoleInUseError: If assignments still reference the role.
    """
    role = get_role(db, role_id, organization_id)
    org_id = role.organization_id

    with org_lock(org_id):
        if role.is_system:
            logger.warning(f"Rejected deletion of system role {role.id}")
            raise ImmutableRoleError(role.id)

        in_use = count_assignments(db, role.id)
        if in_use:
            logger.warning(
                f"Rejected deletion of role {role.id}: {in_use} assignment(s)"
            )
            raise RoleInUseError(role.id, in_use)

        try:
            db.delete(role)
            db.commit()
        except Exception:
            db.rollback()
            raise
        invalidate_organization(org_id)

    logger.info(f"Deleted role {role_id} from org {org_id}")
