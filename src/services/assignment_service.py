# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Assignment store: grant and revoke roles for users."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from src.models import RoleScope, Site, UserRoleAssignment
from src.rbac.cache import invalidate_organization
from src.rbac.errors import (
    AssignmentNotFoundError,
    CrossOrgSiteError,
    ScopeMismatchError,
    SiteNotFoundError,
)
from src.rbac.locks import org_lock
from src.services import role_service

logger = logging.getLogger(__name__)


def _check_site(
    db: Session, organization_id: uuid.UUID, site_id: uuid.UUID
) -> None:
    site = db.get(Site, site_id)
    if site is None:
        raise SiteNotFoundError(site_id)
    if site.organization_id != organization_id:
        raise CrossOrgSiteError(site_id, organization_id)


def _find_existing(
    db: Session,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    site_id: uuid.UUID | None,
) -> UserRoleAssignment | None:
    site_filter = (
        UserRoleAssignment.site_id.is_(None)
        if site_id is None
        else UserRoleAssignment.site_id == site_id
    )
    return db.scalars(
        select(UserRoleAssignment).where(
            UserRoleAssignment.organization_id == organization_id,
            UserRoleAssignment.user_id == user_id,
            UserRoleAssignment.role_id == role_id,
            site_filter,
        )
    ).first()


def assign(
    db: Session,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    site_id: uuid.UUID | None = None,
    assigned_by_id: uuid.UUID | None = None,
) -> UserRoleAssignment:
    """Assign a role to a user, bound to ``site_id`` for SITE-scope roles.

    Re-assigning an existing (organization, user, role, site) tuple returns
    the existing assignment unchanged.

    Raises:
        RoleNotFoundError: If the role does not exist in the organization.
        ScopeMismatchError: If site presence disagrees with the role scope.
        SiteNotFoundError: If the site is unknown.
        CrossOrgSiteError: If the site belongs to another organization.
    """
    with org_lock(organization_id):
        role = role_service.get_role(db, role_id, organization_id)
        try:
            if (role.scope == RoleScope.SITE) != (site_id is not None):
                raise ScopeMismatchError(role.scope.value, site_id)
            if site_id is not None:
                _check_site(db, organization_id, site_id)
        except (ScopeMismatchError, SiteNotFoundError, CrossOrgSiteError) as e:
            logger.warning(
                f"Rejected assignment of role {role_id} to user {user_id}: {e}"
            )
            raise

        existing = _find_existing(db, organization_id, user_id, role_id, site_id)
        if existing is not None:
            return existing

        assignment = UserRoleAssignment(
            organization_id=organization_id,
            user_id=user_id,
            role_id=role_id,
            site_id=site_id,
            assigned_by_id=assigned_by_id,
        )
        try:
            db.add(assignment)
            db.commit()
        except IntegrityError:
            db.rollback()
            # Another worker committed the same tuple first
            existing = _find_existing(db, organization_id, user_id, role_id, site_id)
            if existing is None:
                raise
            logger.info(
                f"Role {role_id} was assigned to user {user_id} concurrently; "
                "returning the existing assignment"
            )
            return existing
        except Exception:
            db.rollback()
            raise
        db.refresh(assignment)
        invalidate_organization(organization_id)

    logger.info(
        f"Assigned role '{role.name}' to user {user_id} in org {organization_id}"
        + (f" at site {site_id}" if site_id else "")
    )
    return assignment


def get_assignment(
    db: Session,
    assignment_id: uuid.UUID,
    organization_id: uuid.UUID | None = None,
) -> UserRoleAssignment:
    """Get an assignment by ID.

    Raises:
        AssignmentNotFoundError: If missing or in a different organization.
    """
    assignment = db.get(UserRoleAssignment, assignment_id)
    if assignment is None or (
        organization_id is not None
        and assignment.organization_id != organization_id
    ):
        raise AssignmentNotFoundError(assignment_id)
    return assignment


def revoke(db: Session, assignment_id: uuid.UUID) -> None:
    """Remove an assignment. Unknown or already revoked IDs are a no-op."""
    assignment = db.get(UserRoleAssignment, assignment_id)
    if assignment is None:
        logger.debug(f"Assignment {assignment_id} already absent")
        return

    organization_id = assignment.organization_id
    with org_lock(organization_id):
        try:
            db.delete(assignment)
            db.commit()
        except Exception:
            db.rollback()
            raise
        invalidate_organization(organization_id)

    logger.info(f"Revoked assignment {assignment_id} in org {organization_id}")


def list_for_user(
    db: Session, organization_id: uuid.UUID, user_id: uuid.UUID
) -> list[UserRoleAssignment]:
    """List a user's assignments in an organization."""
    return list_assignments(db, organization_id, user_id=user_id)


def list_assignments(
    db: Session,
    organization_id: uuid.UUID,
    user_id: uuid.UUID | None = None,
    site_id: uuid.UUID | None = None,
) -> list[UserRoleAssignment]:
    """List an organization's assignments, newest first."""
    query = (
        select(UserRoleAssignment)
        .where(UserRoleAssignment.organization_id == organization_id)
        .options(joinedload(UserRoleAssignment.role))
        .order_by(UserRoleAssignment.assigned_at.desc(), UserRoleAssignment.id)
    )
    if user_id is not None:
        query = query.where(UserRoleAssignment.user_id == user_id)
    if site_id is not None:
        query = query.where(UserRoleAssignment.site_id == site_id)
    return list(db.scalars(query).unique().all())
