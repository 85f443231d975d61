# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""RBAC API endpoints: capabilities, roles, assignments, policies, effective."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from src.api.deps import (
    ensure_capability,
    get_current_user_id,
    get_db,
    require_capability,
)
from src.models import RoleScope, RoleType
from src.rbac import registry
from src.rbac.errors import (
    AssignmentNotFoundError,
    ConflictError,
    ImmutableError,
    NotFoundError,
    RBACError,
    ValidationError,
)
from src.schemas.rbac import (
    AssignmentCreateSchema,
    AssignmentSchema,
    CapabilitySchema,
    EffectivePermissionSchema,
    PolicySchema,
    PolicyUpdateSchema,
    RoleCreateSchema,
    RoleSchema,
    RoleUpdateSchema,
)
from src.services import (
    assignment_service,
    policy_service,
    rbac_service,
    role_service,
)

router = APIRouter(prefix="/orgs/{org_id}/rbac", tags=["rbac"])

_ERROR_STATUS: list[tuple[type[RBACError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ImmutableError, status.HTTP_403_FORBIDDEN),
]


def _http_error(exc: RBACError) -> HTTPException:
    """Translate a domain error into an HTTP error naming the offending rule."""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_cls, code in _ERROR_STATUS:
        if isinstance(exc, error_cls):
            status_code = code
            break

    detail: dict = {"code": exc.code, "message": str(exc)}
    if hasattr(exc, "keys"):
        detail["keys"] = exc.keys
    elif hasattr(exc, "key"):
        detail["key"] = exc.key
    return HTTPException(status_code=status_code, detail=detail)


def _role_manage_capability(scope: RoleScope) -> str:
    return "org.roles.manage" if scope == RoleScope.ORG else "builder.site_roles.manage"


# Capabilities ---------------------------------------------------------------


@router.get("/capabilities", response_model=list[CapabilitySchema], summary="List capabilities")
def list_capabilities(
    org_id: uuid.UUID,
    module: str | None = None,
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(require_capability("org.roles.view")),
):
    """List registry capabilities with the organization's policy state."""
    policies = policy_service.get_policies(db, org_id)
    capabilities = registry.get_by_module(module) if module else registry.get_all()
    return [
        CapabilitySchema(
            key=c.key,
            module=c.module,
            label=c.label,
            description=c.description,
            risk_level=c.risk_level,
            is_dangerous=c.is_dangerous,
            can_be_policy_controlled=c.can_be_policy_controlled,
            blocked_for_custom_roles=c.blocked_for_custom_roles,
            policy_enabled=policies.get(c.key, True),
        )
        for c in capabilities
    ]


# Roles ----------------------------------------------------------------------


@router.get("/roles", response_model=list[RoleSchema], summary="List roles")
def list_roles(
    org_id: uuid.UUID,
    scope: RoleScope | None = None,
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(require_capability("org.roles.view")),
):
    """List system and custom roles, optionally filtered by scope."""
    return role_service.list_roles(db, org_id, scope)


@router.get("/roles/{role_id}", response_model=RoleSchema, summary="Get a role")
def get_role(
    org_id: uuid.UUID,
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(require_capability("org.roles.view")),
):
    """Retrieve a role with its capability keys."""
    try:
        return role_service.get_role(db, role_id, org_id)
    except RBACError as e:
        raise _http_error(e) from e


@router.post("/roles", response_model=RoleSchema, status_code=status.HTTP_201_CREATED, summary="Create a custom role")
def create_role(
    org_id: uuid.UUID,
    role_in: RoleCreateSchema,
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
):
    """Create a custom role.

    ORG roles require org.roles.manage, SITE roles builder.site_roles.manage.
    """
    ensure_capability(db, org_id, current_user_id, _role_manage_capability(role_in.scope))
    try:
        return role_service.create_role(
            db,
            org_id,
            name=role_in.name,
            scope=role_in.scope,
            role_type=RoleType.CUSTOM,
            capability_keys=role_in.capability_keys,
            description=role_in.description,
        )
    except RBACError as e:
        raise _http_error(e) from e


@router.patch("/roles/{role_id}", response_model=RoleSchema, summary="Update a custom role")
def update_role(
    org_id: uuid.UUID,
    role_id: uuid.UUID,
    role_in: RoleUpdateSchema,
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
):
    """Update a custom role's name, description or capabilities.

    System roles cannot be modified.
    """
    try:
        role = role_service.get_role(db, role_id, org_id)
        ensure_capability(db, org_id, current_user_id, _role_manage_capability(role.scope))
        return role_service.update_role(
            db,
            role_id,
            name=role_in.name,
            description=role_in.description,
            capability_keys=role_in.capability_keys,
            organization_id=org_id,
        )
    except RBACError as e:
        raise _http_error(e) from e


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a custom role")
def delete_role(
    org_id: uuid.UUID,
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
):
    """Delete a custom role that has no remaining assignments."""
    try:
        role = role_service.get_role(db, role_id, org_id)
        ensure_capability(db, org_id, current_user_id, _role_manage_capability(role.scope))
        role_service.delete_role(db, role_id, org_id)
    except RBACError as e:
        raise _http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Assignments ----------------------------------------------------------------


@router.get("/assignments", response_model=list[AssignmentSchema], summary="List role assignments")
def list_assignments(
    org_id: uuid.UUID,
    user_id: uuid.UUID | None = None,
    site_id: uuid.UUID | None = None,
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(require_capability("org.users.view")),
):
    """List assignments, optionally filtered by user and site."""
    return assignment_service.list_assignments(db, org_id, user_id=user_id, site_id=site_id)


@router.post("/assignments", response_model=AssignmentSchema, status_code=status.HTTP_201_CREATED, summary="Assign a role to a user")
def create_assignment(
    org_id: uuid.UUID,
    assignment_in: AssignmentCreateSchema,
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
):
    """Assign a role, bound to a site for SITE-scope roles.

    Re-assigning an existing tuple returns the existing assignment.
    """
    try:
        role = role_service.get_role(db, assignment_in.role_id, org_id)
        ensure_capability(
            db,
            org_id,
            current_user_id,
            _role_manage_capability(role.scope),
            site_id=assignment_in.site_id if role.scope == RoleScope.SITE else None,
        )
        return assignment_service.assign(
            db,
            org_id,
            user_id=assignment_in.user_id,
            role_id=assignment_in.role_id,
            site_id=assignment_in.site_id,
            assigned_by_id=current_user_id,
        )
    except RBACError as e:
        raise _http_error(e) from e


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Revoke a role assignment")
def revoke_assignment(
    org_id: uuid.UUID,
    assignment_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
):
    """Revoke an assignment. Revoking an absent assignment succeeds."""
    try:
        assignment = assignment_service.get_assignment(db, assignment_id, org_id)
    except AssignmentNotFoundError:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    ensure_capability(
        db,
        org_id,
        current_user_id,
        _role_manage_capability(assignment.role.scope),
        site_id=assignment.site_id,
    )
    assignment_service.revoke(db, assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Policies -------------------------------------------------------------------


@router.get("/policies", response_model=dict[str, bool], summary="Get organization policies")
def get_policies(
    org_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(require_capability("org.policies.view")),
):
    """Map every policy-controllable capability to its enabled state."""
    return policy_service.get_policies(db, org_id)


@router.put("/policies/{capability_key}", response_model=PolicySchema, summary="Enable or disable a capability")
def set_policy(
    org_id: uuid.UUID,
    capability_key: str,
    policy_in: PolicyUpdateSchema,
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(require_capability("org.policies.manage")),
):
    """Toggle a policy-controllable capability for the organization."""
    try:
        return policy_service.set_policy(
            db, org_id, capability_key, policy_in.enabled, actor_id=current_user_id
        )
    except RBACError as e:
        raise _http_error(e) from e


# Effective permissions -------------------------------------------------------


@router.get("/effective", response_model=dict[str, EffectivePermissionSchema], summary="Get current user's effective permissions")
def get_my_effective_permissions(
    org_id: uuid.UUID,
    site_id: uuid.UUID | None = None,
    module: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
):
    """Resolve every capability for the authenticated user."""
    return rbac_service.resolve(db, org_id, current_user_id, site_id=site_id, module=module)


@router.get("/effective/{user_id}", response_model=dict[str, EffectivePermissionSchema], summary="Get a user's effective permissions")
def get_user_effective_permissions(
    org_id: uuid.UUID,
    user_id: uuid.UUID,
    site_id: uuid.UUID | None = None,
    module: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user_id: uuid.UUID = Depends(require_capability("org.users.view")),
):
    """Resolve every capability for another user of the organization."""
    return rbac_service.resolve(db, org_id, user_id, site_id=site_id, module=module)
