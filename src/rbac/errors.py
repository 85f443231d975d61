# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Errors raised by the RBAC stores.

Every error names the offending key, identifier or rule so callers can
report exactly what was rejected.
"""

import uuid
from collections.abc import Iterable


class RBACError(Exception):
    """Base exception for authorization engine errors."""

    code = "rbac_error"


# Not found ---------------------------------------------------------------


class NotFoundError(RBACError):
    """A looked-up capability, role, assignment or site does not exist."""

    code = "not_found"


class CapabilityNotFoundError(NotFoundError):
    """Capability key is not registered."""

    code = "capability_not_found"

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Capability not found: {key}")


class RoleNotFoundError(NotFoundError):
    """Role does not exist (or belongs to a different organization)."""

    code = "role_not_found"

    def __init__(self, role_id: uuid.UUID) -> None:
        self.role_id = role_id
        super().__init__(f"Role not found: {role_id}")


class AssignmentNotFoundError(NotFoundError):
    """Role assignment does not exist."""

    code = "assignment_not_found"

    def __init__(self, assignment_id: uuid.UUID) -> None:
        self.assignment_id = assignment_id
        super().__init__(f"Assignment not found: {assignment_id}")


class SiteNotFoundError(NotFoundError):
    """Site is unknown to the site directory."""

    code = "site_not_found"

    def __init__(self, site_id: uuid.UUID) -> None:
        self.site_id = site_id
        super().__init__(f"Site not found: {site_id}")


# Validation --------------------------------------------------------------


class ValidationError(RBACError):
    """A write was rejected because it violates an RBAC rule."""

    code = "validation_error"


class InvalidCapabilityError(ValidationError):
    """One or more capability keys are not registered."""

    code = "invalid_capability"

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys = list(keys)
        super().__init__(f"Invalid capabilities: {', '.join(self.keys)}")


class BlockedCapabilityError(ValidationError):
    """Capabilities reserved for system roles were given to a custom role."""

    code = "blocked_capability"

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys = list(keys)
        super().__init__(
            "Cannot assign blocked capabilities to custom roles: "
            f"{', '.join(self.keys)}"
        )


class ScopeMismatchError(ValidationError):
    """Assignment site presence disagrees with the role scope."""

    code = "scope_mismatch"

    def __init__(self, scope: str, site_id: uuid.UUID | None) -> None:
        self.scope = scope
        self.site_id = site_id
        if site_id is None:
            message = f"{scope} scope role requires a site_id"
        else:
            message = f"{scope} scope role cannot be assigned to site {site_id}"
        super().__init__(message)


class CrossOrgSiteError(ValidationError):
    """Site belongs to a different organization."""

    code = "cross_org_site"

    def __init__(self, site_id: uuid.UUID, organization_id: uuid.UUID) -> None:
        self.site_id = site_id
        self.organization_id = organization_id
        super().__init__(
            f"Site {site_id} does not belong to organization {organization_id}"
        )


class NotPolicyControlledError(ValidationError):
    """Capability cannot be toggled by organization policy."""

    code = "not_policy_controlled"

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Capability '{key}' cannot be controlled by policy")


# Conflict / immutability -------------------------------------------------


class ConflictError(RBACError):
    """The write conflicts with existing state."""

    code = "conflict"


class DuplicateRoleError(ConflictError):
    """A role with the same name already exists for the scope."""

    code = "duplicate_role"

    def __init__(self, name: str, scope: str) -> None:
        self.name = name
        self.scope = scope
        super().__init__(f'Role with name "{name}" already exists for scope {scope}')


class RoleInUseError(ConflictError):
    """Role still has assignments and cannot be deleted."""

    code = "role_in_use"

    def __init__(self, role_id: uuid.UUID, assignment_count: int) -> None:
        self.role_id = role_id
        self.assignment_count = assignment_count
        super().__init__(
            f"Role {role_id} is assigned to {assignment_count} user(s); "
            "revoke the assignments before deleting it"
        )


class ImmutableError(RBACError):
    """The target cannot be modified."""

    code = "immutable"


class ImmutableRoleError(ImmutableError):
    """System roles cannot be modified or deleted."""

    code = "immutable_role"

    def __init__(self, role_id: uuid.UUID) -> None:
        self.role_id = role_id
        super().__init__(f"System role {role_id} cannot be modified")
