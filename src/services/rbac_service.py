# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Effective permission resolver.

Combines role assignments, role capability sets and organization policies
into one allow/deny decision per capability. Resolution only reads: a
capability the user does not hold resolves to ``allowed=False`` instead of
raising.
"""

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from sqlalchemy import and_, cast, literal, null, or_, select, true, union_all
from sqlalchemy.orm import Session

from src.models import OrgPolicy, Role, RoleCapability, RoleScope, UserRoleAssignment
from src.rbac import registry
from src.rbac.cache import EffectivePermissionCache
from src.rbac.capabilities import CapabilityDefinition
from src.rbac.locks import org_lock
from src.services import policy_service

logger = logging.getLogger(__name__)

REASON_GRANTED = "granted by role"
REASON_POLICY_DISABLED = "disabled by organization policy"
REASON_NOT_GRANTED = "not present in any assigned role"

_SOURCE_ROLE = "role"
_SOURCE_POLICY = "policy"


@dataclass(frozen=True)
class EffectivePermission:
    """Resolved decision for one capability."""

    key: str
    allowed: bool
    policy_enabled: bool
    reason: str
    role_sources: tuple[str, ...] = field(default_factory=tuple)


def load_inputs(
    db: Session,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    site_id: uuid.UUID | None = None,
) -> tuple[dict[str, set[str]], dict[str, bool]]:
    """Load role grants and organization policies in a single statement.

    Grants map each capability key to the names of the roles granting it.
    ORG-scope assignments always apply. SITE-scope assignments apply only
    when ``site_id`` is given and equals the assignment's site.

    Both inputs come from one ``UNION ALL`` SELECT, so they always reflect
    the same committed state, even when another process writes between
    calls.
    """
    applicable = and_(
        Role.scope == RoleScope.ORG, UserRoleAssignment.site_id.is_(None)
    )
    if site_id is not None:
        applicable = or_(
            applicable,
            and_(
                Role.scope == RoleScope.SITE,
                UserRoleAssignment.site_id == site_id,
            ),
        )

    grant_rows = (
        select(
            literal(_SOURCE_ROLE).label("source"),
            RoleCapability.capability_key.label("capability_key"),
            Role.name.label("role_name"),
            true().label("enabled"),
        )
        .join(Role, Role.id == RoleCapability.role_id)
        .join(UserRoleAssignment, UserRoleAssignment.role_id == Role.id)
        .where(
            UserRoleAssignment.organization_id == organization_id,
            UserRoleAssignment.user_id == user_id,
            Role.organization_id == organization_id,
            applicable,
        )
    )
    policy_rows = select(
        literal(_SOURCE_POLICY),
        OrgPolicy.capability_key,
        cast(null(), Role.name.type),
        OrgPolicy.enabled,
    ).where(OrgPolicy.organization_id == organization_id)

    grants: dict[str, set[str]] = {}
    stored_policies: dict[str, bool] = {}
    for source, key, role_name, enabled in db.execute(
        union_all(grant_rows, policy_rows)
    ).all():
        if source == _SOURCE_ROLE:
            grants.setdefault(key, set()).add(role_name)
        else:
            stored_policies[key] = bool(enabled)
    return grants, policy_service.with_defaults(stored_policies)


def evaluate(
    capabilities: Iterable[CapabilityDefinition],
    grants: Mapping[str, set[str]],
    policies: Mapping[str, bool],
) -> dict[str, EffectivePermission]:
    """Combine role grants and policies for each capability.

    A policy can only take access away: a disabled policy forces
    ``allowed=False`` whatever the roles grant, and an enabled policy never
    grants anything by itself.
    """
    result: dict[str, EffectivePermission] = {}
    for capability in capabilities:
        key = capability.key
        sources = tuple(sorted(grants.get(key, ())))
        policy_enabled = (
            policies.get(key, True) if capability.can_be_policy_controlled else True
        )
        allowed = policy_enabled and bool(sources)

        if allowed:
            reason = REASON_GRANTED
        elif not policy_enabled:
            reason = REASON_POLICY_DISABLED
        else:
            reason = REASON_NOT_GRANTED

        result[key] = EffectivePermission(
            key=key,
            allowed=allowed,
            policy_enabled=policy_enabled,
            reason=reason,
            role_sources=sources,
        )
    return result


def resolve(
    db: Session,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    site_id: uuid.UUID | None = None,
    module: str | None = None,
) -> dict[str, EffectivePermission]:
    """Resolve every capability (optionally one module's) for a user.

    Args:
        db: Database session
        organization_id: Organization the query is about
        user_id: User whose access is resolved
        site_id: Site context; None resolves the bare organization context
        module: Restrict the result to one capability module

    Returns:
        Dict of capability key to EffectivePermission, in catalog order
    """
    cache = EffectivePermissionCache.get_instance()
    cache_key = (organization_id, user_id, site_id, module)
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    capabilities = (
        registry.get_by_module(module) if module is not None else registry.get_all()
    )

    # In-process writers commit and invalidate under the same lock, so a
    # result superseded by this process is never cached.
    with org_lock(organization_id):
        grants, policies = load_inputs(db, organization_id, user_id, site_id)
        result = evaluate(capabilities, grants, policies)
        cache.put(cache_key, result)

    logger.debug(
        f"Resolved {sum(p.allowed for p in result.values())}/{len(result)} "
        f"capabilities for user {user_id} in org {organization_id}"
        + (f" at site {site_id}" if site_id else "")
    )
    return result


def can(
    db: Session,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    capability_key: str,
    site_id: uuid.UUID | None = None,
) -> EffectivePermission:
    """Resolve a single capability.

    Raises:
        CapabilityNotFoundError: If the key is not registered.
    """
    capability = registry.get_by_key(capability_key)
    permissions = resolve(
        db, organization_id, user_id, site_id, module=capability.module
    )
    return permissions[capability_key]


def user_has_capability(
    db: Session,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    capability_key: str,
    site_id: uuid.UUID | None = None,
) -> bool:
    """Check if a user holds an allowed capability."""
    return can(db, organization_id, user_id, capability_key, site_id).allowed
