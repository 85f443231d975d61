# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Organization policy store: restrict-only capability toggles."""

import logging
import uuid
from collections.abc import Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.models import OrgPolicy
from src.rbac import registry
from src.rbac.cache import invalidate_organization
from src.rbac.errors import NotPolicyControlledError
from src.rbac.locks import org_lock

logger = logging.getLogger(__name__)


def list_policy_rows(db: Session, organization_id: uuid.UUID) -> list[OrgPolicy]:
    """Get the persisted policy rows of an organization, ordered by key."""
    return list(
        db.scalars(
            select(OrgPolicy)
            .where(OrgPolicy.organization_id == organization_id)
            .order_by(OrgPolicy.capability_key)
        ).all()
    )


def with_defaults(stored: Mapping[str, bool]) -> dict[str, bool]:
    """Map every policy-controllable key to its state in ``stored``.

    Keys without a row default to enabled. Rows for keys that are no longer
    policy-controllable are ignored.
    """
    return {
        key: stored.get(key, True) for key in registry.get_policy_controlled_keys()
    }


def get_policies(db: Session, organization_id: uuid.UUID) -> dict[str, bool]:
    """Map every policy-controllable key to its current state."""
    rows = db.execute(
        select(OrgPolicy.capability_key, OrgPolicy.enabled).where(
            OrgPolicy.organization_id == organization_id
        )
    ).all()
    return with_defaults({key: enabled for key, enabled in rows})


def set_policy(
    db: Session,
    organization_id: uuid.UUID,
    capability_key: str,
    enabled: bool,
    actor_id: uuid.UUID | None = None,
) -> OrgPolicy:
    """Enable or disable a policy-controllable capability for an organization.

    Raises:
        CapabilityNotFoundError: If the key is not registered.
        NotPolicyControlledError: If the capability cannot be toggled.
    """
    capability = registry.get_by_key(capability_key)
    if not capability.can_be_policy_controlled:
        logger.warning(
            f"Rejected policy change for {capability_key} in org {organization_id}: "
            "not policy-controlled"
        )
        raise NotPolicyControlledError(capability_key)

    with org_lock(organization_id):
        policy = db.scalars(
            select(OrgPolicy).where(
                OrgPolicy.organization_id == organization_id,
                OrgPolicy.capability_key == capability_key,
            )
        ).first()
        try:
            if policy is None:
                policy = OrgPolicy(
                    organization_id=organization_id,
                    capability_key=capability_key,
                )
                db.add(policy)
            policy.enabled = enabled
            policy.updated_by_id = actor_id
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(policy)
        invalidate_organization(organization_id)

    state = "enabled" if enabled else "disabled"
    logger.info(f"Policy {capability_key} {state} in org {organization_id}")
    return policy
