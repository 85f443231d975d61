# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""API dependencies for dependency injection."""

import uuid
from collections.abc import Callable

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from src.database import get_db
from src.services import rbac_service

__all__ = [
    "ensure_capability",
    "get_current_user_id",
    "get_db",
    "require_capability",
]


def get_current_user_id(request: Request) -> uuid.UUID:
    """Get the authenticated user's ID.

    Authentication happens upstream; the auth layer stores the verified user
    ID on ``request.state.user_id``. Nothing client-supplied is trusted here.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user_id


def ensure_capability(
    db: Session,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    capability_key: str,
    site_id: uuid.UUID | None = None,
) -> None:
    """Raise 403 unless the user is allowed ``capability_key``."""
    permission = rbac_service.can(
        db, organization_id, user_id, capability_key, site_id=site_id
    )
    if permission.allowed:
        return

    if not permission.policy_enabled:
        detail = {
            "message": f"Capability '{capability_key}' is disabled by organization policy",
            "reason": "policy_disabled",
            "capability_key": capability_key,
        }
    else:
        detail = {
            "message": f"Insufficient permissions. Required capability: {capability_key}",
            "reason": "missing_capability",
            "capability_key": capability_key,
        }
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def _parse_site_id(request: Request, site_id_param: str | None) -> uuid.UUID | None:
    if not site_id_param:
        return None
    raw = request.path_params.get(site_id_param) or request.query_params.get(
        site_id_param
    )
    if raw is None:
        return None
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        # Without a valid site only ORG-scope roles apply
        return None


def require_capability(
    capability_key: str, site_id_param: str | None = None
) -> Callable[..., uuid.UUID]:
    """Dependency for capability-based authorization.

    The organization comes from the ``org_id`` path parameter; the optional
    site comes from the named path or query parameter.
    """

    def dependency(
        org_id: uuid.UUID,
        request: Request,
        db: Session = Depends(get_db),
        user_id: uuid.UUID = Depends(get_current_user_id),
    ) -> uuid.UUID:
        site_id = _parse_site_id(request, site_id_param)
        ensure_capability(db, org_id, user_id, capability_key, site_id=site_id)
        return user_id

    return dependency
